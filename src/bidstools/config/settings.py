"""
Loader options.

LoaderOptions is the option bundle every BIDS loader level accepts and hands
down unchanged to the children it discovers. Options live in memory only;
nothing is read from or written to disk.

Example:
    from bidstools.config.settings import LoaderOptions

    options = LoaderOptions(load_metadata=False)
    lenient = options.with_overrides(strict=False)

    # Options kept in a caller's own configuration
    options = LoaderOptions.from_dict({"longitudinal": False})
"""

from dataclasses import dataclass, asdict, fields, replace
from typing import Any, Mapping

from ..core.exceptions import ConfigurationError
from ..infrastructure.logging_config import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class LoaderOptions:
    """Options shared by every level of BIDS discovery."""

    search: bool = True
    """Discover children (subjects, sessions, files). False leaves them empty."""

    load_metadata: bool = True
    """Load the JSON sidecar of every file. A missing sidecar is then an error."""

    require_modality: bool = True
    """Expect a trailing modality segment in every filename (e.g. ``_T1w``)."""

    longitudinal: bool = True
    """Expect ``ses-`` directories under every subject."""

    strict: bool = True
    """Raise on invalid filenames. False logs a warning and leaves entities empty."""

    extract_from_full_path: bool = True
    """Fill in ``sub``/``ses`` from the directory names when absent from the filename."""

    def with_overrides(self, **overrides: bool) -> 'LoaderOptions':
        """
        Return a copy with some options changed.

        Raises:
            ConfigurationError: If an option name is unknown.
        """
        unknown = set(overrides) - self.option_names()
        if unknown:
            raise ConfigurationError(f"Unknown loader option(s): {', '.join(sorted(unknown))}")
        return replace(self, **overrides)

    def to_dict(self) -> dict[str, bool]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> 'LoaderOptions':
        """
        Create options from a mapping, e.g. parsed from a caller's JSON config.

        Unknown keys are logged and ignored.

        Raises:
            ConfigurationError: If data is not a mapping.
        """
        if not isinstance(data, Mapping):
            raise ConfigurationError(
                f"Loader options must be a mapping, got {type(data).__name__}"
            )

        names = cls.option_names()
        for key in data:
            if key not in names:
                logger.warning(f"Ignoring unknown loader option: {key}")
        return cls(**{k: bool(v) for k, v in data.items() if k in names})

    @classmethod
    def option_names(cls) -> set[str]:
        return {f.name for f in fields(cls)}
