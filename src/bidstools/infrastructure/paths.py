"""
Path utilities.

This module resolves BIDS information from filesystem paths (entities,
subject and session identifiers, JSON sidecar locations) and provides the
location of the optional bidstools log file.

Functions that take a ``path`` accept a string, a Path, or any object with
a ``path`` attribute such as a BIDSFile.
"""

import os
import platform
import re
from pathlib import Path
from typing import Optional, Union

from ..core.entities import parse_fname, split_extension

PathLike = Union[str, os.PathLike]

SUBJECT_PREFIX = 'sub-'
SESSION_PREFIX = 'ses-'


def _as_path(path) -> Path:
    """Normalize a str, Path or BIDSFile into a Path."""
    return Path(getattr(path, 'path', path))


def parse_path(path, require_modality: bool = True, strict: bool = True) -> dict[str, str]:
    """
    Parse the entities encoded in the filename part of a path.

    Args:
        path: Path to a BIDS file, or a BIDSFile.
        require_modality: Expect a trailing modality segment.
        strict: Raise on malformed filenames instead of warning.

    Returns:
        Ordered entity dictionary (see parse_fname).
    """
    return parse_fname(_as_path(path).name, require_modality=require_modality, strict=strict)


def get_metadata_path(path) -> Optional[Path]:
    """
    Get the JSON sidecar path of a BIDS file.

    The sidecar shares the filename up to the first dot and lives in the same
    directory, e.g. ``sub-01_T1w.nii.gz`` -> ``sub-01_T1w.json``.

    Args:
        path: Path to a BIDS file, or a BIDSFile.

    Returns:
        Path to the sidecar if it exists, None otherwise.
    """
    path = _as_path(path)
    stem, _ = split_extension(path.name)
    metadata_path = path.parent / f"{stem}.json"
    return metadata_path if metadata_path.is_file() else None


def find_path_entity(path, key: str) -> Optional[str]:
    """
    Find the value of a ``<key>-<value>`` directory segment in a path.

    Both ``/`` and ``\\`` are treated as separators. If several directories
    match, the one nearest the filename wins.

    Args:
        path: Full path to inspect.
        key: Entity key, e.g. ``'sub'`` or ``'ses'``.

    Returns:
        The value, or None if no directory segment matches.
    """
    pattern = re.compile(rf"[\\/]{re.escape(key)}-([^\\/]+)(?=[\\/])")
    matches = pattern.findall(str(_as_path(path)))
    return matches[-1] if matches else None


def _get_entity(
    path,
    key: str,
    from_fname: bool,
    require_modality: bool,
    strict: bool
) -> Optional[str]:
    value = parse_path(path, require_modality=require_modality, strict=strict).get(key)
    if value is None and not from_fname:
        value = find_path_entity(path, key)
    return value


def get_sub(
    path,
    from_fname: bool = True,
    require_modality: bool = True,
    strict: bool = True
) -> Optional[str]:
    """
    Get the subject identifier of a BIDS file.

    Args:
        path: Path to a BIDS file, or a BIDSFile.
        from_fname: Only look at the filename. When False, fall back to a
            ``sub-<id>`` directory in the full path.
        require_modality: Expect a trailing modality segment.
        strict: Raise on malformed filenames instead of warning.

    Returns:
        The subject identifier, or None if it cannot be found.
    """
    return _get_entity(path, 'sub', from_fname, require_modality, strict)


def get_ses(
    path,
    from_fname: bool = True,
    require_modality: bool = True,
    strict: bool = True
) -> Optional[str]:
    """
    Get the session identifier of a BIDS file.

    Same lookup rules as get_sub(), with ``ses-<id>`` directories.
    """
    return _get_entity(path, 'ses', from_fname, require_modality, strict)


def strip_prefix(path: PathLike, prefix: str) -> Optional[str]:
    """
    Get a directory name without its BIDS prefix.

    Args:
        path: Directory path (a trailing separator is ignored).
        prefix: Expected prefix, e.g. ``'sub-'``.

    Returns:
        The name without the prefix, or None if the name lacks the prefix.
    """
    name = Path(path).name
    if not name.startswith(prefix):
        return None
    return name[len(prefix):]


def get_persistent_data_directory() -> Path:
    """
    Get the persistent data directory for bidstools (cross-platform).

    Returns:
        Path to the persistent data directory, created if needed.

    Platform-specific locations:
        - Windows: %APPDATA%/LocalLow/bidstools
        - macOS: ~/Library/Application Support/bidstools
        - Linux: ~/.config/bidstools
    """
    system = platform.system()

    if system == "Windows":
        base = Path.home() / "AppData" / "LocalLow"
    elif system == "Darwin":
        base = Path.home() / "Library" / "Application Support"
    else:
        base = Path.home() / ".config"

    data_dir = base / "bidstools"
    data_dir.mkdir(parents=True, exist_ok=True)
    return data_dir


def get_log_file_path() -> Path:
    """Path to the log.txt file."""
    return get_persistent_data_directory() / "log.txt"
