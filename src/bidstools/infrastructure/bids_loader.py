"""
BIDS dataset loading and indexing.

This module reads BIDS datasets from the filesystem and builds the
in-memory model:

    root/sub-<id>/[ses-<id>/]<modality dir>/<k1>-<v1>_..._<modality>.<ext>

Loading is eager: the whole tree, every JSON sidecar and every side table
are read when a layout is built. Children keep the order in which the
filesystem lists them; no sorting is applied, so the order may differ
between platforms.
"""

from pathlib import Path
from typing import Optional, Union

from ..config.settings import LoaderOptions
from ..core.exceptions import BIDSStructureError, MissingSidecarError
from ..core.models import BIDSFile, BIDSLayout, BIDSSession, BIDSSubject
from .json_loader import load_json_ordered
from .logging_config import get_logger
from .paths import (
    SESSION_PREFIX,
    SUBJECT_PREFIX,
    PathLike,
    find_path_entity,
    get_metadata_path,
    parse_path,
    strip_prefix,
)
from .tsv_loader import find_side_table, load_tsv

logger = get_logger(__name__)

DATASET_DESCRIPTION = "dataset_description.json"
SUBJECTS_TABLES = ("subjects.tsv", "participants.tsv")
SCANS_SUFFIX = "_scans.tsv"
SIDECAR_EXTENSION = ".json"


class BidsLoader:
    """
    Loads and indexes BIDS datasets from the filesystem.

    The loader holds one LoaderOptions bundle and uses it, unchanged, at
    every level it discovers: a layout loads its subjects, a subject its
    sessions, and a session its files with the same options.
    """

    def __init__(self, options: Optional[LoaderOptions] = None, **overrides: bool):
        """
        Initialize the loader.

        Args:
            options: Loader options. Defaults to LoaderOptions().
            **overrides: Individual options to change, e.g. ``strict=False``.

        Raises:
            ConfigurationError: If an override names an unknown option.
        """
        if options is None:
            options = LoaderOptions()
        self.options = options.with_overrides(**overrides)

    def load_layout(self, root: PathLike) -> BIDSLayout:
        """
        Load and index a whole BIDS dataset.

        Args:
            root: Root directory of the dataset.

        Returns:
            A fully populated BIDSLayout.

        Raises:
            FileNotFoundError: If root does not exist.
            NotADirectoryError: If root is not a directory.
        """
        root = Path(root)
        self._check_directory(root)
        logger.info(f"Loading BIDS dataset from: {root}")

        subjects = []
        if self.options.search:
            for subject_dir in root.iterdir():
                if subject_dir.is_dir() and subject_dir.name.startswith(SUBJECT_PREFIX):
                    subjects.append(self.load_subject(subject_dir))

        description = self._load_dataset_description(root)
        subjects_detail = load_tsv(find_side_table(root, names=SUBJECTS_TABLES))

        layout = BIDSLayout(
            root=root,
            subjects=tuple(subjects),
            longitudinal=self.options.longitudinal,
            description=description,
            subjects_detail=subjects_detail
        )
        logger.info(
            f"Found {layout.total_subjects()} subjects, {layout.total_sessions()} sessions "
            f"and {layout.total_files()} files"
        )
        return layout

    def load_subject(self, path: PathLike) -> BIDSSubject:
        """
        Load one subject directory.

        Every ``ses-*`` subdirectory becomes a session. When the dataset is
        not longitudinal each of them gets identifier ``"1"``; several
        session directories then give several sessions with the same
        identifier.

        Raises:
            BIDSStructureError: If the directory name does not start with 'sub-'.
        """
        path = Path(path)
        self._check_directory(path)
        identifier = strip_prefix(path, SUBJECT_PREFIX)
        if identifier is None:
            raise BIDSStructureError(
                f"Subject directory must start with '{SUBJECT_PREFIX}': {path}"
            )

        logger.debug(f"Scanning subject: {identifier}")

        sessions = []
        if self.options.search:
            for session_dir in path.iterdir():
                if session_dir.is_dir() and session_dir.name.startswith(SESSION_PREFIX):
                    sessions.append(self.load_session(session_dir))

        return BIDSSubject(path=path, identifier=identifier, sessions=tuple(sessions))

    def load_session(self, path: PathLike) -> BIDSSession:
        """
        Load one session directory.

        Every regular file inside the session's immediate subdirectories
        (the modality directories) becomes a BIDSFile, except JSON sidecars.

        Raises:
            BIDSStructureError: If the dataset is longitudinal and the
                directory name does not start with 'ses-'.
        """
        path = Path(path)
        self._check_directory(path)

        if self.options.longitudinal:
            identifier = strip_prefix(path, SESSION_PREFIX)
            if identifier is None:
                raise BIDSStructureError(
                    f"Session directory must start with '{SESSION_PREFIX}': {path}"
                )
        else:
            identifier = "1"

        logger.debug(f"  Scanning session: {identifier}")

        scans_detail = load_tsv(find_side_table(path, suffix=SCANS_SUFFIX))

        files = []
        if self.options.search:
            for modality_dir in path.iterdir():
                if not modality_dir.is_dir():
                    continue
                for file_path in modality_dir.iterdir():
                    # Sidecars are read through their data file
                    if file_path.is_file() and not file_path.name.endswith(SIDECAR_EXTENSION):
                        files.append(self.load_file(file_path))

        return BIDSSession(
            path=path,
            identifier=identifier,
            files=tuple(files),
            scans_detail=scans_detail
        )

    def load_file(self, path: PathLike) -> BIDSFile:
        """
        Load one BIDS data file: its entities and its JSON sidecar.

        Raises:
            BIDSFilenameError: If the filename is invalid and ``strict`` is set.
            BIDSStructureError: If the modality segment contains a dash.
            MissingSidecarError: If ``load_metadata`` is set and there is no sidecar.
        """
        path = Path(path)
        options = self.options

        entities = parse_path(
            path,
            require_modality=options.require_modality,
            strict=options.strict
        )

        # Also fills the empty map of a filename discarded by a lenient parse
        if options.extract_from_full_path:
            for key in ('sub', 'ses'):
                if key not in entities:
                    value = find_path_entity(path, key)
                    if value is not None:
                        entities[key] = value

        metadata = {}
        if options.load_metadata:
            metadata_path = get_metadata_path(path)
            if metadata_path is None:
                raise MissingSidecarError(f"No JSON sidecar found for {path}")
            metadata = load_json_ordered(metadata_path)

        return BIDSFile(path=path, metadata=metadata, entities=entities)

    def _load_dataset_description(self, root: Path) -> dict:
        """
        Load dataset_description.json.

        Returns:
            Its contents, or an empty dictionary if the file does not exist.
        """
        desc_path = root / DATASET_DESCRIPTION
        if not desc_path.is_file():
            logger.debug(f"{DATASET_DESCRIPTION} not found in {root}")
            return {}

        description = load_json_ordered(desc_path)
        logger.debug(f"Dataset: {description.get('Name', 'Unknown')}")
        if "BIDSVersion" not in description:
            logger.warning(f"{DATASET_DESCRIPTION} missing 'BIDSVersion' field")
        return description

    @staticmethod
    def _check_directory(path: Path) -> None:
        if not path.exists():
            raise FileNotFoundError(f"Path does not exist: {path}")
        if not path.is_dir():
            raise NotADirectoryError(f"Path is not a directory: {path}")


def load_layout(root: PathLike, options: Optional[LoaderOptions] = None, **overrides: bool) -> BIDSLayout:
    """
    Load a BIDS dataset.

    Example:
        layout = load_layout("/path/to/bids/root", load_metadata=False)
        print(layout)

    Args:
        root: Root directory of the dataset.
        options: Loader options. Defaults to LoaderOptions().
        **overrides: Individual options to change.
    """
    return BidsLoader(options, **overrides).load_layout(root)


def load_subject(path: PathLike, options: Optional[LoaderOptions] = None, **overrides: bool) -> BIDSSubject:
    return BidsLoader(options, **overrides).load_subject(path)


def load_session(path: PathLike, options: Optional[LoaderOptions] = None, **overrides: bool) -> BIDSSession:
    return BidsLoader(options, **overrides).load_session(path)


def load_file(path: Union[PathLike, BIDSFile], options: Optional[LoaderOptions] = None, **overrides: bool) -> BIDSFile:
    return BidsLoader(options, **overrides).load_file(getattr(path, 'path', path))
