"""
bidstools - index and query BIDS datasets.

This package loads a BIDS (Brain Imaging Data Structure) directory tree into
an immutable layout -> subject -> session -> file model and lets callers
query files by path, filename entities or sidecar metadata.

Example:
    from bidstools import load_layout, get_files

    layout = load_layout("/path/to/bids/root")
    t1w = get_files(layout, modality="T1w", run="001")
"""

__version__ = "0.1.0"

from .config.settings import LoaderOptions
from .core.entities import construct_fname, parse_fname
from .core.exceptions import (
    BIDSFilenameError,
    BIDSStructureError,
    BidsToolsError,
    ConfigurationError,
    MissingSidecarError,
)
from .core.models import (
    BIDSFile,
    BIDSLayout,
    BIDSSession,
    BIDSSubject,
    total_files,
    total_sessions,
    total_subjects,
)
from .core.query import get_files, select_files
from .core.summary import list_scans_detail, list_subject_detail, print_dataset_description
from .infrastructure.bids_loader import (
    BidsLoader,
    load_file,
    load_layout,
    load_session,
    load_subject,
)
from .infrastructure.paths import get_metadata_path, get_ses, get_sub, parse_path

__all__ = [
    "BIDSFile",
    "BIDSFilenameError",
    "BIDSLayout",
    "BIDSSession",
    "BIDSStructureError",
    "BIDSSubject",
    "BidsLoader",
    "BidsToolsError",
    "ConfigurationError",
    "LoaderOptions",
    "MissingSidecarError",
    "construct_fname",
    "get_files",
    "get_metadata_path",
    "get_ses",
    "get_sub",
    "list_scans_detail",
    "list_subject_detail",
    "load_file",
    "load_layout",
    "load_session",
    "load_subject",
    "parse_fname",
    "parse_path",
    "print_dataset_description",
    "select_files",
    "total_files",
    "total_sessions",
    "total_subjects",
]
