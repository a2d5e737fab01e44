"""
Core domain models for BIDS dataset representation.

The four levels of a dataset (layout, subject, session, file) are immutable
snapshots of the filesystem at discovery time. Children are tuples and a
file's entities and metadata are read-only mappings; nested values inside
sidecar metadata (lists, objects) and the side-table DataFrames are not
copied and must not be modified. They are built by
bidstools.infrastructure.bids_loader and never change afterwards.

Every level answers the same get_files() query: a session filters its own
files, a subject and a layout concatenate the results of their children in
order.
"""

import re
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any, Mapping, Optional, Union

import pandas as pd

from .query import FilterExpression, build_file_filter, filter_files

PathQuery = Union[str, re.Pattern, None]


@dataclass(frozen=True, repr=False)
class BIDSFile:
    """Represents a single data file in a BIDS dataset."""

    path: Path
    """Path to the data file."""

    metadata: Mapping[str, Any] = field(default_factory=dict)
    """Contents of the JSON sidecar, in file order. Empty if not loaded."""

    entities: Mapping[str, str] = field(default_factory=dict)
    """Key-value entities parsed from the filename (e.g. {'sub': '01', 'run': '001'})."""

    def __post_init__(self):
        # Read-only copies; nested sidecar values are shared with the caller
        object.__setattr__(self, 'metadata', MappingProxyType(dict(self.metadata)))
        object.__setattr__(self, 'entities', MappingProxyType(dict(self.entities)))

    @property
    def metadata_path(self) -> Optional[Path]:
        """Path to the JSON sidecar, or None if there is none on disk."""
        from ..infrastructure.paths import get_metadata_path
        return get_metadata_path(self.path)

    def get(self, key: str, default: Any = None) -> Any:
        """
        Look up an attribute of the file.

        Filename entities take precedence over sidecar metadata.

        Args:
            key: Entity or metadata key.
            default: Value returned when the key is in neither.
        """
        if key in self.entities:
            return self.entities[key]
        return self.metadata.get(key, default)

    def __repr__(self) -> str:
        if not self.metadata:
            return f"BIDSFile({str(self.path)!r}, no_metadata=True)"
        return f"BIDSFile({str(self.path)!r})"


@dataclass(frozen=True, repr=False)
class BIDSSession:
    """Represents a single session within a BIDS subject."""

    path: Path
    """Session directory (the subject directory in non-longitudinal datasets)."""

    identifier: str
    """Session identifier without the 'ses-' prefix; always '1' if not longitudinal."""

    files: tuple[BIDSFile, ...] = ()
    """Data files found in the session's modality directories."""

    scans_detail: pd.DataFrame = field(default_factory=pd.DataFrame, compare=False)
    """Contents of the session's *_scans.tsv, or an empty DataFrame."""

    def total_files(self) -> int:
        return len(self.files)

    def get_files(self, path: PathQuery = None, **filters: Any) -> list[BIDSFile]:
        """
        Query the files of this session.

        See bidstools.core.query.get_files for the filtering rules.
        """
        return self.select_files(build_file_filter(path, **filters))

    def select_files(self, filter_expr: FilterExpression) -> list[BIDSFile]:
        return filter_files(self.files, filter_expr)

    def __str__(self) -> str:
        return (
            "Session:\n"
            f"    identifier = {self.identifier}\n"
            f"    total files = {self.total_files()}"
        )

    def __repr__(self) -> str:
        return f"BIDSSession(identifier={self.identifier!r}, total_files={self.total_files()})"


@dataclass(frozen=True, repr=False)
class BIDSSubject:
    """Represents a subject in a BIDS dataset."""

    path: Path
    """Subject directory."""

    identifier: str
    """Subject identifier without the 'sub-' prefix."""

    sessions: tuple[BIDSSession, ...] = ()
    """Sessions of this subject, in discovery order."""

    def get_session(self, identifier: str) -> Optional[BIDSSession]:
        """
        Retrieve a session by identifier.

        Returns:
            The first BIDSSession with that identifier, None if there is none.
        """
        for session in self.sessions:
            if session.identifier == identifier:
                return session
        return None

    def total_sessions(self) -> int:
        return len(self.sessions)

    def total_files(self) -> int:
        return sum(session.total_files() for session in self.sessions)

    def get_files(self, path: PathQuery = None, **filters: Any) -> list[BIDSFile]:
        return self.select_files(build_file_filter(path, **filters))

    def select_files(self, filter_expr: FilterExpression) -> list[BIDSFile]:
        result = []
        for session in self.sessions:
            result.extend(session.select_files(filter_expr))
        return result

    def __str__(self) -> str:
        return (
            "Subject:\n"
            f"    identifier = {self.identifier}\n"
            f"    total session = {self.total_sessions()}\n"
            f"    total files = {self.total_files()}"
        )

    def __repr__(self) -> str:
        return (
            f"BIDSSubject(identifier={self.identifier!r}, "
            f"total_sessions={self.total_sessions()}, total_files={self.total_files()})"
        )


@dataclass(frozen=True, repr=False)
class BIDSLayout:
    """Represents a complete BIDS dataset."""

    root: Path
    """Root directory of the BIDS dataset."""

    subjects: tuple[BIDSSubject, ...] = ()
    """Subjects of the dataset, in discovery order."""

    longitudinal: bool = True
    """True if subjects have 'ses-' directories (multi-session/multi-visit study)."""

    description: dict[str, Any] = field(default_factory=dict)
    """Contents of dataset_description.json, in file order."""

    subjects_detail: pd.DataFrame = field(default_factory=pd.DataFrame, compare=False)
    """Contents of subjects.tsv (or participants.tsv), or an empty DataFrame."""

    def get_subject(self, identifier: str) -> Optional[BIDSSubject]:
        """
        Retrieve a subject by identifier.

        Args:
            identifier: Subject identifier without the 'sub-' prefix.

        Returns:
            The BIDSSubject if found, None otherwise.
        """
        for subject in self.subjects:
            if subject.identifier == identifier:
                return subject
        return None

    def get_all_entity_values(self, entity: str) -> list[str]:
        """
        Get all unique values of one entity across the dataset.

        Args:
            entity: The entity key (e.g., 'run', 'task', 'modality').

        Returns:
            Sorted list of unique values.
        """
        values = set()
        for file in self.get_files():
            if entity in file.entities:
                values.add(file.entities[entity])
        return sorted(values)

    def total_subjects(self) -> int:
        return len(self.subjects)

    def total_sessions(self) -> int:
        return sum(subject.total_sessions() for subject in self.subjects)

    def total_files(self) -> int:
        return sum(subject.total_files() for subject in self.subjects)

    def get_files(self, path: PathQuery = None, **filters: Any) -> list[BIDSFile]:
        return self.select_files(build_file_filter(path, **filters))

    def select_files(self, filter_expr: FilterExpression) -> list[BIDSFile]:
        result = []
        for subject in self.subjects:
            result.extend(subject.select_files(filter_expr))
        return result

    def __str__(self) -> str:
        return (
            "Layout:\n"
            f"    root = {self.root}\n"
            f"    total subject = {self.total_subjects()}\n"
            f"    total session = {self.total_sessions()}\n"
            f"    total files = {self.total_files()}"
        )

    def __repr__(self) -> str:
        return f"BIDSLayout(root={str(self.root)!r}, total_subjects={self.total_subjects()})"


def total_subjects(layout: BIDSLayout) -> int:
    """Get the number of subjects in a layout."""
    return layout.total_subjects()


def total_sessions(node: Union[BIDSSubject, BIDSLayout]) -> int:
    """Get the number of sessions of a subject or a whole layout."""
    return node.total_sessions()


def total_files(node: Union[BIDSSession, BIDSSubject, BIDSLayout]) -> int:
    """Get the number of files in a session, a subject or a whole layout."""
    return node.total_files()
