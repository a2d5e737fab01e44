"""
Querying files in BIDS datasets.

This module contains the filter condition classes and the get_files()
query. Conditions are evaluated against single files; containers (sessions,
subjects, layouts) implement the HasFiles protocol and hand the same
condition down to their children, concatenating the results in order.
"""

import re
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Iterable, Protocol, Union, runtime_checkable

if TYPE_CHECKING:
    from .models import BIDSFile

_MISSING = object()


@dataclass
class FilterCondition:
    """
    Base class for all file filter conditions.

    Each filter condition must implement an evaluate() method that determines
    whether a file matches the condition.
    """

    def evaluate(self, file: 'BIDSFile') -> bool:
        """
        Evaluate whether a file matches this condition.

        Args:
            file: The file to evaluate.

        Returns:
            True if the file matches the condition, False otherwise.
        """
        raise NotImplementedError("Subclasses must implement evaluate()")

    def to_dict(self) -> dict:
        """Serialize filter condition to dictionary for JSON storage."""
        raise NotImplementedError("Subclasses must implement to_dict()")

    @classmethod
    def from_dict(cls, data: dict) -> 'FilterCondition':
        """Deserialize filter condition from dictionary."""
        raise NotImplementedError("Subclasses must implement from_dict()")


@dataclass
class PathFilter(FilterCondition):
    """Filter by file path, as a substring or a regular expression."""

    pattern: str = ''
    """Substring (or regex source when ``regex`` is set) to look for."""

    regex: bool = False
    """Treat ``pattern`` as a regular expression, matched anywhere in the path."""

    flags: int = 0
    """re flags used when ``regex`` is set."""

    @classmethod
    def from_query(cls, query: Union[str, re.Pattern]) -> 'PathFilter':
        """Create a filter from a substring or a compiled pattern."""
        if isinstance(query, re.Pattern):
            return cls(pattern=query.pattern, regex=True, flags=query.flags)
        return cls(pattern=query)

    def evaluate(self, file: 'BIDSFile') -> bool:
        path = str(file.path)
        if self.regex:
            return re.search(self.pattern, path, self.flags) is not None
        return self.pattern in path

    def to_dict(self) -> dict:
        return {
            'type': 'path',
            'pattern': self.pattern,
            'regex': self.regex,
            'flags': self.flags
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'PathFilter':
        return cls(
            pattern=data.get('pattern', ''),
            regex=data.get('regex', False),
            flags=data.get('flags', 0)
        )


@dataclass
class AttributeFilter(FilterCondition):
    """
    Filter by an entity or sidecar metadata value.

    The key is looked up in the filename entities first and in the sidecar
    metadata only when the entities lack it. A file with no value for the key
    never matches.
    """

    key: str = ''
    """Entity or metadata key (e.g., 'run', 'modality', 'RepetitionTime')."""

    value: Any = None
    """Value the attribute must equal."""

    def evaluate(self, file: 'BIDSFile') -> bool:
        found = file.get(self.key, _MISSING)
        if found is _MISSING or found is None:
            return False
        return found == self.value

    def to_dict(self) -> dict:
        return {
            'type': 'attribute',
            'key': self.key,
            'value': self.value
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'AttributeFilter':
        return cls(key=data.get('key', ''), value=data.get('value'))


@dataclass
class LogicalOperation:
    """
    Logical combination of filter conditions.

    Supports AND, OR, and NOT operations for composing complex filters.
    """

    operator: str = 'AND'
    """Logical operator: 'AND', 'OR', 'NOT'."""

    conditions: list['FilterCondition | LogicalOperation'] = field(default_factory=list)
    """List of child conditions or nested logical operations."""

    def __post_init__(self):
        if self.operator not in ('AND', 'OR', 'NOT'):
            raise ValueError(f"Unknown logical operator: {self.operator!r}")

    def evaluate(self, file: 'BIDSFile') -> bool:
        """Evaluate the logical operation recursively."""
        if not self.conditions:
            return True

        if self.operator == 'AND':
            return all(cond.evaluate(file) for cond in self.conditions)
        elif self.operator == 'OR':
            return any(cond.evaluate(file) for cond in self.conditions)
        else:
            # NOT operates on the first condition only
            return not self.conditions[0].evaluate(file)

    def to_dict(self) -> dict:
        return {
            'type': 'logical_operation',
            'operator': self.operator,
            'conditions': [cond.to_dict() for cond in self.conditions]
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'LogicalOperation':
        """
        Deserialize logical operation from dictionary.

        Raises:
            ValueError: If a condition has an unknown type.
        """
        conditions = []
        for cond_data in data.get('conditions', []):
            cond_type = cond_data.get('type')
            if cond_type == 'path':
                conditions.append(PathFilter.from_dict(cond_data))
            elif cond_type == 'attribute':
                conditions.append(AttributeFilter.from_dict(cond_data))
            elif cond_type == 'logical_operation':
                conditions.append(LogicalOperation.from_dict(cond_data))
            else:
                raise ValueError(f"Unknown filter condition type: {cond_type!r}")

        return cls(
            operator=data.get('operator', 'AND'),
            conditions=conditions
        )


FilterExpression = Union[FilterCondition, LogicalOperation]


@runtime_checkable
class HasFiles(Protocol):
    """Anything that can answer file queries: sessions, subjects, layouts."""

    def get_files(self, path: Union[str, re.Pattern, None] = None, **filters: Any) -> list['BIDSFile']:
        ...

    def select_files(self, filter_expr: FilterExpression) -> list['BIDSFile']:
        ...


FileTarget = Union[HasFiles, 'BIDSFile', Iterable['BIDSFile']]
"""Anything a query can run on: a dataset level, one file or a collection of files."""


def build_file_filter(path: Union[str, re.Pattern, None] = None, **filters: Any) -> LogicalOperation:
    """
    Build the AND expression used by get_files().

    Args:
        path: Optional substring or compiled regex the file path must contain.
        **filters: Entity/metadata keys and the values they must equal.

    Returns:
        A LogicalOperation combining all conditions with AND.
    """
    conditions: list[FilterExpression] = []
    if path is not None:
        conditions.append(PathFilter.from_query(path))
    for key, value in filters.items():
        conditions.append(AttributeFilter(key=key, value=value))
    return LogicalOperation(operator='AND', conditions=conditions)


def filter_files(files: Iterable['BIDSFile'], filter_expr: FilterExpression) -> list['BIDSFile']:
    """
    Keep the files matching a filter expression, preserving order.

    The input collection is not modified.
    """
    return [file for file in files if filter_expr.evaluate(file)]


def select_files(target: FileTarget, filter_expr: FilterExpression) -> list['BIDSFile']:
    """
    Apply a filter expression to any level of a dataset.

    Args:
        target: A BIDSLayout, BIDSSubject, BIDSSession, a single BIDSFile, or
            an iterable of BIDSFile.
        filter_expr: The filter expression to apply.

    Returns:
        Matching files, in dataset order.
    """
    if isinstance(target, HasFiles):
        return target.select_files(filter_expr)
    if hasattr(target, 'entities'):
        return filter_files([target], filter_expr)
    return filter_files(target, filter_expr)


def get_files(
    target: FileTarget,
    path: Union[str, re.Pattern, None] = None,
    **filters: Any
) -> list['BIDSFile']:
    """
    Query files by path, filename entities and sidecar metadata.

    ``path`` keeps files whose path contains the given substring, or in
    which a compiled regex matches anywhere. Every other keyword keeps files
    whose entity (or, failing that, metadata) value equals the given value.
    All conditions must hold.

    Example:
        filtered = get_files(files, path="anat", run="002", modality="T1w")

        # Query a whole layout by entities and metadata
        filtered = get_files(layout, run="002", RepetitionTime=2.0)

    Args:
        target: A BIDSLayout, BIDSSubject, BIDSSession, a single BIDSFile, or
            an iterable of BIDSFile.
        path: Optional substring or compiled regex.
        **filters: Keys and the values they must equal.

    Returns:
        Matching files in dataset order; empty if nothing matches.
    """
    return select_files(target, build_file_filter(path, **filters))
