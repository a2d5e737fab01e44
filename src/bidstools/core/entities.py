"""
BIDS filename entities.

This module turns BIDS filenames of the form
``<k1>-<v1>_<k2>-<v2>_..._<modality>.<ext>`` into ordered entity
dictionaries, and builds filenames back from such dictionaries.

It is pure string handling and performs no filesystem access.
"""

import re
from typing import Mapping, Optional

from ..infrastructure.logging_config import get_logger
from .exceptions import BIDSFilenameError, BIDSStructureError

logger = get_logger(__name__)

MODALITY_KEY = 'modality'
"""Entity key under which the trailing filename segment is stored."""

_RESERVED_CHARS = re.compile(r'[-_]')


def split_extension(fname: str) -> tuple[str, str]:
    """
    Split a filename at its first dot.

    Compound extensions stay together, so ``sub-01_T1w.nii.gz`` gives
    ``('sub-01_T1w', 'nii.gz')``.

    Args:
        fname: Filename without directory part.

    Returns:
        Tuple of (stem, extension). The extension is empty if there is no dot.
    """
    stem, _, ext = fname.partition('.')
    return stem, ext


def parse_fname(
    fname: str,
    require_modality: bool = True,
    strict: bool = True
) -> dict[str, str]:
    """
    Parse the key-value entities encoded in a BIDS filename.

    The extension (everything after the first dot) is discarded. With
    ``require_modality`` the last underscore-delimited segment is stored
    under the ``modality`` key, always in last position. An empty stem
    gives an empty modality.

    Args:
        fname: Filename without directory part.
        require_modality: Expect a trailing modality segment (e.g. ``T1w``).
        strict: Raise on malformed filenames. When False, a warning is logged
            and an empty dictionary is returned instead.

    Returns:
        Entities in filename order.

    Raises:
        BIDSStructureError: If the modality segment contains a dash.
        BIDSFilenameError: If ``strict`` and a segment is not a single
            ``key-value`` pair, a key occurs twice or a key is empty.
    """
    stem, _ = split_extension(fname)
    parts = [part.split('-') for part in stem.split('_')] if stem else []

    if require_modality:
        # Dotfiles such as .DS_Store have an empty stem and an empty modality
        modality = parts.pop() if parts else ['']
        if len(modality) != 1:
            raise BIDSStructureError(
                f"Got unexpected modality {'-'.join(modality)!r} in {fname!r}"
            )
        parts.append([MODALITY_KEY, modality[0]])

    entities: dict[str, str] = {}
    for part in parts:
        if len(part) != 2:
            message = (
                f"Invalid BIDS file name {fname} "
                f"(part {'-'.join(part)} should have exactly one '-')"
            )
        elif part[0] in entities:
            message = f"Invalid BIDS file name {fname} (key {part[0]} occurs twice)"
        elif not part[0]:
            message = f"Invalid BIDS file name {fname} (empty key in pair {'-'.join(part)})"
        else:
            key, value = part
            entities[key] = value
            continue

        if strict:
            raise BIDSFilenameError(message)
        logger.warning(message)
        return {}

    return entities


def construct_fname(entities: Mapping[str, Optional[str]], ext: Optional[str] = None) -> str:
    """
    Build a BIDS filename from an entity mapping.

    Pairs are joined in mapping order, entries whose value is None are
    skipped, and the ``modality`` entry is appended last without its key.

    Args:
        entities: Ordered mapping of entity keys to values.
        ext: Optional extension, without leading dot (e.g. ``'nii.gz'``).

    Returns:
        The filename, e.g. ``sub-01_run-001_T1w.nii.gz``.

    Raises:
        ValueError: If a key or value contains ``-`` or ``_``.
    """
    pairs = []
    for key, value in entities.items():
        if key == MODALITY_KEY or value is None:
            continue
        if _RESERVED_CHARS.search(key):
            raise ValueError(f"Cannot have - or _ in BIDS key {key!r}")
        if _RESERVED_CHARS.search(value):
            raise ValueError(f"Cannot have - or _ in BIDS value {value!r}")
        pairs.append(f"{key}-{value}")

    modality = entities.get(MODALITY_KEY)
    if modality is not None:
        pairs.append(modality)

    fname = '_'.join(pairs)
    if ext is not None:
        fname = f"{fname}.{ext}"
    return fname
