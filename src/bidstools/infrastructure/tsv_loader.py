"""
TSV file loading utilities.

This module loads the BIDS side tables (``subjects.tsv``, ``*_scans.tsv``)
into pandas DataFrames.
"""

from pathlib import Path
from typing import Iterable, Optional

import pandas as pd

from .logging_config import get_logger

logger = get_logger(__name__)


def load_tsv(file_path: Optional[Path]) -> pd.DataFrame:
    """
    Load a TSV file into a DataFrame.

    Values of ``n/a`` are read as missing, following BIDS conventions.

    Args:
        file_path: Path to the TSV file, or None.

    Returns:
        The table, or an empty DataFrame if there is no file.
    """
    if file_path is None or not Path(file_path).exists():
        logger.debug(f"TSV file not found: {file_path}")
        return pd.DataFrame()

    df = pd.read_csv(file_path, sep='\t', na_values='n/a', keep_default_na=False)
    logger.debug(f"Loaded {len(df)} rows from {Path(file_path).name}")
    return df


def find_side_table(directory: Path, names: Iterable[str] = (), suffix: Optional[str] = None) -> Optional[Path]:
    """
    Find the first side table in a directory.

    Exact ``names`` are tried in order first; otherwise the first regular file
    (in directory listing order) whose name ends with ``suffix`` is returned.

    Args:
        directory: Directory to look in (not recursive).
        names: Exact filenames to look for, e.g. ``('subjects.tsv',)``.
        suffix: Filename ending to look for, e.g. ``'_scans.tsv'``.

    Returns:
        Path to the side table, or None if there is none.
    """
    for name in names:
        candidate = directory / name
        if candidate.is_file():
            return candidate

    if suffix is not None:
        for candidate in directory.iterdir():
            if candidate.is_file() and candidate.name.endswith(suffix):
                return candidate

    return None
