"""
Text output for dataset descriptions and side tables.
"""

import json

import pandas as pd

from .models import BIDSLayout, BIDSSession


def format_dataset_description(layout: BIDSLayout) -> str:
    """Render dataset_description.json contents as indented JSON."""
    return json.dumps(layout.description, indent=2, ensure_ascii=False)


def format_table(df: pd.DataFrame) -> str:
    """Render a side table in full, without column or row cropping."""
    return df.to_string(index=False, max_rows=None, max_cols=None)


def print_dataset_description(layout: BIDSLayout) -> None:
    print(format_dataset_description(layout))


def list_subject_detail(layout: BIDSLayout) -> None:
    """Print the subjects.tsv side table of a layout."""
    print(format_table(layout.subjects_detail))


def list_scans_detail(session: BIDSSession) -> None:
    """Print the *_scans.tsv side table of a session."""
    print(format_table(session.scans_detail))
