"""
Pytest configuration and shared fixtures.

Most fixtures build small BIDS trees under ``tmp_path``; the in-memory ones
construct model objects directly without touching the filesystem.
"""

import json
import logging
from pathlib import Path
from typing import Callable, Optional

import pytest

from bidstools.core.models import BIDSFile, BIDSLayout, BIDSSession, BIDSSubject


def _write_bids_file(path: Path, metadata: Optional[dict] = None) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.touch()
    if metadata is not None:
        stem = path.name.split('.')[0]
        (path.parent / f"{stem}.json").write_text(json.dumps(metadata), encoding='utf-8')
    return path


@pytest.fixture
def make_bids_file() -> Callable[..., Path]:
    """
    Factory fixture creating an empty data file and, optionally, its sidecar.

    Usage: ``make_bids_file(path, {"RepetitionTime": 2.0})``
    """
    return _write_bids_file


@pytest.fixture
def bids_root(tmp_path: Path) -> Path:
    """
    Create the single-file dataset:

        bids_root/sub-subtest/ses-1/test/sub-test_ses-1_run-001_modlbl.nii.gz
        bids_root/sub-subtest/ses-1/test/sub-test_ses-1_run-001_modlbl.json
    """
    root = tmp_path / "bids_root"
    _write_bids_file(
        root / "sub-subtest" / "ses-1" / "test" / "sub-test_ses-1_run-001_modlbl.nii.gz",
        {"key1": "value1", "key2": "value2"}
    )
    return root


@pytest.fixture
def dataset_root(tmp_path: Path) -> Path:
    """
    Create a two-subject longitudinal dataset with side tables.

    sub-01 has sessions 'pre' (anat + func) and 'post' (anat);
    sub-02 has session 'pre' (anat). Four data files in total.
    """
    root = tmp_path / "dataset"
    root.mkdir()

    (root / "dataset_description.json").write_text(
        json.dumps({"Name": "Test Dataset", "BIDSVersion": "1.8.0", "Authors": ["Test Author"]}),
        encoding='utf-8'
    )
    (root / "subjects.tsv").write_text(
        "participant_id\tage\tsex\n"
        "sub-01\t25\tM\n"
        "sub-02\tn/a\tF\n",
        encoding='utf-8'
    )

    _write_bids_file(
        root / "sub-01" / "ses-pre" / "anat" / "sub-01_ses-pre_run-001_T1w.nii.gz",
        {"RepetitionTime": 2.0, "Manufacturer": "Siemens"}
    )
    _write_bids_file(
        root / "sub-01" / "ses-pre" / "func" / "sub-01_ses-pre_task-rest_run-001_bold.nii.gz",
        {"RepetitionTime": 1.5, "TaskName": "rest"}
    )
    (root / "sub-01" / "ses-pre" / "sub-01_ses-pre_scans.tsv").write_text(
        "filename\tacq_time\n"
        "anat/sub-01_ses-pre_run-001_T1w.nii.gz\t2020-01-01T10:00:00\n"
        "func/sub-01_ses-pre_task-rest_run-001_bold.nii.gz\t2020-01-01T10:30:00\n",
        encoding='utf-8'
    )
    _write_bids_file(
        root / "sub-01" / "ses-post" / "anat" / "sub-01_ses-post_run-001_T1w.nii.gz",
        {"RepetitionTime": 2.0}
    )
    _write_bids_file(
        root / "sub-02" / "ses-pre" / "anat" / "sub-02_ses-pre_run-002_T1w.nii.gz",
        {"RepetitionTime": 2.3}
    )
    return root


@pytest.fixture
def sample_files() -> list[BIDSFile]:
    """Three in-memory files of one subject."""
    base = Path("/test/data/sub-01/ses-pre")
    return [
        BIDSFile(
            path=base / "anat" / "sub-01_ses-pre_run-001_T1w.nii.gz",
            metadata={"RepetitionTime": 2.0, "Manufacturer": "Siemens"},
            entities={"sub": "01", "ses": "pre", "run": "001", "modality": "T1w"}
        ),
        BIDSFile(
            path=base / "func" / "sub-01_ses-pre_task-rest_run-001_bold.nii.gz",
            metadata={"RepetitionTime": 1.5, "TaskName": "rest"},
            entities={"sub": "01", "ses": "pre", "task": "rest", "run": "001", "modality": "bold"}
        ),
        BIDSFile(
            path=base / "func" / "sub-01_ses-pre_task-rest_run-002_bold.nii.gz",
            metadata={"RepetitionTime": 1.5, "TaskName": "rest", "SliceTiming": None},
            entities={"sub": "01", "ses": "pre", "task": "rest", "run": "002", "modality": "bold"}
        ),
    ]


@pytest.fixture
def sample_layout(sample_files) -> BIDSLayout:
    """
    In-memory layout: sub-01 owns the sample files in session 'pre' and one
    more T1w in session 'post'; sub-02 has an empty session.
    """
    post_file = BIDSFile(
        path=Path("/test/data/sub-01/ses-post/anat/sub-01_ses-post_run-001_T1w.nii.gz"),
        metadata={"RepetitionTime": 2.0},
        entities={"sub": "01", "ses": "post", "run": "001", "modality": "T1w"}
    )
    subject1 = BIDSSubject(
        path=Path("/test/data/sub-01"),
        identifier="01",
        sessions=(
            BIDSSession(path=Path("/test/data/sub-01/ses-pre"), identifier="pre", files=tuple(sample_files)),
            BIDSSession(path=Path("/test/data/sub-01/ses-post"), identifier="post", files=(post_file,)),
        )
    )
    subject2 = BIDSSubject(
        path=Path("/test/data/sub-02"),
        identifier="02",
        sessions=(BIDSSession(path=Path("/test/data/sub-02/ses-pre"), identifier="pre"),)
    )
    return BIDSLayout(root=Path("/test/data"), subjects=(subject1, subject2))


@pytest.fixture
def restore_root_logger():
    """Restore root logger handlers and level after a test reconfigures logging."""
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield root
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)
