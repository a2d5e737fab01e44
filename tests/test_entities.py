"""
Tests for BIDS filename parsing and construction.
"""

import logging
import re

import pytest

from bidstools.core.entities import construct_fname, parse_fname, split_extension
from bidstools.core.exceptions import BIDSFilenameError, BIDSStructureError


class TestParseFname:
    """Test cases for parse_fname."""

    def test_parse_filename(self):
        """Test parsing a filename with modality; the extension is discarded."""
        entities = parse_fname("sub-test_ses-1_run-001_modlbl.json")

        assert entities == {"sub": "test", "ses": "1", "run": "001", "modality": "modlbl"}
        assert list(entities) == ["sub", "ses", "run", "modality"]

    def test_compound_extension_is_discarded(self):
        """Test that everything after the first dot is ignored."""
        entities = parse_fname("sub-01_T1w.nii.gz")

        assert entities == {"sub": "01", "modality": "T1w"}

    def test_without_modality(self):
        """Test parsing when no modality segment is expected."""
        entities = parse_fname("sub-01_task-rest_run-1.tsv", require_modality=False)

        assert entities == {"sub": "01", "task": "rest", "run": "1"}
        assert "modality" not in entities

    def test_modality_only(self):
        """Test a filename made of the modality segment alone."""
        assert parse_fname("T1w.nii.gz") == {"modality": "T1w"}

    @pytest.mark.parametrize("strict", [True, False])
    def test_dotfile_has_empty_modality(self, strict):
        """Test that a hidden file parses to an empty modality instead of failing."""
        assert parse_fname(".DS_Store", strict=strict) == {"modality": ""}
        assert parse_fname("", strict=strict) == {"modality": ""}

    def test_no_entity_segments(self):
        """Test that an empty stem without modality gives an empty map."""
        assert parse_fname("", require_modality=False) == {}
        assert parse_fname(".json", require_modality=False) == {}

    def test_modality_with_dash_is_fatal(self):
        """Test that a dash in the modality segment always raises."""
        fname = "sub-subtest_ses-1_run-001_key-nomoderror.nii.gz"

        with pytest.raises(BIDSStructureError, match="key-nomoderror"):
            parse_fname(fname)

        # Not governed by strict
        with pytest.raises(AssertionError):
            parse_fname(fname, strict=False)

    def test_more_than_one_dash(self):
        """Test that a segment with several dashes is a malformed pair."""
        fname = "sub-subtest_ses-1-more-than-one-dash_run-001_mod.nii.gz"

        expected = re.escape(
            f"Invalid BIDS file name {fname} "
            "(part ses-1-more-than-one-dash should have exactly one '-')"
        )
        with pytest.raises(BIDSFilenameError, match=expected):
            parse_fname(fname)

    def test_key_without_value(self):
        """Test that a segment without a dash is a malformed pair."""
        fname = "sub-subtest_key_without_val_mod.nii.gz"

        with pytest.raises(BIDSFilenameError, match=re.escape("(part key should have exactly one '-')")):
            parse_fname(fname)

    def test_single_segment_without_dash(self):
        """Test the error quotes the lone segment."""
        with pytest.raises(BIDSFilenameError, match="part README"):
            parse_fname("README.md", require_modality=False)

    def test_duplicate_key(self):
        """Test that a repeated key raises in strict mode."""
        fname = "sub-subtest_key1-val1_key1-val2_mod.nii.gz"

        with pytest.raises(BIDSFilenameError, match="key key1 occurs twice"):
            parse_fname(fname, strict=True)

    def test_empty_key(self):
        """Test that a pair with an empty key raises."""
        with pytest.raises(BIDSFilenameError, match="empty key in pair -val1"):
            parse_fname("sub-subtest_-val1_mod.nii.gz")

    def test_filename_error_is_value_error(self):
        """Test that data errors can be caught as ValueError."""
        with pytest.raises(ValueError):
            parse_fname("sub-01_sub-02_T1w.nii.gz")

    @pytest.mark.parametrize("fname", [
        "sub-subtest_key1-val1_key1-val2_mod.nii.gz",
        "sub-subtest_ses-1-more-than-one-dash_run-001_mod.nii.gz",
        "sub-subtest_-val1_mod.nii.gz",
    ])
    def test_lenient_returns_empty(self, fname, caplog):
        """Test that strict=False warns and discards the whole filename."""
        with caplog.at_level(logging.WARNING, logger="bidstools.core.entities"):
            entities = parse_fname(fname, strict=False)

        assert entities == {}
        assert any(fname in record.getMessage() for record in caplog.records)


class TestConstructFname:
    """Test cases for construct_fname."""

    def test_round_trip(self):
        """Test that parsing then constructing keeps pairs and order."""
        fname = "sub-01_ses-pre_task-rest_run-001_bold.nii.gz"
        stem, ext = split_extension(fname)

        assert construct_fname(parse_fname(fname), ext=ext) == fname
        assert construct_fname(parse_fname(fname)) == stem

    def test_modality_appended_last(self):
        """Test that modality goes last, without its key, wherever it is in the map."""
        entities = {"modality": "bold", "sub": "01", "task": "rest"}

        assert construct_fname(entities) == "sub-01_task-rest_bold"

    def test_none_values_skipped(self):
        """Test that entries with a None value are left out."""
        entities = {"sub": "01", "ses": None, "run": "2", "modality": "T1w"}

        assert construct_fname(entities, ext="nii") == "sub-01_run-2_T1w.nii"

    def test_without_modality(self):
        """Test constructing a filename without a modality."""
        assert construct_fname({"sub": "01", "ses": "1"}, ext="tsv") == "sub-01_ses-1.tsv"

    @pytest.mark.parametrize("entities", [
        {"sub_id": "01"},
        {"sub-id": "01"},
        {"sub": "0_1"},
        {"sub": "0-1"},
    ])
    def test_reserved_characters(self, entities):
        """Test that '-' or '_' in a key or value is rejected."""
        with pytest.raises(ValueError, match="Cannot have - or _"):
            construct_fname(entities)


def test_split_extension():
    """Test splitting at the first dot."""
    assert split_extension("sub-01_T1w.nii.gz") == ("sub-01_T1w", "nii.gz")
    assert split_extension("README") == ("README", "")
