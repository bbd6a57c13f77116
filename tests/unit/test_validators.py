"""
Unit tests for required-field validation.

Run with:
    pytest tests/unit/test_validators.py -v
"""

import pytest

from healthbatch.exceptions import PipelineError, ValidationError
from healthbatch.models.schemas import HealthRecord
from healthbatch.transforms.validators import RecordValidator, validate
from healthbatch.utils.config import get_settings


def _records(*dicts):
    return [HealthRecord.from_dict(d) for d in dicts]


class TestValidate:
    """Test validate()."""

    def test_valid_batch_passes(self, make_record):
        """Test that a complete batch validates."""
        records = _records(make_record("1"), make_record("2"))
        assert validate(records, ["id", "subjectId", "category"]) is None

    def test_fail_fast_at_first_gap(self, make_record):
        """Test the record at index 2 is reported, ignoring later ones."""
        missing_category = make_record("c")
        del missing_category["category"]
        missing_subject = make_record("d")
        del missing_subject["subjectId"]

        records = _records(make_record("a"), make_record("b"), missing_category, missing_subject)

        with pytest.raises(ValidationError) as exc_info:
            validate(records, ["id", "subjectId", "category"])

        assert exc_info.value.record_id == "c"
        assert exc_info.value.missing_field == "category"
        assert "category" in str(exc_info.value)
        assert "c" in str(exc_info.value)

    def test_field_order_decides_first_missing(self, make_record):
        """Test that required fields are checked in the given order."""
        record = {"id": "1"}

        with pytest.raises(ValidationError) as exc_info:
            validate(_records(record), ["category", "subjectId"])

        assert exc_info.value.missing_field == "category"

    def test_python_field_names(self, make_record):
        """Test attribute-style names are accepted."""
        record = make_record("1")
        del record["subjectId"]

        with pytest.raises(ValidationError) as exc_info:
            validate(_records(record), ["subject_id"])

        assert exc_info.value.missing_field == "subject_id"

    def test_explicit_none_is_missing(self, make_record):
        """Test that an explicit null counts as missing."""
        with pytest.raises(ValidationError):
            validate(_records(make_record("1", value=None)), ["value"])

    def test_empty_string_is_present(self, make_record):
        """Test that presence, not non-emptiness, is checked."""
        validate(_records(make_record("1", value="")), ["value"])

    def test_extra_field_can_be_required(self, make_record):
        """Test requiring a pass-through field."""
        validate(_records(make_record("1", unit="bpm")), ["unit"])

        with pytest.raises(ValidationError):
            validate(_records(make_record("1")), ["unit"])

    def test_empty_batch_passes(self):
        """Test that an empty batch is valid."""
        validate([], ["id"])

    def test_is_pipeline_error(self):
        """Test ValidationError is part of the pipeline hierarchy."""
        assert issubclass(ValidationError, PipelineError)


class TestRecordValidator:
    """Test RecordValidator construction."""

    def test_defaults_from_settings(self):
        """Test default required fields come from configuration."""
        validator = RecordValidator()
        assert validator.required_fields == tuple(get_settings().required_fields)

    def test_duplicate_names_collapsed(self):
        """Test that repeated field names are checked once."""
        validator = RecordValidator(["id", "id", "category"])
        assert validator.required_fields == ("id", "category")

    def test_find_first_gap(self, make_record):
        """Test gap lookup without raising."""
        validator = RecordValidator(["id", "metadata"])
        records = _records(make_record("1", metadata={"a": 1}), make_record("2"))

        record, field = validator.find_first_gap(records)

        assert record.id == "2"
        assert field == "metadata"
