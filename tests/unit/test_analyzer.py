"""
Unit tests for batch analysis.

Run with:
    pytest tests/unit/test_analyzer.py -v
"""

from datetime import datetime, timezone

import pytest

from healthbatch.analysis.analyzer import BatchAnalyzer, analyze, group_by
from healthbatch.models.schemas import HealthRecord
from healthbatch.transforms.cleaners import clean
from healthbatch.transforms.normalizers import transform


class TestAnalyze:
    """Test analyze()."""

    def test_average_ignores_non_numeric(self, records):
        """Test [10, 20, 30, "n/a"] averages to 20 over four records."""
        summary = analyze(records)

        assert summary.total_records == 4
        assert summary.average_value == 20

    def test_category_counts(self, make_record):
        """Test ["bp", "hr", "bp"] counts to {bp: 2, hr: 1}."""
        records = [
            HealthRecord.from_dict(make_record(str(i), category=category))
            for i, category in enumerate(["bp", "hr", "bp"])
        ]

        assert analyze(records).records_by_category == {"bp": 2, "hr": 1}

    def test_empty_input(self):
        """Test empty batch summary."""
        summary = analyze([])

        assert summary.total_records == 0
        assert summary.records_by_category == {}
        assert summary.average_value is None
        assert "averageValue" not in summary.to_dict()

    def test_no_numeric_values(self, make_record):
        """Test that average is absent when nothing is numeric."""
        records = [HealthRecord.from_dict(make_record("1", value="high"))]

        summary = analyze(records)

        assert summary.total_records == 1
        assert summary.average_value is None

    def test_zero_average_is_reported(self, make_record):
        """Test that an average of zero is not dropped."""
        records = [
            HealthRecord.from_dict(make_record("1", value=-5)),
            HealthRecord.from_dict(make_record("2", value=5)),
        ]

        summary = analyze(records)

        assert summary.average_value == 0
        assert summary.to_dict()["averageValue"] == 0

    def test_mixed_int_and_float(self, make_record):
        """Test plain floating-point mean."""
        records = [
            HealthRecord.from_dict(make_record("1", value=1)),
            HealthRecord.from_dict(make_record("2", value=0.5)),
        ]

        assert analyze(records).average_value == pytest.approx(0.75)

    def test_no_filtering(self, make_record):
        """Test that the analyzer counts whatever it is given."""
        records = [
            HealthRecord.from_dict(make_record("1")),
            HealthRecord.from_dict(make_record("1")),
        ]

        assert analyze(records).total_records == 2

    def test_generated_at_is_now(self, records):
        """Test that the summary is stamped with the current UTC time."""
        before = datetime.now(timezone.utc)
        summary = analyze(records)
        after = datetime.now(timezone.utc)

        assert before <= summary.generated_at <= after

    def test_calculate_statistics(self, records):
        """Test raw statistics triple."""
        total, by_category, average = BatchAnalyzer().calculate_statistics(records)

        assert total == 4
        assert by_category == {"bp": 2, "hr": 2}
        assert average == 20


class TestGroupBy:
    """Test group_by()."""

    def test_group_by_category(self, records):
        """Test partitioning preserves per-group order."""
        groups = group_by(records, "category")

        assert set(groups) == {"bp", "hr"}
        assert [r.id for r in groups["bp"]] == ["1", "3"]
        assert [r.id for r in groups["hr"]] == ["2", "4"]

    def test_group_by_wire_name(self, make_record):
        """Test grouping by a camelCase field name."""
        records = [
            HealthRecord.from_dict(make_record("1", subjectId="P001")),
            HealthRecord.from_dict(make_record("2", subjectId="P002")),
            HealthRecord.from_dict(make_record("3", subjectId="P001")),
        ]

        groups = group_by(records, "subjectId")

        assert [r.id for r in groups["P001"]] == ["1", "3"]
        assert [r.id for r in groups["P002"]] == ["2"]

    def test_missing_field_grouped_under_none(self, make_record):
        """Test records without the field share the None group."""
        records = [
            HealthRecord.from_dict(make_record("1", unit="bpm")),
            HealthRecord.from_dict(make_record("2")),
        ]

        groups = group_by(records, "unit")

        assert [r.id for r in groups[None]] == ["2"]

    def test_unhashable_values(self, make_record):
        """Test dict values are keyed by their string form."""
        record = HealthRecord.from_dict(make_record("1", metadata={"a": 1}))

        groups = group_by([record], "metadata")

        assert list(groups) == ["{'a': 1}"]

    def test_every_record_in_one_group(self, records):
        """Test the groups partition the batch."""
        groups = group_by(records, "value")
        assert sum(len(g) for g in groups.values()) == len(records)

    def test_empty(self):
        """Test grouping an empty batch."""
        assert group_by([], "category") == {}


class TestNumericEdgeCases:
    """Test which values take part in the average."""

    def test_booleans_excluded_from_average(self, make_record):
        """Test that True is kept as a boolean and not averaged as 1."""
        records = transform(clean([make_record("1", value=True), make_record("2", value=10)]))

        assert records[0].value is True
        assert analyze(records).average_value == 10

    def test_huge_integral_string_not_averaged(self, make_record):
        """Test that an integer beyond float range does not break the mean."""
        huge = "1" + "0" * 400
        records = transform(clean([make_record("1", value=huge), make_record("2", value=4)]))

        assert records[0].value == huge
        assert analyze(records).average_value == 4

    def test_huge_int_value_excluded(self, make_record):
        """Test that an int too large for a float is not numeric."""
        records = [
            HealthRecord.from_dict(make_record("1", value=10 ** 400)),
            HealthRecord.from_dict(make_record("2", value=6)),
        ]

        assert analyze(records).average_value == 6

    def test_mean_uses_float_arithmetic(self, make_record):
        """Test that large ints inside float range still average."""
        records = [
            HealthRecord.from_dict(make_record("1", value=10 ** 300)),
            HealthRecord.from_dict(make_record("2", value=10 ** 300)),
        ]

        assert analyze(records).average_value == pytest.approx(1e300)
