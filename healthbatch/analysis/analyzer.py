"""
Batch Analysis

Aggregate statistics over a cleaned, transformed batch: record count,
per-category counts and the mean of numeric values.

Example:
    >>> summary = analyze(records)
    >>> summary.records_by_category
    {'blood_pressure': 3, 'heart_rate': 2, 'temperature': 1}
"""

from collections import Counter
from typing import Any, Dict, List, Optional, Sequence, Tuple

from healthbatch.models.schemas import AnalysisSummary, HealthRecord
from healthbatch.utils.logger import get_logger
from healthbatch.utils.timestamps import utc_now

logger = get_logger(__name__)


class BatchAnalyzer:
    """
    Computes summaries over a batch. Holds no state between calls.

    The analyzer trusts its input: it does no filtering of its own.
    """

    def calculate_statistics(
        self, records: Sequence[HealthRecord]
    ) -> Tuple[int, Dict[str, int], Optional[float]]:
        """
        Calculate basic statistics for a batch.

        Args:
            records: Processed records

        Returns:
            tuple: (total, count by category, average numeric value or None)
        """
        total = len(records)
        by_category = dict(Counter(record.category for record in records))

        numeric_values = [record.value for record in records if record.has_numeric_value()]
        average = None
        if numeric_values:
            average = sum(float(v) for v in numeric_values) / len(numeric_values)

        return total, by_category, average

    def analyze(self, records: Sequence[HealthRecord]) -> AnalysisSummary:
        """
        Summarize a batch.

        ``average_value`` is None when no record has a numeric value
        (an average of zero is kept as 0.0).

        Args:
            records: Processed records

        Returns:
            AnalysisSummary: Summary stamped with the completion time
        """
        total, by_category, average = self.calculate_statistics(records)

        summary = AnalysisSummary(
            total_records=total,
            average_value=average,
            records_by_category=by_category,
            generated_at=utc_now(),
        )

        logger.info(
            "Analysis complete",
            extra={
                "total_records": total,
                "categories": len(by_category),
                "average_value": average,
            },
        )

        return summary

    def group_by(
        self, records: Sequence[HealthRecord], field: str
    ) -> Dict[Any, List[HealthRecord]]:
        """
        Partition records by the value of a field.

        Each group keeps the input order of its records. Records lacking the
        field are grouped under None. Unhashable values (e.g. metadata
        dicts) are keyed by their string form.

        Args:
            records: Records to partition
            field: Attribute name, wire name or extra key

        Returns:
            dict: Field value -> records sharing it

        Example:
            >>> groups = BatchAnalyzer().group_by(records, "subjectId")
            >>> [r.id for r in groups["P001"]]
            ['1', '3']
        """
        groups: Dict[Any, List[HealthRecord]] = {}
        for record in records:
            key = record.get_field(field)
            try:
                hash(key)
            except TypeError:
                key = str(key)
            groups.setdefault(key, []).append(record)
        return groups


def analyze(records: Sequence[HealthRecord]) -> AnalysisSummary:
    """Convenience function returning the summary of a batch."""
    return BatchAnalyzer().analyze(records)


def group_by(records: Sequence[HealthRecord], field: str) -> Dict[Any, List[HealthRecord]]:
    """Convenience function partitioning a batch by ``field``."""
    return BatchAnalyzer().group_by(records, field)
