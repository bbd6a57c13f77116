"""
Cleaning

Removes duplicate and incomplete records from a raw batch.
Duplicates share an ``id``; the earliest occurrence wins. Records without a
non-blank ``id``, ``subjectId`` or ``category`` are dropped silently.

Example:
    >>> cleaned = clean(raw_records)
"""

from collections import defaultdict
from typing import Any, Dict, Iterable, List, Mapping, Union

from pydantic import ValidationError as PydanticValidationError

from healthbatch.models.schemas import HealthRecord
from healthbatch.utils.logger import get_logger

logger = get_logger(__name__)

RawRecord = Union[HealthRecord, Mapping[str, Any]]


class RecordCleaner:
    """
    Deduplicates records by ``id`` and filters out incomplete ones.

    Output keeps the relative input order of surviving records, and
    cleaning an already-clean batch returns it unchanged.

    Example:
        >>> cleaner = RecordCleaner()
        >>> records = [
        ...     {"id": "1", "subjectId": "P001", "category": "heart_rate"},
        ...     {"id": "1", "subjectId": "P009", "category": "heart_rate"},  # Duplicate
        ...     {"id": "2", "category": "temperature"},  # No subject
        ... ]
        >>> [r.subject_id for r in cleaner.clean(records)]
        ['P001']
    """

    def clean(self, records: Iterable[RawRecord]) -> List[HealthRecord]:
        """
        Deduplicate and filter a batch.

        Deduplication runs before filtering, so an incomplete first
        occurrence of an ``id`` shadows any later complete one.

        Args:
            records: Raw mappings or HealthRecord instances

        Returns:
            list: Surviving records, in input order
        """
        parsed = self._parse_all(records)
        initial_count = len(parsed)

        seen = set()
        unique_records = []
        for record in parsed:
            if record.id in seen:
                logger.debug(f"Dropping duplicate record (id={record.id})")
                continue
            seen.add(record.id)
            unique_records.append(record)

        cleaned = [record for record in unique_records if record.is_complete()]

        logger.info(
            "Cleaning complete",
            extra={
                "initial_count": initial_count,
                "final_count": len(cleaned),
                "duplicates_removed": initial_count - len(unique_records),
                "incomplete_removed": len(unique_records) - len(cleaned),
            },
        )

        return cleaned

    def get_duplicate_stats(self, records: Iterable[RawRecord]) -> Dict[str, Any]:
        """
        Get statistics about duplicates and incomplete records without removing them.

        Args:
            records: List of records to analyze

        Returns:
            dict: Statistics about the batch

        Example:
            >>> stats = RecordCleaner().get_duplicate_stats(records)
            >>> print(f"Duplicate rate: {stats['duplicate_rate']:.2%}")
        """
        parsed = self._parse_all(records)
        if not parsed:
            return {
                "total_records": 0,
                "unique_records": 0,
                "duplicate_records": 0,
                "duplicate_rate": 0.0,
                "duplicate_groups": 0,
                "incomplete_records": 0,
            }

        groups = defaultdict(list)
        for record in parsed:
            groups[record.id].append(record)

        duplicate_groups = sum(1 for group in groups.values() if len(group) > 1)
        duplicate_count = sum(len(group) - 1 for group in groups.values())

        return {
            "total_records": len(parsed),
            "unique_records": len(groups),
            "duplicate_records": duplicate_count,
            "duplicate_rate": duplicate_count / len(parsed),
            "duplicate_groups": duplicate_groups,
            "incomplete_records": sum(1 for r in parsed if not r.is_complete()),
        }

    def _parse_all(self, records: Iterable[RawRecord]) -> List[HealthRecord]:
        parsed = []
        for index, raw in enumerate(records):
            record = self._parse(raw, index)
            if record is not None:
                parsed.append(record)
        return parsed

    def _parse(self, raw: RawRecord, index: int):
        """
        Turn a raw mapping into a HealthRecord.

        Unparseable entries are data-quality problems, not errors: they are
        logged and dropped like any other incomplete record.
        """
        if isinstance(raw, HealthRecord):
            return raw
        if not isinstance(raw, Mapping):
            logger.warning(
                "Dropping non-object record",
                extra={"index": index, "type": type(raw).__name__},
            )
            return None
        try:
            return HealthRecord.from_dict(dict(raw))
        except PydanticValidationError as e:
            logger.warning(
                "Dropping unparseable record",
                extra={"index": index, "id": raw.get("id"), "errors": e.error_count()},
            )
            return None


def clean(records: Iterable[RawRecord]) -> List[HealthRecord]:
    """
    Convenience function for cleaning.

    Args:
        records: Raw records to clean

    Returns:
        list: Deduplicated, complete records
    """
    return RecordCleaner().clean(records)
