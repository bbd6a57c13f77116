"""
Field Normalization

Normalizes record timestamps to canonical ISO-8601 UTC and coerces
numeric-looking string values to numbers.

A timestamp that is missing or cannot be parsed fails the whole batch with
MalformedTimestampError. Value coercion never fails: strings that are not
numbers are left exactly as they were.

Example:
    >>> normalizer = RecordNormalizer()
    >>> normalizer.normalize_timestamp("2024-01-15 10:30")
    '2024-01-15T10:30:00.000Z'
    >>> normalizer.coerce_value("42")
    42
"""

import math
import re
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import Any, Iterable, List, Optional, Sequence

from healthbatch.exceptions import MalformedTimestampError
from healthbatch.models.schemas import HealthRecord, is_numeric
from healthbatch.utils.logger import get_logger
from healthbatch.utils.timestamps import format_iso, to_utc

logger = get_logger(__name__)

# Tried in order after ISO-8601 and RFC 2822
FALLBACK_DATE_FORMATS = (
    "%Y/%m/%d",
    "%Y/%m/%d %H:%M",
    "%Y/%m/%d %H:%M:%S",
    "%m/%d/%Y",
    "%m/%d/%Y %H:%M",
    "%m/%d/%Y %H:%M:%S",
)

_INT_PATTERN = re.compile(r"[+-]?\d+")


def parse_timestamp(raw: Any) -> Optional[datetime]:
    """
    Parse a timestamp in any supported format.

    Numbers are epoch milliseconds. Naive results are taken as UTC.

    Args:
        raw: String, datetime or number

    Returns:
        datetime: Aware UTC datetime, or None if ``raw`` cannot be parsed
    """
    if isinstance(raw, bool) or raw is None:
        return None
    if isinstance(raw, datetime):
        return to_utc(raw)
    if isinstance(raw, (int, float)):
        if not math.isfinite(raw):
            return None
        try:
            return datetime.fromtimestamp(raw / 1000, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None
    if not isinstance(raw, str):
        return None

    text = raw.strip()
    if not text:
        return None

    # Python < 3.11 does not accept a trailing Z
    iso_text = text[:-1] + "+00:00" if text[-1] in "zZ" else text
    try:
        return to_utc(datetime.fromisoformat(iso_text))
    except ValueError:
        pass

    try:
        return to_utc(parsedate_to_datetime(text))
    except (TypeError, ValueError, IndexError):
        pass

    for fmt in FALLBACK_DATE_FORMATS:
        try:
            return to_utc(datetime.strptime(text, fmt))
        except ValueError:
            continue

    return None


class RecordNormalizer:
    """
    Normalizes the timestamp and value fields of records.

    Records are never mutated; each normalized record is a copy.
    """

    def normalize_timestamp(self, raw: Any, record_id: Optional[str] = None) -> str:
        """
        Re-serialize a timestamp as ``YYYY-MM-DDTHH:MM:SS.mmmZ``.

        Args:
            raw: Timestamp as received
            record_id: Owning record (for error context)

        Returns:
            str: Canonical ISO-8601 UTC timestamp

        Raises:
            MalformedTimestampError: If the timestamp is missing or unparseable
        """
        if raw is None:
            raise MalformedTimestampError(
                "Missing timestamp", record_id=record_id, timestamp=None
            )
        parsed = parse_timestamp(raw)
        if parsed is None:
            raise MalformedTimestampError(
                "Unparseable timestamp", record_id=record_id, timestamp=raw
            )
        return format_iso(parsed)

    def coerce_value(self, value: Any) -> Any:
        """
        Convert a numeric string to int or float; return anything else unchanged.

        Surrounding whitespace is ignored. Integral-looking strings become
        ints, other numeric strings become floats. Empty strings, non-finite
        values ("NaN", "Infinity") and integers beyond float range are not
        numbers here.

        Example:
            >>> RecordNormalizer().coerce_value(" 98.6 ")
            98.6
            >>> RecordNormalizer().coerce_value("n/a")
            'n/a'
        """
        if not isinstance(value, str):
            return value

        text = value.strip()
        # float() would also accept digit separators like "1_000"
        if not text or "_" in text:
            return value

        if _INT_PATTERN.fullmatch(text):
            try:
                number = int(text)
            except ValueError:
                # Past the interpreter's int/str conversion digit limit
                return value
            return number if is_numeric(number) else value

        try:
            number = float(text)
        except ValueError:
            return value

        if not math.isfinite(number):
            return value
        return number

    def normalize(self, record: HealthRecord) -> HealthRecord:
        """
        Normalize a single record.

        Raises:
            MalformedTimestampError: If the record's timestamp is unusable
        """
        return record.model_copy(
            update={
                "timestamp": self.normalize_timestamp(record.timestamp, record.id),
                "value": self.coerce_value(record.value),
            }
        )

    def normalize_batch(self, records: Iterable[HealthRecord]) -> List[HealthRecord]:
        """
        Normalize every record in a batch.

        Returns:
            list: Normalized copies, in input order

        Raises:
            MalformedTimestampError: On the first unusable timestamp
        """
        return [self.normalize(record) for record in records]


def transform(records: Sequence[HealthRecord]) -> List[HealthRecord]:
    """
    Normalize timestamps and coerce numeric values across a batch.

    Args:
        records: Cleaned records

    Returns:
        list: Transformed records

    Raises:
        MalformedTimestampError: If any timestamp is missing or unparseable
    """
    transformed = RecordNormalizer().normalize_batch(records)
    coerced = sum(
        1
        for before, after in zip(records, transformed)
        if isinstance(before.value, str) and not isinstance(after.value, str)
    )
    logger.info(
        "Transformation complete",
        extra={"records": len(transformed), "values_coerced": coerced},
    )
    return transformed
