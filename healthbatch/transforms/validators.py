"""
Required-field validation.

Validation is all-or-nothing: the first record missing a required field
rejects the whole batch.
"""

from typing import Iterable, Optional, Sequence, Tuple

from healthbatch.exceptions import ValidationError
from healthbatch.models.schemas import HealthRecord
from healthbatch.utils.config import get_settings
from healthbatch.utils.logger import get_logger

logger = get_logger(__name__)


class RecordValidator:
    """
    Checks that every record carries a set of required fields.

    Field names may use attribute form (``subject_id``) or wire form
    (``subjectId``). A field counts as missing when it is absent or None.

    Example:
        >>> validator = RecordValidator(["id", "subjectId", "category"])
        >>> validator.validate(records)  # raises ValidationError on the first gap
    """

    def __init__(self, required_fields: Optional[Iterable[str]] = None):
        if required_fields is None:
            required_fields = get_settings().required_fields
        # Keep caller order so "first missing field" is deterministic
        self.required_fields: Tuple[str, ...] = tuple(dict.fromkeys(required_fields))

    def find_first_gap(
        self, records: Iterable[HealthRecord]
    ) -> Optional[Tuple[HealthRecord, str]]:
        """
        Locate the first (record, field) pair where a required field is missing.

        Returns:
            tuple: (record, field name), or None if the batch is complete
        """
        for record in records:
            for field in self.required_fields:
                if record.get_field(field) is None:
                    return record, field
        return None

    def validate(self, records: Sequence[HealthRecord]) -> None:
        """
        Validate a batch.

        Raises:
            ValidationError: Identifying the first offending record id and field
        """
        gap = self.find_first_gap(records)
        if gap is not None:
            record, field = gap
            logger.warning(
                "Validation failed",
                extra={"record_id": record.id, "missing_field": field},
            )
            raise ValidationError(
                f"Missing required field: {field} in record {record.id}",
                record_id=record.id,
                missing_field=field,
            )

        logger.debug(
            "Validation passed",
            extra={"records": len(records), "required_fields": list(self.required_fields)},
        )


def validate(
    records: Sequence[HealthRecord],
    required_fields: Optional[Iterable[str]] = None,
) -> None:
    """
    Convenience function for validation.

    Args:
        records: Transformed records
        required_fields: Field names to require (defaults to settings.required_fields)

    Raises:
        ValidationError: On the first record missing a required field
    """
    RecordValidator(required_fields).validate(records)
