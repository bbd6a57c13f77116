"""
Pydantic data models for health measurement batches.

Records are parsed permissively (every field optional) so that the cleaner,
rather than the parser, decides which records survive. All models are frozen;
pipeline stages produce new instances instead of mutating their input.

Example:
    >>> record = HealthRecord.from_dict({
    ...     "id": "1",
    ...     "subjectId": "P001",
    ...     "category": "heart_rate",
    ...     "value": "72",
    ...     "timestamp": "2024-01-15T10:30:00Z",
    ... })
    >>> record.subject_id
    'P001'
"""

import math
from datetime import datetime
from typing import Any, Dict, List, Optional, Union

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    PrivateAttr,
    StrictBool,
    StrictFloat,
    StrictInt,
    field_serializer,
    field_validator,
)
from pydantic.alias_generators import to_camel

from healthbatch.models.enums import SubmissionStatus
from healthbatch.utils.timestamps import format_iso, utc_now

# Strict members keep booleans as booleans rather than 0/1
RecordValue = Union[StrictBool, StrictInt, StrictFloat, str]

# Wire names (and legacy names) mapped to model attribute names
FIELD_ALIASES = {
    "subjectId": "subject_id",
    "patientId": "subject_id",
    "recordType": "category",
}


def is_numeric(value: Any) -> bool:
    """
    True for finite ints and floats; bools do not count as numbers.

    Ints too large to convert to a float are not numbers either.
    """
    if isinstance(value, bool):
        return False
    if isinstance(value, int):
        try:
            float(value)
        except OverflowError:
            return False
        return True
    return isinstance(value, float) and math.isfinite(value)


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


class HealthRecord(BaseModel):
    """
    A single measurement tied to a subject and a category.

    Unknown keys are kept as extras and passed through the pipeline untouched.
    ``patientId`` and ``recordType`` are accepted on input for ``subjectId``
    and ``category``.
    """

    model_config = ConfigDict(
        frozen=True,
        extra="allow",
        populate_by_name=True,
    )

    id: Optional[str] = Field(
        default=None,
        description="Unique record identifier (deduplication key)",
    )
    subject_id: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("subjectId", "subject_id", "patientId"),
        serialization_alias="subjectId",
        description="Entity the measurement concerns",
    )
    category: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("category", "recordType"),
        description="Classification label (e.g., 'heart_rate')",
    )
    value: Optional[RecordValue] = Field(
        default=None,
        description="Measurement, numeric or a numeric-looking string",
    )
    timestamp: Optional[Union[StrictBool, StrictInt, StrictFloat, datetime, str]] = Field(
        default=None,
        description="Point in time; ISO-8601 string after transformation",
    )
    metadata: Optional[Dict[str, Any]] = Field(
        default=None,
        description="Free-form annotations, passed through unmodified",
    )

    @field_validator("id", "subject_id", "category", mode="before")
    @classmethod
    def stringify_identifiers(cls, v: Any) -> Any:
        """Accept numeric identifiers (e.g. ``1``) as their string form."""
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            return str(v)
        return v

    def is_complete(self) -> bool:
        """Check that id, subject and category are all present and non-blank."""
        return not (
            _is_blank(self.id) or _is_blank(self.subject_id) or _is_blank(self.category)
        )

    def has_numeric_value(self) -> bool:
        """Check if the record's value is a finite number."""
        return is_numeric(self.value)

    def get_field(self, name: str) -> Any:
        """
        Look up a field by attribute name, wire name or extra key.

        Returns None when the field is absent.

        Example:
            >>> record.get_field("subjectId") == record.get_field("subject_id")
            True
        """
        attr = FIELD_ALIASES.get(name, name)
        if attr in type(self).model_fields:
            return getattr(self, attr)
        return (self.model_extra or {}).get(name)

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert to a JSON-ready dictionary with camelCase keys.

        Returns:
            dict: Record as dictionary (None fields omitted)
        """
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "HealthRecord":
        """
        Create record from dictionary.

        Raises:
            pydantic.ValidationError: If a field has an unusable type
        """
        return cls.model_validate(data)


class AnalysisSummary(BaseModel):
    """
    Aggregate statistics over one processed batch.

    ``average_value`` is None when the batch held no numeric value; it is
    left out of the dictionary form entirely so "no data" is not confused
    with an average of zero.
    """

    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        alias_generator=to_camel,
    )

    total_records: int = Field(ge=0, description="Number of records analyzed")
    average_value: Optional[float] = Field(
        default=None,
        description="Mean of numeric values, None if there were none",
    )
    records_by_category: Dict[str, int] = Field(
        default_factory=dict,
        description="Count of records per category",
    )
    generated_at: datetime = Field(
        default_factory=utc_now,
        description="When the analysis completed",
    )

    @field_serializer("generated_at")
    def serialize_generated_at(self, value: datetime) -> str:
        return format_iso(value)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a JSON-ready dictionary with camelCase keys."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class SubmissionPayload(BaseModel):
    """Body POSTed to the downstream results endpoint."""

    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        alias_generator=to_camel,
    )

    analysis: AnalysisSummary
    record_count: int = Field(ge=0)
    status: SubmissionStatus
    processed_at: datetime = Field(default_factory=utc_now)

    @field_serializer("processed_at")
    def serialize_processed_at(self, value: datetime) -> str:
        return format_iso(value)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a JSON-ready dictionary with camelCase keys."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class SubmissionReceipt(BaseModel):
    """Acknowledgement returned by the results endpoint."""

    model_config = ConfigDict(
        populate_by_name=True,
        alias_generator=to_camel,
        extra="allow",
    )

    id: Optional[Union[str, int]] = None
    message: Optional[str] = None
    timestamp: Optional[str] = None
    records_processed: Optional[int] = None


class ErrorDetail(BaseModel):
    """Serializable description of a pipeline failure."""

    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        alias_generator=to_camel,
    )

    error_type: str
    message: str
    stage: Optional[str] = None
    context: Dict[str, Any] = Field(default_factory=dict)


class PipelineResult(BaseModel):
    """
    Outcome of processing one batch.

    Exactly one of (``records`` + ``analysis``) or ``error`` is meaningful,
    depending on ``status``. Callers check ``ok`` (or call
    ``raise_for_status``) before using the records.
    """

    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        alias_generator=to_camel,
    )

    status: SubmissionStatus
    records: List[HealthRecord] = Field(default_factory=list)
    analysis: Optional[AnalysisSummary] = None
    error: Optional[ErrorDetail] = None

    _exception: Optional[Exception] = PrivateAttr(default=None)

    @property
    def ok(self) -> bool:
        return self.status == SubmissionStatus.COMPLETED

    @classmethod
    def success(
        cls, records: List[HealthRecord], analysis: AnalysisSummary
    ) -> "PipelineResult":
        return cls(status=SubmissionStatus.COMPLETED, records=records, analysis=analysis)

    @classmethod
    def failure(cls, exc: Exception, stage: Optional[str] = None) -> "PipelineResult":
        if hasattr(exc, "to_dict"):
            info = exc.to_dict()
        else:
            info = {"error_type": type(exc).__name__, "message": str(exc), "context": {}}
        result = cls(
            status=SubmissionStatus.FAILED,
            error=ErrorDetail(stage=stage, **info),
        )
        result._exception = exc
        return result

    def raise_for_status(self) -> None:
        """Re-raise the original exception of a failed result."""
        if self._exception is not None:
            raise self._exception

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert to the response shape served to callers.

        Successful results carry ``processedData`` and ``analysis``;
        failed ones carry ``error``.
        """
        data: Dict[str, Any] = {"status": self.status.value}
        if self.ok:
            data["processedData"] = [record.to_dict() for record in self.records]
            data["analysis"] = self.analysis.to_dict() if self.analysis else None
        else:
            data["error"] = self.error.model_dump(mode="json", by_alias=True)
        return data
