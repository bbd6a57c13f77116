"""
Batch Processor

Runs one batch through clean -> transform -> validate -> analyze and
returns an explicit PipelineResult, so callers must look at the status
before using the records.

Example:
    >>> processor = BatchProcessor()
    >>> result = processor.process(raw_records)
    >>> if result.ok:
    ...     print(result.analysis.total_records)
"""

import time
from typing import Iterable, List, Optional

from healthbatch.analysis.analyzer import BatchAnalyzer
from healthbatch.exceptions import MalformedTimestampError, PipelineError, ValidationError
from healthbatch.models.enums import PipelineStage, SubmissionStatus
from healthbatch.models.schemas import (
    AnalysisSummary,
    HealthRecord,
    PipelineResult,
    SubmissionPayload,
)
from healthbatch.transforms.cleaners import RawRecord, RecordCleaner
from healthbatch.transforms.normalizers import RecordNormalizer
from healthbatch.transforms.validators import RecordValidator
from healthbatch.utils.logger import get_logger

logger = get_logger(__name__)


class BatchProcessor:
    """
    End-to-end processing of a single in-memory batch.

    Stages are created per processor and hold no state between batches,
    so one processor can be reused for any number of batches.

    Example:
        >>> processor = BatchProcessor(required_fields=["id", "subjectId", "category"])
        >>> result = processor.process(records)
        >>> result.status
        <SubmissionStatus.COMPLETED: 'completed'>
    """

    def __init__(self, required_fields: Optional[Iterable[str]] = None):
        """
        Initialize processor.

        Args:
            required_fields: Fields checked after transformation
                             (defaults to settings.required_fields)
        """
        self.cleaner = RecordCleaner()
        self.normalizer = RecordNormalizer()
        self.validator = RecordValidator(required_fields)
        self.analyzer = BatchAnalyzer()

    def process_or_raise(self, records: Iterable[RawRecord]) -> PipelineResult:
        """
        Process a batch, letting stage errors propagate.

        Returns:
            PipelineResult: Always a completed result

        Raises:
            MalformedTimestampError: If a timestamp cannot be normalized
            ValidationError: If a record lacks a required field
        """
        start_time = time.time()
        records = list(records)
        logger.info("Processing batch", extra={"raw_records": len(records)})

        cleaned = self.cleaner.clean(records)
        transformed = self.normalizer.normalize_batch(cleaned)
        self.validator.validate(transformed)
        analysis = self.analyzer.analyze(transformed)

        logger.info(
            "Batch processed",
            extra={
                "raw_records": len(records),
                "processed_records": len(transformed),
                "duration_seconds": round(time.time() - start_time, 4),
            },
        )
        return PipelineResult.success(transformed, analysis)

    def process(self, records: Iterable[RawRecord]) -> PipelineResult:
        """
        Process a batch, reporting stage failures as a failed result.

        Only pipeline errors are converted; anything else is a bug and
        propagates.

        Returns:
            PipelineResult: Completed, or failed with error details
        """
        try:
            return self.process_or_raise(records)
        except PipelineError as e:
            stage = STAGE_BY_ERROR.get(type(e))
            logger.error(
                f"Batch processing failed: {e}",
                extra={"stage": str(stage), "error_type": type(e).__name__},
            )
            return PipelineResult.failure(e, stage=stage.value if stage else None)


STAGE_BY_ERROR = {
    MalformedTimestampError: PipelineStage.TRANSFORM,
    ValidationError: PipelineStage.VALIDATE,
}


def build_submission(result: PipelineResult) -> SubmissionPayload:
    """
    Build the downstream payload for a processing result.

    Failed results are reported with an empty summary so the receiver
    still learns that the batch was attempted.
    """
    if result.ok:
        return SubmissionPayload(
            analysis=result.analysis,
            record_count=len(result.records),
            status=SubmissionStatus.COMPLETED,
        )
    return SubmissionPayload(
        analysis=AnalysisSummary(total_records=0),
        record_count=0,
        status=SubmissionStatus.FAILED,
    )


def process_records(
    records: Iterable[RawRecord],
    required_fields: Optional[Iterable[str]] = None,
) -> List[HealthRecord]:
    """
    Clean, transform and validate a batch without analyzing it.

    Raises:
        MalformedTimestampError: If a timestamp cannot be normalized
        ValidationError: If a record lacks a required field
    """
    return BatchProcessor(required_fields).process_or_raise(records).records
