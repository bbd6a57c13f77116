"""Data models for the healthbatch pipeline."""

from healthbatch.models.enums import PipelineStage, SubmissionStatus
from healthbatch.models.schemas import (
    AnalysisSummary,
    ErrorDetail,
    HealthRecord,
    PipelineResult,
    SubmissionPayload,
    SubmissionReceipt,
    is_numeric,
)

__all__ = [
    "HealthRecord",
    "AnalysisSummary",
    "SubmissionPayload",
    "SubmissionReceipt",
    "ErrorDetail",
    "PipelineResult",
    "PipelineStage",
    "SubmissionStatus",
    "is_numeric",
]
