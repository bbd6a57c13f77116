"""
healthbatch: Health Measurement Batch Pipeline

Cleans, normalizes, validates and summarizes batches of health measurements.
"""

__version__ = "1.0.0"
__license__ = "MIT"

# Public API
from healthbatch.analysis.analyzer import analyze, group_by
from healthbatch.exceptions import (
    HealthBatchError,
    MalformedTimestampError,
    PipelineError,
    ValidationError,
)
from healthbatch.models.schemas import AnalysisSummary, HealthRecord, PipelineResult
from healthbatch.pipeline.processor import BatchProcessor, build_submission
from healthbatch.pipeline.sample_data import sample_records
from healthbatch.transforms.cleaners import clean
from healthbatch.transforms.normalizers import transform
from healthbatch.transforms.validators import validate
from healthbatch.utils.config import Settings, get_settings
from healthbatch.utils.logger import get_logger

__all__ = [
    "clean",
    "transform",
    "validate",
    "analyze",
    "group_by",
    "BatchProcessor",
    "build_submission",
    "sample_records",
    "HealthRecord",
    "AnalysisSummary",
    "PipelineResult",
    "HealthBatchError",
    "PipelineError",
    "ValidationError",
    "MalformedTimestampError",
    "Settings",
    "get_settings",
    "get_logger",
    "__version__",
]
