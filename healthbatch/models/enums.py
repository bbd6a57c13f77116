"""
Enumerations for healthbatch data models.
"""

from enum import Enum


class SubmissionStatus(str, Enum):
    """Outcome reported alongside an analysis summary."""

    COMPLETED = "completed"
    FAILED = "failed"
    PENDING = "pending"

    def __str__(self) -> str:
        return self.value


class PipelineStage(str, Enum):
    """Pipeline stages that can fail a batch, in execution order."""

    TRANSFORM = "transform"
    VALIDATE = "validate"

    def __str__(self) -> str:
        return self.value
