"""
Custom Exceptions

Domain-specific exceptions for the health-measurement batch pipeline.
Every exception carries keyword context so it can be logged as structured data.

Example:
    >>> raise ValidationError("Missing required field", record_id="7", missing_field="category")
"""


class HealthBatchError(Exception):
    """Base exception for all healthbatch errors."""

    def __init__(self, message: str, **context):
        """
        Initialize exception with message and optional context.

        Args:
            message: Error message
            **context: Additional context for debugging
        """
        self.message = message
        self.context = context
        super().__init__(message)

    def __str__(self):
        """Format exception with context."""
        if self.context:
            context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            return f"{self.message} ({context_str})"
        return self.message

    def to_dict(self):
        """Convert to dictionary for structured logging."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "context": self.context,
        }


class ConfigurationError(HealthBatchError):
    """
    Configuration error.

    Raised when settings are invalid or missing.

    Example:
        >>> raise ConfigurationError("API key is required", environment="production")
    """
    pass


class PipelineError(HealthBatchError):
    """Base class for failures raised by a pipeline stage."""
    pass


class ValidationError(PipelineError):
    """
    A record is missing a required field.

    Raised by the validator on the first gap it finds; the whole batch
    is rejected.

    Example:
        >>> raise ValidationError("Missing required field", record_id="3", missing_field="category")
    """

    def __init__(self, message: str, record_id=None, missing_field=None, **context):
        self.record_id = record_id
        self.missing_field = missing_field
        super().__init__(
            message, record_id=record_id, missing_field=missing_field, **context
        )


class MalformedTimestampError(PipelineError):
    """
    A record's timestamp is missing or cannot be parsed as a date.

    Example:
        >>> raise MalformedTimestampError("Unparseable timestamp", record_id="3", timestamp="yesterday")
    """

    def __init__(self, message: str, record_id=None, timestamp=None, **context):
        self.record_id = record_id
        self.timestamp = timestamp
        super().__init__(message, record_id=record_id, timestamp=timestamp, **context)


class FetchError(HealthBatchError):
    """
    Raw records could not be fetched from the external API.

    Example:
        >>> raise FetchError("Request failed", endpoint="/records", attempts=3)
    """
    pass


class SubmissionError(HealthBatchError):
    """
    An analysis summary could not be submitted downstream.

    Example:
        >>> raise SubmissionError("Server rejected payload", status_code=422)
    """
    pass
