"""HTTP collaborators: fetching raw batches and submitting summaries."""

from healthbatch.clients.fetcher import RecordFetcher
from healthbatch.clients.retry import call_with_retry, is_retryable
from healthbatch.clients.submitter import ResultSubmitter

__all__ = ["RecordFetcher", "ResultSubmitter", "call_with_retry", "is_retryable"]
