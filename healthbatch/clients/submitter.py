"""
Result Submitter

POSTs analysis summaries to the downstream results endpoint.

Submissions are not idempotent on their own, so they are only retried
when they carry an ``Idempotency-Key`` header that lets the receiver
discard repeats. ``submit_with_retry`` generates one when none is given.

Example:
    >>> submitter = ResultSubmitter()
    >>> receipt = submitter.submit_with_retry(payload)
"""

import uuid
from typing import Dict, Optional

import requests

from healthbatch.clients.fetcher import build_session, log_request_error
from healthbatch.clients.retry import call_with_retry
from healthbatch.exceptions import SubmissionError
from healthbatch.models.schemas import SubmissionPayload, SubmissionReceipt
from healthbatch.utils.config import Settings, get_settings
from healthbatch.utils.logger import get_logger

logger = get_logger(__name__)

IDEMPOTENCY_HEADER = "Idempotency-Key"


class ResultSubmitter:
    """Client for the results endpoint."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        session: Optional[requests.Session] = None,
    ):
        self.settings = settings or get_settings()
        self.session = session or build_session(self.settings)

    def submit(
        self,
        payload: SubmissionPayload,
        idempotency_key: Optional[str] = None,
    ) -> SubmissionReceipt:
        """
        Submit a payload in a single attempt.

        Args:
            payload: Summary to submit
            idempotency_key: Optional key sent as the Idempotency-Key header

        Returns:
            SubmissionReceipt: Parsed acknowledgement

        Raises:
            SubmissionError: If the request fails
        """
        try:
            return self._post(payload, idempotency_key)
        except requests.RequestException as e:
            raise SubmissionError(
                f"Submission failed: {e}",
                endpoint=self.settings.post_endpoint,
                status_code=_status_code(e),
                attempts=1,
            ) from e

    def submit_with_retry(
        self,
        payload: SubmissionPayload,
        idempotency_key: Optional[str] = None,
        attempts: Optional[int] = None,
    ) -> SubmissionReceipt:
        """
        Submit a payload, retrying transient failures under one idempotency key.

        Args:
            payload: Summary to submit
            idempotency_key: Key reused across attempts (generated if None)
            attempts: Maximum attempts (defaults to settings.retry_attempts)

        Raises:
            SubmissionError: When every attempt failed or the error was not retryable
        """
        idempotency_key = idempotency_key or uuid.uuid4().hex
        attempts = attempts or self.settings.retry_attempts
        try:
            return call_with_retry(
                lambda: self._post(payload, idempotency_key),
                attempts=attempts,
                backoff=self.settings.retry_backoff,
                operation="Submission",
            )
        except requests.RequestException as e:
            raise SubmissionError(
                f"Submission failed: {e}",
                endpoint=self.settings.post_endpoint,
                status_code=_status_code(e),
                attempts=attempts,
                idempotency_key=idempotency_key,
            ) from e

    def _post(
        self,
        payload: SubmissionPayload,
        idempotency_key: Optional[str],
    ) -> SubmissionReceipt:
        url = self.settings.post_endpoint
        headers: Dict[str, str] = {}
        if idempotency_key:
            headers[IDEMPOTENCY_HEADER] = idempotency_key

        try:
            response = self.session.post(
                url,
                json=payload.to_dict(),
                headers=headers,
                timeout=self.settings.timeout,
            )
            response.raise_for_status()
        except requests.RequestException as e:
            log_request_error(e, url)
            raise

        receipt = _parse_receipt(response)
        logger.info(
            "Submitted results",
            extra={
                "endpoint": url,
                "status": payload.status.value,
                "record_count": payload.record_count,
                "receipt_id": receipt.id,
            },
        )
        return receipt


def _status_code(error: requests.RequestException) -> Optional[int]:
    return error.response.status_code if error.response is not None else None


def _parse_receipt(response: requests.Response) -> SubmissionReceipt:
    if not response.content:
        return SubmissionReceipt()
    try:
        body = response.json()
    except ValueError:
        logger.warning("Submission response is not JSON; ignoring body")
        return SubmissionReceipt()
    # Some endpoints wrap the acknowledgement as {"response": {...}}
    if isinstance(body, dict) and isinstance(body.get("response"), dict):
        body = body["response"]
    if not isinstance(body, dict):
        return SubmissionReceipt()
    return SubmissionReceipt.model_validate(body)
