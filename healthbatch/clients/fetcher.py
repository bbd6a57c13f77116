"""
Record Fetcher

Fetches raw record batches from the external records API with a bearer
token, a request timeout and bounded retries.

Example:
    >>> fetcher = RecordFetcher()
    >>> raw = fetcher.fetch_with_retry("/records")
"""

from typing import Any, Dict, List, Optional

import requests

from healthbatch.clients.retry import call_with_retry
from healthbatch.exceptions import FetchError
from healthbatch.utils.config import Settings, get_settings
from healthbatch.utils.logger import get_logger

logger = get_logger(__name__)


def build_session(settings: Settings) -> requests.Session:
    """Create a session carrying the JSON and authorization headers."""
    session = requests.Session()
    session.headers.update({"Content-Type": "application/json"})
    if settings.api_key:
        session.headers.update({"Authorization": f"Bearer {settings.api_key}"})
    return session


def log_request_error(error: requests.RequestException, target: str) -> None:
    """Log a failed request, distinguishing HTTP errors from transport errors."""
    response = error.response
    if response is not None:
        logger.error(
            f"API error ({response.status_code}): {target}",
            extra={"status_code": response.status_code, "body": response.text[:500]},
        )
    else:
        logger.error(f"No response from {target}: {error}")


class RecordFetcher:
    """Client for the records API."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        session: Optional[requests.Session] = None,
    ):
        self.settings = settings or get_settings()
        self.session = session or build_session(self.settings)

    def url_for(self, endpoint: Optional[str] = None) -> str:
        endpoint = endpoint or self.settings.fetch_endpoint
        return f"{self.settings.api_base_url.rstrip('/')}/{endpoint.lstrip('/')}"

    def fetch(
        self,
        endpoint: Optional[str] = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> List[Dict[str, Any]]:
        """
        Fetch one batch in a single attempt.

        Args:
            endpoint: Path relative to api_base_url (defaults to settings.fetch_endpoint)
            params: Optional query parameters

        Returns:
            list: Raw record dictionaries

        Raises:
            FetchError: If the request fails or the body is not a record list
        """
        try:
            return self._get(endpoint, params)
        except requests.RequestException as e:
            raise FetchError(
                f"Request failed: {e}", endpoint=self.url_for(endpoint), attempts=1
            ) from e

    def fetch_with_retry(
        self,
        endpoint: Optional[str] = None,
        params: Optional[Dict[str, Any]] = None,
        attempts: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        """
        Fetch one batch, retrying transient failures with exponential backoff.

        Args:
            endpoint: Path relative to api_base_url
            params: Optional query parameters
            attempts: Maximum attempts (defaults to settings.retry_attempts)

        Raises:
            FetchError: When every attempt failed or the error was not retryable
        """
        attempts = attempts or self.settings.retry_attempts
        try:
            return call_with_retry(
                lambda: self._get(endpoint, params),
                attempts=attempts,
                backoff=self.settings.retry_backoff,
                operation="Fetch",
            )
        except requests.RequestException as e:
            raise FetchError(
                f"Request failed: {e}", endpoint=self.url_for(endpoint), attempts=attempts
            ) from e

    def _get(
        self,
        endpoint: Optional[str],
        params: Optional[Dict[str, Any]],
    ) -> List[Dict[str, Any]]:
        url = self.url_for(endpoint)
        try:
            response = self.session.get(url, params=params, timeout=self.settings.timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            log_request_error(e, url)
            raise

        try:
            body = response.json()
        except ValueError as e:
            raise FetchError("Response is not valid JSON", endpoint=url) from e

        records = body.get("data") if isinstance(body, dict) else body
        if not isinstance(records, list):
            raise FetchError(
                "Response does not contain a list of records",
                endpoint=url,
                body_type=type(body).__name__,
            )

        logger.info("Fetched records", extra={"endpoint": url, "records": len(records)})
        return records
