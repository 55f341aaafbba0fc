"""HTTP client for the Realworks listing API.

Realworks notifies the receiver with an ``objectUrl``; the client fetches
that URL and returns the raw listing document for normalization.
"""

import logging
from typing import Any, Optional

import requests

from listing_alerts.logging import get_logger

from .exceptions import (
    ListingFetchConfigurationError,
    ListingFetchHTTPError,
    ListingFetchResponseError,
    ListingFetchTimeoutError,
)

logger = get_logger(__name__, component="realworks")

AUTH_SCHEME = "rwauth"


class RealworksClient:
    """Fetches raw listing documents from Realworks.

    Attributes:
        timeout: HTTP request timeout in seconds
        user_agent: User-Agent header for HTTP requests
    """

    def __init__(
        self,
        api_token: str,
        timeout: int = 30,
        user_agent: str = "ListingAlerts/1.0",
        session: Optional[requests.Session] = None,
    ) -> None:
        """Initialize the client.

        Args:
            api_token: Realworks API token (sent as ``rwauth <token>``)
            timeout: HTTP request timeout in seconds (range 5-300)
            user_agent: User-Agent header for requests
            session: Optional pre-built session (for tests)

        Raises:
            ListingFetchConfigurationError: If the token is empty, the timeout is out
                of range or user_agent is empty
        """
        if not api_token or not api_token.strip():
            raise ListingFetchConfigurationError("Realworks API token cannot be empty")
        if not 5 <= timeout <= 300:
            raise ListingFetchConfigurationError(
                f"Timeout must be between 5 and 300 seconds, got: {timeout}"
            )
        if not user_agent or not user_agent.strip():
            raise ListingFetchConfigurationError("user_agent cannot be empty")

        self.timeout = timeout
        self.user_agent = user_agent.strip()

        self._session = session or requests.Session()
        self._session.headers.update(
            {
                "User-Agent": self.user_agent,
                "Authorization": f"{AUTH_SCHEME} {api_token.strip()}",
                "Accept": "application/json",
            }
        )

    def fetch_listing(self, object_url: str) -> Any:
        """Fetch the raw listing document at object_url.

        Args:
            object_url: URL supplied by the Realworks webhook

        Returns:
            Decoded JSON document (shape is not validated here)

        Raises:
            ListingFetchHTTPError: On 4xx/5xx status or connection failure
            ListingFetchTimeoutError: On request timeout
            ListingFetchResponseError: On a body that is not valid JSON
        """
        try:
            logger.debug(
                f"HTTP GET request to {object_url}",
                extra={
                    "event": "realworks.fetch.request",
                    "url": object_url,
                    "timeout": self.timeout,
                },
            )

            response = self._session.get(object_url, timeout=self.timeout)

        except requests.exceptions.Timeout as e:
            logger.warning(
                f"Request to {object_url} timed out after {self.timeout} seconds",
                extra={
                    "event": "realworks.fetch.retryable_error",
                    "error_type": "Timeout",
                    "url": object_url,
                    "timeout": self.timeout,
                },
            )
            raise ListingFetchTimeoutError(
                f"Request to {object_url} timed out after {self.timeout} seconds",
                url=object_url,
            ) from e
        except requests.exceptions.RequestException as e:
            logger.error(
                f"Request to {object_url} failed: {e}",
                extra={
                    "event": "realworks.fetch.error",
                    "error_type": type(e).__name__,
                    "url": object_url,
                },
            )
            raise ListingFetchHTTPError(
                f"Request to {object_url} failed: {e}",
                status_code=0,
                url=object_url,
            ) from e

        if response.status_code >= 400:
            is_retryable = response.status_code >= 500
            logger.log(
                logging.WARNING if is_retryable else logging.ERROR,
                f"HTTP {response.status_code} error from {object_url}",
                extra={
                    "event": "realworks.fetch.retryable_error" if is_retryable else "realworks.fetch.error",
                    "status_code": response.status_code,
                    "url": object_url,
                },
            )
            raise ListingFetchHTTPError(
                f"HTTP {response.status_code}: {response.reason}",
                status_code=response.status_code,
                url=object_url,
            )

        try:
            data = response.json()
        except ValueError as e:
            logger.error(
                f"Failed to parse JSON response from {object_url}",
                extra={
                    "event": "realworks.fetch.error",
                    "error_type": "JSONDecodeError",
                    "url": object_url,
                },
            )
            raise ListingFetchResponseError(
                f"Failed to parse JSON response from {object_url}: {e}"
            ) from e

        logger.info(
            f"Fetched listing document from {object_url}",
            extra={
                "event": "realworks.fetch.succeeded",
                "status_code": response.status_code,
                "url": object_url,
            },
        )
        return data

    def close(self) -> None:
        self._session.close()
