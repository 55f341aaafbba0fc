"""WhatsApp Cloud API client.

Thin wrapper around ``requests`` that posts message payloads to the Graph API
``/messages`` endpoint and translates failures into WhatsAppDeliveryError.
"""

import logging
from typing import Any, Dict, Optional

import requests

from .models import WhatsAppDeliveryError

logger = logging.getLogger(__name__)

GRAPH_API_BASE = "https://graph.facebook.com"


class WhatsAppClient:
    """Sends messages through the WhatsApp Cloud API.

    Designed to be easily mockable for testing: inject a session or replace
    the client entirely in NotificationService.
    """

    def __init__(
        self,
        phone_number_id: str,
        access_token: str,
        api_version: str = "v21.0",
        timeout: int = 15,
        session: Optional[requests.Session] = None,
    ):
        """Initialize the client.

        Args:
            phone_number_id: Sender phone number id
            access_token: Bearer token for the Graph API
            api_version: Graph API version segment, e.g. "v21.0"
            timeout: Request timeout in seconds
            session: Optional pre-built session (for tests)
        """
        self.phone_number_id = phone_number_id
        self.api_version = api_version
        self.timeout = timeout

        self._session = session or requests.Session()
        self._session.headers.update(
            {
                "Authorization": f"Bearer {access_token}",
                "Content-Type": "application/json",
            }
        )

    @property
    def messages_url(self) -> str:
        return f"{GRAPH_API_BASE}/{self.api_version}/{self.phone_number_id}/messages"

    def send(self, payload: Dict[str, Any]) -> Optional[str]:
        """Post a message payload.

        Args:
            payload: Message body built by the payload helpers

        Returns:
            Message id reported by the API, if present

        Raises:
            WhatsAppDeliveryError: On a non-2xx response or a network failure
        """
        try:
            response = self._session.post(self.messages_url, json=payload, timeout=self.timeout)
        except requests.exceptions.Timeout as e:
            error_msg = f"WhatsApp API request timed out after {self.timeout} seconds"
            logger.error(error_msg)
            raise WhatsAppDeliveryError(error_msg) from e
        except requests.exceptions.RequestException as e:
            error_msg = f"Network error during WhatsApp API request: {e}"
            logger.error(error_msg)
            raise WhatsAppDeliveryError(error_msg) from e

        if not 200 <= response.status_code < 300:
            body = response.text
            error_msg = f"WhatsApp API returned HTTP {response.status_code}: {_error_message(response)}"
            logger.error(error_msg)
            raise WhatsAppDeliveryError(error_msg, status_code=response.status_code, response_body=body)

        message_id = None
        try:
            messages = response.json().get("messages") or []
            if messages:
                message_id = messages[0].get("id")
        except (ValueError, AttributeError):
            logger.warning("WhatsApp API accepted the message but returned an unexpected body")

        logger.debug(f"Message accepted by WhatsApp API for {payload.get('to')}")
        return message_id

    def close(self) -> None:
        self._session.close()


def _error_message(response: requests.Response) -> str:
    """Extract the Graph API error message, falling back to the reason phrase."""
    try:
        error = response.json().get("error") or {}
        return error.get("message") or response.reason
    except (ValueError, AttributeError):
        return response.reason or ""
