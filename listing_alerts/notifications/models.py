"""Data models and exceptions for the notification service.

This module defines result types and custom exceptions used throughout
the notification dispatcher.
"""

from dataclasses import dataclass
from typing import Optional


class NotificationError(Exception):
    """Base exception for notification-related errors."""

    pass


class NotificationTemplateError(NotificationError):
    """Raised when template rendering fails due to configuration or missing variables."""

    pass


class InvalidRecipientError(NotificationError):
    """Raised when a profile's contact handle cannot be turned into a phone number."""

    pass


class WhatsAppDeliveryError(NotificationError):
    """Raised when the WhatsApp Cloud API rejects a message or cannot be reached.

    Attributes:
        status_code: HTTP status of the rejection (0 when no response arrived)
        response_body: Raw error body returned by the API, if any
    """

    def __init__(self, message: str, status_code: int = 0, response_body: Optional[str] = None):
        super().__init__(message)
        self.status_code = status_code
        self.response_body = response_body


@dataclass
class NotificationResult:
    """Result of attempting to notify one profile about one listing.

    Attributes:
        profile_id: Identifier of the notified profile
        listing_id: Identifier of the listing (may be None for sparse input)
        attempts: Number of send attempts made
        status: Outcome status (sent, skipped, failed)
        recipient: Normalized phone number the message was addressed to
        message_id: Message id returned by the API on success
        error: Optional error message if delivery failed
    """

    profile_id: str
    listing_id: Optional[str]
    attempts: int
    status: str  # "sent", "skipped", "failed"
    recipient: Optional[str] = None
    message_id: Optional[str] = None
    error: Optional[str] = None

    def is_success(self) -> bool:
        return self.status == "sent"
