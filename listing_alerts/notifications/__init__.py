"""WhatsApp notification dispatcher for matched listings.

This module provides:
- NotificationService: per-profile delivery with retry/backoff and dry-run
- WhatsAppClient: WhatsApp Cloud API transport
- TemplateRenderer: Jinja2 rendering of text message bodies
- Payload helpers and phone number normalization
"""

from .models import (
    InvalidRecipientError,
    NotificationError,
    NotificationResult,
    NotificationTemplateError,
    WhatsAppDeliveryError,
)
from .payloads import (
    build_message_context,
    build_template_payload,
    build_text_payload,
    normalize_phone_number,
)
from .service import NotificationService
from .templates import TemplateRenderer
from .whatsapp_client import WhatsAppClient

__all__ = [
    "NotificationService",
    "WhatsAppClient",
    "TemplateRenderer",
    "NotificationResult",
    "NotificationError",
    "NotificationTemplateError",
    "InvalidRecipientError",
    "WhatsAppDeliveryError",
    "normalize_phone_number",
    "build_template_payload",
    "build_text_payload",
    "build_message_context",
]
