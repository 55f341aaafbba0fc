"""Notification service for sending listing offers to matched buyers.

This module provides the NotificationService class that orchestrates
the notification flow: recipient normalization, payload building (template
or rendered text), and WhatsApp delivery with retry/backoff.
"""

import logging
import time
from typing import Any, Dict, Iterable, List, Optional

from listing_alerts.config.models import MessageType, WhatsAppConfig
from listing_alerts.domain.models import Listing
from listing_alerts.logging import get_logger
from listing_alerts.logging.context import log_context
from listing_alerts.matching.models import ProfileMatch

from .models import (
    InvalidRecipientError,
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
from .templates import TemplateRenderer
from .whatsapp_client import WhatsAppClient

logger = get_logger(__name__, component="notification")

MAX_RETRY_DELAY_SECONDS = 60.0


class NotificationService:
    """Service for sending WhatsApp notifications about matched listings.

    Coordinates the notification flow for each qualifying profile:
    1. Normalize the profile's contact handle to a phone number
    2. Build the template payload, or render the text body
    3. Skip delivery in dry-run mode
    4. Deliver via WhatsAppClient with retry/backoff

    Failures are reported in the returned NotificationResult and never
    raised, so one profile cannot block the others.
    """

    def __init__(
        self,
        whatsapp_client: Optional[WhatsAppClient],
        whatsapp_config: Optional[WhatsAppConfig] = None,
        template_renderer: Optional[TemplateRenderer] = None,
        dry_run: bool = False,
        logger_instance: Optional[logging.Logger] = None,
    ):
        """Initialize notification service.

        Args:
            whatsapp_client: API client (may be None in dry-run mode)
            whatsapp_config: Message settings (defaults apply when None)
            template_renderer: Renderer for text messages (creates default if None)
            dry_run: Build payloads but do not deliver
            logger_instance: Logger instance (uses module logger if None)
        """
        if whatsapp_client is None and not dry_run:
            raise ValueError("whatsapp_client is required unless dry_run is enabled")

        self.whatsapp_client = whatsapp_client
        self.config = whatsapp_config or WhatsAppConfig()
        self.template_renderer = template_renderer or TemplateRenderer()
        self.dry_run = dry_run
        self.logger = logger_instance or logger

    def notify(self, match: ProfileMatch, listing: Listing) -> NotificationResult:
        """Send the listing offer to one matched profile.

        Args:
            match: Qualifying profile and its score
            listing: Listing being offered

        Returns:
            NotificationResult indicating the outcome
        """
        profile = match.profile

        with log_context(profile_id=profile.id, listing_id=listing.id):
            try:
                recipient = normalize_phone_number(profile.contact_handle, self.config.country_code)
            except InvalidRecipientError as e:
                self.logger.error(
                    f"Cannot notify profile {profile.id}: {e}",
                    extra={"event": "notification.recipient.invalid"},
                )
                return self._result(match, listing, attempts=0, status="failed", error=str(e))

            try:
                payload = self.build_payload(match, listing, recipient)
            except NotificationTemplateError as e:
                # Template errors are fatal (developer misconfiguration)
                error_msg = f"Template rendering failed: {e}"
                self.logger.error(error_msg, exc_info=True)
                return self._result(
                    match, listing, attempts=0, status="failed", recipient=recipient, error=error_msg
                )

            if self.dry_run:
                self.logger.info(
                    f"Dry run: not sending {payload['type']} message to profile {profile.id}",
                    extra={
                        "event": "notification.skip",
                        "reason": "dry_run",
                        "message_type": payload["type"],
                        "score": match.score,
                    },
                )
                return self._result(match, listing, attempts=0, status="skipped", recipient=recipient)

            return self._send_with_retry(match, listing, recipient, payload)

    def build_payload(self, match: ProfileMatch, listing: Listing, recipient: str) -> Dict[str, Any]:
        """Build the API payload for the configured message type.

        Raises:
            NotificationTemplateError: If the text template cannot be rendered
        """
        if self.config.message_type == MessageType.TEXT.value:
            body = self.template_renderer.render(build_message_context(match, listing))
            return build_text_payload(recipient, body)
        return build_template_payload(listing, recipient, self.config)

    def _send_with_retry(
        self,
        match: ProfileMatch,
        listing: Listing,
        recipient: str,
        payload: Dict[str, Any],
    ) -> NotificationResult:
        profile_id = match.profile.id
        max_attempts = self.config.max_retries + 1
        last_error = None

        for attempt in range(1, max_attempts + 1):
            # Apply backoff delay for retries (not on first attempt)
            if attempt > 1:
                delay = self.config.retry_initial_delay * (
                    self.config.retry_backoff_multiplier ** (attempt - 2)
                )
                delay = min(delay, MAX_RETRY_DELAY_SECONDS)
                self.logger.warning(
                    f"Retrying delivery to profile {profile_id} (attempt {attempt}/{max_attempts}) "
                    f"after {delay:.1f}s delay",
                    extra={"event": "notification.send.attempt", "attempt": attempt},
                )
                time.sleep(delay)

            try:
                message_id = self.whatsapp_client.send(payload)
            except WhatsAppDeliveryError as e:
                last_error = str(e)
                retry_remaining = attempt < max_attempts
                if retry_remaining:
                    self.logger.warning(
                        f"WhatsApp delivery failed for profile {profile_id} "
                        f"(attempt {attempt}/{max_attempts}): {e}",
                        extra={
                            "event": "notification.send.failure",
                            "attempt": attempt,
                            "status_code": e.status_code,
                            "retry_remaining": True,
                        },
                    )
                else:
                    self.logger.error(
                        f"WhatsApp delivery failed for profile {profile_id} "
                        f"after {max_attempts} attempts: {e}",
                        extra={
                            "event": "notification.send.failure",
                            "attempts": max_attempts,
                            "attempt": attempt,
                            "status_code": e.status_code,
                            "retry_remaining": False,
                        },
                    )
                continue

            self.logger.info(
                f"Notification sent to profile {profile_id} for listing {listing.id} "
                f"(score: {match.score}, attempts: {attempt})",
                extra={
                    "event": "notification.send.success",
                    "attempt": attempt,
                    "score": match.score,
                    "message_type": payload["type"],
                    "message_id": message_id,
                },
            )
            return self._result(
                match,
                listing,
                attempts=attempt,
                status="sent",
                recipient=recipient,
                message_id=message_id,
            )

        return self._result(
            match,
            listing,
            attempts=max_attempts,
            status="failed",
            recipient=recipient,
            error=last_error,
        )

    def send_notifications(
        self,
        matches: Iterable[ProfileMatch],
        listing: Listing,
    ) -> List[NotificationResult]:
        """Notify every matched profile, sequentially.

        Continues processing even if individual notifications fail.

        Returns:
            List of NotificationResult objects (one per match, in order)
        """
        results = []

        for match in matches:
            try:
                results.append(self.notify(match, listing))
            except Exception as e:
                # Catch any unexpected errors to prevent batch failure
                self.logger.error(
                    f"Unexpected error notifying profile {match.profile.id}: {e}",
                    exc_info=True,
                    extra={"event": "notification.send.failure", "profile_id": match.profile.id},
                )
                results.append(
                    self._result(match, listing, attempts=0, status="failed", error=str(e))
                )

        sent = sum(1 for r in results if r.status == "sent")
        skipped = sum(1 for r in results if r.status == "skipped")
        failed = sum(1 for r in results if r.status == "failed")

        self.logger.info(
            f"Notification batch complete: {sent} sent, {skipped} skipped, "
            f"{failed} failed (total: {len(results)})",
            extra={
                "event": "notification.batch.completed",
                "listing_id": listing.id,
                "sent": sent,
                "skipped": skipped,
                "failed": failed,
            },
        )

        return results

    @staticmethod
    def _result(match: ProfileMatch, listing: Listing, **kwargs) -> NotificationResult:
        return NotificationResult(profile_id=match.profile.id, listing_id=listing.id, **kwargs)
