"""Pipeline orchestration for a single listing event."""

import time
from datetime import datetime, timezone
from typing import Any, Optional
from uuid import uuid4

from listing_alerts.logging import get_logger
from listing_alerts.logging.context import log_context
from listing_alerts.matching.engine import ProfileMatcher
from listing_alerts.normalization.service import ListingNormalizer
from listing_alerts.notifications.service import NotificationService
from listing_alerts.realworks.client import RealworksClient

from .models import PipelineRunResult

logger = get_logger(__name__, component="pipeline")


class ListingPipeline:
    """
    Processes one listing event end to end.

    fetch (optional) → normalize → load profiles → match → notify

    The pipeline keeps no state between events: profiles are re-read from
    the source each time and nothing is cached.
    """

    def __init__(
        self,
        profile_source,
        matcher: ProfileMatcher,
        notification_service: NotificationService,
        realworks_client: Optional[RealworksClient] = None,
        normalizer: Optional[ListingNormalizer] = None,
    ):
        """
        Initialize the listing pipeline.

        Args:
            profile_source: Object with a ``load()`` method returning search profiles
            matcher: Matcher for evaluating the listing against profiles
            notification_service: Service for sending notifications
            realworks_client: Client for fetching listings by object URL
            normalizer: Listing normalizer (creates default if None)
        """
        self.profile_source = profile_source
        self.matcher = matcher
        self.notification_service = notification_service
        self.realworks_client = realworks_client
        self.normalizer = normalizer or ListingNormalizer()

    def process_object_url(self, object_url: str) -> PipelineRunResult:
        """
        Fetch a listing document from Realworks and process it.

        Raises:
            RuntimeError: If no Realworks client is configured
            ListingFetchError: If the listing cannot be fetched
            MalformedInputError: If the fetched document is not a mapping
            ProfileSourceError: If profiles cannot be loaded
        """
        if self.realworks_client is None:
            raise RuntimeError("ListingPipeline has no Realworks client configured")

        event_id = uuid4().hex
        with log_context(event_id=event_id, object_url=object_url):
            logger.info(
                "Listing event received",
                extra={"event": "pipeline.event.received", "source": "realworks"},
            )
            raw = self.realworks_client.fetch_listing(object_url)
            return self._process(raw, event_id)

    def process_listing(self, raw: Any) -> PipelineRunResult:
        """
        Process an already-fetched raw listing document.

        Raises:
            MalformedInputError: If raw is not a mapping
            ProfileSourceError: If profiles cannot be loaded
        """
        event_id = uuid4().hex
        with log_context(event_id=event_id):
            return self._process(raw, event_id)

    def _process(self, raw: Any, event_id: str) -> PipelineRunResult:
        run_started_at = datetime.now(timezone.utc)
        start = time.perf_counter()

        listing = self.normalizer.normalize(raw)

        with log_context(listing_id=listing.id):
            profiles = self.profile_source.load()
            matches = self.matcher.match(listing, profiles)
            notification_results = self.notification_service.send_notifications(matches, listing)

            result = PipelineRunResult(
                event_id=event_id,
                run_started_at=run_started_at,
                run_finished_at=datetime.now(timezone.utc),
                listing_id=listing.id,
                profiles_evaluated=len(profiles),
                matches=matches,
                notification_results=notification_results,
                total_duration_seconds=time.perf_counter() - start,
            )

            logger.info(
                "Listing event processed",
                extra={
                    "event": "pipeline.event.completed",
                    "duration_ms": int(result.total_duration_seconds * 1000),
                    "profiles_evaluated": result.profiles_evaluated,
                    "total_matched": result.total_matched,
                    "total_notified": result.total_notified,
                    "total_skipped": result.total_skipped,
                    "total_failed": result.total_failed,
                    "had_errors": result.had_errors,
                },
            )

            return result
