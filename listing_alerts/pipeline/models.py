"""Data models for pipeline execution tracking and reporting."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional

from listing_alerts.matching.models import ProfileMatch
from listing_alerts.notifications.models import NotificationResult


@dataclass
class PipelineRunResult:
    """
    Results from processing one listing event.

    Attributes:
        event_id: Identifier correlating all logs of this event
        run_started_at: UTC timestamp when processing began
        run_finished_at: UTC timestamp when processing completed
        listing_id: Identifier of the normalized listing (None for sparse input)
        profiles_evaluated: Number of profiles loaded from the profile source
        matches: Qualifying profiles with their scores
        notification_results: One result per match, in match order
        total_duration_seconds: Time spent on the event
    """

    event_id: str
    run_started_at: datetime
    run_finished_at: datetime
    listing_id: Optional[str] = None
    profiles_evaluated: int = 0
    matches: List[ProfileMatch] = field(default_factory=list)
    notification_results: List[NotificationResult] = field(default_factory=list)
    total_duration_seconds: float = 0.0

    def __post_init__(self):
        """Compute duration if not set."""
        if self.total_duration_seconds == 0.0:
            delta = self.run_finished_at - self.run_started_at
            self.total_duration_seconds = delta.total_seconds()

    @property
    def total_matched(self) -> int:
        return len(self.matches)

    @property
    def total_notified(self) -> int:
        return sum(1 for r in self.notification_results if r.status == "sent")

    @property
    def total_skipped(self) -> int:
        return sum(1 for r in self.notification_results if r.status == "skipped")

    @property
    def total_failed(self) -> int:
        return sum(1 for r in self.notification_results if r.status == "failed")

    @property
    def had_errors(self) -> bool:
        return self.total_failed > 0
