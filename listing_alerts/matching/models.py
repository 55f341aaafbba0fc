"""Data models for the profile matching engine."""

from dataclasses import dataclass, field
from typing import List, Optional

from listing_alerts.domain.models import SearchProfile


@dataclass
class ScoreBreakdown:
    """Individual soft-score adjustments applied to the base score.

    Attributes:
        base: Starting score
        rooms_penalty: Deducted when the listing has fewer rooms than preferred
        area_penalty: Deducted when the living area is below the preferred minimum
        energy_penalty: Deducted when the energy label is worse than the minimum
        outdoor_bonus: Added when outdoor space is wanted and present
    """

    base: int = 100
    rooms_penalty: int = 0
    area_penalty: int = 0
    energy_penalty: int = 0
    outdoor_bonus: int = 0

    @property
    def raw_score(self) -> int:
        """Score before clamping; may fall outside 0-100."""
        return (
            self.base
            - self.rooms_penalty
            - self.area_penalty
            - self.energy_penalty
            + self.outdoor_bonus
        )


@dataclass
class MatchResult:
    """Result of evaluating one listing against one search profile.

    Attributes:
        profile: Profile that was evaluated
        opted_in: False when the profile was skipped for lacking notification opt-in
        failed_criteria: Names of hard criteria that excluded the profile
        score: Clamped soft score, None when the profile was never scored
        breakdown: Adjustments behind the score
        qualifies: True when the profile should be notified
    """

    profile: SearchProfile
    opted_in: bool = True
    failed_criteria: List[str] = field(default_factory=list)
    score: Optional[int] = None
    breakdown: Optional[ScoreBreakdown] = None
    qualifies: bool = False

    @property
    def passed_hard_filters(self) -> bool:
        return self.opted_in and not self.failed_criteria

    @property
    def reason(self) -> str:
        """Short machine-friendly reason for the outcome."""
        if not self.opted_in:
            return "not_opted_in"
        if self.failed_criteria:
            return "hard_filter:" + ",".join(self.failed_criteria)
        if not self.qualifies:
            return "below_threshold"
        return "qualified"


@dataclass(frozen=True)
class ProfileMatch:
    """A qualifying (profile, score) pair handed to the notification dispatcher."""

    profile: SearchProfile
    score: int
