"""Profile matching engine for evaluating listings against buyer search profiles.

This module implements the matching logic that:
1. Skips profiles without notification opt-in
2. Applies hard filters (city, price range, property type)
3. Scores the remaining profiles on soft preferences
4. Keeps profiles whose score reaches the configured threshold
"""

import logging
from typing import Any, Iterable, List, Mapping, Optional, Sequence

from pydantic import ValidationError

from listing_alerts.config.models import DEFAULT_MATCH_THRESHOLD, MatchingConfig
from listing_alerts.domain.models import (
    LISTING_LABEL_FALLBACK,
    NO_MINIMUM_LABEL,
    Listing,
    OutdoorSpace,
    SearchProfile,
    normalize_for_comparison,
)
from listing_alerts.logging import get_logger

from .models import MatchResult, ProfileMatch, ScoreBreakdown

logger = get_logger(__name__, component="matching")

BASE_SCORE = 100
MIN_SCORE = 0
MAX_SCORE = 100
ROOMS_PENALTY = 20
AREA_PENALTY = 20
ENERGY_LABEL_PENALTY = 10
OUTDOOR_SPACE_BONUS = 5


class ProfileMatcher:
    """Evaluates a listing against search profiles.

    Responsibilities:
    - Skip profiles without notification opt-in
    - Exclude profiles failing any hard criterion (never scored)
    - Compute the clamped 0-100 soft score
    - Apply the match threshold
    - Skip malformed profile entries with a warning

    The matcher holds no per-event state; ``match`` is a pure function of the
    listing, the profiles and the configuration.
    """

    def __init__(
        self,
        matching_config: Optional[MatchingConfig] = None,
        logger_instance: Optional[logging.Logger] = None,
    ):
        """Initialize ProfileMatcher.

        Args:
            matching_config: Threshold and energy-label ordering (defaults apply when None)
            logger_instance: Optional logger instance (defaults to module logger)
        """
        self.config = matching_config or MatchingConfig()
        self.logger = logger_instance or logger
        self._label_rank = {label: idx for idx, label in enumerate(self.config.energy_labels)}

    @property
    def threshold(self) -> float:
        return self.config.threshold

    def match(
        self,
        listing: Listing,
        profiles: Iterable[Any],
        threshold: Optional[float] = None,
    ) -> List[ProfileMatch]:
        """Return the qualifying (profile, score) pairs in input order.

        Args:
            listing: Canonical listing
            profiles: SearchProfile instances or raw mappings to validate
            threshold: Overrides the configured threshold for this call

        Returns:
            ProfileMatch list, stable relative to the input profile order
        """
        effective_threshold = self.threshold if threshold is None else threshold
        matches: List[ProfileMatch] = []
        evaluated = 0

        for position, entry in enumerate(profiles):
            profile = self._coerce_profile(entry, position)
            if profile is None:
                continue

            evaluated += 1
            result = self.evaluate(listing, profile, effective_threshold)
            if result.qualifies:
                matches.append(ProfileMatch(profile=profile, score=result.score))

        self.logger.info(
            f"Matched listing against {evaluated} profiles: {len(matches)} qualified",
            extra={
                "event": "matching.listing.completed",
                "listing_id": listing.id,
                "profiles_evaluated": evaluated,
                "profiles_qualified": len(matches),
                "threshold": effective_threshold,
            },
        )

        return matches

    def evaluate(
        self,
        listing: Listing,
        profile: SearchProfile,
        threshold: Optional[float] = None,
    ) -> MatchResult:
        """Evaluate a single profile.

        Args:
            listing: Canonical listing
            profile: Search profile to evaluate
            threshold: Overrides the configured threshold for this call

        Returns:
            MatchResult describing the opt-in check, hard filters and score
        """
        effective_threshold = self.threshold if threshold is None else threshold

        if not profile.notification_opt_in:
            self.logger.debug(
                f"Profile {profile.id} skipped: no notification opt-in",
                extra={"event": "matching.profile.skipped", "profile_id": profile.id},
            )
            return MatchResult(profile=profile, opted_in=False)

        failed = self.failed_hard_criteria(listing, profile)
        if failed:
            self.logger.debug(
                f"Profile {profile.id} excluded by hard criteria",
                extra={
                    "event": "matching.profile.excluded",
                    "profile_id": profile.id,
                    "failed_criteria": ",".join(failed),
                },
            )
            return MatchResult(profile=profile, failed_criteria=failed)

        breakdown = self.score_breakdown(listing, profile)
        score = clamp_score(breakdown.raw_score)
        qualifies = score >= effective_threshold

        self.logger.log(
            logging.INFO if qualifies else logging.DEBUG,
            f"Profile {profile.id} scored {score}",
            extra={
                "event": "matching.profile.qualified" if qualifies else "matching.profile.below_threshold",
                "profile_id": profile.id,
                "score": score,
                "raw_score": breakdown.raw_score,
                "threshold": effective_threshold,
            },
        )

        return MatchResult(
            profile=profile,
            score=score,
            breakdown=breakdown,
            qualifies=qualifies,
        )

    def failed_hard_criteria(self, listing: Listing, profile: SearchProfile) -> List[str]:
        """Names of the hard criteria the listing violates (empty when all pass)."""
        hard = profile.hard_criteria
        failed = []

        if hard.cities and not _matches_any(listing.city, hard.cities):
            failed.append("city")

        if hard.price_min is not None and listing.asking_price < hard.price_min:
            failed.append("price_min")

        if hard.price_max is not None and listing.asking_price > hard.price_max:
            failed.append("price_max")

        if hard.property_types and not _matches_any(listing.property_type, hard.property_types):
            failed.append("property_type")

        return failed

    def score_breakdown(self, listing: Listing, profile: SearchProfile) -> ScoreBreakdown:
        """Soft-score adjustments for a profile that passed the hard filters."""
        soft = profile.soft_criteria
        breakdown = ScoreBreakdown(base=BASE_SCORE)

        if listing.room_count < (soft.min_rooms or 0):
            breakdown.rooms_penalty = ROOMS_PENALTY

        if listing.living_area < (soft.min_area or 0):
            breakdown.area_penalty = AREA_PENALTY

        if self.is_worse_label(listing.energy_label, soft.min_energy_label):
            breakdown.energy_penalty = ENERGY_LABEL_PENALTY

        if soft.wants_outdoor_space and listing.outdoor_space != OutdoorSpace.NONE:
            breakdown.outdoor_bonus = OUTDOOR_SPACE_BONUS

        return breakdown

    def is_worse_label(self, listing_label: Optional[str], minimum_label: Optional[str]) -> bool:
        """True if the listing label is strictly worse than the profile minimum.

        An absent listing label ranks as LISTING_LABEL_FALLBACK. An absent
        minimum ranks as NO_MINIMUM_LABEL, which nothing can be worse than.
        """
        listing_rank = self._rank(listing_label, LISTING_LABEL_FALLBACK)
        minimum_rank = self._rank(minimum_label, NO_MINIMUM_LABEL)
        return listing_rank > minimum_rank

    def _rank(self, label: Optional[str], fallback: str) -> int:
        rank = self._label_rank.get(label) if label else None
        if rank is None:
            return self._label_rank[fallback]
        return rank

    def _coerce_profile(self, entry: Any, position: int) -> Optional[SearchProfile]:
        """Return a SearchProfile for entry, or None (with a warning) if it is malformed."""
        if isinstance(entry, SearchProfile):
            return entry

        if isinstance(entry, Mapping):
            try:
                return SearchProfile.model_validate(entry)
            except ValidationError as e:
                self.logger.warning(
                    f"Skipping malformed profile at position {position}: "
                    f"{e.error_count()} validation errors",
                    extra={
                        "event": "matching.profile.malformed",
                        "position": position,
                        "profile_id": entry.get("id"),
                    },
                )
                return None

        self.logger.warning(
            f"Skipping malformed profile at position {position}: "
            f"expected a profile, got {type(entry).__name__}",
            extra={"event": "matching.profile.malformed", "position": position},
        )
        return None


def clamp_score(score: int) -> int:
    """Clamp a score to the inclusive range [MIN_SCORE, MAX_SCORE]."""
    return max(MIN_SCORE, min(score, MAX_SCORE))


def _matches_any(value: Optional[str], allowed: Sequence[str]) -> bool:
    key = normalize_for_comparison(value)
    if not key:
        return False
    return any(key == normalize_for_comparison(candidate) for candidate in allowed)


def match(
    listing: Listing,
    profiles: Iterable[Any],
    threshold: float = DEFAULT_MATCH_THRESHOLD,
) -> List[ProfileMatch]:
    """Match a listing against profiles with the default energy-label ordering.

    Args:
        listing: Canonical listing
        profiles: Search profiles (malformed entries are skipped with a warning)
        threshold: Minimum score required to qualify

    Returns:
        Qualifying ProfileMatch pairs in input order
    """
    return ProfileMatcher().match(listing, profiles, threshold)
