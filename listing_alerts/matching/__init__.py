"""Profile matching engine for deciding which buyers hear about a listing.

This module provides:
- ProfileMatcher: hard filters, soft scoring and threshold per profile
- match: convenience function over the default configuration
- MatchResult / ScoreBreakdown: per-profile evaluation details
- ProfileMatch: qualifying (profile, score) pair
"""

from .engine import ProfileMatcher, clamp_score, match
from .models import MatchResult, ProfileMatch, ScoreBreakdown

__all__ = [
    "ProfileMatcher",
    "match",
    "clamp_score",
    "MatchResult",
    "ProfileMatch",
    "ScoreBreakdown",
]
