"""Domain models for listings and buyer search profiles."""

from .models import (
    DEFAULT_PROPERTY_TYPE,
    ENERGY_LABELS,
    LISTING_LABEL_FALLBACK,
    NO_MINIMUM_LABEL,
    HardCriteria,
    Listing,
    OutdoorSpace,
    SearchProfile,
    SoftCriteria,
    normalize_energy_label,
    normalize_for_comparison,
)

__all__ = [
    "Listing",
    "OutdoorSpace",
    "SearchProfile",
    "HardCriteria",
    "SoftCriteria",
    "ENERGY_LABELS",
    "LISTING_LABEL_FALLBACK",
    "NO_MINIMUM_LABEL",
    "DEFAULT_PROPERTY_TYPE",
    "normalize_energy_label",
    "normalize_for_comparison",
]
