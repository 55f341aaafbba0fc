"""Core domain models for listings and buyer search profiles.

This module defines the data structures used throughout the application:
- Listing: canonical, immutable representation of one property offering
- OutdoorSpace: derived outdoor-space classification of a listing
- SearchProfile: a buyer's hard/soft preferences plus contact details
"""

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

# Best to worst
ENERGY_LABELS = ("A++", "A+", "A", "B", "C", "D", "E", "F", "G")

# A listing without a label is scored as if it had the worst one
LISTING_LABEL_FALLBACK = "G"

# A profile without a minimum accepts every label; with "G" as the minimum
# no listing can be strictly worse, so the penalty never applies
NO_MINIMUM_LABEL = "G"

DEFAULT_PROPERTY_TYPE = "woning"


def normalize_energy_label(value) -> Optional[str]:
    """Canonicalize an energy label spelling, returning None when unrecognized.

    Accepts the canonical forms plus common upstream spellings such as
    ``"a"``, ``"A_PLUS"`` or ``"label b"``.

    Example:
        >>> normalize_energy_label(" a_plus ")
        'A+'
    """
    if not isinstance(value, str):
        return None

    label = value.strip().upper().replace(" ", "").replace("_", "")
    label = label.replace("PLUS", "+")
    if label.startswith("LABEL"):
        label = label[len("LABEL"):]

    return label if label in ENERGY_LABELS else None


def normalize_for_comparison(value: Optional[str]) -> str:
    """Case- and whitespace-insensitive comparison key.

    Trims, collapses internal whitespace and casefolds.

    Example:
        >>> normalize_for_comparison("  Den   Haag ")
        'den haag'
    """
    if not value:
        return ""
    return " ".join(value.split()).casefold()


class OutdoorSpace(str, Enum):
    """Outdoor-space classification derived during normalization."""

    NONE = "NONE"
    GARDEN = "GARDEN"
    BALCONY = "BALCONY"


class Listing(BaseModel):
    """Canonical listing produced by the normalizer.

    Every numeric field is non-negative and every field has a typed default, so
    downstream code never has to deal with missing source data.
    """

    id: Optional[str] = Field(None, description="External listing identifier")
    street: Optional[str] = Field(None, description="Street name")
    house_number: str = Field("", description="House number with optional suffix, e.g. '12 A'")
    city: Optional[str] = Field(None, description="City (plaats)")
    postal_code: Optional[str] = Field(None, description="Postal code")
    asking_price: float = Field(0, ge=0, description="Asking price in euros")
    room_count: int = Field(0, ge=0, description="Number of rooms")
    living_area: float = Field(0, ge=0, description="Living area in square meters")
    energy_label: Optional[str] = Field(None, description="Energy label, A++ through G")
    outdoor_space: OutdoorSpace = Field(OutdoorSpace.NONE, description="Outdoor-space classification")
    property_type: str = Field(DEFAULT_PROPERTY_TYPE, description="Display label of the property type")
    image_url: Optional[str] = Field(None, description="Primary photo link")
    brochure_url: Optional[str] = Field(None, description="Brochure document link")

    @field_validator("energy_label")
    @classmethod
    def validate_energy_label(cls, v: Optional[str]) -> Optional[str]:
        """Accept only labels from the fixed ordering."""
        if v is None:
            return None
        label = normalize_energy_label(v)
        if label is None:
            raise ValueError(f"energy_label must be one of {', '.join(ENERGY_LABELS)}, got: {v}")
        return label

    @property
    def address(self) -> str:
        """Street and house number on one line."""
        return " ".join(part for part in (self.street, self.house_number) if part)

    model_config = {"frozen": True, "json_schema_extra": {"example": {
        "id": "12345",
        "street": "Broersvest",
        "house_number": "12 A",
        "city": "Schiedam",
        "postal_code": "3111 AA",
        "asking_price": 300000,
        "room_count": 3,
        "living_area": 75,
        "energy_label": "B",
        "outdoor_space": "GARDEN",
        "property_type": "Appartement",
        "image_url": "https://images.example.com/12345/hoofdfoto.jpg",
        "brochure_url": "https://docs.example.com/12345/brochure.pdf",
    }}}


class HardCriteria(BaseModel):
    """Disqualifying constraints. Any unset criterion is unconstrained."""

    cities: Optional[List[str]] = Field(None, description="Allowed cities")
    price_min: Optional[float] = Field(None, ge=0, description="Minimum asking price")
    price_max: Optional[float] = Field(None, ge=0, description="Maximum asking price")
    property_types: Optional[List[str]] = Field(None, description="Allowed property types")

    @field_validator("cities", "property_types")
    @classmethod
    def strip_entries(cls, v: Optional[List[str]]) -> Optional[List[str]]:
        """Strip whitespace and drop empty entries."""
        if v is None:
            return None
        return [entry.strip() for entry in v if entry and entry.strip()]


class SoftCriteria(BaseModel):
    """Weighted preferences that lower or raise the match score."""

    min_rooms: Optional[int] = Field(None, ge=0, description="Preferred minimum room count")
    min_area: Optional[float] = Field(None, ge=0, description="Preferred minimum living area (m²)")
    min_energy_label: Optional[str] = Field(None, description="Worst acceptable energy label")
    wants_outdoor_space: Optional[bool] = Field(None, description="Buyer wants a garden or balcony")

    @field_validator("min_energy_label")
    @classmethod
    def validate_min_energy_label(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        label = normalize_energy_label(v)
        if label is None:
            raise ValueError(
                f"min_energy_label must be one of {', '.join(ENERGY_LABELS)}, got: {v}"
            )
        return label


class SearchProfile(BaseModel):
    """A buyer's stored matching preferences plus notification contact and opt-in."""

    id: str = Field(..., description="Profile identifier")
    name: Optional[str] = Field(None, description="Display name of the buyer")
    contact_handle: str = Field(..., min_length=1, description="Phone number for notifications")
    notification_opt_in: bool = Field(False, description="Buyer agreed to receive notifications")
    hard_criteria: HardCriteria = Field(default_factory=HardCriteria)
    soft_criteria: SoftCriteria = Field(default_factory=SoftCriteria)

    @field_validator("id", "contact_handle", mode="before")
    @classmethod
    def coerce_to_string(cls, v):
        """Accept numeric identifiers and phone numbers from YAML."""
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            return str(v)
        return v

    @field_validator("id", "contact_handle")
    @classmethod
    def strip_whitespace(cls, v: str) -> str:
        stripped = v.strip()
        if not stripped:
            raise ValueError("Field cannot be empty or whitespace-only")
        return stripped

    model_config = {"frozen": True, "json_schema_extra": {"example": {
        "id": "1",
        "name": "Fenna Test",
        "contact_handle": "0612345678",
        "notification_opt_in": True,
        "hard_criteria": {
            "cities": ["Schiedam", "Vlaardingen", "Rotterdam"],
            "price_min": 250000,
            "price_max": 500000,
            "property_types": ["Appartement", "Eengezinswoning"],
        },
        "soft_criteria": {
            "min_rooms": 3,
            "min_area": 70,
            "min_energy_label": "C",
            "wants_outdoor_space": True,
        },
    }}}
