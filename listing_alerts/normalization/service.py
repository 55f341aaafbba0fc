"""Listing normalization service for converting raw provider payloads to Listing.

This module implements the normalization logic that:
1. Rejects payloads that are not structured records (MalformedInputError)
2. Resolves every canonical field through its fallback chain
3. Composes the house number from base number and suffix
4. Derives the outdoor-space classification (garden before balcony)
5. Selects the primary photo and brochure links from media collections
6. Emits a structured log line naming the fields that fell back to defaults
"""

import logging
from typing import Any, Dict, List, Mapping, Optional

from listing_alerts.domain.models import DEFAULT_PROPERTY_TYPE, Listing, OutdoorSpace
from listing_alerts.logging import get_logger

from . import rules
from .exceptions import MalformedInputError
from .resolver import first_present, iter_entries

logger = get_logger(__name__, component="normalization")


class ListingNormalizer:
    """Normalizes raw upstream listing records into canonical Listing models.

    The normalizer is stateless; one instance can be shared across events.
    """

    def __init__(self, logger_instance: Optional[logging.Logger] = None):
        self.logger = logger_instance or logger

    def normalize(self, raw_listing: Any) -> Listing:
        """Normalize a single raw listing.

        Args:
            raw_listing: Decoded provider payload (tree of mappings, sequences, scalars)

        Returns:
            Listing with every field resolved or defaulted

        Raises:
            MalformedInputError: If raw_listing is not a mapping
        """
        if not isinstance(raw_listing, Mapping):
            received = type(raw_listing).__name__
            self.logger.error(
                f"Cannot normalize listing: expected an object, got {received}",
                extra={
                    "event": "normalization.listing.malformed",
                    "received_type": received,
                },
            )
            raise MalformedInputError(
                f"Listing payload must be a JSON object, got {received}",
                received_type=received,
            )

        values: Dict[str, Any] = {}
        defaulted: List[str] = []
        for resolver in rules.SCALAR_FIELDS:
            resolved = resolver.resolve_with_source(raw_listing)
            values[resolver.name] = resolved.value
            if resolved.defaulted:
                defaulted.append(resolver.name)

        property_type = rules.PROPERTY_TYPE.resolve(raw_listing)
        if property_type is None:
            property_type = DEFAULT_PROPERTY_TYPE
            defaulted.append("property_type")

        listing = Listing(
            **values,
            house_number=self.compose_house_number(
                rules.HOUSE_NUMBER_BASE.resolve(raw_listing),
                rules.HOUSE_NUMBER_SUFFIX.resolve(raw_listing),
            ),
            outdoor_space=self.derive_outdoor_space(raw_listing),
            property_type=property_type,
            image_url=self.select_primary_image(raw_listing),
            brochure_url=self.select_brochure(raw_listing),
        )

        self.logger.info(
            "Normalized listing",
            extra={
                "event": "normalization.listing.normalized",
                "listing_id": listing.id,
                "city": listing.city,
                "asking_price": listing.asking_price,
                "property_type": listing.property_type,
                "outdoor_space": listing.outdoor_space.value,
                "defaulted_fields": ",".join(defaulted) or None,
            },
        )

        return listing

    @staticmethod
    def compose_house_number(base: Optional[str], suffix: Optional[str]) -> str:
        """Join base number and suffix with one space.

        Example:
            >>> ListingNormalizer.compose_house_number("12", "A")
            '12 A'
            >>> ListingNormalizer.compose_house_number(None, None)
            ''
        """
        parts = [part.strip() for part in (base, suffix) if part and part.strip()]
        return " ".join(parts)

    @staticmethod
    def derive_outdoor_space(raw_listing: Mapping) -> OutdoorSpace:
        """Classify outdoor space. Garden types take precedence over a balcony area."""
        if rules.GARDEN.resolve(raw_listing):
            return OutdoorSpace.GARDEN
        if rules.BALCONY_AREA.resolve(raw_listing) is not None:
            return OutdoorSpace.BALCONY
        return OutdoorSpace.NONE

    @staticmethod
    def select_primary_image(raw_listing: Mapping) -> Optional[str]:
        """First media entry categorized as the primary photo that carries a link."""
        for entry in iter_entries(raw_listing, rules.MEDIA_COLLECTIONS):
            if _category(entry) not in rules.PRIMARY_PHOTO_CATEGORIES:
                continue
            link = _link(entry)
            if link:
                return link
        return None

    @staticmethod
    def select_brochure(raw_listing: Mapping) -> Optional[str]:
        """First document entry whose title or description mentions a brochure."""
        for entry in iter_entries(raw_listing, rules.BROCHURE_COLLECTIONS):
            if _category(entry) not in rules.DOCUMENT_CATEGORIES:
                continue
            if not _mentions_brochure(entry):
                continue
            link = _link(entry)
            if link:
                return link
        return None


def _category(entry: Mapping) -> str:
    category = first_present(entry, rules.CATEGORY_KEYS)
    return category.strip().upper() if isinstance(category, str) else ""


def _link(entry: Mapping) -> Optional[str]:
    link = first_present(entry, rules.LINK_KEYS)
    return link.strip() if isinstance(link, str) else None


def _mentions_brochure(entry: Mapping) -> bool:
    for key in rules.TITLE_KEYS:
        text = entry.get(key)
        if isinstance(text, str) and "brochure" in text.casefold():
            return True
    return False


_default_normalizer = ListingNormalizer()


def normalize(raw_listing: Any) -> Listing:
    """Normalize a raw listing with a module-level normalizer.

    Raises:
        MalformedInputError: If raw_listing is not a mapping
    """
    return _default_normalizer.normalize(raw_listing)
