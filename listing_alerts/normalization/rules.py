"""Field resolution table for Realworks listing payloads.

Each canonical Listing field maps to an ordered fallback chain. Order matters:
the first rule that yields usable data wins, so current schema shapes come
first and historical ones after.
"""

import re
from typing import Any, Optional

from listing_alerts.domain.models import normalize_energy_label

from .resolver import chain, rule

PROPERTY_TYPE_LABELS = {
    "APPARTEMENT": "Appartement",
    "WOONHUIS": "Woonhuis",
}

PRIMARY_PHOTO_CATEGORIES = frozenset({"HOOFDFOTO"})
DOCUMENT_CATEGORIES = frozenset({"DOCUMENT", "BROCHURE"})

MEDIA_COLLECTIONS = (("media",),)
BROCHURE_COLLECTIONS = (("links",), ("documenten",), ("media",))

# Dutch grouping: 1.250.000 or 1.250.000,50
THOUSANDS_GROUPED = re.compile(r"^\d{1,3}(\.\d{3})+(,\d+)?$")

CATEGORY_KEYS = ("soort", "categorie")
LINK_KEYS = ("link", "url")
TITLE_KEYS = ("titel", "naam", "omschrijving")


def to_text(value: Any) -> Optional[str]:
    """Trimmed string; integral numbers are rendered without a decimal part."""
    if isinstance(value, bool):
        raise TypeError("boolean is not text")
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, str):
        return value.strip()
    raise TypeError(f"expected text, got {type(value).__name__}")


def to_number(value: Any) -> float:
    """Parse a numeric value; strings may carry a euro sign and Dutch separators."""
    if isinstance(value, bool):
        raise TypeError("boolean is not a number")
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        cleaned = "".join(value.replace("€", "").split())
        if THOUSANDS_GROUPED.match(cleaned):
            cleaned = cleaned.replace(".", "")
        cleaned = cleaned.replace(",", ".")
        number = float(cleaned)
    else:
        raise TypeError(f"expected number, got {type(value).__name__}")

    if number != number or number in (float("inf"), float("-inf")):
        raise ValueError("number must be finite")
    return number


def to_non_negative_number(value: Any) -> float:
    return max(to_number(value), 0.0)


def to_non_negative_int(value: Any) -> int:
    return max(int(to_number(value)), 0)


def to_positive_number(value: Any) -> Optional[float]:
    """Number if strictly positive, otherwise absent."""
    number = to_number(value)
    return number if number > 0 else None


def to_energy_label(value: Any) -> Optional[str]:
    return normalize_energy_label(value)


def to_property_type(value: Any) -> Optional[str]:
    """Map known type codes to display labels; unknown codes pass through."""
    code = to_text(value)
    if not code:
        return None
    return PROPERTY_TYPE_LABELS.get(code.upper(), code)


def to_presence(value: Any) -> Optional[bool]:
    """True for a non-empty sequence of entries, absent otherwise."""
    if isinstance(value, (list, tuple)) and len(value) > 0:
        return True
    return None


ID = chain(
    "id",
    rule("id", to_text),
    rule("diversen.diversen.objectcode", to_text),
    rule("diversen.objectcode", to_text),
)

STREET = chain("street", rule("adres.straat", to_text))
HOUSE_NUMBER_BASE = chain("house_number", rule("adres.huisnummer", to_text))
HOUSE_NUMBER_SUFFIX = chain("house_number_suffix", rule("adres.huisnummertoevoeging", to_text))
CITY = chain("city", rule("adres.plaats", to_text))
POSTAL_CODE = chain("postal_code", rule("adres.postcode", to_text))

ASKING_PRICE = chain(
    "asking_price",
    rule("financieel.overdracht.koopprijs", to_non_negative_number),
    rule("financieel.overdracht.transactieprijs", to_non_negative_number),
    rule("financieel.koopprijs", to_non_negative_number),
    rule("vraagprijs", to_non_negative_number),
    default=0.0,
)

ROOM_COUNT = chain(
    "room_count",
    rule("algemeen.aantalKamers", to_non_negative_int),
    rule("detail.aantalKamers", to_non_negative_int),
    default=0,
)

LIVING_AREA = chain(
    "living_area",
    rule("algemeen.woonoppervlakte", to_non_negative_number),
    rule("detail.woonoppervlakte", to_non_negative_number),
    rule("algemeen.gebruiksoppervlakteWoonfunctie", to_non_negative_number),
    default=0.0,
)

ENERGY_LABEL = chain(
    "energy_label",
    rule("algemeen.energieklasse", to_energy_label),
    rule("algemeen.energielabel", to_energy_label),
    rule("detail.energielabel.energieklasse", to_energy_label),
)

GARDEN = chain(
    "garden",
    rule("detail.buitenruimte.tuintypes", to_presence),
    default=False,
)

BALCONY_AREA = chain(
    "balcony_area",
    rule("detail.buitenruimte.oppervlakteGebouwgebondenBuitenruimte", to_positive_number),
    rule("algemeen.gebouwgebondenBuitenruimte", to_positive_number),
)

PROPERTY_TYPE = chain(
    "property_type",
    rule("object.type.objecttype", to_property_type),
    rule("objecttype", to_property_type),
)

SCALAR_FIELDS = (
    ID,
    STREET,
    CITY,
    POSTAL_CODE,
    ASKING_PRICE,
    ROOM_COUNT,
    LIVING_AREA,
    ENERGY_LABEL,
)
