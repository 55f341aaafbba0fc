"""WhatsApp Cloud API payload construction.

Turns a listing and a qualifying profile into the JSON body accepted by the
``/messages`` endpoint, either as an approved template message or as a plain
text message.
"""

from typing import Any, Dict, List, Optional

from listing_alerts.config.models import HeaderMedia, WhatsAppConfig
from listing_alerts.domain.models import Listing, OutdoorSpace
from listing_alerts.matching.models import ProfileMatch

from .models import InvalidRecipientError

MESSAGING_PRODUCT = "whatsapp"

OUTDOOR_SPACE_LABELS = {
    OutdoorSpace.GARDEN: "Tuin",
    OutdoorSpace.BALCONY: "Balkon",
    OutdoorSpace.NONE: "Geen",
}


def normalize_phone_number(contact_handle: Optional[str], country_code: str = "31") -> str:
    """Convert a stored contact handle to the international digits-only form.

    Non-digits are removed. A leading ``00`` international access prefix is
    dropped and the rest used as-is. A trunk ``0`` is always replaced by the
    country code (``0313...`` becomes ``31313...``). Other digits get the
    country code unless they already start with it.

    Example:
        >>> normalize_phone_number("06-1234 5678")
        '31612345678'

    Raises:
        InvalidRecipientError: If no digits remain
    """
    digits = "".join(ch for ch in (contact_handle or "") if ch.isdigit())
    if digits.startswith("00"):
        international = digits[2:]
    elif digits.startswith("0"):
        international = country_code + digits[1:] if digits[1:] else ""
    elif digits.startswith(country_code):
        international = digits
    else:
        international = country_code + digits if digits else ""

    if not international:
        raise InvalidRecipientError(f"Contact handle has no usable digits: {contact_handle!r}")
    return international


def format_number(value: float) -> str:
    """Render a count or area without a trailing ``.0``."""
    if float(value).is_integer():
        return str(int(value))
    return f"{value:g}"


def format_price(value: float) -> str:
    """Euro amount with Dutch thousands separators, e.g. ``€ 300.000``."""
    return "€ " + f"{int(round(value)):,}".replace(",", ".")


def outdoor_space_label(outdoor_space) -> str:
    return OUTDOOR_SPACE_LABELS[OutdoorSpace(outdoor_space)]


def template_body_parameters(listing: Listing) -> List[Dict[str, str]]:
    """Ordered body parameters for the listing offer template.

    Order: city, street and house number, room count, property type,
    living area, outdoor-space label, energy label.
    """
    values = [
        listing.city or "",
        f"{listing.street or ''} {listing.house_number}".strip(),
        format_number(listing.room_count),
        listing.property_type,
        format_number(listing.living_area),
        outdoor_space_label(listing.outdoor_space),
        listing.energy_label or "",
    ]
    return [{"type": "text", "text": value} for value in values]


def header_component(listing: Listing, header_media: str) -> Optional[Dict[str, Any]]:
    """Media header for the template, or None when unavailable or disabled."""
    if header_media == HeaderMedia.DOCUMENT.value and listing.brochure_url:
        document = {"link": listing.brochure_url, "filename": f"Brochure {listing.address}".strip()}
        return {"type": "header", "parameters": [{"type": "document", "document": document}]}

    if header_media == HeaderMedia.IMAGE.value and listing.image_url:
        return {
            "type": "header",
            "parameters": [{"type": "image", "image": {"link": listing.image_url}}],
        }

    return None


def build_template_payload(
    listing: Listing,
    recipient: str,
    config: WhatsAppConfig,
) -> Dict[str, Any]:
    """Build a template message payload for one recipient."""
    components = []
    header = header_component(listing, config.header_media)
    if header is not None:
        components.append(header)
    components.append({"type": "body", "parameters": template_body_parameters(listing)})

    return {
        "messaging_product": MESSAGING_PRODUCT,
        "to": recipient,
        "type": "template",
        "template": {
            "name": config.template_name,
            "language": {"code": config.language_code},
            "components": components,
        },
    }


def build_text_payload(recipient: str, body: str, preview_url: bool = True) -> Dict[str, Any]:
    """Build a plain text message payload for one recipient."""
    return {
        "messaging_product": MESSAGING_PRODUCT,
        "to": recipient,
        "type": "text",
        "text": {"preview_url": preview_url, "body": body},
    }


def build_message_context(match: ProfileMatch, listing: Listing) -> Dict[str, Any]:
    """Template context for the plain text listing offer.

    Returns:
        Dictionary with keys:
        - name: Buyer display name (empty when unknown)
        - score: Match score
        - city, address, postal_code: Location details
        - price, rooms, living_area: Formatted figures
        - property_type, outdoor_space, energy_label: Display labels
        - brochure_url, image_url: Links (None when absent)
    """
    profile = match.profile
    return {
        "name": profile.name or "",
        "score": match.score,
        "city": listing.city or "",
        "address": f"{listing.street or ''} {listing.house_number}".strip(),
        "postal_code": listing.postal_code or "",
        "price": format_price(listing.asking_price),
        "rooms": format_number(listing.room_count),
        "living_area": format_number(listing.living_area),
        "property_type": listing.property_type,
        "outdoor_space": outdoor_space_label(listing.outdoor_space),
        "energy_label": listing.energy_label or "",
        "brochure_url": listing.brochure_url,
        "image_url": listing.image_url,
    }
