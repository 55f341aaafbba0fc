"""Shared fixtures for the listing alert test suite."""

import pytest

from listing_alerts.domain.models import Listing, OutdoorSpace, SearchProfile
from listing_alerts.logging.context import clear_log_context


@pytest.fixture(autouse=True)
def clean_log_context():
    """Keep logging context from leaking between tests."""
    clear_log_context()
    yield
    clear_log_context()


@pytest.fixture
def mock_env_vars(monkeypatch):
    """Set the required environment variables and clear optional overrides."""
    monkeypatch.setenv("REALWORKS_API_TOKEN", "rw-test-token")
    monkeypatch.setenv("WHATSAPP_PHONE_NUMBER_ID", "1234567890")
    monkeypatch.setenv("WHATSAPP_ACCESS_TOKEN", "wa-test-token")
    for name in (
        "WHATSAPP_API_VERSION",
        "VERIFY_TOKEN",
        "MATCH_THRESHOLD",
        "LOG_LEVEL",
        "PORT",
        "ENVIRONMENT",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def raw_listing():
    """Realworks listing document in the current schema shape."""
    return {
        "id": "rw-1001",
        "adres": {
            "straat": "Broersvest",
            "huisnummer": 12,
            "huisnummertoevoeging": "A",
            "postcode": "3111 AA",
            "plaats": "Schiedam",
        },
        "financieel": {"overdracht": {"koopprijs": 300000}},
        "algemeen": {
            "aantalKamers": 3,
            "woonoppervlakte": 75,
            "energieklasse": "B",
        },
        "detail": {
            "buitenruimte": {
                "tuintypes": ["ACHTERTUIN"],
                "oppervlakteGebouwgebondenBuitenruimte": 15,
            },
        },
        "object": {"type": {"objecttype": "APPARTEMENT"}},
        "media": [
            {"soort": "FOTO", "link": "https://images.example.com/rw-1001/2.jpg"},
            {"soort": "HOOFDFOTO", "link": "https://images.example.com/rw-1001/1.jpg"},
            {
                "soort": "DOCUMENT",
                "titel": "Verkoopbrochure",
                "link": "https://docs.example.com/rw-1001/brochure.pdf",
            },
        ],
    }


@pytest.fixture
def sample_listing():
    """Canonical listing matching raw_listing."""
    return Listing(
        id="rw-1001",
        street="Broersvest",
        house_number="12 A",
        city="Schiedam",
        postal_code="3111 AA",
        asking_price=300000,
        room_count=3,
        living_area=75,
        energy_label="B",
        outdoor_space=OutdoorSpace.GARDEN,
        property_type="Appartement",
        image_url="https://images.example.com/rw-1001/1.jpg",
        brochure_url="https://docs.example.com/rw-1001/brochure.pdf",
    )


@pytest.fixture
def profile_data():
    """Raw profile entry as stored in profiles.yaml."""
    return {
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
    }


@pytest.fixture
def sample_profile(profile_data):
    return SearchProfile.model_validate(profile_data)
