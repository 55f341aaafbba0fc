"""Environment variable loading and validation."""

import math
import os
from typing import Optional

from .exceptions import ConfigurationError

VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class EnvironmentConfig:
    """Environment variable configuration holder (credentials and process settings)."""

    def __init__(
        self,
        realworks_api_token: str,
        whatsapp_phone_number_id: str,
        whatsapp_access_token: str,
        whatsapp_api_version: Optional[str] = None,
        verify_token: Optional[str] = None,
        match_threshold: Optional[float] = None,
        log_level: Optional[str] = None,
        port: Optional[int] = None,
        environment: Optional[str] = None,
    ):
        self.realworks_api_token = realworks_api_token
        self.whatsapp_phone_number_id = whatsapp_phone_number_id
        self.whatsapp_access_token = whatsapp_access_token
        self.whatsapp_api_version = whatsapp_api_version or "v21.0"
        self.verify_token = verify_token
        self.match_threshold = match_threshold
        self.log_level = log_level
        self.port = port or 3000
        self.environment = environment or "local"


def load_environment_config() -> EnvironmentConfig:
    """
    Load and validate environment variables.

    Required environment variables:
    - REALWORKS_API_TOKEN: token for the listing API (sent as ``rwauth <token>``)
    - WHATSAPP_PHONE_NUMBER_ID: sender phone number id in the WhatsApp Cloud API
    - WHATSAPP_ACCESS_TOKEN: bearer token for the WhatsApp Cloud API

    Optional environment variables:
    - WHATSAPP_API_VERSION: Graph API version (default v21.0)
    - VERIFY_TOKEN: token expected during Meta webhook verification
    - MATCH_THRESHOLD: overrides matching.threshold from the config file (0-100)
    - LOG_LEVEL: overrides the configured log level
    - PORT: HTTP port for the webhook receiver (default 3000)
    - ENVIRONMENT: deployment name attached to every log record (default local)

    Returns:
        EnvironmentConfig with validated values

    Raises:
        ConfigurationError: If required variables are missing or invalid
    """
    errors = []

    realworks_api_token = os.getenv("REALWORKS_API_TOKEN")
    whatsapp_phone_number_id = os.getenv("WHATSAPP_PHONE_NUMBER_ID")
    whatsapp_access_token = os.getenv("WHATSAPP_ACCESS_TOKEN")

    for name, value in (
        ("REALWORKS_API_TOKEN", realworks_api_token),
        ("WHATSAPP_PHONE_NUMBER_ID", whatsapp_phone_number_id),
        ("WHATSAPP_ACCESS_TOKEN", whatsapp_access_token),
    ):
        if not value or not value.strip():
            errors.append(f"Missing required environment variable: {name}")

    match_threshold = _parse_float(
        "MATCH_THRESHOLD", os.getenv("MATCH_THRESHOLD"), minimum=0, maximum=100, errors=errors
    )
    port = _parse_int("PORT", os.getenv("PORT"), minimum=1, maximum=65535, errors=errors)

    log_level = os.getenv("LOG_LEVEL")
    if log_level and log_level.upper() not in VALID_LOG_LEVELS:
        errors.append(
            f"Invalid LOG_LEVEL: '{log_level}'. Must be one of: {', '.join(VALID_LOG_LEVELS)}"
        )

    if errors:
        raise ConfigurationError(
            "Environment variable validation failed",
            errors=errors,
            suggestions=[
                "Copy .env.example to .env and fill in your credentials",
                "Ensure all required environment variables are set",
                "Verify MATCH_THRESHOLD is a number between 0 and 100",
            ],
        )

    return EnvironmentConfig(
        realworks_api_token=realworks_api_token.strip(),
        whatsapp_phone_number_id=whatsapp_phone_number_id.strip(),
        whatsapp_access_token=whatsapp_access_token.strip(),
        whatsapp_api_version=os.getenv("WHATSAPP_API_VERSION"),
        verify_token=os.getenv("VERIFY_TOKEN"),
        match_threshold=match_threshold,
        log_level=log_level.upper() if log_level else None,
        port=port,
        environment=(os.getenv("ENVIRONMENT") or "").strip() or None,
    )


def _parse_int(name: str, raw: Optional[str], minimum: int, maximum: int, errors: list) -> Optional[int]:
    """Parse an optional integer variable, appending to errors when invalid."""
    if raw is None or not raw.strip():
        return None
    try:
        value = int(raw.strip())
    except ValueError:
        errors.append(f"Invalid {name}: '{raw}'. Must be a valid integer.")
        return None
    if value < minimum or value > maximum:
        errors.append(f"Invalid {name}: {value}. Must be between {minimum} and {maximum}.")
        return None
    return value


def _parse_float(name: str, raw: Optional[str], minimum: float, maximum: float, errors: list) -> Optional[float]:
    """Parse an optional numeric variable, appending to errors when invalid."""
    if raw is None or not raw.strip():
        return None
    try:
        value = float(raw.strip())
    except ValueError:
        errors.append(f"Invalid {name}: '{raw}'. Must be a number.")
        return None
    if not math.isfinite(value) or value < minimum or value > maximum:
        errors.append(f"Invalid {name}: {raw.strip()}. Must be between {minimum} and {maximum}.")
        return None
    return value
