"""Configuration schema models using Pydantic."""

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from listing_alerts.domain.models import ENERGY_LABELS, LISTING_LABEL_FALLBACK, normalize_energy_label

DEFAULT_MATCH_THRESHOLD = 80.0


class LogLevel(str, Enum):
    """Logging levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class LogFormat(str, Enum):
    """Log output formats."""

    JSON = "json"
    KEY_VALUE = "key-value"


class MessageType(str, Enum):
    """WhatsApp message kinds."""

    TEMPLATE = "template"
    TEXT = "text"


class HeaderMedia(str, Enum):
    """Optional media header attached to template messages."""

    NONE = "none"
    IMAGE = "image"
    DOCUMENT = "document"


class MatchingConfig(BaseModel):
    """Profile matching settings."""

    threshold: float = Field(DEFAULT_MATCH_THRESHOLD, ge=0, le=100, description="Minimum score to notify a profile")
    energy_labels: List[str] = Field(
        default_factory=lambda: list(ENERGY_LABELS),
        description="Energy labels ordered best to worst",
    )

    @field_validator("energy_labels")
    @classmethod
    def validate_energy_labels(cls, v: List[str]) -> List[str]:
        """Canonicalize labels and require a known, duplicate-free ordering that includes G."""
        entries = [label for label in v if label and label.strip()]
        labels = [normalize_energy_label(label) for label in entries]
        unknown = [entry for entry, label in zip(entries, labels) if label is None]
        if unknown:
            raise ValueError(
                f"unknown energy labels: {', '.join(unknown)} (expected one of {', '.join(ENERGY_LABELS)})"
            )
        if len(set(labels)) != len(labels):
            raise ValueError("energy_labels must not contain duplicates")
        if LISTING_LABEL_FALLBACK not in labels:
            raise ValueError(f"energy_labels must include '{LISTING_LABEL_FALLBACK}'")
        return labels


class ProfilesConfig(BaseModel):
    """Where search profiles are read from."""

    path: str = Field("profiles.yaml", min_length=1, description="YAML file with search profiles")

    @field_validator("path")
    @classmethod
    def strip_path(cls, v: str) -> str:
        stripped = v.strip()
        if not stripped:
            raise ValueError("profiles path cannot be empty")
        return stripped


class WhatsAppConfig(BaseModel):
    """WhatsApp Cloud API message settings."""

    message_type: MessageType = Field(MessageType.TEMPLATE, description="template or text")
    template_name: str = Field("aanbod_brochure", min_length=1, description="Approved template name")
    language_code: str = Field("nl", min_length=2, description="Template language code")
    header_media: HeaderMedia = Field(
        HeaderMedia.NONE, description="Media header for template messages"
    )
    country_code: str = Field("31", pattern=r"^\d{1,3}$", description="Default country calling code")
    http_request_timeout: int = Field(15, ge=5, le=120, description="API request timeout (seconds)")
    max_retries: int = Field(0, ge=0, le=10, description="Retry attempts for failed sends")
    retry_backoff_multiplier: float = Field(
        2.0, ge=1.0, le=5.0, description="Exponential backoff multiplier for retries"
    )
    retry_initial_delay: int = Field(2, ge=1, le=60, description="Initial retry delay in seconds")

    model_config = {"use_enum_values": True}


class RealworksConfig(BaseModel):
    """Listing-fetch client settings."""

    http_request_timeout: int = Field(
        30, ge=5, le=300, description="Request timeout for Realworks API calls (seconds)"
    )
    user_agent: str = Field(
        "ListingAlerts/1.0", min_length=1, description="User-Agent string for HTTP requests"
    )

    @field_validator("user_agent")
    @classmethod
    def strip_user_agent(cls, v: str) -> str:
        stripped = v.strip()
        if not stripped:
            raise ValueError("user_agent cannot be empty")
        return stripped


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: LogLevel = Field(LogLevel.INFO, description="Log level")
    format: LogFormat = Field(
        LogFormat.KEY_VALUE, description="Log output format (json or key-value)"
    )

    model_config = {"use_enum_values": True}


class AppConfig(BaseModel):
    """Root configuration object for the listing alert service."""

    matching: MatchingConfig = Field(default_factory=MatchingConfig)
    profiles: ProfilesConfig = Field(default_factory=ProfilesConfig)
    whatsapp: WhatsAppConfig = Field(default_factory=WhatsAppConfig)
    realworks: RealworksConfig = Field(default_factory=RealworksConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    dry_run: bool = Field(False, description="Match and log, but do not deliver messages")

    model_config = {"extra": "forbid"}

    def with_threshold(self, threshold: Optional[float]) -> "AppConfig":
        """Return a copy with the match threshold overridden (None keeps the current value)."""
        if threshold is None:
            return self
        matching = MatchingConfig(
            threshold=threshold, energy_labels=self.matching.energy_labels
        )
        return self.model_copy(update={"matching": matching})
