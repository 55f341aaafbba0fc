"""Configuration management module for the listing alert service."""

from .environment import EnvironmentConfig, load_environment_config
from .exceptions import ConfigurationError
from .loader import load_config, parse_app_config, validate_config_file
from .models import (
    AppConfig,
    HeaderMedia,
    LogFormat,
    LogLevel,
    LoggingConfig,
    MatchingConfig,
    MessageType,
    ProfilesConfig,
    RealworksConfig,
    WhatsAppConfig,
)

__all__ = [
    # Main loader functions
    "load_config",
    "parse_app_config",
    "validate_config_file",
    "load_environment_config",
    # Configuration models
    "AppConfig",
    "MatchingConfig",
    "ProfilesConfig",
    "WhatsAppConfig",
    "RealworksConfig",
    "LoggingConfig",
    "EnvironmentConfig",
    # Enums
    "LogLevel",
    "LogFormat",
    "MessageType",
    "HeaderMedia",
    # Exceptions
    "ConfigurationError",
]
