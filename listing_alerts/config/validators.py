"""Additional validation utilities for configuration."""

import warnings
from pathlib import Path
from typing import Any, Dict, List


def check_for_warnings(config_dict: Dict[str, Any]) -> List[str]:
    """
    Check configuration for potential issues and return warnings.

    Args:
        config_dict: Raw configuration dictionary

    Returns:
        List of warning messages
    """
    warning_messages = []

    matching = config_dict.get("matching", {})
    if isinstance(matching, dict):
        threshold = matching.get("threshold")
        if isinstance(threshold, (int, float)) and threshold == 0:
            warning_messages.append(
                "matching.threshold is 0: every profile passing the hard filters will be notified"
            )

    profiles = config_dict.get("profiles", {})
    if isinstance(profiles, dict):
        path = profiles.get("path", "profiles.yaml")
        if isinstance(path, str) and path.strip():
            profile_path = Path(path.strip())
            if not profile_path.exists():
                warning_messages.append(
                    f"Profiles file '{profile_path}' does not exist yet; events will fail until it is created"
                )

    whatsapp = config_dict.get("whatsapp", {})
    if isinstance(whatsapp, dict):
        if whatsapp.get("message_type") == "text" and whatsapp.get("header_media", "none") != "none":
            warning_messages.append(
                "whatsapp.header_media is ignored for text messages"
            )
        max_retries = whatsapp.get("max_retries", 0)
        if isinstance(max_retries, int) and max_retries > 3:
            warning_messages.append(
                f"High whatsapp.max_retries ({max_retries}) may delay webhook responses"
            )

    if config_dict.get("dry_run") is True:
        warning_messages.append("dry_run is enabled: no messages will be delivered")

    return warning_messages


def emit_warnings(warning_messages: List[str]) -> None:
    """Emit warning messages using Python's warnings module."""
    for message in warning_messages:
        warnings.warn(message, UserWarning, stacklevel=2)
