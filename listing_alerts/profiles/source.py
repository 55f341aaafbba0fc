"""Read-only providers of buyer search profiles.

Profiles are owned outside the matching core. A source is anything with a
``load()`` method returning the current profile set; the pipeline calls it
once per listing event.
"""

import logging
from pathlib import Path
from typing import Any, Iterable, List, Mapping, Optional, Union

import yaml
from pydantic import ValidationError

from listing_alerts.domain.models import SearchProfile
from listing_alerts.logging import get_logger

from .exceptions import ProfileSourceError

logger = get_logger(__name__, component="profiles")


class StaticProfileSource:
    """In-memory profile set, mainly for tests and the --listing-file mode."""

    def __init__(self, profiles: Iterable[SearchProfile]):
        self._profiles = list(profiles)

    def load(self) -> List[SearchProfile]:
        return list(self._profiles)


class YamlProfileSource:
    """Profiles stored in a YAML document under a top-level ``profiles`` key.

    The file is re-read on every ``load()`` so edits take effect on the next
    listing event without a restart.

    Example document::

        profiles:
          - id: "1"
            name: Fenna Test
            contact_handle: "06 12345678"
            notification_opt_in: true
            hard_criteria:
              cities: [Schiedam]
    """

    def __init__(
        self,
        path: Union[str, Path],
        logger_instance: Optional[logging.Logger] = None,
    ):
        self.path = Path(path)
        self.logger = logger_instance or logger

    def load(self) -> List[SearchProfile]:
        """Read and validate the profile file.

        Returns:
            Valid profiles in file order

        Raises:
            ProfileSourceError: If the file is missing, unreadable or not a profile document
        """
        entries = self._read_entries()
        profiles: List[SearchProfile] = []

        for position, entry in enumerate(entries):
            profile = self._parse_entry(entry, position)
            if profile is not None:
                profiles.append(profile)

        self.logger.debug(
            f"Loaded {len(profiles)} profiles from {self.path}",
            extra={
                "event": "profiles.loaded",
                "path": str(self.path),
                "profile_count": len(profiles),
                "skipped_count": len(entries) - len(profiles),
            },
        )
        return profiles

    def _read_entries(self) -> List[Any]:
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                document = yaml.safe_load(f)
        except FileNotFoundError as e:
            raise ProfileSourceError(f"Profile file not found: {self.path}") from e
        except yaml.YAMLError as e:
            raise ProfileSourceError(f"Failed to parse profile file {self.path}: {e}") from e
        except OSError as e:
            raise ProfileSourceError(f"Failed to read profile file {self.path}: {e}") from e

        if document is None:
            return []

        if not isinstance(document, Mapping):
            raise ProfileSourceError(
                f"Profile file {self.path} must contain a mapping with a 'profiles' list, "
                f"got {type(document).__name__}"
            )

        entries = document.get("profiles") or []
        if not isinstance(entries, list):
            raise ProfileSourceError(
                f"'profiles' in {self.path} must be a list, got {type(entries).__name__}"
            )
        return entries

    def _parse_entry(self, entry: Any, position: int) -> Optional[SearchProfile]:
        if not isinstance(entry, Mapping):
            self.logger.warning(
                f"Skipping profile entry {position} in {self.path}: not a mapping",
                extra={"event": "profiles.entry.invalid", "position": position},
            )
            return None

        try:
            return SearchProfile.model_validate(entry)
        except ValidationError as e:
            fields = sorted({".".join(str(loc) for loc in err["loc"]) for err in e.errors()})
            self.logger.warning(
                f"Skipping invalid profile entry {position} in {self.path}: {', '.join(fields)}",
                extra={
                    "event": "profiles.entry.invalid",
                    "position": position,
                    "profile_id": entry.get("id"),
                },
            )
            return None
