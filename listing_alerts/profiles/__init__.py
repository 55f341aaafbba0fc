"""Search profile sources."""

from .exceptions import ProfileSourceError
from .source import StaticProfileSource, YamlProfileSource

__all__ = [
    "ProfileSourceError",
    "StaticProfileSource",
    "YamlProfileSource",
]
