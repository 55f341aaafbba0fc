"""Realworks listing API client.

This module provides:
- RealworksClient: fetches raw listing documents by object URL
- ListingFetchError hierarchy: HTTP, timeout, response and configuration failures
"""

from .client import RealworksClient
from .exceptions import (
    ListingFetchConfigurationError,
    ListingFetchError,
    ListingFetchHTTPError,
    ListingFetchResponseError,
    ListingFetchTimeoutError,
)

__all__ = [
    "RealworksClient",
    "ListingFetchError",
    "ListingFetchHTTPError",
    "ListingFetchTimeoutError",
    "ListingFetchResponseError",
    "ListingFetchConfigurationError",
]
