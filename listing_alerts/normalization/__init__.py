"""Listing normalization layer.

This module provides:
- ListingNormalizer / normalize: raw provider payload to canonical Listing
- FieldRule / FieldResolver: declarative fallback chains for field extraction
- MalformedInputError: raised when the payload is not a structured record
"""

from .exceptions import MalformedInputError, NormalizationError
from .resolver import FieldResolver, FieldRule, ResolvedField, get_path
from .service import ListingNormalizer, normalize

__all__ = [
    "ListingNormalizer",
    "normalize",
    "FieldRule",
    "FieldResolver",
    "ResolvedField",
    "get_path",
    "MalformedInputError",
    "NormalizationError",
]
