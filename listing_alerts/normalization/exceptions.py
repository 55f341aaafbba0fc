"""Custom exceptions for listing normalization."""


class NormalizationError(Exception):
    """Base exception for normalization errors."""

    pass


class MalformedInputError(NormalizationError):
    """The raw listing is not a structured record at all.

    Raised only when the payload root is not a mapping (None, a list, a bare
    scalar). Missing or malformed optional fields never raise; they resolve to
    documented defaults instead.
    """

    def __init__(self, message: str, received_type: str) -> None:
        super().__init__(message)
        self.received_type = received_type
