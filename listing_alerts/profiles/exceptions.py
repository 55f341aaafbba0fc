"""Exceptions raised by profile sources."""


class ProfileSourceError(Exception):
    """Search profiles could not be read from their source.

    Raised for a missing or unreadable file, invalid YAML, or a document
    without a top-level ``profiles`` list. Individual malformed entries are
    skipped instead.
    """

    pass
