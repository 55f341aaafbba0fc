"""Exceptions raised while fetching listings from Realworks."""


class ListingFetchError(Exception):
    """Base exception for listing fetch failures.

    Catching this exception catches every error that should abort processing
    of a single listing event without taking down the receiver.
    """

    pass


class ListingFetchHTTPError(ListingFetchError):
    """HTTP request failed with a 4xx/5xx status or could not connect.

    A status_code of 0 means no response was received.
    """

    def __init__(self, message: str, status_code: int, url: str) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.url = url


class ListingFetchTimeoutError(ListingFetchError):
    """HTTP request did not complete within the configured timeout."""

    def __init__(self, message: str, url: str) -> None:
        super().__init__(message)
        self.url = url


class ListingFetchResponseError(ListingFetchError):
    """Response body could not be decoded as JSON."""

    pass


class ListingFetchConfigurationError(ListingFetchError):
    """Client was constructed with invalid settings (token, timeout, user agent)."""

    pass
