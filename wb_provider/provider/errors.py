from __future__ import annotations


class ProviderError(Exception):
    """Base class for failures the provider degrades on instead of propagating."""


class TransportError(ProviderError):
    """Connection refused, DNS failure, timeout."""


class NotFoundError(ProviderError):
    """Non-2xx answer from the server, or a missing local file."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class MalformedResponseError(ProviderError):
    """A 2xx body that could not be decoded into the expected shape."""


class UnsupportedUrlFormatError(ProviderError):
    """An image url that is neither a share path nor an absolute http(s) url."""
