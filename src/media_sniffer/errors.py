"""Custom exceptions for Media Sniffer."""

from typing import Optional


class MediaSnifferError(Exception):
    """Base exception for Media Sniffer."""

    def __init__(self, message: str, code: str = "INTERNAL_ERROR", context: Optional[dict] = None):
        super().__init__(message)
        self.message = message
        self.code = code
        self.context = context or {}


class InvalidInputError(MediaSnifferError):
    """The page URL or page text handed to the engine is unusable."""

    def __init__(self, message: str, context: Optional[dict] = None):
        super().__init__(message, "INVALID_INPUT", context)


class ResolutionError(MediaSnifferError):
    """A single reference could not be turned into an absolute URL."""

    def __init__(self, message: str, reference: str = ""):
        super().__init__(message, "RESOLUTION_ERROR", {"reference": reference})
        self.reference = reference


class FetchError(MediaSnifferError):
    """Fetching the page failed before extraction could start."""

    def __init__(self, message: str, url: str = "", status_code: Optional[int] = None):
        super().__init__(message, "FETCH_ERROR", {"url": url, "status_code": status_code})
        self.url = url
        self.status_code = status_code
