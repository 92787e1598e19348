"""
Exception types raised by the archive engine.
"""

from typing import Optional


class GyotakuError(Exception):
    """Base class for all archiver errors."""


class InvalidUrlError(GyotakuError, ValueError):
    """A URL could not be parsed into an absolute http(s) URL."""

    def __init__(self, url: str, reason: str = "not an absolute http(s) URL"):
        self.url = url
        self.reason = reason
        super().__init__(f"Invalid URL {url!r}: {reason}")


class FetchError(GyotakuError):
    """
    A request failed.

    Raised for network errors, timeouts and non-success responses.

    Attributes:
        url: URL that was requested
        message: Diagnostic message
        status: HTTP status code, if a response was received
    """

    def __init__(self, url: str, message: str, status: Optional[int] = None):
        self.url = url
        self.message = message
        self.status = status
        super().__init__(f"{url}: {message}")


class ResourceFetchError(FetchError):
    """A resource download failed."""


class UnsafePathError(GyotakuError, ValueError):
    """A URL would map to a path outside its host's mirror directory."""

    error_type = 'unsafe_path'

    def __init__(self, url: str, path: str):
        self.url = url
        self.path = path
        super().__init__(f"Refusing to map {url!r} outside the mirror root: {path}")


class PathConflictError(UnsafePathError):
    """A URL maps onto a path already taken by a file or directory of the other kind."""

    error_type = 'path_conflict'

    def __init__(self, url: str, path: str):
        self.url = url
        self.path = path
        GyotakuError.__init__(self, f"Path for {url!r} conflicts with existing {path}")
