"""
Error hierarchy for the HubSpot client.

Every error raised by the library derives from HubspotError so callers can
catch the whole family at once. Nothing in the library retries or swallows
these errors; they propagate synchronously to the caller.
"""

from typing import Any


class HubspotError(Exception):
    """Base class for all library errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging."""
        return {
            "type": type(self).__name__,
            "message": self.message,
            "details": self.details,
        }


class ConfigurationError(HubspotError):
    """A required configuration value is missing or invalid."""


class InvalidParams(HubspotError):
    """The caller passed a malformed or ambiguous request."""


class PathTemplateError(HubspotError):
    """A path template still contains placeholders after substitution."""


class DecodeError(HubspotError):
    """A response or property bag did not have the expected shape."""


class TransportError(HubspotError):
    """
    HTTP or network failure.

    Attributes:
        status_code: HTTP status, None for network level failures
        body_snippet: First characters of the response body, if any
        code: Short machine readable code (HTTP_404, NETWORK_ERROR, ...)
    """

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        body_snippet: str | None = None,
        code: str | None = None,
    ):
        super().__init__(
            message,
            details={"status_code": status_code, "body_snippet": body_snippet},
        )
        self.status_code = status_code
        self.body_snippet = body_snippet
        self.code = code or (f"HTTP_{status_code}" if status_code else "TRANSPORT_ERROR")


class PaginationError(HubspotError):
    """A paged collection was used outside its iteration contract."""


class PageLimitExceeded(PaginationError):
    """The server still reported more pages after max_pages were fetched."""

    def __init__(self, max_pages: int, next_offset: Any):
        super().__init__(
            f"Stopped after {max_pages} pages while the server still reports more",
            details={"max_pages": max_pages, "next_offset": next_offset},
        )
        self.max_pages = max_pages
        self.next_offset = next_offset
