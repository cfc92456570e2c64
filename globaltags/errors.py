"""Exceptions raised by the GlobalTags client."""

from __future__ import annotations


class GlobalTagsError(Exception):
    """Base class for all client errors."""


class ApiError(GlobalTagsError):
    """The API answered with a non-2xx status."""

    def __init__(self, status_code: int, error: str | None = None) -> None:
        self.status_code = status_code
        self.error = error
        super().__init__(f"HTTP {status_code}: {error or 'request failed'}")


class SelfKeyMissingError(GlobalTagsError):
    """A self operation was called but no client UUID is configured."""

    def __init__(self) -> None:
        super().__init__("No client UUID configured")
