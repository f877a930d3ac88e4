"""Error hierarchy shared by the core and its adapters.

Adapters translate integration-specific failures (Telethon, Pillow, sqlite)
into these types at the boundary so the core never imports those libraries.
"""

from __future__ import annotations

from typing import Optional, Sequence


class PackScopeError(Exception):
    """Base class for every error raised by packscope."""


class RateLimitedError(PackScopeError):
    """The history source asked us to slow down."""

    def __init__(self, message: str = "rate limited", retry_after: Optional[float] = None) -> None:
        super().__init__(message)
        self.retry_after = retry_after


class HistoryFetchError(PackScopeError):
    """Pagination gave up; ``partial`` holds everything fetched before that."""

    def __init__(self, message: str, partial: Sequence = ()) -> None:
        super().__init__(message)
        self.partial = list(partial)


class HistorySourceError(PackScopeError):
    """The history source failed for a reason retrying will not fix."""


class TransportError(PackScopeError):
    """An attachment could not be downloaded or decoded."""


class InvalidImageError(PackScopeError):
    """The image cannot contain the sampled coordinate."""


class ProcessingDisabledError(PackScopeError):
    """Processing was switched off while a run was in progress."""


class ReportDeliveryError(PackScopeError):
    """The reporting sink failed to deliver a message."""
