"""Ports (interfaces) used by the core pipeline.

Ports define the minimal contracts for the chat platform, image decoding and
cache adapters so that the core can be reused with different backends.
"""

from __future__ import annotations

from typing import Optional, Protocol

from core.categories import Category
from core.classifier import PixelBuffer
from core.models import Page


class HistorySourcePort(Protocol):
    """Paginated channel history. Raises ``RateLimitedError`` when throttled."""

    async def fetch_page(self, channel_id: int, before_id: Optional[int], limit: int) -> Page:
        ...


class AttachmentFetcherPort(Protocol):
    """Download an attachment by key. Raises ``TransportError`` on failure."""

    async def fetch(self, url: str) -> bytes:
        ...


class ImageDecoderPort(Protocol):
    """Decode raw bytes. Raises ``TransportError`` on failure."""

    def decode(self, data: bytes) -> PixelBuffer:
        ...


class ClassificationCachePort(Protocol):
    """Key -> Category store that degrades to always-absent when unavailable."""

    @property
    def available(self) -> bool:
        ...

    def lookup(self, key: str) -> Optional[Category]:
        ...

    def store(self, key: str, category: Category) -> bool:
        ...


class ReportSinkPort(Protocol):
    """Deliver a formatted report. Raises ``ReportDeliveryError`` on failure."""

    async def send(self, channel_id: int, text: str) -> None:
        ...


class ActivityIndicatorPort(Protocol):
    """Show a busy indicator in a channel until the coroutine is cancelled."""

    async def run(self, channel_id: int) -> None:
        ...


class PresencePort(Protocol):
    """Set or clear the account presence line."""

    async def set_status(self, kind: str, name: str) -> None:
        ...
