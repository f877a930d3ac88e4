"""Telegram history source adapter.

Implements the core HistorySourcePort on top of ``client.get_messages``.
"""

from __future__ import annotations

from typing import Optional

from telethon import errors

from adapters.telegram_mapper import build_history_item
from core.errors import HistorySourceError, RateLimitedError
from core.models import Page


class TelegramHistorySource:
    """Newest-first history pages.

    FloodWait surfaces as RateLimitedError; any other RPC failure, or a channel
    that cannot be resolved, surfaces as HistorySourceError.
    """

    def __init__(self, client) -> None:
        self._client = client

    async def fetch_page(self, channel_id: int, before_id: Optional[int], limit: int) -> Page:
        try:
            messages = await self._client.get_messages(channel_id, limit=limit, offset_id=before_id or 0)
        except errors.FloodWaitError as exc:
            raise RateLimitedError(f"FloodWait on {channel_id}", retry_after=exc.seconds) from exc
        except (errors.RPCError, ValueError) as exc:
            raise HistorySourceError(f"Cannot read history of {channel_id}: {exc}") from exc
        return Page(items=[build_history_item(message) for message in messages])
