"""Telegram reporting sink adapter.

Sends formatted Markdown reports back into the channel a command came from.
"""

from __future__ import annotations

from telethon import errors

from core.errors import ReportDeliveryError


class TelegramReportSink:
    """ReportSinkPort implementation using ``client.send_message``."""

    def __init__(self, client) -> None:
        self._client = client

    async def send(self, channel_id: int, text: str) -> None:
        try:
            await self._client.send_message(channel_id, text, parse_mode="md", link_preview=False)
        except (errors.RPCError, ValueError) as exc:
            raise ReportDeliveryError(f"send_message to {channel_id} failed: {exc}") from exc
