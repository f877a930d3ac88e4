"""Typing indicator adapter."""

from __future__ import annotations

import asyncio


class TelegramTypingIndicator:
    """Keep "typing..." visible in a chat until the task is cancelled.

    Telethon's ``client.action`` re-sends the action periodically and sends a
    cancel action when the context exits.
    """

    def __init__(self, client) -> None:
        self._client = client

    async def run(self, channel_id: int) -> None:
        async with self._client.action(channel_id, "typing"):
            await asyncio.Event().wait()
