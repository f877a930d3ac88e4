"""Telegram attachment download adapter."""

from __future__ import annotations

from telethon import errors

from adapters.telegram_mapper import parse_attachment_key
from core.errors import TransportError


class TelegramAttachmentFetcher:
    """Resolve an attachment key to its message and download the media bytes."""

    def __init__(self, client) -> None:
        self._client = client

    async def fetch(self, url: str) -> bytes:
        try:
            chat_id, message_id = parse_attachment_key(url)
        except ValueError as exc:
            raise TransportError(str(exc)) from exc
        try:
            message = await self._client.get_messages(chat_id, ids=message_id)
            if message is None:
                raise TransportError(f"Message for {url} no longer exists")
            data = await self._client.download_media(message, file=bytes)
        except (errors.RPCError, OSError) as exc:
            raise TransportError(f"Download failed for {url}: {exc}") from exc
        if not data:
            raise TransportError(f"No media in {url}")
        return data
