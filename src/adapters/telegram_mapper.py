"""Telegram-to-core message mapping adapter.

This keeps Telethon-specific details out of the core pipeline.
"""

from __future__ import annotations

from typing import Optional

from telethon.tl.custom import Message
from telethon.tl.types import MessageMediaDocument, MessageMediaPhoto

from core.commands import CommandRequest, parse_command
from core.models import HistoryItem

ATTACHMENT_SCHEME = "tg://message/"


def source_key_from_message(message: Message) -> str:
    """Normalize a source key using a single rule enforced across the app."""

    chat = getattr(message, "chat", None)
    username = getattr(chat, "username", None)

    if isinstance(username, str) and username:
        return f"@{username.lower()}"

    # Fallback: always stable and universal
    return f"chat_id:{message.chat_id}"


def attachment_key(chat_id: int, message_id: int) -> str:
    return f"{ATTACHMENT_SCHEME}{chat_id}/{message_id}"


def parse_attachment_key(key: str) -> tuple[int, int]:
    """Split an attachment key back into (chat_id, message_id)."""

    if not key.startswith(ATTACHMENT_SCHEME):
        raise ValueError(f"Not a Telegram attachment key: {key}")
    chat_part, _, message_part = key[len(ATTACHMENT_SCHEME):].partition("/")
    return int(chat_part), int(message_part)


def _has_image(message: Message) -> bool:
    # Link previews carry a photo too; only uploaded media counts.
    media = getattr(message, "media", None)
    if isinstance(media, MessageMediaPhoto):
        return media.photo is not None
    if isinstance(media, MessageMediaDocument):
        mime_type = getattr(media.document, "mime_type", None) or ""
        return mime_type.startswith("image/")
    return False


def build_history_item(message: Message) -> HistoryItem:
    """Build a core HistoryItem from a Telethon Message."""

    attachments: tuple[str, ...] = ()
    if _has_image(message):
        attachments = (attachment_key(message.chat_id, message.id),)
    return HistoryItem(
        item_id=message.id,
        channel_id=message.chat_id,
        author_id=message.sender_id,
        date=message.date,
        text=message.raw_text or "",
        attachments=attachments,
    )


def display_name(sender) -> str:
    if sender is None:
        return ""
    first = getattr(sender, "first_name", None)
    last = getattr(sender, "last_name", None)
    if first or last:
        return " ".join(part for part in [first, last] if part)
    title = getattr(sender, "title", None)
    if title:
        return str(title)
    username = getattr(sender, "username", None)
    return f"@{username}" if username else ""


def build_command_request(message: Message, prefix: str, sender=None) -> Optional[CommandRequest]:
    """Return a CommandRequest when the message is a known command."""

    command = parse_command(message.raw_text or "", prefix)
    if command is None or message.sender_id is None:
        return None
    return CommandRequest(
        command=command,
        channel_id=message.chat_id,
        author_id=message.sender_id,
        author_name=display_name(sender) or str(message.sender_id),
        message_id=message.id,
    )
