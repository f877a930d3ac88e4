"""Account presence adapter used by the admin SetBotStatus call.

Telegram user accounts have no activity line, so the presence is written into
the profile bio instead, e.g. "Watching packs".
"""

from __future__ import annotations

import logging

from telethon.tl.functions.account import UpdateProfileRequest

LOGGER = logging.getLogger(__name__)

ABOUT_MAX_CHARS = 70
CLEAR = "clear"


def format_presence(kind: str, name: str) -> str:
    if kind == CLEAR:
        return ""
    text = f"{kind.capitalize()} {name}".strip()
    return text[:ABOUT_MAX_CHARS]


class TelegramPresence:
    """PresencePort implementation backed by the account bio."""

    def __init__(self, client) -> None:
        self._client = client

    async def set_status(self, kind: str, name: str) -> None:
        about = format_presence(kind, name)
        await self._client(UpdateProfileRequest(about=about))
        LOGGER.info("Presence set to %r", about)
