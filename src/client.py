"""Telethon client factory.

The caller owns connect/disconnect; the same client serves command handling,
history reads, media downloads and profile updates.
"""

from __future__ import annotations

import logging
import os

from dotenv import load_dotenv
from telethon import TelegramClient

DEFAULT_SESSION_NAME = "packscope"


def build_client() -> TelegramClient:
    """Create a client from API_ID/API_HASH (``.env`` is honoured)."""

    load_dotenv()

    api_id = os.getenv("API_ID")
    api_hash = os.getenv("API_HASH")
    if not api_id or not api_hash:
        raise RuntimeError("Missing API_ID or API_HASH in environment")

    session_name = os.getenv("SESSION_NAME", DEFAULT_SESSION_NAME)
    logging.getLogger(__name__).info("Using Telegram session %s", session_name)
    return TelegramClient(session_name, int(api_id), api_hash)
