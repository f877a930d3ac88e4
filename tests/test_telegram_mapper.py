from __future__ import annotations

from datetime import datetime, timezone
from types import SimpleNamespace

import pytest
from telethon.tl.custom import Message
from telethon.tl.types import (
    MessageMediaDocument,
    MessageMediaPhoto,
    MessageMediaWebPage,
    PeerChannel,
    PeerUser,
    Photo,
    WebPage,
)

from adapters.telegram_mapper import (
    attachment_key,
    build_command_request,
    build_history_item,
    display_name,
    parse_attachment_key,
    source_key_from_message,
)
from adapters.telegram_presence import ABOUT_MAX_CHARS, format_presence
from core.commands import Command
from core.pipeline import select_candidates


def _message(**overrides):
    fields = dict(
        id=42,
        chat_id=-100123,
        sender_id=7,
        date=datetime(2024, 1, 1, tzinfo=timezone.utc),
        raw_text="",
        media=None,
        chat=SimpleNamespace(username=None),
    )
    fields.update(overrides)
    return SimpleNamespace(**fields)


def test_photo_becomes_attachment_key() -> None:
    item = build_history_item(_message(media=MessageMediaPhoto(photo=object()), raw_text="*rare"))
    assert item.attachments == ("tg://message/-100123/42",)
    assert item.text == "*rare"
    assert item.author_id == 7


def test_image_document_is_an_attachment_but_other_files_are_not() -> None:
    image = build_history_item(_message(media=MessageMediaDocument(document=SimpleNamespace(mime_type="image/png"))))
    video = build_history_item(_message(media=MessageMediaDocument(document=SimpleNamespace(mime_type="video/mp4"))))
    assert image.attachments
    assert video.attachments == ()


def test_link_preview_is_not_an_attachment() -> None:
    preview = WebPage(
        id=1,
        url="https://x.example",
        display_url="x.example",
        hash=0,
        photo=Photo(
            id=2,
            access_hash=3,
            file_reference=b"",
            date=datetime(2024, 1, 1, tzinfo=timezone.utc),
            sizes=[],
            dc_id=2,
        ),
    )
    message = Message(
        id=5,
        peer_id=PeerChannel(123),
        from_id=PeerUser(7),
        date=datetime(2024, 1, 1, tzinfo=timezone.utc),
        message="look https://x.example",
        media=MessageMediaWebPage(webpage=preview),
    )

    item = build_history_item(message)

    assert item.attachments == ()
    assert select_candidates([item], 7) == []


def test_expired_photo_is_not_an_attachment() -> None:
    assert build_history_item(_message(media=MessageMediaPhoto(photo=None))).attachments == ()


def test_attachment_key_roundtrip() -> None:
    assert parse_attachment_key(attachment_key(-100123, 42)) == (-100123, 42)
    with pytest.raises(ValueError):
        parse_attachment_key("https://example.com/a.png")


def test_source_key_prefers_username() -> None:
    assert source_key_from_message(_message(chat=SimpleNamespace(username="Packs"))) == "@packs"
    assert source_key_from_message(_message()) == "chat_id:-100123"


def test_command_request_uses_sender_name() -> None:
    sender = SimpleNamespace(first_name="Alice", last_name=None, username="alice")
    request = build_command_request(_message(raw_text="!count"), "!", sender)

    assert request is not None
    assert request.command is Command.COUNT
    assert request.channel_id == -100123
    assert request.author_name == "Alice"


def test_non_command_message_is_ignored() -> None:
    assert build_command_request(_message(raw_text="hello"), "!") is None
    assert build_command_request(_message(raw_text="!count", sender_id=None), "!") is None


def test_display_name_fallbacks() -> None:
    assert display_name(None) == ""
    assert display_name(SimpleNamespace(first_name=None, last_name=None, title="Pack Club")) == "Pack Club"
    assert display_name(SimpleNamespace(username="bob")) == "@bob"


def test_presence_formatting() -> None:
    assert format_presence("watching", "packs") == "Watching packs"
    assert format_presence("clear", "ignored") == ""
    assert len(format_presence("playing", "x" * 200)) == ABOUT_MAX_CHARS
