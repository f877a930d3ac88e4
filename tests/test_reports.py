from __future__ import annotations

from core.categories import Category
from core.control import ControlSnapshot
from core.models import UserAggregate
from core.reports import escape_md, format_counts, format_status, mention


def test_counts_list_every_category_and_total() -> None:
    aggregate = UserAggregate(author_id=7, author_name="alice")
    aggregate.increment(Category.RARE)
    aggregate.increment(Category.RARE)
    aggregate.increment(Category.UNKNOWN)

    text = format_counts(aggregate)

    assert text.splitlines()[0] == "[alice](tg://user?id=7)"
    assert "**Total:** 3" in text
    assert "Rare: 2" in text
    assert "Unknown: 1" in text
    assert "Legendary: 0" in text


def test_mention_strips_link_brackets() -> None:
    assert mention(7, "[bot]") == "[bot](tg://user?id=7)"
    assert mention(7, "") == "[7](tg://user?id=7)"


def test_mention_escapes_markdown_in_names() -> None:
    assert mention(7, "a_b*c`") == r"[a\_b\*c\`](tg://user?id=7)"


def test_escape_md() -> None:
    assert escape_md("a*b_c") == "a\\*b\\_c"


def test_status_lists_toggles() -> None:
    snapshot = ControlSnapshot(
        uptime="0d 00h 01m 00s",
        commands_received=3,
        processing_enabled=True,
        caching_enabled=False,
        reporting_enabled=True,
        processing_counter=2,
        cache_available=False,
    )
    text = format_status(snapshot)
    assert "Caching: off" in text
    assert "Active sessions: 2" in text
    assert "Cache available: no" in text
