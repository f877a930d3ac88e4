"""Report formatting helpers.

Keeping formatting here prevents drift between commands and keeps messages
consistent regardless of the sink delivering them. Bodies use Telegram
Markdown (``parse_mode="md"``).
"""

from __future__ import annotations

from core.categories import Category
from core.control import ControlSnapshot
from core.models import UserAggregate

DIVIDER = "──────────────"


def escape_md(value: str) -> str:
    for ch in r"*_[`":
        value = value.replace(ch, f"\\{ch}")
    return value


def mention(author_id: int, author_name: str) -> str:
    """Inline user mention that works without a public username."""

    label = escape_md(author_name.replace("]", "").replace("[", "")) or str(author_id)
    return f"[{label}](tg://user?id={author_id})"


def format_counts(aggregate: UserAggregate) -> str:
    lines = [
        mention(aggregate.author_id, aggregate.author_name),
        f"**Total:** {aggregate.total}",
        DIVIDER,
    ]
    for category in Category:
        lines.append(f"{category.value.capitalize()}: {aggregate.counts.get(category, 0)}")
    return "\n".join(lines)


def format_single(author_id: int, author_name: str, label: str, category: Category) -> str:
    return f"{mention(author_id, author_name)}\n**{escape_md(label)}:** {category.value.capitalize()}"


def format_status(snapshot: ControlSnapshot) -> str:
    def on_off(value: bool) -> str:
        return "on" if value else "off"

    lines = [
        "**Status**",
        DIVIDER,
        f"Uptime: {snapshot.uptime}",
        f"Commands received: {snapshot.commands_received}",
        f"Processing: {on_off(snapshot.processing_enabled)}",
        f"Caching: {on_off(snapshot.caching_enabled)}",
        f"Reporting: {on_off(snapshot.reporting_enabled)}",
        f"Active sessions: {snapshot.processing_counter}",
        f"Cache available: {'yes' if snapshot.cache_available else 'no'}",
    ]
    return "\n".join(lines)


def format_failure(author_id: int, author_name: str, reason: str) -> str:
    return f"{mention(author_id, author_name)}\n{escape_md(reason)}"
