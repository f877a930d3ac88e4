"""Core domain models.

These dataclasses are shared across the core and adapters to avoid tight
coupling to any integration-specific types.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from core.categories import Category


@dataclass(frozen=True)
class HistoryItem:
    """One message read from a channel's history."""

    item_id: int
    channel_id: int
    author_id: Optional[int]
    date: datetime
    text: str
    attachments: tuple[str, ...] = ()


@dataclass(frozen=True)
class Page:
    """A batch of history, newest first."""

    items: list[HistoryItem]


@dataclass
class UserAggregate:
    """Per-category counts for one user over one classification run."""

    author_id: int
    author_name: str
    counts: dict[Category, int] = field(default_factory=lambda: {category: 0 for category in Category})

    def increment(self, category: Category) -> None:
        self.counts[category] = self.counts.get(category, 0) + 1

    @property
    def total(self) -> int:
        return sum(self.counts.values())
