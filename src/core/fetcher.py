"""Paginated history retrieval with rate-limit-aware retry."""

from __future__ import annotations

import logging
from typing import Optional

from core.errors import HistoryFetchError, HistorySourceError, RateLimitedError
from core.models import HistoryItem
from core.ports import HistorySourcePort
from core.retry import RetryPolicy

LOGGER = logging.getLogger(__name__)

MAX_PAGE_SIZE = 100


class HistoryFetcher:
    """Walk a channel's history page by page, newest first."""

    def __init__(self, source: HistorySourcePort, policy: RetryPolicy, page_size: int = MAX_PAGE_SIZE) -> None:
        if not 0 < page_size <= MAX_PAGE_SIZE:
            raise ValueError(f"page_size must be between 1 and {MAX_PAGE_SIZE}")
        self._source = source
        self._policy = policy
        self._page_size = page_size

    async def fetch_all(self, channel_id: int, limit: Optional[int] = None) -> list[HistoryItem]:
        """Return every reachable item, deduplicated by id.

        When the retry budget runs out, or the source fails outright, the call
        fails with ``HistoryFetchError`` carrying the items collected so far in
        ``partial``.
        """

        items: list[HistoryItem] = []
        seen: set[int] = set()
        before_id: Optional[int] = None
        pages = 0

        while limit is None or len(items) < limit:
            request_size = self._page_size if limit is None else min(self._page_size, limit - len(items))
            try:
                page = await self._policy.run(self._source.fetch_page, channel_id, before_id, request_size)
            except (RateLimitedError, HistorySourceError) as exc:
                raise HistoryFetchError(
                    f"Gave up on channel {channel_id} after {pages} page(s)",
                    partial=items,
                ) from exc
            pages += 1

            for item in page.items:
                if item.item_id in seen:
                    continue
                seen.add(item.item_id)
                items.append(item)

            if not page.items or len(page.items) < request_size:
                break
            before_id = min(item.item_id for item in page.items)

        LOGGER.debug("Fetched %s item(s) from %s in %s page(s)", len(items), channel_id, pages)
        return items
