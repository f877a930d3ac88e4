"""Classification pipeline.

For every candidate item the pipeline enforces a strict order:
1) Override marker (``*<category>``) wins outright
2) Cache lookup, when caching is enabled
3) Download, decode and classify on a miss
4) Cache write, when caching is enabled
"""

from __future__ import annotations

import asyncio
import logging
from typing import Callable, Iterable, Mapping, Optional

from core.categories import DEFAULT_CATEGORY_TABLE, Category, ColorRange
from core.classifier import PixelBuffer, can_sample, classify
from core.control import ControlState, Toggle
from core.errors import ProcessingDisabledError, TransportError
from core.models import HistoryItem, UserAggregate
from core.ports import AttachmentFetcherPort, ClassificationCachePort, ImageDecoderPort

LOGGER = logging.getLogger(__name__)

OVERRIDE_PREFIX = "*"
IGNORE_MARKER = "*ignored"


def is_ignored(text: str) -> bool:
    return text.startswith(IGNORE_MARKER)


def override_category(text: str) -> Optional[Category]:
    """Return the category forced by a leading ``*<name>``, if any."""

    if not text.startswith(OVERRIDE_PREFIX):
        return None
    return Category.parse(text[len(OVERRIDE_PREFIX):])


def select_candidates(items: Iterable[HistoryItem], author_id: int) -> list[HistoryItem]:
    return [
        item
        for item in items
        if item.attachments and item.author_id == author_id and not is_ignored(item.text)
    ]


class ClassificationPipeline:
    """Cache-aware classification of history items."""

    def __init__(
        self,
        cache: ClassificationCachePort,
        attachments: AttachmentFetcherPort,
        decoder: ImageDecoderPort,
        control: ControlState,
        table: Mapping[Category, ColorRange] = DEFAULT_CATEGORY_TABLE,
        classifier: Callable[[PixelBuffer, Mapping[Category, ColorRange]], Category] = classify,
    ) -> None:
        self._cache = cache
        self._attachments = attachments
        self._decoder = decoder
        self._control = control
        self._table = table
        self._classifier = classifier

    async def classify_item(self, item: HistoryItem) -> Optional[Category]:
        """Return the item's category, or None when it had to be skipped."""

        forced = override_category(item.text)
        if forced is not None:
            return forced

        url = item.attachments[0]
        caching = self._control.is_enabled(Toggle.CACHING)
        if caching:
            cached = self._cache.lookup(url)
            if cached is not None:
                return cached

        try:
            data = await self._attachments.fetch(url)
            # Decoding is CPU bound; keep the event loop responsive.
            image = await asyncio.to_thread(self._decoder.decode, data)
        except TransportError as exc:
            LOGGER.error("Skipping %s: %s", url, exc)
            return None

        if not can_sample(image):
            LOGGER.warning("Skipping %s: image %sx%s is too small", url, image.width, image.height)
            return None

        category = self._classifier(image, self._table)
        if category is Category.UNKNOWN:
            LOGGER.info("Unknown category in %s", url)
        if caching:
            self._cache.store(url, category)
        return category

    async def aggregate(self, items: Iterable[HistoryItem], author_id: int, author_name: str) -> UserAggregate:
        """Classify every item and count the results for one user."""

        aggregate = UserAggregate(author_id=author_id, author_name=author_name)
        for item in items:
            if not self._control.is_enabled(Toggle.PROCESSING):
                raise ProcessingDisabledError(
                    f"Processing disabled after {aggregate.total} item(s) for {author_name}"
                )
            category = await self.classify_item(item)
            if category is not None:
                aggregate.increment(category)
        return aggregate
