"""Chat command parsing and execution.

Each command runs as an independent unit of work. Commands that read history
run inside a session so the channel shows a typing indicator and the admin API
can see how many are in flight.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from core.control import ControlState, Toggle
from core.errors import HistoryFetchError, ProcessingDisabledError, RateLimitedError, ReportDeliveryError
from core.fetcher import HistoryFetcher
from core.pipeline import ClassificationPipeline, select_candidates
from core.ports import ClassificationCachePort, ReportSinkPort
from core.reports import format_counts, format_failure, format_single, format_status
from core.sessions import SessionManager

LOGGER = logging.getLogger(__name__)


class Command(str, Enum):
    COUNT = "count"
    FIRST = "first"
    LAST = "last"
    STATUS = "status"


def parse_command(text: str, prefix: str) -> Optional[Command]:
    """Return the command named by ``<prefix><name>`` at the start of text."""

    if not text or not text.startswith(prefix):
        return None
    name = text[len(prefix):].split(maxsplit=1)
    if not name:
        return None
    try:
        return Command(name[0].lower())
    except ValueError:
        return None


@dataclass(frozen=True)
class CommandRequest:
    command: Command
    channel_id: int
    author_id: int
    author_name: str
    message_id: int


class CommandRunner:
    """Runs commands against the fetcher, pipeline and reporting sink."""

    def __init__(
        self,
        control: ControlState,
        sessions: SessionManager,
        fetcher: HistoryFetcher,
        pipeline: ClassificationPipeline,
        cache: ClassificationCachePort,
        reporter: ReportSinkPort,
    ) -> None:
        self._control = control
        self._sessions = sessions
        self._fetcher = fetcher
        self._pipeline = pipeline
        self._cache = cache
        self._reporter = reporter

    async def handle(self, request: CommandRequest) -> None:
        self._control.record_command()
        if self._control.exit_requested:
            LOGGER.info("Ignoring %s: shutting down", request.command.value)
            return
        if not self._control.is_enabled(Toggle.PROCESSING):
            LOGGER.info("Ignoring %s: processing disabled", request.command.value)
            return

        LOGGER.info(
            "Running %s for %s in %s",
            request.command.value,
            request.author_id,
            request.channel_id,
        )
        if request.command is Command.STATUS:
            await self._report(request.channel_id, format_status(self._control.snapshot(self._cache.available)))
            return

        try:
            async with self._sessions.session(request.channel_id):
                text = await self._run_history_command(request)
        except HistoryFetchError as exc:
            LOGGER.error("%s (%s item(s) fetched before failure)", exc, len(exc.partial))
            if isinstance(exc.__cause__, RateLimitedError):
                reason = "Rate limited while reading history, please try again later."
            else:
                reason = "Could not read the channel history."
            text = format_failure(request.author_id, request.author_name, reason)
        except ProcessingDisabledError as exc:
            LOGGER.info("%s", exc)
            return
        if text:
            await self._report(request.channel_id, text)

    async def _run_history_command(self, request: CommandRequest) -> Optional[str]:
        items = await self._fetcher.fetch_all(request.channel_id)
        candidates = select_candidates(items, request.author_id)
        LOGGER.info("%s candidate item(s) for %s", len(candidates), request.author_id)

        if request.command is Command.COUNT:
            aggregate = await self._pipeline.aggregate(candidates, request.author_id, request.author_name)
            return format_counts(aggregate)

        if not candidates:
            return format_failure(request.author_id, request.author_name, "No images found.")
        # History arrives newest first.
        item = candidates[-1] if request.command is Command.FIRST else candidates[0]
        category = await self._pipeline.classify_item(item)
        if category is None:
            return format_failure(request.author_id, request.author_name, "Could not read that image.")
        label = "First" if request.command is Command.FIRST else "Last"
        return format_single(request.author_id, request.author_name, label, category)

    async def _report(self, channel_id: int, text: str) -> None:
        if not self._control.is_enabled(Toggle.REPORTING):
            LOGGER.info("Reporting disabled, report for %s:\n%s", channel_id, text)
            return
        try:
            await self._reporter.send(channel_id, text)
        except ReportDeliveryError as exc:
            LOGGER.error("Failed to deliver report to %s: %s", channel_id, exc)
