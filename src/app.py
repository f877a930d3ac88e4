"""Application entry point for packscope."""

from __future__ import annotations

import argparse
import asyncio
import logging
import os
from logging.handlers import RotatingFileHandler
from typing import Optional

import uvicorn
from art import tprint
from dotenv import load_dotenv
from telethon import events

import settings
from adapters.admin_api import create_admin_app
from adapters.pillow_decoder import PillowImageDecoder
from adapters.sqlite_cache import SQLiteClassificationCache
from adapters.telegram_activity import TelegramTypingIndicator
from adapters.telegram_history import TelegramHistorySource
from adapters.telegram_mapper import build_command_request, source_key_from_message
from adapters.telegram_media import TelegramAttachmentFetcher
from adapters.telegram_presence import TelegramPresence
from adapters.telegram_reporter import TelegramReportSink
from client import build_client
from core.commands import CommandRunner
from core.control import ControlState
from core.fetcher import HistoryFetcher
from core.pipeline import ClassificationPipeline
from core.sessions import ActivityRegistry, SessionManager
from get_session import authorize

NAME = "PACKSCOPE"
FONT = "tarty-1"


def _print_banner() -> None:
    tprint(NAME, FONT, space=1)


class _RedactingFormatter(logging.Formatter):
    def __init__(self, secrets: list[str], fmt: str, datefmt: Optional[str] = None) -> None:
        super().__init__(fmt=fmt, datefmt=datefmt)
        self._secrets = [secret for secret in secrets if secret]

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        for secret in self._secrets:
            message = message.replace(secret, "***")
        return message


def _collect_redaction_values(config: dict) -> list[str]:
    redact_cfg = config.get("redact", {}) if config else {}
    if not redact_cfg.get("enabled", False):
        return []
    values = []
    for name in redact_cfg.get("patterns", []):
        value = os.getenv(name)
        if value:
            values.append(value)
    return sorted(set(values), key=len, reverse=True)


def _configure_logging() -> None:
    config = settings.LOGGING or {}
    if not config.get("enabled", False):
        return

    load_dotenv()
    level_name = str(config.get("level", "INFO")).upper()
    level = getattr(logging, level_name, logging.INFO)

    fmt = "%(asctime)s %(levelname)s %(name)s: %(message)s"
    datefmt = "%Y-%m-%d %H:%M:%S"
    formatter = _RedactingFormatter(_collect_redaction_values(config), fmt=fmt, datefmt=datefmt)

    handlers: list[logging.Handler] = []

    if config.get("console", True):
        console_handler = logging.StreamHandler()
        console_handler.setLevel(level)
        console_handler.setFormatter(formatter)
        handlers.append(console_handler)

    file_cfg = config.get("file", {})
    if file_cfg.get("enabled", False):
        path = file_cfg.get("path", "logs/packscope.log")
        if not os.path.isabs(path):
            path = os.path.join(settings.PROJECT_ROOT, path)
        directory = os.path.dirname(path)
        if directory:
            os.makedirs(directory, exist_ok=True)

        file_handler = RotatingFileHandler(
            path,
            maxBytes=int(file_cfg.get("max_bytes", 5 * 1024 * 1024)),
            backupCount=int(file_cfg.get("backup_count", 5)),
            encoding="utf-8",
        )
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        handlers.append(file_handler)

    if not handlers:
        return

    logging.basicConfig(level=level, handlers=handlers)


def _channel_allowed(message) -> bool:
    if not settings.CHANNELS:
        return True
    return (
        source_key_from_message(message) in settings.CHANNELS
        or f"chat_id:{message.chat_id}" in settings.CHANNELS
    )


async def _serve(client, logger: logging.Logger) -> None:
    cache = SQLiteClassificationCache(settings.CACHE_DB_PATH)
    cache.init_db()
    logger.info("Classification cache holds %s entries", cache.count())

    control = ControlState(
        processing_enabled=settings.PROCESSING_ENABLED,
        caching_enabled=settings.CACHING_ENABLED,
        reporting_enabled=settings.REPORTING_ENABLED,
    )
    sessions = SessionManager(control, ActivityRegistry(TelegramTypingIndicator(client)))
    fetcher = HistoryFetcher(
        TelegramHistorySource(client),
        settings.FETCH.retry_policy(),
        page_size=settings.FETCH.page_size,
    )
    pipeline = ClassificationPipeline(
        cache=cache,
        attachments=TelegramAttachmentFetcher(client),
        decoder=PillowImageDecoder(),
        control=control,
        table=settings.CATEGORY_TABLE,
    )
    runner = CommandRunner(
        control=control,
        sessions=sessions,
        fetcher=fetcher,
        pipeline=pipeline,
        cache=cache,
        reporter=TelegramReportSink(client),
    )

    # Telethon runs each handler in its own task, so commands from different
    # users proceed concurrently.
    @client.on(events.NewMessage())
    async def handler(event) -> None:
        try:
            if not _channel_allowed(event.message):
                return
            sender = await event.get_sender()
            request = build_command_request(event.message, settings.COMMAND_PREFIX, sender)
            if request is None:
                return
            await runner.handle(request)
        except Exception:
            logger.exception("Error while handling command")

    server = None
    server_task = None
    if settings.ADMIN.enabled:
        admin_app = create_admin_app(
            control,
            cache,
            TelegramPresence(client),
            admin_token=os.getenv("ADMIN_TOKEN"),
        )
        server = uvicorn.Server(
            uvicorn.Config(admin_app, host=settings.ADMIN.host, port=settings.ADMIN.port, log_config=None)
        )
        server_task = asyncio.create_task(server.serve())
        logger.info("Admin API listening on %s:%s", settings.ADMIN.host, settings.ADMIN.port)

    logger.info("Client connected. Listening for commands...")
    exit_task = asyncio.create_task(control.wait_for_exit())
    disconnect_task = asyncio.ensure_future(client.run_until_disconnected())
    await asyncio.wait({exit_task, disconnect_task}, return_when=asyncio.FIRST_COMPLETED)

    # Exit policy: stop accepting commands, let running sessions finish within
    # the grace period, abandon whatever is left.
    if control.exit_requested:
        logger.info("Draining %s active session(s)", control.in_flight)
        if not await sessions.wait_idle(settings.SHUTDOWN_GRACE_SECONDS):
            logger.warning("Abandoning %s session(s) after grace period", control.in_flight)

    if server is not None:
        server.should_exit = True
        await server_task
    exit_task.cancel()
    await client.disconnect()
    if not disconnect_task.done():
        disconnect_task.cancel()
    logger.info("Stopped")


def _run() -> None:
    _print_banner()
    _configure_logging()
    logger = logging.getLogger(__name__)
    logger.info("Starting packscope")

    client = build_client()

    async def _main() -> None:
        await client.connect()
        await authorize(client)
        await _serve(client, logger)

    client.loop.run_until_complete(_main())


def _login() -> None:
    _print_banner()
    client = build_client()

    async def _run_login() -> None:
        await client.connect()
        await authorize(client)
        await client.disconnect()

    client.loop.run_until_complete(_run_login())


def _console() -> None:
    load_dotenv()
    from frontend.app import AdminConsoleApp

    AdminConsoleApp(base_url=settings.ADMIN_URL, token=os.getenv("ADMIN_TOKEN")).run()


def main(argv: Optional[list[str]] = None) -> None:
    parser = argparse.ArgumentParser(prog="packscope")
    subparsers = parser.add_subparsers(dest="command")

    subparsers.add_parser("run", help="Start the bot and the admin API")
    subparsers.add_parser("login", help="Authorize the Telegram session")
    subparsers.add_parser("console", help="Launch the admin console TUI")

    args = parser.parse_args(argv)
    if args.command == "login":
        _login()
        return
    if args.command == "console":
        _console()
        return
    _run()


if __name__ == "__main__":
    main()
