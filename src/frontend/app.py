"""Textual admin console for a running packscope process."""

from __future__ import annotations

from typing import Any, Optional

from rich.text import Text
from textual import on, work
from textual.app import App, ComposeResult
from textual.containers import Container, Horizontal, Vertical
from textual.widgets import Button, Footer, Static, Switch

from .admin_client import AdminClient, AdminClientError
from .constants import REFRESH_SECONDS, TELEGRAM_BLUE
from .modals import BotStatusScreen, ExitConfirmScreen
from .state import ConsoleState

TOGGLES = [
    ("processing", "Processing"),
    ("caching", "Caching"),
    ("reporting", "Reporting"),
]


def status_lines(status: dict[str, Any]) -> list[str]:
    return [
        f"uptime: {status.get('uptime', '?')}",
        f"commands received: {status.get('commands_received', 0)}",
        f"active sessions: {status.get('processing_counter', 0)}",
        f"cache: {'available' if status.get('cache_available') else 'unavailable'}",
    ]


class AdminConsoleApp(App):
    """Live status plus runtime toggles."""

    CSS = """
    Screen {
        background: #0f1a21;
        color: #e8eef5;
    }

    #header {
        height: 5;
        padding: 1 4;
        border-bottom: solid #2a3a46;
    }

    #title {
        text-style: bold;
    }

    .subtle {
        color: #c6d2dd;
    }

    #body {
        padding: 1 4;
    }

    .toggle-row {
        height: 3;
    }

    .toggle-label {
        width: 16;
        padding: 1 0;
    }

    #actions {
        height: 3;
        margin-top: 1;
    }

    .status-error {
        color: #ff6b6b;
    }

    .modal-dialog {
        width: 60;
        height: auto;
        padding: 1 2;
        border: solid #2a3a46;
        background: #15232d;
    }
    """

    BINDINGS = [
        ("r", "refresh", "Refresh"),
        ("q", "quit", "Quit"),
    ]

    def __init__(self, base_url: str, token: Optional[str] = None, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self.base_url = base_url
        self.client = AdminClient(base_url, token)
        self.console_state = ConsoleState()

    def compose(self) -> ComposeResult:
        with Container(id="header"):
            yield Static(self._title_text(), id="title")
            yield Static(f"api: {self.base_url}", classes="subtle")
        with Vertical(id="body"):
            yield Static("", id="status")
            for key, label in TOGGLES:
                with Horizontal(classes="toggle-row"):
                    yield Static(label, classes="toggle-label")
                    yield Switch(id=f"toggle-{key}")
            with Horizontal(id="actions"):
                yield Button("Bot status", id="bot-status-btn")
                yield Button("Stop bot", id="exit-btn", variant="error")
        yield Footer()

    def on_mount(self) -> None:
        self.action_refresh()
        self.set_interval(REFRESH_SECONDS, self.action_refresh)

    async def on_unmount(self) -> None:
        await self.client.aclose()

    def action_refresh(self) -> None:
        self._poll_status()

    @work(exclusive=True, group="poll")
    async def _poll_status(self) -> None:
        try:
            self.console_state.status = await self.client.status()
            self.console_state.error = None
        except AdminClientError as exc:
            self.console_state.error = str(exc)
        self._render_state()

    def _render_state(self) -> None:
        widget = self.query_one("#status", Static)
        widget.remove_class("status-error")
        if self.console_state.error:
            widget.update(f"error: {self.console_state.error}")
            widget.add_class("status-error")
            return
        status = self.console_state.status or {}
        widget.update("\n".join(status_lines(status)))
        for key, _ in TOGGLES:
            switch = self.query_one(f"#toggle-{key}", Switch)
            value = bool(status.get(f"{key}_enabled"))
            if switch.value != value:
                with switch.prevent(Switch.Changed):
                    switch.value = value

    @on(Switch.Changed)
    async def _on_toggle(self, event: Switch.Changed) -> None:
        if not event.switch.id:
            return
        key = event.switch.id.removeprefix("toggle-")
        try:
            await self.client.toggle(key, event.value)
        except AdminClientError as exc:
            self.notify(str(exc), severity="error")
        self.action_refresh()

    @on(Button.Pressed, "#bot-status-btn")
    def _on_bot_status(self) -> None:
        self.push_screen(BotStatusScreen(), self._apply_bot_status)

    @on(Button.Pressed, "#exit-btn")
    def _on_exit(self) -> None:
        self.push_screen(ExitConfirmScreen(), self._confirm_exit)

    async def _apply_bot_status(self, choice: tuple[str, str] | None) -> None:
        if choice is None:
            return
        kind, name = choice
        try:
            code = await self.client.set_bot_status(kind, name)
        except AdminClientError as exc:
            self.notify(str(exc), severity="error")
            return
        if code == 0:
            self.notify("Bot status updated")
        else:
            self.notify("Bot status update failed", severity="error")

    async def _confirm_exit(self, confirmed: bool | None) -> None:
        if not confirmed:
            return
        try:
            self.console_state.exit_sent = await self.client.exit()
        except AdminClientError as exc:
            self.notify(str(exc), severity="error")
            return
        self.notify("Exit requested")

    @staticmethod
    def _title_text() -> Text:
        return Text.assemble(
            ("PACK", TELEGRAM_BLUE),
            ("SCOPE > Admin Console", "bold"),
        )
