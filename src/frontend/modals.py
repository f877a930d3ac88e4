"""Modal dialogs for the admin console."""

from __future__ import annotations

from textual.app import ComposeResult
from textual.containers import Container, Horizontal
from textual.screen import ModalScreen
from textual.widgets import Button, Input, Select, Static

ACTIVITY_KINDS = ["playing", "competing", "listening", "watching", "clear"]


class ExitConfirmScreen(ModalScreen[bool]):
    """Confirm stopping the bot process."""

    def compose(self) -> ComposeResult:
        yield Container(
            Static("Stop packscope?", classes="modal-title"),
            Static("Running sessions get the shutdown grace period.", classes="modal-body"),
            Horizontal(
                Button("Stop", id="exit-confirm", variant="error"),
                Button("Cancel", id="exit-cancel"),
                classes="modal-actions",
            ),
            classes="modal-dialog",
        )

    def on_button_pressed(self, event: Button.Pressed) -> None:
        self.dismiss(event.button.id == "exit-confirm")


class BotStatusScreen(ModalScreen[tuple[str, str] | None]):
    """Form for the presence kind and text."""

    def compose(self) -> ComposeResult:
        yield Container(
            Static("Set bot status", classes="modal-title"),
            Static("", id="status-error", classes="modal-error"),
            Static("type", classes="form-label"),
            Select([(kind, kind) for kind in ACTIVITY_KINDS], id="status-kind", allow_blank=False),
            Static("name", classes="form-label"),
            Input(placeholder="packs", id="status-name"),
            Horizontal(
                Button("Apply", id="status-apply", variant="success"),
                Button("Cancel", id="status-cancel"),
                classes="modal-actions",
            ),
            classes="modal-dialog",
        )

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id != "status-apply":
            self.dismiss(None)
            return
        kind = str(self.query_one("#status-kind", Select).value)
        name = self.query_one("#status-name", Input).value.strip()
        if kind != "clear" and not name:
            self.query_one("#status-error", Static).update("name is required")
            return
        self.dismiss((kind, name))
