"""State container for the last status poll."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass
class ConsoleState:
    status: dict[str, Any] | None = None
    error: str | None = None
    exit_sent: bool = False
