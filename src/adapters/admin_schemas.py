"""Request/response models for the admin API."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field

from core.control import Toggle


class ActivityKind(str, Enum):
    PLAYING = "playing"
    COMPETING = "competing"
    LISTENING = "listening"
    WATCHING = "watching"
    CLEAR = "clear"


class StatusReply(BaseModel):
    uptime: str
    commands_received: int
    processing_enabled: bool
    processing_counter: int
    cache_available: bool
    caching_enabled: bool
    reporting_enabled: bool


class ToggleRequest(BaseModel):
    toggle: Toggle
    new_value: bool


class ToggleResponse(BaseModel):
    toggle: Toggle
    value: bool


class BotStatusRequest(BaseModel):
    type: ActivityKind
    name: str = Field(default="", max_length=128)


class BotStatusReply(BaseModel):
    status_code: int


class ExitRequest(BaseModel):
    pass


class ExitResponse(BaseModel):
    accepted: bool
