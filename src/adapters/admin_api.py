"""HTTP admin API.

Exposes live status and runtime toggles. All mutations go through
ControlState, which the classification sessions read concurrently.
"""

from __future__ import annotations

import logging
import secrets
from typing import Optional

from fastapi import Depends, FastAPI, Header, HTTPException

from adapters.admin_schemas import (
    ActivityKind,
    BotStatusReply,
    BotStatusRequest,
    ExitRequest,
    ExitResponse,
    StatusReply,
    ToggleRequest,
    ToggleResponse,
)
from core.control import ControlState
from core.ports import ClassificationCachePort, PresencePort

LOGGER = logging.getLogger(__name__)

STATUS_OK = 0
STATUS_FAILED = 1


def create_admin_app(
    control: ControlState,
    cache: ClassificationCachePort,
    presence: PresencePort,
    admin_token: Optional[str] = None,
) -> FastAPI:
    """Build the admin FastAPI app around the shared process state."""

    app = FastAPI(title="packscope admin", docs_url=None, redoc_url=None)

    if not admin_token:
        LOGGER.warning("ADMIN_TOKEN is not set. Admin endpoints are unprotected.")

    def require_admin(x_admin_token: Optional[str] = Header(default=None, alias="X-Admin-Token")) -> None:
        if not admin_token:
            return
        if not secrets.compare_digest(x_admin_token or "", admin_token):
            raise HTTPException(status_code=401, detail="Admin token required")

    @app.get("/health")
    async def health() -> dict:
        return {"status": "ok"}

    @app.get("/status", response_model=StatusReply, dependencies=[Depends(require_admin)])
    async def get_status() -> StatusReply:
        snapshot = control.snapshot(cache.available)
        return StatusReply(
            uptime=snapshot.uptime,
            commands_received=snapshot.commands_received,
            processing_enabled=snapshot.processing_enabled,
            processing_counter=snapshot.processing_counter,
            cache_available=snapshot.cache_available,
            caching_enabled=snapshot.caching_enabled,
            reporting_enabled=snapshot.reporting_enabled,
        )

    @app.post("/toggle", response_model=ToggleResponse, dependencies=[Depends(require_admin)])
    async def toggle_property(request: ToggleRequest) -> ToggleResponse:
        control.set_toggle(request.toggle, request.new_value)
        return ToggleResponse(toggle=request.toggle, value=control.is_enabled(request.toggle))

    @app.post("/bot-status", response_model=BotStatusReply, dependencies=[Depends(require_admin)])
    async def set_bot_status(request: BotStatusRequest) -> BotStatusReply:
        if request.type is not ActivityKind.CLEAR and not request.name.strip():
            raise HTTPException(status_code=422, detail="name is required unless type is clear")
        try:
            await presence.set_status(request.type.value, request.name.strip())
        except Exception:
            LOGGER.exception("Failed to set bot status")
            return BotStatusReply(status_code=STATUS_FAILED)
        return BotStatusReply(status_code=STATUS_OK)

    @app.post("/exit", response_model=ExitResponse, dependencies=[Depends(require_admin)])
    async def exit_process(request: Optional[ExitRequest] = None) -> ExitResponse:
        control.request_exit()
        return ExitResponse(accepted=True)

    return app
