"""Async client for the packscope admin API."""

from __future__ import annotations

from typing import Any, Optional

import httpx


class AdminClientError(RuntimeError):
    """The admin API could not be reached or rejected the request."""


class AdminClient:
    def __init__(
        self,
        base_url: str,
        token: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: float = 5.0,
    ) -> None:
        headers = {"X-Admin-Token": token} if token else {}
        self._client = httpx.AsyncClient(
            base_url=base_url,
            headers=headers,
            timeout=timeout,
            transport=transport,
        )

    async def _request(self, method: str, path: str, payload: Optional[dict] = None) -> dict[str, Any]:
        try:
            response = await self._client.request(method, path, json=payload)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise AdminClientError(f"{method} {path} -> {exc.response.status_code}") from exc
        except httpx.HTTPError as exc:
            raise AdminClientError(f"{method} {path} failed: {exc}") from exc
        return response.json()

    async def status(self) -> dict[str, Any]:
        return await self._request("GET", "/status")

    async def toggle(self, toggle: str, value: bool) -> dict[str, Any]:
        return await self._request("POST", "/toggle", {"toggle": toggle, "new_value": value})

    async def set_bot_status(self, kind: str, name: str = "") -> int:
        reply = await self._request("POST", "/bot-status", {"type": kind, "name": name})
        return int(reply["status_code"])

    async def exit(self) -> bool:
        reply = await self._request("POST", "/exit", {})
        return bool(reply["accepted"])

    async def aclose(self) -> None:
        await self._client.aclose()
