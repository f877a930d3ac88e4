from __future__ import annotations

import asyncio
import json

import httpx
import pytest

from frontend.admin_client import AdminClient, AdminClientError


def _transport(seen: list[httpx.Request], status_code: int = 200) -> httpx.MockTransport:
    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        if status_code != 200:
            return httpx.Response(status_code, json={"detail": "nope"})
        if request.url.path == "/status":
            return httpx.Response(200, json={"uptime": "0d 00h 00m 01s", "processing_enabled": True})
        if request.url.path == "/toggle":
            payload = json.loads(request.content)
            return httpx.Response(200, json={"toggle": payload["toggle"], "value": payload["new_value"]})
        if request.url.path == "/bot-status":
            return httpx.Response(200, json={"status_code": 0})
        if request.url.path == "/exit":
            return httpx.Response(200, json={"accepted": True})
        return httpx.Response(404)

    return httpx.MockTransport(handler)


def test_client_sends_token_and_payloads() -> None:
    seen: list[httpx.Request] = []

    async def scenario() -> None:
        client = AdminClient("http://admin", token="secret", transport=_transport(seen))
        status = await client.status()
        toggled = await client.toggle("reporting", False)
        code = await client.set_bot_status("watching", "packs")
        accepted = await client.exit()
        await client.aclose()

        assert status["processing_enabled"] is True
        assert toggled == {"toggle": "reporting", "value": False}
        assert code == 0
        assert accepted is True

    asyncio.run(scenario())

    assert [request.url.path for request in seen] == ["/status", "/toggle", "/bot-status", "/exit"]
    assert all(request.headers["X-Admin-Token"] == "secret" for request in seen)
    assert json.loads(seen[2].content) == {"type": "watching", "name": "packs"}


def test_http_errors_become_admin_client_errors() -> None:
    seen: list[httpx.Request] = []

    async def scenario() -> None:
        client = AdminClient("http://admin", transport=_transport(seen, status_code=401))
        try:
            with pytest.raises(AdminClientError, match="401"):
                await client.status()
        finally:
            await client.aclose()

    asyncio.run(scenario())
    assert "X-Admin-Token" not in seen[0].headers
