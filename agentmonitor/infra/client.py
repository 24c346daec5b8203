"""HTTP client for a running monitor server."""

from __future__ import annotations

import logging
from typing import Any
from urllib.parse import quote

import httpx

logger = logging.getLogger(__name__)


class MonitorClient:
    """Thin async wrapper over the monitor's JSON API.

    Raises ``httpx.HTTPStatusError`` on non-2xx responses and
    ``httpx.ConnectError`` when no server is listening.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._client = httpx.AsyncClient(
            base_url=base_url.rstrip("/"), timeout=timeout, transport=transport
        )

    async def close(self) -> None:
        await self._client.aclose()

    async def _get(self, path: str, **params: Any) -> Any:
        query = {k: v for k, v in params.items() if v is not None}
        response = await self._client.get(path, params=query)
        response.raise_for_status()
        return response.json()

    async def _send(self, method: str, path: str, payload: dict | None = None) -> Any:
        response = await self._client.request(method, path, json=payload)
        response.raise_for_status()
        return response.json()

    async def status(self, date: str | None = None) -> dict:
        return await self._get("/api/status", date=date)

    async def system_status(self) -> dict:
        return await self._get("/api/system/status")

    async def chat_summary(self) -> list[dict]:
        result = await self._get("/api/chat/summary")
        return result.get("channels", [])

    async def chat_history(self, channel: str, limit: int | None = None, before: int | None = None) -> dict:
        return await self._get(f"/api/chat/{quote(channel, safe='')}", limit=limit, before=before)

    async def chat_send(self, channel: str, agent: str, message: str) -> dict:
        return await self._send(
            "POST", f"/api/chat/{quote(channel, safe='')}", {"agent": agent, "message": message}
        )

    async def chat_clear(self, channel: str) -> int:
        result = await self._send("DELETE", f"/api/chat/{quote(channel, safe='')}")
        return result.get("deleted", 0)

    async def nudge(self, agent: str, message: str | None = None) -> dict:
        payload = {"agent": agent}
        if message:
            payload["message"] = message
        return await self._send("POST", "/api/agents/nudge", payload)
