"""CLI helpers for connecting to a running monitor server."""

from __future__ import annotations

import asyncio

import click
import httpx

from agentmonitor.config import load_config


def run(coro):
    """Run an async function from sync context."""
    return asyncio.run(coro)


def get_base_url() -> str:
    """Return the server URL from config or default."""
    config = load_config()
    host = config.server.host
    if host in ("0.0.0.0", "::"):
        host = "127.0.0.1"
    return f"http://{host}:{config.server.port}"


def get_client():
    from agentmonitor.infra.client import MonitorClient

    return MonitorClient(get_base_url())


def fail_unreachable(e: Exception) -> None:
    """Turn transport errors into a readable CLI exit."""
    if isinstance(e, httpx.HTTPStatusError):
        raise click.ClickException(
            f"Server rejected request ({e.response.status_code}): {e.response.text.strip()}"
        ) from e
    raise SystemExit(
        f"Server not reachable at {get_base_url()}. Start with: agentmonitor server start"
    ) from e
