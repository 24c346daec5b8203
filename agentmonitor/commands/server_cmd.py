"""CLI handlers for server commands: start, status."""

from __future__ import annotations

import click
import httpx

from agentmonitor.commands._helpers import fail_unreachable, get_client, run


@click.group("server")
def server_group():
    """Manage the monitor server."""
    pass


@server_group.command("start")
@click.option("--host", default=None, help="Interface to bind (overrides config)")
@click.option("--port", type=int, default=None, help="Port to listen on (overrides config)")
def server_start(host: str | None, port: int | None):
    """Run the monitor server in the foreground."""

    async def _start():
        import uvicorn

        from agentmonitor.context import AppContext
        from agentmonitor.web.app import create_app

        ctx = AppContext()
        bind_host = host or ctx.config.server.host
        bind_port = port or ctx.config.server.port
        app = create_app(ctx)

        server = uvicorn.Server(
            uvicorn.Config(app, host=bind_host, port=bind_port, log_level="warning")
        )

        click.echo(f"Memento root: {ctx.config.resolved_memento_root}")
        click.echo(f"Listening on http://{bind_host}:{bind_port}")
        await server.serve()
        click.echo("Server stopped")

    run(_start())


@server_group.command("status")
def server_status():
    """Check whether the monitor and its collaborators are running."""

    async def _status():
        client = get_client()
        try:
            result = await client.system_status()
        except httpx.HTTPError as e:
            fail_unreachable(e)
        finally:
            await client.close()
        click.echo("Monitor: running")
        agentd = result.get("agentd", {})
        supervisor = result.get("supervisor", {})
        click.echo(f"  agentd: {'running' if agentd.get('running') else 'stopped'} ({agentd.get('socket', '')})")
        click.echo(
            f"  supervisor: {'running' if supervisor.get('running') else 'stopped'} "
            f"({supervisor.get('lockDir', '')})"
        )

    run(_status())
