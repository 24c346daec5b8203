"""CLI handler for the per-agent status table."""

from __future__ import annotations

import click
import httpx

from agentmonitor.commands._helpers import fail_unreachable, get_client, run


@click.command("status")
@click.option("--date", "-d", default=None, help="Single day to report (YYYY-MM-DD)")
def status_command(date: str | None):
    """Show what every agent is doing."""

    async def _status():
        client = get_client()
        try:
            report = await client.status(date)
        except httpx.HTTPError as e:
            fail_unreachable(e)
        finally:
            await client.close()
        agents = report.get("agents", [])
        click.echo(f"Status for {report.get('date', '')}")
        if not agents:
            click.echo("No agents configured.")
            return
        for a in agents:
            chat = "●" if a.get("chatActive") else "○"
            name = a.get("personDisplayName") or a.get("agent", "")
            click.echo(f"  {chat} {name:<20} {a.get('currentActivity', '')}")
            if a.get("lastCompletedActivity"):
                click.echo(f"      last completed: {a['lastCompletedActivity']}")
            if a.get("lastMessageAt") and a.get("lastMessageAt", "") > a.get("lastResponseAt", ""):
                click.echo(f"      awaiting reply since {a['lastMessageAt']}")

    run(_status())
