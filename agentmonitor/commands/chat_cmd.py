"""CLI handlers for chat commands."""

from __future__ import annotations

import click
import httpx

from agentmonitor.commands._helpers import fail_unreachable, get_client, run
from agentmonitor.config import load_config
from agentmonitor.services.channels import normalize_channel


@click.group("chat")
def chat_group():
    """Read and write hub chat channels."""
    pass


@chat_group.command("send")
@click.argument("channel")
@click.argument("message")
@click.option("--as", "sender", default="", help="Sender id (defaults to the hub identity)")
def chat_send(channel: str, message: str, sender: str):
    """Post a message to a channel."""

    async def _send():
        client = get_client()
        try:
            await client.chat_send(channel, sender or load_config().hub_identity, message)
        except httpx.HTTPError as e:
            fail_unreachable(e)
        finally:
            await client.close()
        click.echo(f"Sent to {channel}")

    run(_send())


@chat_group.command("history")
@click.argument("channel")
@click.option("--limit", "-n", type=int, default=25, help="Messages per page")
@click.option("--before", "-b", type=int, default=0, help="Skip this many newest messages")
def chat_history(channel: str, limit: int, before: int):
    """Show a page of channel history, oldest first."""

    async def _history():
        client = get_client()
        try:
            page = await client.chat_history(channel, limit=limit, before=before)
        except httpx.HTTPError as e:
            fail_unreachable(e)
        finally:
            await client.close()
        messages = page.get("messages", [])
        if not messages:
            click.echo("No messages.")
            return
        for msg in messages:
            click.echo(f"[{msg.get('ts', '')}] {msg.get('agent', '')}: {msg.get('message', '')}")
        shown = page.get("nextBefore", 0)
        total = page.get("total", 0)
        if shown < total:
            click.echo(f"-- {total - shown} older messages (use --before {shown})")

    run(_history())


@chat_group.command("clear")
@click.argument("channel")
@click.confirmation_option(prompt="Delete the whole channel history?")
def chat_clear(channel: str):
    """Delete every message in a channel."""

    async def _clear():
        client = get_client()
        try:
            deleted = await client.chat_clear(channel)
        except httpx.HTTPError as e:
            fail_unreachable(e)
        finally:
            await client.close()
        click.echo(f"Deleted {deleted} messages")

    run(_clear())


@chat_group.command("summary")
def chat_summary():
    """List hub conversations, most recent first."""

    async def _summary():
        client = get_client()
        try:
            channels = await client.chat_summary()
        except httpx.HTTPError as e:
            fail_unreachable(e)
        finally:
            await client.close()
        if not channels:
            click.echo("No conversations.")
            return
        for ch in channels:
            last = ch.get("lastMessage", "")
            if len(last) > 60:
                last = last[:57] + "..."
            click.echo(f"  {ch.get('channel', ''):<40} {ch.get('lastTs', ''):<26} {last}")

    run(_summary())


@chat_group.command("canonical")
@click.argument("channel")
def chat_canonical(channel: str):
    """Print the canonical spelling of a channel name."""
    click.echo(normalize_channel(channel, load_config().hub_identity))


@chat_group.command("nudge")
@click.argument("agent")
@click.option("--message", "-m", default="", help="Check-in text")
def chat_nudge(agent: str, message: str):
    """Open a check-in chat with an agent."""

    async def _nudge():
        client = get_client()
        try:
            await client.nudge(agent, message or None)
        except httpx.HTTPError as e:
            fail_unreachable(e)
        finally:
            await client.close()
        click.echo(f"Nudged {agent}")

    run(_nudge())
