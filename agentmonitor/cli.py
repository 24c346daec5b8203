"""Click CLI definitions - main entry point."""

from __future__ import annotations

import logging
import sys

import click

from agentmonitor.commands.chat_cmd import chat_group
from agentmonitor.commands.config_cmd import config_group
from agentmonitor.commands.server_cmd import server_group
from agentmonitor.commands.status_cmd import status_command


@click.group()
@click.option("--debug", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx, debug: bool) -> None:
    """agentmonitor - chat and activity hub for agent teams."""
    level = logging.DEBUG if debug else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        stream=sys.stderr,
    )
    logging.getLogger("httpx").setLevel(logging.WARNING)
    ctx.ensure_object(dict)
    ctx.obj["debug"] = debug


cli.add_command(server_group, "server")
cli.add_command(config_group, "config")
cli.add_command(chat_group, "chat")
cli.add_command(status_command, "status")


if __name__ == "__main__":
    cli()
