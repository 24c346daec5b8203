"""CLI handlers for config commands."""

from __future__ import annotations

import tomllib

import click

from agentmonitor.config import DEFAULT_CONFIG_PATH, DEFAULT_CONFIG_TOML, init_config, load_config


@click.group("config")
def config_group():
    """Manage configuration."""
    pass


@config_group.command("init")
def config_init():
    """Create default configuration file."""
    path = init_config()
    click.echo(f"Configuration created at: {path}")


@config_group.command("show")
def config_show():
    """Show current configuration."""
    config = load_config()
    click.echo(f"Config file: {config.config_path}")
    click.echo(f"  Hub identity: {config.hub_identity}")
    click.echo(f"  Memento root: {config.resolved_memento_root}")
    click.echo(f"  Server: {config.server.host}:{config.server.port}")
    click.echo(f"  UI dir: {config.server.resolved_ui_dir}")
    chat = config.chat
    click.echo(
        f"  Chat: idle_timeout={chat.idle_timeout}s (sweep {chat.idle_sweep_interval}s), "
        f"sla_window={chat.sla_window}s (sweep {chat.sla_sweep_interval}s)"
    )
    click.echo(f"  agentd script: {config.resolved_agentd_script}")
    click.echo(f"  agentd socket: {config.dispatch.agentd_socket}")
    click.echo(f"  Kick script: {config.resolved_kick_script}")
    click.echo(f"  Dispatch timeout: {config.dispatch.timeout}s")


def _coerce(raw: str, current):
    """Parse ``raw`` to the type of the value it replaces."""
    if isinstance(current, bool):
        if raw.lower() not in ("true", "false"):
            raise click.BadParameter(f"expected true or false, got {raw!r}")
        return raw.lower() == "true"
    if isinstance(current, (int, float)):
        try:
            return type(current)(raw)
        except ValueError:
            raise click.BadParameter(f"expected a number, got {raw!r}") from None
    return raw


@config_group.command("set")
@click.argument("key")
@click.argument("value")
def config_set(key: str, value: str):
    """Set a configuration value.

    KEY is ``section.name``, e.g. chat.sla_window or dispatch.timeout.
    Values are parsed to the type of the default they replace.
    """
    import tomli_w

    path = DEFAULT_CONFIG_PATH
    if not path.exists():
        click.echo("No config file found. Run 'agentmonitor config init' first.", err=True)
        return

    defaults = tomllib.loads(DEFAULT_CONFIG_TOML)
    section, _, name = key.partition(".")
    if section not in defaults or name not in defaults[section]:
        raise click.BadParameter(f"unknown key {key!r}", param_hint="KEY")

    with open(path, "rb") as f:
        data = tomllib.load(f)
    data.setdefault(section, {})[name] = _coerce(value, defaults[section][name])

    with open(path, "wb") as f:
        tomli_w.dump(data, f)
    click.echo(f"Set {key} = {data[section][name]!r}")
