"""Configuration loading: TOML file + environment variable overlay."""

from __future__ import annotations

import os
import tomllib
from dataclasses import dataclass, field
from pathlib import Path

DEFAULT_CONFIG_DIR = Path.home() / ".config" / "agentmonitor"
DEFAULT_CONFIG_PATH = DEFAULT_CONFIG_DIR / "config.toml"
ROOT_LINK_FILE = ".memento-root"

DEFAULT_CHECKIN_MESSAGE = "Quick check-in: please respond when you can."

DEFAULT_CONFIG_TOML = """\
[general]
hub_identity = "product-owner"
# memento_root defaults to the path named in ./.memento-root
memento_root = ""

[server]
host = "127.0.0.1"
port = 4317
# ui_dir defaults to the bundled landing page
ui_dir = ""

[chat]
idle_timeout = 300
sla_window = 120
idle_sweep_interval = 60
sla_sweep_interval = 30
checkin_message = "Quick check-in: please respond when you can."

[dispatch]
agentd_script = ""
agentd_socket = "/tmp/memento-agentd.sock"
kick_script = ""
python = "python3"
timeout = 8.0
"""


def read_root_link(base_dir: Path) -> Path | None:
    """Resolve the memento root named in a `.memento-root` link file."""
    link = base_dir / ROOT_LINK_FILE
    if not link.exists():
        return None
    raw = link.read_text(encoding="utf-8").strip()
    if not raw:
        return None
    target = Path(raw).expanduser()
    return target if target.is_absolute() else (base_dir / target).resolve()


@dataclass
class GeneralConfig:
    hub_identity: str = "product-owner"
    memento_root: str = ""


@dataclass
class ServerConfig:
    host: str = "127.0.0.1"
    port: int = 4317
    ui_dir: str = ""

    @property
    def resolved_ui_dir(self) -> Path:
        if self.ui_dir:
            return Path(self.ui_dir).expanduser()
        return Path(__file__).parent / "web" / "ui"


@dataclass
class ChatConfig:
    idle_timeout: int = 300
    sla_window: int = 120
    idle_sweep_interval: int = 60
    sla_sweep_interval: int = 30
    checkin_message: str = DEFAULT_CHECKIN_MESSAGE


@dataclass
class DispatchConfig:
    agentd_script: str = ""
    agentd_socket: str = "/tmp/memento-agentd.sock"
    kick_script: str = ""
    python: str = "python3"
    timeout: float = 8.0


@dataclass
class AppConfig:
    general: GeneralConfig = field(default_factory=GeneralConfig)
    server: ServerConfig = field(default_factory=ServerConfig)
    chat: ChatConfig = field(default_factory=ChatConfig)
    dispatch: DispatchConfig = field(default_factory=DispatchConfig)
    config_path: Path = DEFAULT_CONFIG_PATH

    @property
    def hub_identity(self) -> str:
        return self.general.hub_identity

    @property
    def resolved_memento_root(self) -> Path:
        if self.general.memento_root:
            return Path(self.general.memento_root).expanduser()
        return read_root_link(Path.cwd()) or Path.cwd()

    @property
    def state_dir(self) -> Path:
        return self.resolved_memento_root / "state"

    @property
    def resolved_agentd_script(self) -> Path:
        if self.dispatch.agentd_script:
            return Path(self.dispatch.agentd_script).expanduser()
        return self.resolved_memento_root / "scripts" / "agentd.py"

    @property
    def resolved_kick_script(self) -> Path:
        if self.dispatch.kick_script:
            return Path(self.dispatch.kick_script).expanduser()
        return self.resolved_memento_root / "scripts" / "baton_kick.sh"


def _env_overlay(config: AppConfig) -> None:
    """Override config values with environment variables where applicable."""
    if root := os.environ.get("MEMENTO_ROOT"):
        config.general.memento_root = root
    if script := os.environ.get("MEMENTO_AGENTD_SCRIPT"):
        config.dispatch.agentd_script = script
    if socket := os.environ.get("MEMENTO_AGENTD_SOCKET"):
        config.dispatch.agentd_socket = socket
    if kick := os.environ.get("MEMENTO_KICK_SCRIPT"):
        config.dispatch.kick_script = kick
    if port := os.environ.get("PORT"):
        try:
            config.server.port = int(port)
        except ValueError:
            pass


def load_config(config_path: Path | None = None) -> AppConfig:
    """Load configuration from TOML file with env var overlay."""
    path = config_path or DEFAULT_CONFIG_PATH

    if path.exists():
        with open(path, "rb") as f:
            raw = tomllib.load(f)
    else:
        raw = tomllib.loads(DEFAULT_CONFIG_TOML)

    general_raw = raw.get("general", {})
    server_raw = raw.get("server", {})
    chat_raw = raw.get("chat", {})
    dispatch_raw = raw.get("dispatch", {})

    config = AppConfig(
        general=GeneralConfig(
            hub_identity=general_raw.get("hub_identity", "product-owner"),
            memento_root=general_raw.get("memento_root", ""),
        ),
        server=ServerConfig(
            host=server_raw.get("host", "127.0.0.1"),
            port=server_raw.get("port", 4317),
            ui_dir=server_raw.get("ui_dir", ""),
        ),
        chat=ChatConfig(
            idle_timeout=chat_raw.get("idle_timeout", 300),
            sla_window=chat_raw.get("sla_window", 120),
            idle_sweep_interval=chat_raw.get("idle_sweep_interval", 60),
            sla_sweep_interval=chat_raw.get("sla_sweep_interval", 30),
            checkin_message=chat_raw.get("checkin_message", DEFAULT_CHECKIN_MESSAGE),
        ),
        dispatch=DispatchConfig(
            agentd_script=dispatch_raw.get("agentd_script", ""),
            agentd_socket=dispatch_raw.get("agentd_socket", "/tmp/memento-agentd.sock"),
            kick_script=dispatch_raw.get("kick_script", ""),
            python=dispatch_raw.get("python", "python3"),
            timeout=float(dispatch_raw.get("timeout", 8.0)),
        ),
        config_path=path,
    )

    _env_overlay(config)
    return config


def init_config(config_path: Path | None = None) -> Path:
    """Create default config file."""
    path = config_path or DEFAULT_CONFIG_PATH
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(DEFAULT_CONFIG_TOML)
    return path
