"""agentmonitor - chat and activity status hub for multi-agent teams."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("agentmonitor")
except PackageNotFoundError:  # pragma: no cover - source checkout
    __version__ = "0.1.0"
