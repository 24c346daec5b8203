"""Shared fixtures: a recording dispatch gateway, a fake clock and a temp memento root."""

from __future__ import annotations

import json

import pytest

from agentmonitor.config import AppConfig, GeneralConfig
from agentmonitor.services.session_tracker import ChatState


class FakeClock:
    def __init__(self, start: float = 1_700_000_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class RecordingGateway:
    """DispatchGateway double that records calls instead of spawning agentd."""

    def __init__(self, result: bool = True) -> None:
        self.result = result
        self.calls: list[tuple] = []

    def named(self, cmd: str) -> list[tuple]:
        return [c for c in self.calls if c[0] == cmd]

    async def chat_start(self, agent_id, channel, sender, message):
        self.calls.append(("chat_start", agent_id, channel, sender, message))
        return self.result

    async def chat_stop(self, agent_id, channel):
        self.calls.append(("chat_stop", agent_id, channel))
        return self.result

    async def chat_prewarm(self, agents):
        self.calls.append(("chat_prewarm", list(agents)))
        return self.result

    async def chat_mark(self, agent_id, channel, status, message_id):
        self.calls.append(("chat_mark", agent_id, channel, status, message_id))
        return self.result

    async def wake(self, agent_id, sender, message):
        self.calls.append(("wake", agent_id, sender, message))
        return self.result


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def gateway():
    return RecordingGateway()


@pytest.fixture
def state(clock):
    return ChatState(clock=clock)


@pytest.fixture
def memento_root(tmp_path):
    root = tmp_path / "memento"
    (root / "state").mkdir(parents=True)
    (root / "config.json").write_text(json.dumps({
        "agents": {
            "product-owner": {"personDisplayName": "Pat", "roleDisplayName": "Product Owner"},
            "alice": {"personDisplayName": "Alice", "roleDisplayName": "Backend"},
            "bob": {"personDisplayName": "Bob", "roleDisplayName": "Frontend"},
        }
    }))
    return root


@pytest.fixture
def app_config(memento_root):
    return AppConfig(general=GeneralConfig(memento_root=str(memento_root)))
