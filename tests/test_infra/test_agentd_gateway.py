"""Tests for the agentd-backed dispatch gateway."""

from __future__ import annotations

import asyncio
import sys
import tempfile

import pytest

from agentmonitor.infra.dispatch.agentd import AgentdGateway, build_wake_prompt
from agentmonitor.infra.dispatch.base import DispatchGateway
from agentmonitor.infra.store.jsonl import AuditLog, iter_records

RECORDING_AGENTD = """\
import json, os, sys
with open(os.path.join(os.environ["MEMENTO_ROOT"], "calls.jsonl"), "a") as f:
    f.write(json.dumps({"argv": sys.argv[1:], "payload": json.loads(sys.argv[2])}) + "\\n")
print("ok")
"""


@pytest.fixture
def audit(tmp_path):
    return AuditLog(tmp_path / "agentd.log.jsonl")


def _gateway(tmp_path, audit, script_body=None, **kwargs):
    script = tmp_path / "agentd.py"
    if script_body is not None:
        script.write_text(script_body)
    return AgentdGateway(
        agentd_script=script,
        memento_root=tmp_path,
        audit=audit,
        python=sys.executable,
        **kwargs,
    )


class TestAgentdGateway:
    def test_satisfies_protocol(self, tmp_path, audit):
        assert isinstance(_gateway(tmp_path, audit), DispatchGateway)

    @pytest.mark.asyncio
    async def test_missing_script_is_noop(self, tmp_path, audit):
        gateway = _gateway(tmp_path, audit)
        assert await gateway.chat_stop("alice", "product-owner__alice") is False
        assert not audit.path.exists()

    @pytest.mark.asyncio
    async def test_chat_start_invokes_once(self, tmp_path, audit):
        gateway = _gateway(tmp_path, audit, RECORDING_AGENTD)
        ok = await gateway.chat_start("alice", "product-owner__alice", "product-owner", "hi")
        assert ok is True
        call = list(iter_records(tmp_path / "calls.jsonl"))[0]
        assert call["argv"][0] == "once"
        assert call["payload"] == {
            "cmd": "chat_start",
            "agent": "alice",
            "channel": "product-owner__alice",
            "sender": "product-owner",
            "message": "hi",
        }
        entry = list(iter_records(audit.path))[0]
        assert entry["ok"] is True
        assert entry["cmd"] == "chat_start"
        assert entry["stdout"].strip() == "ok"

    @pytest.mark.asyncio
    async def test_no_dispatch_to_sender(self, tmp_path, audit):
        gateway = _gateway(tmp_path, audit, RECORDING_AGENTD)
        assert await gateway.chat_start("alice", "alice", "alice", "talking to myself") is False
        assert not (tmp_path / "calls.jsonl").exists()

    @pytest.mark.asyncio
    async def test_nonzero_exit_is_failure(self, tmp_path, audit):
        gateway = _gateway(tmp_path, audit, "import sys\nsys.stderr.write('nope')\nsys.exit(3)\n")
        assert await gateway.chat_stop("alice", "c") is False
        entry = list(iter_records(audit.path))[0]
        assert entry["status"] == 3
        assert entry["stderr"] == "nope"

    @pytest.mark.asyncio
    async def test_timeout_kills(self, tmp_path, audit):
        gateway = _gateway(tmp_path, audit, "import time\ntime.sleep(30)\n", timeout=0.5)
        assert await gateway.chat_prewarm(["alice"]) is False
        entry = list(iter_records(audit.path))[0]
        assert entry["timeout"] is True
        assert entry["ok"] is False

    @pytest.mark.asyncio
    async def test_chat_mark_requires_socket(self, tmp_path, audit):
        gateway = _gateway(
            tmp_path, audit, RECORDING_AGENTD, agentd_socket=str(tmp_path / "missing.sock")
        )
        assert await gateway.chat_mark("alice", "c", "read", "1") is False
        assert not (tmp_path / "calls.jsonl").exists()

        (tmp_path / "agentd.sock").write_text("")
        gateway = _gateway(tmp_path, audit, RECORDING_AGENTD, agentd_socket=str(tmp_path / "agentd.sock"))
        assert await gateway.chat_mark("alice", "c", "read", "1") is True

    @pytest.mark.asyncio
    async def test_failed_start_wakes_agent(self, tmp_path, audit):
        kick = tmp_path / "kick.sh"
        marker = tmp_path / "woken"
        kick.write_text(f'#!/bin/sh\necho "$1 $2" > "{marker}"\n')
        kick.chmod(0o755)
        gateway = _gateway(tmp_path, audit, "import sys\nsys.exit(1)\n", kick_script=kick)
        assert await gateway.chat_start("alice", "c", "product-owner", "hi") is False
        # The kick script is detached; poll briefly for its side effect
        for _ in range(50):
            if marker.exists():
                break
            await asyncio.sleep(0.05)
        agent, prompt_file = marker.read_text().split()
        assert agent == "alice"
        assert "Target agent: **alice**" in open(prompt_file).read()

    @pytest.mark.asyncio
    async def test_failed_launch_removes_prompt_file(self, tmp_path, audit, monkeypatch):
        scratch = tmp_path / "scratch"
        scratch.mkdir()
        monkeypatch.setattr(tempfile, "tempdir", str(scratch))
        kick = tmp_path / "kick.sh"
        kick.write_text("#!/bin/sh\n")
        kick.chmod(0o644)
        gateway = _gateway(tmp_path, audit, kick_script=kick)
        assert await gateway.wake("alice", "product-owner", "hi") is False
        assert list(scratch.iterdir()) == []

    @pytest.mark.asyncio
    async def test_wake_without_kick_script(self, tmp_path, audit):
        gateway = _gateway(tmp_path, audit, kick_script=tmp_path / "absent.sh")
        assert await gateway.wake("alice", "product-owner", "hi") is False


class TestWakePrompt:
    def test_truncates_message(self):
        prompt = build_wake_prompt("alice", "product-owner", "x" * 500)
        assert f'"{"x" * 200}"' in prompt
        assert "x" * 201 not in prompt

    def test_default_sender(self):
        assert "from a teammate" in build_wake_prompt("alice", "", "")

