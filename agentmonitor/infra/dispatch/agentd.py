"""Dispatch gateway backed by the agentd helper script and the kick script."""

from __future__ import annotations

import asyncio
import json
import logging
import os
import subprocess
import tempfile
import time
from pathlib import Path

from agentmonitor.infra.store.jsonl import AuditLog
from agentmonitor.models.timestamps import format_ts, utc_now

logger = logging.getLogger(__name__)

# Captured stdout/stderr kept per audit entry
OUTPUT_TAIL = 2000


def build_wake_prompt(agent_id: str, sender: str, message: str) -> str:
    lines = [
        "# MEMENTO PROMPT",
        "",
        f"Target agent: **{agent_id}**",
        "",
        f"You have a new chat message from {sender or 'a teammate'}:",
        f'"{message[:200]}"' if message else "",
        "",
        "Please check the monitor chat and respond if needed.",
    ]
    return "\n".join(line for line in lines if line)


class AgentdGateway:
    """Runs ``<python> agentd.py once <payload>`` with a hard timeout.

    Each invocation is recorded in the agentd audit log. A failed
    ``chat_start`` falls back to waking the agent with the kick script.
    """

    def __init__(
        self,
        agentd_script: Path,
        memento_root: Path,
        audit: AuditLog,
        agentd_socket: str = "/tmp/memento-agentd.sock",
        kick_script: Path | None = None,
        python: str = "python3",
        timeout: float = 8.0,
    ) -> None:
        self._script = agentd_script
        self._root = memento_root
        self._audit = audit
        self._socket = agentd_socket
        self._kick_script = kick_script
        self._python = python
        self._timeout = timeout

    @property
    def agentd_running(self) -> bool:
        return bool(self._socket) and Path(self._socket).exists()

    async def _call(self, payload: dict) -> bool:
        """Invoke agentd once. Returns True only on a zero exit status."""
        if not self._script.exists():
            logger.debug("agentd script not found at %s, skipping %s", self._script, payload.get("cmd"))
            return False

        env = {**os.environ, "MEMENTO_ROOT": str(self._root)}
        timed_out = False
        stdout = stderr = b""
        try:
            proc = await asyncio.create_subprocess_exec(
                self._python,
                str(self._script),
                "once",
                json.dumps(payload),
                env=env,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            logger.warning("Failed to launch agentd for %s: %s", payload.get("cmd"), e)
            return False

        try:
            stdout, stderr = await asyncio.wait_for(proc.communicate(), timeout=self._timeout)
        except asyncio.TimeoutError:
            timed_out = True
            proc.kill()
            await proc.wait()

        ok = not timed_out and proc.returncode == 0
        self._audit.write({
            "ts": format_ts(utc_now()),
            "ok": ok,
            "status": proc.returncode,
            "timeout": timed_out,
            "cmd": payload.get("cmd", ""),
            "agent": payload.get("agent", ""),
            "channel": payload.get("channel", ""),
            "stdout": stdout.decode(errors="replace")[:OUTPUT_TAIL],
            "stderr": stderr.decode(errors="replace")[:OUTPUT_TAIL],
        })
        if not ok:
            logger.warning(
                "agentd %s failed (agent=%s, status=%s, timeout=%s)",
                payload.get("cmd"), payload.get("agent", ""), proc.returncode, timed_out,
            )
        return ok

    async def chat_start(
        self, agent_id: str, channel: str, sender: str, message: str
    ) -> bool:
        if not agent_id or agent_id == sender:
            return False
        ok = await self._call({
            "cmd": "chat_start",
            "agent": agent_id,
            "channel": channel,
            "sender": sender,
            "message": message,
        })
        if not ok:
            await self.wake(agent_id, sender, message)
        return ok

    async def chat_stop(self, agent_id: str, channel: str) -> bool:
        if not agent_id:
            return False
        return await self._call({"cmd": "chat_stop", "agent": agent_id, "channel": channel})

    async def chat_prewarm(self, agents: list[str]) -> bool:
        return await self._call({"cmd": "chat_prewarm", "agents": agents})

    async def chat_mark(
        self, agent_id: str, channel: str, status: str, message_id: str
    ) -> bool:
        if not self.agentd_running:
            return False
        return await self._call({
            "cmd": "chat_mark",
            "agent": agent_id,
            "channel": channel,
            "status": status,
            "message_id": message_id,
        })

    async def wake(self, agent_id: str, sender: str, message: str) -> bool:
        """Launch the kick script detached with a prompt file for the agent."""
        if not agent_id or agent_id == sender:
            return False
        if self._kick_script is None or not self._kick_script.exists():
            return False
        prompt_path = None
        try:
            with tempfile.NamedTemporaryFile(
                "w",
                prefix=f"monitor_wake_{agent_id}_{int(time.time() * 1000)}_",
                suffix=".md",
                delete=False,
                encoding="utf-8",
            ) as f:
                prompt_path = f.name
                f.write(build_wake_prompt(agent_id, sender, message))
            subprocess.Popen(
                [str(self._kick_script), agent_id, prompt_path],
                stdin=subprocess.DEVNULL,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
                start_new_session=True,
            )
        except OSError as e:
            logger.warning("Failed to wake %s: %s", agent_id, e)
            if prompt_path is not None:
                Path(prompt_path).unlink(missing_ok=True)
            return False
        logger.info("Woke %s via %s", agent_id, self._kick_script.name)
        return True
