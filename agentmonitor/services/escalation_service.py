"""Escalation service: idle-session and reply-SLA sweeps."""

from __future__ import annotations

import asyncio
import logging

from agentmonitor.config import ChatConfig
from agentmonitor.infra.dispatch.base import DispatchGateway
from agentmonitor.infra.store.jsonl import AuditLog
from agentmonitor.models.timestamps import format_ts, utc_now
from agentmonitor.services.channels import HUB_IDENTITY, hub_channel
from agentmonitor.services.session_tracker import ChatState

logger = logging.getLogger(__name__)


class EscalationService:
    """Closes idle chat sessions and re-pings agents that leave the hub waiting.

    Both sweeps are safe to call at any time; with nothing to do they do
    nothing. Gateway failures are logged and never undo the local change.
    """

    def __init__(
        self,
        state: ChatState,
        gateway: DispatchGateway,
        config: ChatConfig,
        audit: AuditLog | None = None,
        hub: str = HUB_IDENTITY,
    ) -> None:
        self._state = state
        self._gateway = gateway
        self._config = config
        self._audit = audit
        self._hub = hub
        self._idle_task: asyncio.Task | None = None
        self._sla_task: asyncio.Task | None = None

    # --- Sweeps ---

    async def sweep_idle(self) -> list[str]:
        """End sessions idle past the timeout. Returns the ended session keys."""
        ended = []
        timeout = self._config.idle_timeout
        for key in self._state.sessions.expired(timeout):
            # An earlier dispatch may have yielded while this session was refreshed
            if not self._state.sessions.is_expired(key, timeout):
                continue
            self._state.sessions.end(key.agent_id, key.channel)
            ended.append(str(key))
            logger.info("Chat session %s timed out", key)
            self._record("chat_timeout", key.agent_id, key.channel)
            try:
                await self._gateway.chat_stop(key.agent_id, key.channel)
            except Exception:
                logger.warning("Failed to stop session %s", key, exc_info=True)
        return ended

    async def sweep_sla(self) -> list[str]:
        """Check in with agents whose hub message went unanswered too long.

        The pending clock restarts at each escalation, so an agent is pinged
        once per elapsed window rather than on every sweep.
        """
        escalated = []
        window = self._config.sla_window
        for pending in self._state.pending.overdue(window):
            agent_id = pending.agent_id
            if not self._state.pending.is_overdue(agent_id, window):
                continue
            channel = hub_channel(agent_id, self._hub)
            waited = pending.age(self._state.now())
            self._state.pending.record_message(agent_id, self._hub)
            escalated.append(agent_id)
            logger.info("No reply from %s for %ds, sending check-in", agent_id, int(waited))
            self._record("chat_escalate", agent_id, channel)
            try:
                await self._gateway.chat_start(
                    agent_id, channel, self._hub, self._config.checkin_message
                )
            except Exception:
                logger.warning("Failed to escalate to %s", agent_id, exc_info=True)
        return escalated

    def _record(self, event: str, agent_id: str, channel: str) -> None:
        if self._audit is None:
            return
        self._audit.write({
            "ts": format_ts(utc_now()),
            "event": event,
            "agent": agent_id,
            "channel": channel,
            "sender": self._hub,
        })

    # --- Background loops ---

    def start(self) -> None:
        """Start both sweep loops on the running event loop."""
        if self._idle_task is None:
            self._idle_task = asyncio.ensure_future(
                self._loop("Idle sweep", self._config.idle_sweep_interval, self.sweep_idle)
            )
        if self._sla_task is None:
            self._sla_task = asyncio.ensure_future(
                self._loop("SLA sweep", self._config.sla_sweep_interval, self.sweep_sla)
            )
        logger.info(
            "Escalation sweeps started (idle=%ds every %ds, sla=%ds every %ds)",
            self._config.idle_timeout, self._config.idle_sweep_interval,
            self._config.sla_window, self._config.sla_sweep_interval,
        )

    def stop(self) -> None:
        for task in (self._idle_task, self._sla_task):
            if task is not None:
                task.cancel()
        self._idle_task = None
        self._sla_task = None
        logger.info("Escalation sweeps stopped")

    @property
    def running(self) -> bool:
        return self._idle_task is not None or self._sla_task is not None

    async def _loop(self, name: str, interval: float, sweep) -> None:
        try:
            while True:
                await asyncio.sleep(interval)
                try:
                    await sweep()
                except Exception:
                    logger.warning("%s failed", name, exc_info=True)
        except asyncio.CancelledError:
            pass
