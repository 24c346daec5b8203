"""Chat service: message posting, session bookkeeping and channel summaries."""

from __future__ import annotations

import logging

from agentmonitor.config import DEFAULT_CHECKIN_MESSAGE
from agentmonitor.infra.dispatch.base import DispatchGateway
from agentmonitor.infra.store.chat_log import ChatLogRepo
from agentmonitor.infra.store.inbox import InboxUpdateRepo
from agentmonitor.infra.store.jsonl import AuditLog
from agentmonitor.infra.store.roster import RosterRepo
from agentmonitor.models.chat import ChannelSummary, ChatMessage, ChatPage
from agentmonitor.models.timestamps import format_ts, parse_ts, utc_now
from agentmonitor.services.channels import (
    HUB_IDENTITY,
    canonicalize,
    hub_channel,
    other_participant,
    parse_participants,
)
from agentmonitor.services.phrases import is_end_phrase
from agentmonitor.services.session_tracker import ChatState

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 25
MAX_PAGE_SIZE = 100


def clamp_page(limit: int | None, before: int | None) -> tuple[int, int]:
    """Page size in [1, 100] (default 25) and a non-negative offset."""
    size = limit or DEFAULT_PAGE_SIZE
    return max(1, min(MAX_PAGE_SIZE, size)), max(0, before or 0)


class ChatService:
    """Hub-side chat operations.

    Every posted message updates the session table and the pending-reply
    ledger before any dispatch happens, so local state never depends on
    the external runtime answering.
    """

    def __init__(
        self,
        chat_repo: ChatLogRepo,
        roster_repo: RosterRepo,
        inbox_repo: InboxUpdateRepo,
        state: ChatState,
        gateway: DispatchGateway,
        audit: AuditLog | None = None,
        hub: str = HUB_IDENTITY,
        checkin_message: str = DEFAULT_CHECKIN_MESSAGE,
    ) -> None:
        self._chat_repo = chat_repo
        self._roster_repo = roster_repo
        self._inbox_repo = inbox_repo
        self._state = state
        self._gateway = gateway
        self._audit = audit
        self._hub = hub
        self._checkin_message = checkin_message

    # --- History ---

    def history(self, channel: str, limit: int | None = None, before: int | None = None) -> ChatPage:
        size, offset = clamp_page(limit, before)
        return self._chat_repo.read(channel, limit=size, before=offset)

    def clear(self, channel: str) -> int:
        return self._chat_repo.clear(channel)

    # --- Posting ---

    async def post_message(self, channel: str, sender: str, message: str) -> ChatMessage:
        """Append a message and drive session state for the other participants."""
        if not sender or not message:
            raise ValueError("Invalid payload")

        entry = self._chat_repo.append(channel, sender, message)
        normalized = entry.channel
        recipients = [p for p in parse_participants(normalized) if p and p != sender]

        now = self._state.now()
        if sender == self._hub:
            for agent_id in recipients:
                self._state.pending.record_message(agent_id, sender, at=now)
        else:
            self._state.pending.record_response(sender, at=now)

        for agent_id in recipients:
            self._state.sessions.touch(agent_id, normalized)
            await self._gateway.chat_start(agent_id, normalized, sender, entry.message)
            self._record("chat_start", agent_id, normalized, sender)

        if sender == self._hub and is_end_phrase(entry.message):
            for agent_id in recipients:
                self._state.sessions.end(agent_id, normalized)
                await self._gateway.chat_stop(agent_id, normalized)
                self._record("chat_stop", agent_id, normalized, sender)
            logger.info("Hub ended conversation on %s", normalized)

        return entry

    async def nudge(self, agent_id: str, message: str | None = None) -> bool:
        """Open a check-in session with an agent on its hub channel."""
        if not agent_id:
            raise ValueError("Invalid payload")
        text = message or self._checkin_message
        return await self._gateway.chat_start(
            agent_id, hub_channel(agent_id, self._hub), self._hub, text
        )

    async def prewarm(self, agents: list[str]) -> bool:
        return await self._gateway.chat_prewarm(agents)

    async def mark_inbox(self, agent_id: str, channel: str, status: str, message_id: str) -> dict:
        """Persist an inbox marker, then forward it to agentd when it is running."""
        if not (agent_id and channel and status and message_id):
            raise ValueError("Invalid payload")
        entry = self._inbox_repo.append(agent_id, channel, status, message_id)
        await self._gateway.chat_mark(agent_id, channel, status, message_id)
        return entry

    # --- Summary ---

    def summary(self) -> list[ChannelSummary]:
        """One entry per canonical hub conversation, most recent first.

        Spellings on disk that canonicalize to the same channel are merged:
        the spelling with the newest last message wins, and the canonical
        spelling wins ties.
        """
        agents = self._roster_repo.by_id()
        merged: dict[str, tuple[ChannelSummary, bool]] = {}
        for raw in self._chat_repo.list_channels():
            participants = parse_participants(raw)
            if self._hub not in participants:
                continue
            canonical = canonicalize(participants, self._hub)
            try:
                messages = self._chat_repo.load(raw)
            except ValueError:
                logger.debug("Skipping unreadable channel name %r", raw)
                continue
            last = messages[-1] if messages else None
            other = other_participant(participants, self._hub)
            candidate = ChannelSummary(
                channel=canonical,
                other_agent_id=other,
                last_message=last.message if last else "",
                last_ts=last.ts if last else "",
                agent=agents.get(other),
            )
            is_canonical = raw == canonical
            existing = merged.get(canonical)
            if existing is None:
                merged[canonical] = (candidate, is_canonical)
                continue
            current, current_canonical = existing
            newer = parse_ts(candidate.last_ts) > parse_ts(current.last_ts)
            tied = parse_ts(candidate.last_ts) == parse_ts(current.last_ts)
            if newer or (tied and is_canonical and not current_canonical):
                merged[canonical] = (candidate, is_canonical)

        summaries = [summary for summary, _ in merged.values()]
        summaries.sort(key=lambda s: parse_ts(s.last_ts), reverse=True)
        return summaries

    def _record(self, event: str, agent_id: str, channel: str, sender: str) -> None:
        if self._audit is None:
            return
        self._audit.write({
            "ts": format_ts(utc_now()),
            "event": event,
            "agent": agent_id,
            "channel": channel,
            "sender": sender,
        })
