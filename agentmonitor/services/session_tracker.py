"""In-memory chat session liveness and pending-reply tracking."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass, field

from agentmonitor.models.session import InboundMark, PendingReply, SessionKey

logger = logging.getLogger(__name__)

Clock = Callable[[], float]


class SessionTracker:
    """Active (agent, channel) sessions and their last-activity times.

    A key present in the table is ACTIVE; a missing key is ABSENT.
    """

    def __init__(self, clock: Clock = time.time) -> None:
        self._clock = clock
        self._sessions: dict[SessionKey, float] = {}

    def __len__(self) -> int:
        return len(self._sessions)

    def touch(self, agent_id: str, channel: str) -> SessionKey:
        """Start a session or refresh its last-activity time."""
        key = SessionKey(agent_id, channel)
        if key not in self._sessions:
            logger.debug("Session started: %s", key)
        self._sessions[key] = self._clock()
        return key

    def end(self, agent_id: str, channel: str) -> bool:
        """End a session. Returns False if it was not active."""
        return self._sessions.pop(SessionKey(agent_id, channel), None) is not None

    def is_active(self, agent_id: str, channel: str) -> bool:
        return SessionKey(agent_id, channel) in self._sessions

    def last_activity(self, agent_id: str, channel: str) -> float | None:
        return self._sessions.get(SessionKey(agent_id, channel))

    def expired(self, timeout: float) -> list[SessionKey]:
        """Sessions idle for at least ``timeout`` seconds."""
        now = self._clock()
        return [key for key, last in self._sessions.items() if now - last >= timeout]

    def is_expired(self, key: SessionKey, timeout: float) -> bool:
        """True while ``key`` is still active and idle for at least ``timeout``."""
        last = self._sessions.get(key)
        return last is not None and self._clock() - last >= timeout

    def has_active_chat(self, agent_id: str) -> bool:
        return any(key.agent_id == agent_id for key in self._sessions)

    def active_chat_since(self, agent_id: str) -> float | None:
        """Most recent activity across the agent's sessions, None when inactive."""
        times = [last for key, last in self._sessions.items() if key.agent_id == agent_id]
        return max(times) if times else None


class PendingReplies:
    """Last hub message per agent versus the agent's last response."""

    def __init__(self, clock: Clock = time.time) -> None:
        self._clock = clock
        self._messages: dict[str, InboundMark] = {}
        self._responses: dict[str, float] = {}

    def record_message(self, agent_id: str, sender: str, at: float | None = None) -> None:
        self._messages[agent_id] = InboundMark(at=self._clock() if at is None else at, sender=sender)

    def record_response(self, agent_id: str, at: float | None = None) -> None:
        self._responses[agent_id] = self._clock() if at is None else at

    def last_message(self, agent_id: str) -> InboundMark | None:
        return self._messages.get(agent_id)

    def last_response(self, agent_id: str) -> float | None:
        return self._responses.get(agent_id)

    def get(self, agent_id: str) -> PendingReply | None:
        mark = self._messages.get(agent_id)
        if mark is None:
            return None
        return PendingReply(
            agent_id=agent_id,
            last_message_at=mark.at,
            last_message_from=mark.sender,
            last_response_at=self._responses.get(agent_id),
        )

    def is_overdue(self, agent_id: str, window: float) -> bool:
        pending = self.get(agent_id)
        return bool(pending and pending.is_pending and pending.age(self._clock()) >= window)

    def overdue(self, window: float) -> list[PendingReply]:
        """Unanswered messages at least ``window`` seconds old."""
        return [self.get(a) for a in list(self._messages) if self.is_overdue(a, window)]


@dataclass
class ChatState:
    """Process-wide chat state owned by the application context."""

    clock: Clock = time.time
    sessions: SessionTracker = field(init=False)
    pending: PendingReplies = field(init=False)

    def __post_init__(self) -> None:
        self.sessions = SessionTracker(self.clock)
        self.pending = PendingReplies(self.clock)

    def now(self) -> float:
        return self.clock()
