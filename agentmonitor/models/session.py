"""Chat session and pending-reply domain models."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class SessionKey:
    """Identifies one agent's participation in one canonical channel."""

    agent_id: str
    channel: str

    def __str__(self) -> str:
        return f"{self.agent_id}::{self.channel}"


@dataclass(frozen=True)
class InboundMark:
    """Last hub message addressed to an agent."""

    at: float
    sender: str


@dataclass(frozen=True)
class PendingReply:
    """Hub message still waiting on an agent response."""

    agent_id: str
    last_message_at: float
    last_message_from: str
    last_response_at: float | None = None

    @property
    def is_pending(self) -> bool:
        if self.last_response_at is None:
            return True
        return self.last_response_at < self.last_message_at

    def age(self, now: float) -> float:
        return now - self.last_message_at
