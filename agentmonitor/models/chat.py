"""Chat log domain models."""

from __future__ import annotations

from dataclasses import dataclass, field

from agentmonitor.models.agent import Agent


@dataclass(frozen=True)
class ChatMessage:
    """One record of a channel log."""

    ts: str
    channel: str
    agent: str
    message: str

    def to_doc(self) -> dict:
        return {
            "ts": self.ts,
            "channel": self.channel,
            "agent": self.agent,
            "message": self.message,
        }

    @classmethod
    def from_doc(cls, doc: dict) -> ChatMessage:
        message = doc.get("message")
        return cls(
            ts=str(doc.get("ts") or ""),
            channel=str(doc.get("channel") or ""),
            agent=str(doc.get("agent") or ""),
            message="" if message is None else str(message),
        )


@dataclass(frozen=True)
class ChatPage:
    """A backward page of a channel's history, oldest message first."""

    channel: str
    messages: tuple[ChatMessage, ...] = ()
    total: int = 0
    next_before: int = 0

    def to_doc(self) -> dict:
        return {
            "channel": self.channel,
            "messages": [m.to_doc() for m in self.messages],
            "total": self.total,
            "nextBefore": self.next_before,
        }


@dataclass(frozen=True)
class ChannelSummary:
    """Last message of one hub conversation."""

    channel: str
    other_agent_id: str
    last_message: str = ""
    last_ts: str = ""
    agent: Agent | None = field(default=None, compare=False)

    def to_doc(self) -> dict:
        return {
            "channel": self.channel,
            "lastMessage": self.last_message,
            "lastTs": self.last_ts,
            "agent": self.agent.to_doc() if self.agent else None,
            "otherAgentId": self.other_agent_id,
        }
