"""Dispatch gateway protocol definition."""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class DispatchGateway(Protocol):
    """Side effects on the external agent runtime.

    Every method reports success as a bool and never raises; callers treat
    the effect as best-effort and keep their local state either way.
    """

    async def chat_start(
        self, agent_id: str, channel: str, sender: str, message: str
    ) -> bool:
        """Open (or feed) a chat session for an agent on a channel."""
        ...

    async def chat_stop(self, agent_id: str, channel: str) -> bool:
        """Close an agent's chat session on a channel."""
        ...

    async def chat_prewarm(self, agents: list[str]) -> bool:
        """Warm up chat sessions for a batch of agents."""
        ...

    async def chat_mark(
        self, agent_id: str, channel: str, status: str, message_id: str
    ) -> bool:
        """Forward an inbox status marker for one message."""
        ...

    async def wake(self, agent_id: str, sender: str, message: str) -> bool:
        """Kick a sleeping agent so it checks its chat."""
        ...
