"""Chat log repository - one append-only JSON-lines file per canonical channel."""

from __future__ import annotations

import logging
from pathlib import Path

from agentmonitor.infra.store.jsonl import append_record, iter_records
from agentmonitor.models.chat import ChatMessage, ChatPage
from agentmonitor.models.timestamps import format_ts, utc_now
from agentmonitor.services.channels import HUB_IDENTITY, normalize_channel, validate_name

logger = logging.getLogger(__name__)


class ChatLogRepo:
    """Append, page and clear channel logs under ``<state>/chat``."""

    SUFFIX = ".log"

    def __init__(self, chat_dir: Path, hub: str = HUB_IDENTITY) -> None:
        self._dir = chat_dir
        self._hub = hub

    def _path(self, channel: str) -> Path:
        if not channel:
            raise ValueError("Missing channel")
        return self._dir / f"{validate_name(channel)}{self.SUFFIX}"

    def canonical(self, channel: str) -> str:
        return normalize_channel(channel, self._hub)

    def list_channels(self) -> list[str]:
        """Channel names as spelled on disk, canonical or not."""
        if not self._dir.is_dir():
            return []
        return sorted(p.stem for p in self._dir.glob(f"*{self.SUFFIX}"))

    def load(self, channel: str) -> list[ChatMessage]:
        """All messages for a channel spelling, in append order."""
        return [ChatMessage.from_doc(doc) for doc in iter_records(self._path(channel))]

    def append(self, channel: str, agent: str, message: str) -> ChatMessage:
        normalized = self.canonical(channel)
        entry = ChatMessage(
            ts=format_ts(utc_now()),
            channel=normalized,
            agent=agent,
            message=str(message),
        )
        append_record(self._path(normalized), entry.to_doc())
        return entry

    def read(self, channel: str, limit: int = 25, before: int = 0) -> ChatPage:
        """Return the page ending ``before`` messages from the newest one.

        Bounds are computed against a single snapshot of the log, so paging
        with ``next_before`` walks backward without gaps even while new
        messages arrive.
        """
        normalized = self.canonical(channel)
        messages = self.load(normalized)
        total = len(messages)
        end = max(0, total - max(0, before))
        start = max(0, end - max(0, limit))
        return ChatPage(
            channel=normalized,
            messages=tuple(messages[start:end]),
            total=total,
            next_before=total - start,
        )

    def clear(self, channel: str) -> int:
        """Empty a channel log and return how many records it held."""
        path = self._path(self.canonical(channel))
        try:
            raw = path.read_bytes()
        except FileNotFoundError:
            return 0
        count = sum(1 for line in raw.splitlines() if line.strip())
        if count:
            path.write_bytes(b"")
        logger.info("Cleared %d messages from %s", count, path.stem)
        return count
