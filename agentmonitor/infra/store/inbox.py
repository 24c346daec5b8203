"""Inbox status updates - one JSON-lines file per agent."""

from __future__ import annotations

from pathlib import Path

from agentmonitor.infra.store.jsonl import append_record
from agentmonitor.models.timestamps import format_ts, utc_now
from agentmonitor.services.channels import validate_name


class InboxUpdateRepo:
    def __init__(self, inbox_updates_dir: Path) -> None:
        self._dir = inbox_updates_dir

    def append(self, agent_id: str, channel: str, status: str, message_id: str) -> dict:
        """Record a status marker. Raises OSError when the file cannot be written."""
        entry = {
            "ts": format_ts(utc_now()),
            "agent": agent_id,
            "channel": channel,
            "status": status,
            "message_id": message_id,
        }
        append_record(self._dir / f"{validate_name(agent_id)}.jsonl", entry)
        return entry
