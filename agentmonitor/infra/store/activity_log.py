"""Activity log repository - daily JSON-lines files written by the agents."""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path

from agentmonitor.infra.store.jsonl import iter_records
from agentmonitor.models.activity import ActivityEntry
from agentmonitor.models.timestamps import is_date_key


class ActivityLogRepo:
    """Reads ``<state>/activity/<YYYY-MM-DD>.jsonl``."""

    def __init__(self, activity_dir: Path) -> None:
        self._dir = activity_dir

    def read_date(self, date_key: str) -> list[ActivityEntry]:
        if not is_date_key(date_key):
            raise ValueError(f"Invalid date: {date_key!r}")
        path = self._dir / f"{date_key}.jsonl"
        return [ActivityEntry.from_doc(doc) for doc in iter_records(path)]

    def read_dates(self, date_keys: Iterable[str]) -> list[ActivityEntry]:
        """Entries for each date in turn, preserving in-file order."""
        entries: list[ActivityEntry] = []
        for key in date_keys:
            entries.extend(self.read_date(key))
        return entries
