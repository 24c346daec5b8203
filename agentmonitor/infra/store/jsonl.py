"""JSON-lines file helpers and the best-effort audit trail writer."""

from __future__ import annotations

import json
import logging
from collections.abc import Iterator
from pathlib import Path

logger = logging.getLogger(__name__)


def iter_records(path: Path) -> Iterator[dict]:
    """Yield each JSON object in a JSON-lines file.

    A missing file yields nothing; blank and unparseable lines are skipped.
    """
    try:
        raw = path.read_bytes()
    except FileNotFoundError:
        return
    for line in raw.splitlines():
        if not line.strip():
            continue
        try:
            record = json.loads(line.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError):
            logger.debug("Skipping corrupt line in %s", path)
            continue
        if isinstance(record, dict):
            yield record


def append_record(path: Path, record: dict) -> None:
    """Append one record, creating the parent directory on first write."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "a", encoding="utf-8") as f:
        f.write(json.dumps(record) + "\n")


class AuditLog:
    """Append-only operational trail. Write failures never reach the caller."""

    def __init__(self, path: Path) -> None:
        self._path = path

    @property
    def path(self) -> Path:
        return self._path

    def write(self, entry: dict) -> None:
        try:
            append_record(self._path, entry)
        except OSError:
            logger.debug("Failed to write audit entry to %s", self._path, exc_info=True)
