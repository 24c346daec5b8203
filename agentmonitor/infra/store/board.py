"""Task board snapshot reader."""

from __future__ import annotations

import json
import logging
from pathlib import Path

from agentmonitor.models.activity import Board

logger = logging.getLogger(__name__)


class BoardRepo:
    """Reads ``<state>/board.json``; absent or unreadable boards are ``None``."""

    def __init__(self, board_path: Path) -> None:
        self._path = board_path

    def load(self) -> Board | None:
        try:
            doc = json.loads(self._path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return None
        except (OSError, UnicodeDecodeError, json.JSONDecodeError):
            logger.warning("Failed to read board %s", self._path, exc_info=True)
            return None
        if not isinstance(doc, dict):
            return None
        return Board.from_doc(doc)
