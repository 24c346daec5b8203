"""Agent roster reader (the ``agents`` table of the shared config.json)."""

from __future__ import annotations

import json
import logging
from pathlib import Path

from agentmonitor.models.agent import Agent

logger = logging.getLogger(__name__)


class RosterRepo:
    def __init__(self, config_path: Path) -> None:
        self._path = config_path

    def list_agents(self) -> list[Agent]:
        """Agents in file order; an absent or corrupt file means no agents."""
        try:
            doc = json.loads(self._path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return []
        except (OSError, UnicodeDecodeError, json.JSONDecodeError):
            logger.warning("Failed to read agent roster %s", self._path, exc_info=True)
            return []
        agents = doc.get("agents") if isinstance(doc, dict) else None
        if not isinstance(agents, dict):
            return []
        return [
            Agent.from_doc(agent_id, meta if isinstance(meta, dict) else {})
            for agent_id, meta in agents.items()
            if agent_id
        ]

    def by_id(self) -> dict[str, Agent]:
        return {agent.id: agent for agent in self.list_agents()}
