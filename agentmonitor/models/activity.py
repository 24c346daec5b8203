"""Activity log and task board domain models."""

from __future__ import annotations

from dataclasses import dataclass, field

from agentmonitor.models.timestamps import parse_ts

# Board statuses that count as work still on an agent's plate
OPEN_BOARD_STATUSES = ("assigned", "in_progress", "blocked", "needs_review")


@dataclass(frozen=True)
class ActivityEntry:
    """One line of a daily activity log."""

    ts: str
    agent: str
    message: str = ""
    story: str | None = None
    tasks: tuple[str, ...] | None = None
    tags: tuple[str, ...] | None = None

    @property
    def epoch(self) -> float:
        return parse_ts(self.ts)

    @property
    def is_completion(self) -> bool:
        return "complete" in self.message.lower()

    def to_doc(self) -> dict:
        doc: dict = {"ts": self.ts, "agent": self.agent, "message": self.message}
        if self.story is not None:
            doc["story"] = self.story
        if self.tasks is not None:
            doc["tasks"] = list(self.tasks)
        if self.tags is not None:
            doc["tags"] = list(self.tags)
        return doc

    @classmethod
    def from_doc(cls, doc: dict) -> ActivityEntry:
        tasks = doc.get("tasks")
        tags = doc.get("tags")
        message = doc.get("message")
        return cls(
            ts=str(doc.get("ts") or ""),
            agent=str(doc.get("agent") or "system"),
            message="" if message is None else str(message),
            story=doc.get("story"),
            tasks=tuple(str(t) for t in tasks) if isinstance(tasks, list) else None,
            tags=tuple(str(t) for t in tags) if isinstance(tags, list) else None,
        )


@dataclass(frozen=True)
class BoardTask:
    """A task on the shared board. Read-only here."""

    id: str
    owner: str = ""
    status: str = ""
    priority: float = 0

    @property
    def is_open(self) -> bool:
        return self.status in OPEN_BOARD_STATUSES

    @classmethod
    def from_doc(cls, task_id: str, doc: dict) -> BoardTask:
        priority = doc.get("priority") or 0
        if not isinstance(priority, (int, float)):
            priority = 0
        return cls(
            id=str(doc.get("id") or task_id),
            owner=str(doc.get("owner") or ""),
            status=str(doc.get("status") or ""),
            priority=priority,
        )


@dataclass(frozen=True)
class Board:
    """Snapshot of board.json."""

    tasks: tuple[BoardTask, ...] = ()
    last_updated_at: str = ""

    @classmethod
    def from_doc(cls, doc: dict) -> Board:
        raw_tasks = doc.get("tasks") or {}
        if isinstance(raw_tasks, dict):
            items = raw_tasks.items()
        elif isinstance(raw_tasks, list):
            items = ((str(t.get("id", "")), t) for t in raw_tasks if isinstance(t, dict))
        else:
            items = ()
        return cls(
            tasks=tuple(
                BoardTask.from_doc(task_id, task)
                for task_id, task in items
                if isinstance(task, dict)
            ),
            last_updated_at=str(doc.get("lastUpdatedAt") or ""),
        )


@dataclass
class AgentActivity:
    """Latest and last-completed activity for one agent."""

    latest: ActivityEntry | None = None
    last_completed: ActivityEntry | None = None


@dataclass(frozen=True)
class ActivityView:
    """Display labels derived from an agent's latest entry."""

    current_activity: str
    last_completed_activity: str
    is_complete: bool = False


@dataclass
class ActivitySummary:
    """Per-agent activity keyed by agent id."""

    by_agent: dict[str, AgentActivity] = field(default_factory=dict)

    def get(self, agent_id: str) -> AgentActivity | None:
        return self.by_agent.get(agent_id)
