"""Activity service: merges activity logs and the board into per-agent views."""

from __future__ import annotations

import logging
from datetime import datetime

from agentmonitor.infra.store.activity_log import ActivityLogRepo
from agentmonitor.infra.store.board import BoardRepo
from agentmonitor.models.activity import (
    ActivityEntry,
    ActivitySummary,
    ActivityView,
    AgentActivity,
    Board,
)
from agentmonitor.models.timestamps import today_utc, yesterday_utc
from agentmonitor.services.phrases import current_activity_label, is_completion

logger = logging.getLogger(__name__)


def default_dates(now: datetime | None = None) -> list[str]:
    """Today and yesterday, UTC."""
    return [today_utc(now), yesterday_utc(now)]


def summarize_entries(entries: list[ActivityEntry]) -> ActivitySummary:
    """Group entries by agent, keeping the latest and the last completion.

    Equal timestamps resolve to the later-seen entry. The completion is
    tracked independently, so an agent's latest entry need not be one.
    """
    summary = ActivitySummary()
    for entry in entries:
        activity = summary.by_agent.setdefault(entry.agent, AgentActivity())
        if activity.latest is None or entry.epoch >= activity.latest.epoch:
            activity.latest = entry
        if entry.is_completion:
            activity.last_completed = entry
    return summary


def board_fallback(agent_id: str, board: Board | None) -> ActivityEntry | None:
    """Pseudo entry from the agent's highest-priority open board task."""
    if board is None:
        return None
    tasks = [t for t in board.tasks if t.owner == agent_id and t.is_open]
    if not tasks:
        return None
    top = sorted(tasks, key=lambda t: t.priority, reverse=True)[0]
    return ActivityEntry(
        ts=board.last_updated_at,
        agent=agent_id,
        message=f"Board status: {top.status}",
        story="",
        tasks=(top.id,),
        tags=("board",),
    )


def compute_view(entry: ActivityEntry | None, last_completed: ActivityEntry | None) -> ActivityView:
    raw = entry.message if entry else ""
    complete = is_completion(raw)
    if last_completed is not None and last_completed.message:
        completed_text = last_completed.message
    else:
        completed_text = raw if complete else ""
    return ActivityView(
        current_activity=current_activity_label(raw),
        last_completed_activity=completed_text,
        is_complete=complete,
    )


class ActivityService:
    """Per-query aggregation over the activity logs and the board. Holds no state."""

    def __init__(self, activity_repo: ActivityLogRepo, board_repo: BoardRepo) -> None:
        self._activity_repo = activity_repo
        self._board_repo = board_repo

    def summarize(self, date_keys: list[str]) -> ActivitySummary:
        return summarize_entries(self._activity_repo.read_dates(date_keys))

    def load_board(self) -> Board | None:
        return self._board_repo.load()

    def resolve(
        self, agent_id: str, summary: ActivitySummary, board: Board | None
    ) -> tuple[ActivityEntry | None, ActivityEntry | None]:
        """Return ``(latest, last_completed)`` for an agent.

        The board is consulted only when the logs have nothing for the agent;
        the last completion always comes from the logs.
        """
        activity = summary.get(agent_id)
        latest = activity.latest if activity else None
        if latest is None:
            latest = board_fallback(agent_id, board)
        last_completed = activity.last_completed if activity else None
        return latest, last_completed

    def tail(self, limit: int, now: datetime | None = None) -> list[ActivityEntry]:
        """Most recent entries across today and yesterday, newest first."""
        entries = self._activity_repo.read_dates(default_dates(now))
        entries.sort(key=lambda e: e.epoch, reverse=True)
        return entries[:limit]
