"""Status service: the per-agent view served to the dashboard."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path

from agentmonitor.infra.store.roster import RosterRepo
from agentmonitor.models.activity import ActivityEntry
from agentmonitor.models.agent import Agent
from agentmonitor.models.timestamps import format_ts, is_date_key, iso_from_epoch, today_utc, utc_now
from agentmonitor.services.activity_service import ActivityService, compute_view, default_dates
from agentmonitor.services.channels import HUB_IDENTITY
from agentmonitor.services.session_tracker import ChatState


@dataclass(frozen=True)
class AgentStatus:
    """Everything the dashboard shows for one agent."""

    agent: Agent
    activity: ActivityEntry | None
    last_completed: ActivityEntry | None
    current_activity: str
    last_completed_activity: str
    chat_active: bool
    force_online: bool = False
    last_message_at: str = ""
    last_message_from: str = ""
    last_response_at: str = ""
    chat_started_at: str = ""

    def to_doc(self) -> dict:
        return {
            "agent": self.agent.id,
            "personDisplayName": self.agent.person_display_name,
            "roleDisplayName": self.agent.role_display_name,
            "activity": self.activity.to_doc() if self.activity else None,
            "lastCompleted": self.last_completed.to_doc() if self.last_completed else None,
            "currentActivity": self.current_activity,
            "lastCompletedActivity": self.last_completed_activity,
            "chatActive": self.chat_active,
            "forceOnline": self.force_online,
            "lastSeen": self.activity.ts if self.activity else "",
            "lastMessageAt": self.last_message_at,
            "lastMessageFrom": self.last_message_from,
            "lastResponseAt": self.last_response_at,
            "chatStartedAt": self.chat_started_at,
        }


@dataclass
class StatusReport:
    date: str
    agents: list[AgentStatus] = field(default_factory=list)

    def to_doc(self) -> dict:
        return {"date": self.date, "agents": [a.to_doc() for a in self.agents]}


class StatusService:
    def __init__(
        self,
        roster_repo: RosterRepo,
        activity_service: ActivityService,
        state: ChatState,
        hub: str = HUB_IDENTITY,
    ) -> None:
        self._roster_repo = roster_repo
        self._activity = activity_service
        self._state = state
        self._hub = hub

    def build(self, date: str | None = None, now: datetime | None = None) -> StatusReport:
        """Status for every roster agent.

        With ``date`` only that day's log is read; otherwise today and
        yesterday (UTC) are merged.
        """
        if date:
            if not is_date_key(date):
                raise ValueError(f"Invalid date: {date!r}")
            dates = [date]
        else:
            dates = default_dates(now)

        summary = self._activity.summarize(dates)
        board = self._activity.load_board()
        report = StatusReport(date=date or today_utc(now))
        for agent in self._roster_repo.list_agents():
            latest, last_completed = self._activity.resolve(agent.id, summary, board)
            view = compute_view(latest, last_completed)
            report.agents.append(self._agent_status(agent, latest, last_completed, view))
        return report

    def _agent_status(self, agent, latest, last_completed, view) -> AgentStatus:
        inbound = self._state.pending.last_message(agent.id)
        response_at = self._state.pending.last_response(agent.id)
        since = self._state.sessions.active_chat_since(agent.id)
        return AgentStatus(
            agent=agent,
            activity=latest,
            last_completed=last_completed,
            current_activity=view.current_activity,
            last_completed_activity=view.last_completed_activity,
            chat_active=self._state.sessions.has_active_chat(agent.id),
            force_online=agent.id == self._hub,
            last_message_at=iso_from_epoch(inbound.at) if inbound else "",
            last_message_from=inbound.sender if inbound else "",
            last_response_at=iso_from_epoch(response_at) if response_at is not None else "",
            chat_started_at=iso_from_epoch(since) if since is not None else "",
        )


def system_status(agentd_socket: str, state_dir: Path) -> dict:
    """Presence checks for the agentd socket and the supervisor lock."""
    lock_dir = state_dir / "supervisor.lock"
    supervisor_state = state_dir / "supervisor"
    return {
        "agentd": {"running": bool(agentd_socket) and Path(agentd_socket).exists(), "socket": agentd_socket},
        "supervisor": {
            "running": lock_dir.exists(),
            "lockDir": str(lock_dir),
            "stateDir": str(supervisor_state),
        },
        "ts": format_ts(utc_now()),
    }
