"""AppContext: wires config, stores, chat state, and services together."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from agentmonitor.config import AppConfig, load_config
from agentmonitor.models.timestamps import format_ts, utc_now
from agentmonitor.services.session_tracker import ChatState

if TYPE_CHECKING:
    from pathlib import Path

    from agentmonitor.infra.dispatch.base import DispatchGateway
    from agentmonitor.infra.store.activity_log import ActivityLogRepo
    from agentmonitor.infra.store.board import BoardRepo
    from agentmonitor.infra.store.chat_log import ChatLogRepo
    from agentmonitor.infra.store.inbox import InboxUpdateRepo
    from agentmonitor.infra.store.jsonl import AuditLog
    from agentmonitor.infra.store.roster import RosterRepo
    from agentmonitor.services.activity_service import ActivityService
    from agentmonitor.services.chat_service import ChatService
    from agentmonitor.services.escalation_service import EscalationService
    from agentmonitor.services.status_service import StatusService

logger = logging.getLogger(__name__)


class AppContext:
    """Central wiring for all application dependencies.

    Owns the in-memory chat state for the lifetime of the server. Stores and
    services are created lazily on first access; pass ``gateway`` or
    ``state`` to substitute test doubles.
    """

    def __init__(
        self,
        config: AppConfig | None = None,
        config_path: Path | None = None,
        gateway: DispatchGateway | None = None,
        state: ChatState | None = None,
    ) -> None:
        self.config = config or load_config(config_path)
        self.state = state or ChatState()
        self.build_id = format_ts(utc_now())
        self._gateway = gateway
        self._chat_repo: ChatLogRepo | None = None
        self._activity_repo: ActivityLogRepo | None = None
        self._board_repo: BoardRepo | None = None
        self._roster_repo: RosterRepo | None = None
        self._inbox_repo: InboxUpdateRepo | None = None
        self._supervisor_log: AuditLog | None = None
        self._agentd_log: AuditLog | None = None
        self._activity_service: ActivityService | None = None
        self._chat_service: ChatService | None = None
        self._status_service: StatusService | None = None
        self._escalation_service: EscalationService | None = None

    async def initialize(self) -> None:
        """Start the background sweeps."""
        self.escalation_service.start()
        logger.info("AppContext initialized (root=%s)", self.config.resolved_memento_root)

    async def close(self) -> None:
        if self._escalation_service is not None:
            self._escalation_service.stop()
        logger.info("AppContext closed")

    @property
    def state_dir(self) -> Path:
        return self.config.state_dir

    # --- Stores ---

    @property
    def chat_repo(self) -> ChatLogRepo:
        if self._chat_repo is None:
            from agentmonitor.infra.store.chat_log import ChatLogRepo

            self._chat_repo = ChatLogRepo(self.state_dir / "chat", hub=self.config.hub_identity)
        return self._chat_repo

    @property
    def activity_repo(self) -> ActivityLogRepo:
        if self._activity_repo is None:
            from agentmonitor.infra.store.activity_log import ActivityLogRepo

            self._activity_repo = ActivityLogRepo(self.state_dir / "activity")
        return self._activity_repo

    @property
    def board_repo(self) -> BoardRepo:
        if self._board_repo is None:
            from agentmonitor.infra.store.board import BoardRepo

            self._board_repo = BoardRepo(self.state_dir / "board.json")
        return self._board_repo

    @property
    def roster_repo(self) -> RosterRepo:
        if self._roster_repo is None:
            from agentmonitor.infra.store.roster import RosterRepo

            self._roster_repo = RosterRepo(self.config.resolved_memento_root / "config.json")
        return self._roster_repo

    @property
    def inbox_repo(self) -> InboxUpdateRepo:
        if self._inbox_repo is None:
            from agentmonitor.infra.store.inbox import InboxUpdateRepo

            self._inbox_repo = InboxUpdateRepo(self.state_dir / "inbox_updates")
        return self._inbox_repo

    @property
    def supervisor_log(self) -> AuditLog:
        if self._supervisor_log is None:
            from agentmonitor.infra.store.jsonl import AuditLog

            self._supervisor_log = AuditLog(self.state_dir / "supervisor.log.jsonl")
        return self._supervisor_log

    @property
    def agentd_log(self) -> AuditLog:
        if self._agentd_log is None:
            from agentmonitor.infra.store.jsonl import AuditLog

            self._agentd_log = AuditLog(self.state_dir / "agentd.log.jsonl")
        return self._agentd_log

    # --- Dispatch ---

    @property
    def gateway(self) -> DispatchGateway:
        if self._gateway is None:
            from agentmonitor.infra.dispatch.agentd import AgentdGateway

            dispatch = self.config.dispatch
            self._gateway = AgentdGateway(
                agentd_script=self.config.resolved_agentd_script,
                memento_root=self.config.resolved_memento_root,
                audit=self.agentd_log,
                agentd_socket=dispatch.agentd_socket,
                kick_script=self.config.resolved_kick_script,
                python=dispatch.python,
                timeout=dispatch.timeout,
            )
        return self._gateway

    # --- Services ---

    @property
    def activity_service(self) -> ActivityService:
        if self._activity_service is None:
            from agentmonitor.services.activity_service import ActivityService

            self._activity_service = ActivityService(self.activity_repo, self.board_repo)
        return self._activity_service

    @property
    def chat_service(self) -> ChatService:
        if self._chat_service is None:
            from agentmonitor.services.chat_service import ChatService

            self._chat_service = ChatService(
                chat_repo=self.chat_repo,
                roster_repo=self.roster_repo,
                inbox_repo=self.inbox_repo,
                state=self.state,
                gateway=self.gateway,
                audit=self.supervisor_log,
                hub=self.config.hub_identity,
                checkin_message=self.config.chat.checkin_message,
            )
        return self._chat_service

    @property
    def status_service(self) -> StatusService:
        if self._status_service is None:
            from agentmonitor.services.status_service import StatusService

            self._status_service = StatusService(
                roster_repo=self.roster_repo,
                activity_service=self.activity_service,
                state=self.state,
                hub=self.config.hub_identity,
            )
        return self._status_service

    @property
    def escalation_service(self) -> EscalationService:
        if self._escalation_service is None:
            from agentmonitor.services.escalation_service import EscalationService

            self._escalation_service = EscalationService(
                state=self.state,
                gateway=self.gateway,
                config=self.config.chat,
                audit=self.supervisor_log,
                hub=self.config.hub_identity,
            )
        return self._escalation_service
