"""Workflow service facade.

Wires the SQL-backed Idea Store, the event dispatcher and its handlers
(notification outbox, audit trail, status counters), the engine and the
bulk operator from one session factory.
"""

from __future__ import annotations

import asyncio
from collections.abc import Iterable

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from ideaflow.audit.recorder import AuditTrailRecorder
from ideaflow.infrastructure.database.session import get_session_factory
from ideaflow.notifications.producers import NotificationProducer
from ideaflow.repositories.sql import SqlAlchemyIdeaStore
from ideaflow.shared.utils.datetime_utils import Clock, utcnow
from ideaflow.shared.utils.logging import get_logger
from ideaflow.workflow.bulk import BulkOperator, BulkResult
from ideaflow.workflow.config import WorkflowSettings, get_workflow_settings
from ideaflow.workflow.counters import StatusCounters
from ideaflow.workflow.engine import TransitionResult, WorkflowEngine
from ideaflow.workflow.events import EventDispatcher, FeedbackRecorded, StatusChanged
from ideaflow.workflow.models import ActorRole, ActorScope, IdeaStatus

logger = get_logger(__name__)


class WorkflowService:
    """Entry point for reviewers' status changes.

    Call ``seed_counters`` once at startup so the status counters start from
    the stored ideas. Callers that serve requests should wrap each call in
    ``bind_request_context`` / ``clear_request_context`` from
    ``ideaflow.shared.utils.logging`` so the engine's log events carry the
    request and actor ids.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession] | None = None,
        settings: WorkflowSettings | None = None,
        clock: Clock = utcnow,
    ) -> None:
        self.settings = settings or get_workflow_settings()
        self.session_factory = session_factory or get_session_factory()

        self.store = SqlAlchemyIdeaStore(self.session_factory)
        self.counters = StatusCounters()
        self.dispatcher = EventDispatcher()

        producer = NotificationProducer(
            self.session_factory,
            notify_stakeholders=self.settings.notify_stakeholders,
        )
        recorder = AuditTrailRecorder(self.session_factory)
        self.dispatcher.subscribe(StatusChanged.event_type, producer.handle_status_changed)
        self.dispatcher.subscribe(StatusChanged.event_type, recorder.record_status_change)
        self.dispatcher.subscribe(StatusChanged.event_type, self.counters.handle_status_changed)
        self.dispatcher.subscribe(FeedbackRecorded.event_type, recorder.record_feedback)

        self.engine = WorkflowEngine(self.store, self.dispatcher, clock=clock)
        self.bulk = BulkOperator(self.engine, self.store, self.settings)

        logger.info(
            "workflow_service_initialized",
            bulk_concurrency=self.settings.bulk_concurrency,
            bulk_max_batch_size=self.settings.bulk_max_batch_size,
            notify_stakeholders=self.settings.notify_stakeholders,
        )

    async def seed_counters(self) -> None:
        """Rebuild the status counters from every idea in the store."""
        self.counters.seed(await self.store.list_all())

    async def transition(
        self,
        idea_id: str,
        expected_version: int,
        actor_role: ActorRole | str,
        actor_id: str,
        target_status: IdeaStatus | str,
        feedback: str | None = None,
        incubator_id: str | None = None,
        *,
        scope: ActorScope | None = None,
    ) -> TransitionResult:
        return await self.engine.transition(
            idea_id,
            expected_version,
            actor_role,
            actor_id,
            target_status,
            feedback=feedback,
            incubator_id=incubator_id,
            scope=scope,
        )

    async def apply_bulk(
        self,
        idea_ids: Iterable[str],
        actor_role: ActorRole | str,
        actor_id: str,
        target_status: IdeaStatus | str,
        feedback: str | None = None,
        incubator_id: str | None = None,
        *,
        scope: ActorScope | None = None,
        cancel_event: asyncio.Event | None = None,
    ) -> BulkResult:
        return await self.bulk.apply_bulk(
            idea_ids,
            actor_role,
            actor_id,
            target_status,
            feedback=feedback,
            incubator_id=incubator_id,
            scope=scope,
            cancel_event=cancel_event,
        )
