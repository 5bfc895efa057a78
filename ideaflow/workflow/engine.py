"""Workflow engine: applies one status transition to one idea.

The sequence is load, terminal and version checks, scope and policy
validation, next-state construction, compare-and-swap, then event
emission. Workflow errors never escape ``transition``; they come back as
a failed ``TransitionResult`` so callers (and the bulk operator) always
get a typed outcome.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from ideaflow.repositories.base import IdeaStore
from ideaflow.repositories.exceptions import (
    ConcurrencyError,
    EntityNotFoundError,
    RepositoryError,
)
from ideaflow.shared.utils.datetime_utils import Clock, utcnow
from ideaflow.shared.utils.logging import get_logger
from ideaflow.workflow.events import (
    FeedbackRecorded,
    NotificationDispatcher,
    StatusChanged,
    WorkflowEvent,
)
from ideaflow.workflow.exceptions import (
    AlreadyTerminalError,
    ErrorKind,
    IdeaNotFoundError,
    IllegalTransitionError,
    NotificationDispatchError,
    RETRYABLE_KINDS,
    StoreUnavailableError,
    VersionConflictError,
    WorkflowError,
)
from ideaflow.workflow.models import (
    ActorRole,
    ActorScope,
    Idea,
    IdeaStatus,
    parse_role,
    parse_status,
)
from ideaflow.workflow.validator import check_actor_scope, check_transition

logger = get_logger(__name__)


class Outcome(str, Enum):
    SUCCESS = "success"
    FAILURE = "failure"


@dataclass
class TransitionResult:
    """Outcome of one transition request."""

    idea_id: str
    outcome: Outcome
    new_version: int | None = None
    error_kind: ErrorKind | None = None
    error_message: str | None = None
    warnings: list[WorkflowError] = field(default_factory=list)
    idea: Idea | None = None

    @property
    def succeeded(self) -> bool:
        return self.outcome is Outcome.SUCCESS

    @property
    def retryable(self) -> bool:
        return self.error_kind in RETRYABLE_KINDS

    @classmethod
    def success(cls, idea: Idea, warnings: list[WorkflowError] | None = None) -> TransitionResult:
        return cls(
            idea_id=idea.id,
            outcome=Outcome.SUCCESS,
            new_version=idea.version,
            warnings=warnings or [],
            idea=idea,
        )

    @classmethod
    def failure(cls, idea_id: str, error: WorkflowError) -> TransitionResult:
        return cls(
            idea_id=idea_id,
            outcome=Outcome.FAILURE,
            error_kind=error.error_type,
            error_message=error.message,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "idea_id": self.idea_id,
            "outcome": self.outcome.value,
            "new_version": self.new_version,
            "error_kind": self.error_kind.value if self.error_kind else None,
            "error_message": self.error_message,
            "retryable": self.retryable if self.error_kind else None,
            "warnings": [
                {"kind": w.error_type.value, "message": w.message} for w in self.warnings
            ],
        }


class WorkflowEngine:
    """Applies validated status transitions with optimistic concurrency.

    Holds no locks and no per-request state; one instance may serve any
    number of concurrent requests. ``VersionConflict`` is always surfaced,
    never retried here.
    """

    def __init__(
        self,
        store: IdeaStore,
        dispatcher: NotificationDispatcher,
        clock: Clock = utcnow,
    ) -> None:
        self.store = store
        self.dispatcher = dispatcher
        self._clock = clock

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
        """Move one idea to ``target_status`` on behalf of a reviewer.

        Args:
            idea_id: Idea to transition.
            expected_version: Version the caller last read; the write is
                rejected if the store has moved past it.
            actor_role: Role the reviewer acts in.
            actor_id: Reviewer identity recorded on the idea and in events.
            target_status: Requested status.
            feedback: Reviewer comment, stored as the idea's latest feedback.
            incubator_id: Required when the target is ``forwarded`` or ``incubated``.
            scope: Reviewer tenancy; when given, college admins and incubator
                managers may only act inside their own college / incubator.

        Returns:
            TransitionResult carrying the new version on success or the
            error kind on failure. Dispatch problems appear as warnings on
            an otherwise successful result.
        """
        try:
            committed, previous, role = await self._apply(
                idea_id, expected_version, actor_role, actor_id,
                target_status, feedback, incubator_id, scope,
            )
        except WorkflowError as e:
            logger.info(
                "idea_transition_rejected",
                idea_id=idea_id,
                actor_id=actor_id,
                actor_role=str(getattr(actor_role, "value", actor_role)),
                target_status=str(getattr(target_status, "value", target_status)),
                error_kind=e.error_type.value,
                reason=e.message,
            )
            return TransitionResult.failure(idea_id, e)

        logger.info(
            "idea_transitioned",
            idea_id=idea_id,
            actor_id=actor_id,
            actor_role=role.value,
            from_status=previous.status.value,
            to_status=committed.status.value,
            version=committed.version,
        )

        warnings = await self._emit(self._events_for(previous, committed, actor_id, role))
        return TransitionResult.success(committed, warnings)

    async def _apply(
        self,
        idea_id: str,
        expected_version: int,
        actor_role: ActorRole | str,
        actor_id: str,
        target_status: IdeaStatus | str,
        feedback: str | None,
        incubator_id: str | None,
        scope: ActorScope | None,
    ) -> tuple[Idea, Idea, ActorRole]:
        """Run the read-validate-write sequence. Returns (committed, previous, role)."""
        idea = await self._load(idea_id)

        if idea.is_terminal:
            raise AlreadyTerminalError(idea.id, idea.status.value)
        if idea.version != expected_version:
            raise VersionConflictError(idea_id, expected_version, idea.version)

        role = parse_role(actor_role)
        if role is not None:
            scope_error = check_actor_scope(idea, role, scope, incubator_id)
            if scope_error is not None:
                raise scope_error

        error = check_transition(idea, actor_role, target_status, incubator_id)
        if error is not None:
            raise error

        target = parse_status(target_status)
        if role is None or target is None:
            # check_transition already rejects unknown values
            raise IllegalTransitionError(str(actor_role), idea.status.value, str(target_status))

        updated = idea.with_transition(
            target=target,
            reviewer_id=actor_id,
            reviewer_role=role,
            feedback=feedback,
            incubator_id=incubator_id,
            now=self._clock(),
        )

        try:
            committed = await self.store.compare_and_swap(idea_id, expected_version, updated)
        except ConcurrencyError as e:
            raise VersionConflictError(idea_id, expected_version, e.actual_version) from e
        except EntityNotFoundError as e:
            raise IdeaNotFoundError(idea_id) from e
        except RepositoryError as e:
            logger.error("idea_store_write_failed", idea_id=idea_id, error=str(e))
            raise StoreUnavailableError(idea_id, e.message) from e
        except Exception as e:
            logger.exception("idea_store_write_failed", idea_id=idea_id, error=str(e))
            raise StoreUnavailableError(idea_id, str(e)) from e

        return committed, idea, role

    async def _load(self, idea_id: str) -> Idea:
        try:
            idea = await self.store.get(idea_id)
        except RepositoryError as e:
            logger.error("idea_store_read_failed", idea_id=idea_id, error=str(e))
            raise StoreUnavailableError(idea_id, e.message) from e
        except Exception as e:
            logger.exception("idea_store_read_failed", idea_id=idea_id, error=str(e))
            raise StoreUnavailableError(idea_id, str(e)) from e
        if idea is None:
            raise IdeaNotFoundError(idea_id)
        return idea

    def _events_for(
        self,
        previous: Idea,
        committed: Idea,
        actor_id: str,
        role: ActorRole,
    ) -> list[WorkflowEvent]:
        events: list[WorkflowEvent] = [
            StatusChanged(
                idea_id=committed.id,
                from_status=previous.status,
                to_status=committed.status,
                actor_id=actor_id,
                actor_role=role,
                timestamp=committed.status_changed_at,
                version=committed.version,
                student_id=committed.student_id,
                college_id=committed.college_id,
                incubator_id=committed.incubator_id,
                from_incubator_id=previous.incubator_id,
                feedback=committed.feedback,
                idea_title=committed.title,
            )
        ]
        if committed.feedback:
            events.append(
                FeedbackRecorded(
                    idea_id=committed.id,
                    actor_id=actor_id,
                    actor_role=role,
                    status=committed.status,
                    feedback=committed.feedback,
                    timestamp=committed.status_changed_at,
                    version=committed.version,
                )
            )
        return events

    async def _emit(self, events: list[WorkflowEvent]) -> list[WorkflowError]:
        """Hand events to the dispatcher. Failures become warnings, never errors."""
        warnings: list[WorkflowError] = []
        for event in events:
            try:
                await self.dispatcher.notify(event)
            except WorkflowError as e:
                warnings.append(e)
                logger.warning(
                    "notification_dispatch_failed",
                    idea_id=event.idea_id,
                    event_type=event.event_type,
                    error=e.message,
                )
            except Exception as e:
                warnings.append(NotificationDispatchError(event.event_type, [type(e).__name__]))
                logger.warning(
                    "notification_dispatch_failed",
                    idea_id=event.idea_id,
                    event_type=event.event_type,
                    error=str(e),
                )
        return warnings
