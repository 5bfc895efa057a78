"""Workflow domain events and their dispatch.

The engine emits ``StatusChanged`` after every committed transition and
``FeedbackRecorded`` when the reviewer left a comment. Delivery is owned by
the Notification Dispatcher collaborator; the engine only guarantees that
``notify`` was called.

``EventDispatcher`` is the in-process dispatcher: it fans each event out
to the handlers subscribed to its type (notification outbox, audit trail,
status counters). A failing handler does not stop the others; failures
are collected and surfaced as one ``NotificationDispatchError``.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, ClassVar, Protocol, Union
from uuid import uuid4

from ideaflow.shared.utils.logging import get_logger
from ideaflow.workflow.exceptions import NotificationDispatchError
from ideaflow.workflow.models import ActorRole, IdeaStatus

logger = get_logger(__name__)


@dataclass(frozen=True)
class StatusChanged:
    """An idea moved from one status to another."""

    event_type: ClassVar[str] = "idea.status_changed"

    idea_id: str
    from_status: IdeaStatus
    to_status: IdeaStatus
    actor_id: str
    actor_role: ActorRole
    timestamp: datetime
    version: int
    student_id: str
    college_id: str
    incubator_id: str | None = None
    from_incubator_id: str | None = None
    feedback: str | None = None
    idea_title: str | None = None
    event_id: str = field(default_factory=lambda: str(uuid4()))

    def to_dict(self) -> dict[str, Any]:
        return {
            "event_id": self.event_id,
            "event_type": self.event_type,
            "idea_id": self.idea_id,
            "from_status": self.from_status.value,
            "to_status": self.to_status.value,
            "actor_id": self.actor_id,
            "actor_role": self.actor_role.value,
            "timestamp": self.timestamp.isoformat(),
            "version": self.version,
            "student_id": self.student_id,
            "college_id": self.college_id,
            "incubator_id": self.incubator_id,
            "from_incubator_id": self.from_incubator_id,
            "feedback": self.feedback,
            "idea_title": self.idea_title,
        }


@dataclass(frozen=True)
class FeedbackRecorded:
    """A reviewer attached feedback while transitioning an idea."""

    event_type: ClassVar[str] = "idea.feedback_recorded"

    idea_id: str
    actor_id: str
    actor_role: ActorRole
    status: IdeaStatus
    feedback: str
    timestamp: datetime
    version: int
    event_id: str = field(default_factory=lambda: str(uuid4()))

    def to_dict(self) -> dict[str, Any]:
        return {
            "event_id": self.event_id,
            "event_type": self.event_type,
            "idea_id": self.idea_id,
            "actor_id": self.actor_id,
            "actor_role": self.actor_role.value,
            "status": self.status.value,
            "feedback": self.feedback,
            "timestamp": self.timestamp.isoformat(),
            "version": self.version,
        }


WorkflowEvent = Union[StatusChanged, FeedbackRecorded]
EventHandler = Callable[[Any], Awaitable[None]]


class NotificationDispatcher(Protocol):
    """Port consumed by the engine. Fire-and-forget: the result is ignored."""

    async def notify(self, event: WorkflowEvent) -> None: ...


class EventDispatcher:
    """Fan-out dispatcher implementing the NotificationDispatcher port."""

    def __init__(self) -> None:
        self._handlers: dict[str, list[EventHandler]] = {}

    def subscribe(self, event_type: str, handler: EventHandler) -> None:
        """Register ``handler`` for events whose ``event_type`` matches."""
        self._handlers.setdefault(event_type, []).append(handler)
        logger.debug(
            "event_handler_subscribed",
            event_type=event_type,
            handler=getattr(handler, "__qualname__", repr(handler)),
        )

    def handlers_for(self, event_type: str) -> list[EventHandler]:
        return list(self._handlers.get(event_type, []))

    async def notify(self, event: WorkflowEvent) -> None:
        """Run every handler subscribed to the event's type.

        Raises:
            NotificationDispatchError: If at least one handler failed. All
                handlers are attempted before raising.
        """
        handlers = self.handlers_for(event.event_type)
        if not handlers:
            logger.debug("unrouted_event", event_type=event.event_type, event_id=event.event_id)
            return

        failures: list[str] = []
        for handler in handlers:
            name = getattr(handler, "__qualname__", repr(handler))
            try:
                await handler(event)
            except Exception as e:
                logger.error(
                    "event_handler_failed",
                    event_type=event.event_type,
                    event_id=event.event_id,
                    handler=name,
                    error=str(e),
                )
                failures.append(name)

        if failures:
            raise NotificationDispatchError(event.event_type, failures)
