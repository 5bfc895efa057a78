"""Audit trail recorder.

Writes one append-only ``audit_logs`` row per workflow event. Rows carry
the event id under a unique constraint, so a redelivered event is recorded
once.
"""

from __future__ import annotations

from typing import Any

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from ideaflow.infrastructure.database.models import AuditLogRecord
from ideaflow.shared.utils.logging import get_logger
from ideaflow.workflow.events import FeedbackRecorded, StatusChanged

logger = get_logger(__name__)

ACTION_STATUS_CHANGED = "IDEA_STATUS_CHANGED"
ACTION_FEEDBACK_RECORDED = "IDEA_FEEDBACK_RECORDED"
ACTION_CATEGORY = "WORKFLOW"


def status_change_entry(event: StatusChanged) -> dict[str, Any]:
    return {
        "event_id": event.event_id,
        "user_id": event.actor_id,
        "user_role": event.actor_role.value,
        "action": ACTION_STATUS_CHANGED,
        "resource_id": event.idea_id,
        "description": (
            f"Idea status changed from {event.from_status.value} to {event.to_status.value}"
        ),
        "old_values": {
            "status": event.from_status.value,
            "incubator_id": event.from_incubator_id,
            "version": event.version - 1,
        },
        "new_values": {
            "status": event.to_status.value,
            "incubator_id": event.incubator_id,
            "version": event.version,
        },
        "created_at": event.timestamp,
    }


def feedback_entry(event: FeedbackRecorded) -> dict[str, Any]:
    return {
        "event_id": event.event_id,
        "user_id": event.actor_id,
        "user_role": event.actor_role.value,
        "action": ACTION_FEEDBACK_RECORDED,
        "resource_id": event.idea_id,
        "description": f"Feedback recorded while moving idea to {event.status.value}",
        "old_values": None,
        "new_values": {
            "feedback": event.feedback,
            "status": event.status.value,
            "version": event.version,
        },
        "created_at": event.timestamp,
    }


class AuditTrailRecorder:
    """Persists workflow events as audit log rows."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def record_status_change(self, event: StatusChanged) -> None:
        await self._write(status_change_entry(event))

    async def record_feedback(self, event: FeedbackRecorded) -> None:
        await self._write(feedback_entry(event))

    async def _write(self, entry: dict[str, Any]) -> None:
        record = AuditLogRecord(
            action_category=ACTION_CATEGORY,
            resource_type="idea",
            **entry,
        )
        async with self._session_factory() as session:
            try:
                session.add(record)
                await session.commit()
            except IntegrityError:
                await session.rollback()
                logger.info(
                    "audit_entry_already_recorded",
                    event_id=entry["event_id"],
                    action=entry["action"],
                )
                return
            except SQLAlchemyError:
                await session.rollback()
                logger.exception(
                    "audit_entry_write_failed",
                    event_id=entry["event_id"],
                    action=entry["action"],
                )
                raise

        logger.debug(
            "audit_entry_recorded",
            event_id=entry["event_id"],
            action=entry["action"],
            resource_id=entry["resource_id"],
        )
