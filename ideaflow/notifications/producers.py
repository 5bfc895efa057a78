"""Notification producer that translates workflow events into outbox rows.

Every status change produces one student notification using the
status-specific template below. With stakeholder notifications enabled,
the incubator is told when an idea is forwarded to it and the college is
told when one of its ideas is incubated.
"""

from __future__ import annotations

from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from ideaflow.notifications.service import NotificationService
from ideaflow.shared.utils.logging import get_logger
from ideaflow.workflow.events import StatusChanged
from ideaflow.workflow.models import IdeaStatus

logger = get_logger(__name__)


# ---------------------------------------------------------------------------
# Template registry
# ---------------------------------------------------------------------------
# Each entry is keyed by the new status and holds:
#   (title, message_template, notification_type)
# Message templates use str.format() with ``title`` and ``status``.

STATUS_NOTIFICATION_TEMPLATES: dict[IdeaStatus, tuple[str, str, str]] = {
    IdeaStatus.UNDER_REVIEW: (
        "Idea Under Review 📋",
        'Your idea "{title}" is now under review by college administrators. '
        "We'll notify you of the decision soon!",
        "info",
    ),
    IdeaStatus.ENDORSED: (
        "Idea Endorsed! 🎉",
        'Congratulations! Your idea "{title}" has been endorsed by your college '
        "and is being considered for incubation.",
        "success",
    ),
    IdeaStatus.FORWARDED: (
        "Idea Forwarded to Incubator 🚀",
        'Great news! Your idea "{title}" has been forwarded to the incubator for final review.',
        "success",
    ),
    IdeaStatus.NURTURE: (
        "Idea Needs Improvement 📝",
        'Your idea "{title}" needs some improvements. Please check the feedback '
        "and update your idea.",
        "warning",
    ),
    IdeaStatus.REJECTED: (
        "Idea Feedback 📝",
        'Your idea "{title}" needs some improvements. Please check the feedback '
        "and consider resubmitting.",
        "warning",
    ),
    IdeaStatus.INCUBATED: (
        "Idea Selected for Incubation! 🎊",
        'Amazing! Your idea "{title}" has been selected for incubation. Welcome to the program!',
        "success",
    ),
}

DEFAULT_TEMPLATE: tuple[str, str, str] = (
    "Idea Status Updated",
    'Your idea "{title}" status has been updated to {status}.',
    "info",
)

INCUBATOR_FORWARDED_TEMPLATE: tuple[str, str, str] = (
    "New Idea for Incubation Review",
    'Endorsed idea "{title}" is ready for incubation review.',
    "info",
)

COLLEGE_INCUBATED_TEMPLATE: tuple[str, str, str] = (
    "Idea Successfully Incubated! 🚀",
    'Congratulations! Idea "{title}" from your college has been selected for incubation.',
    "success",
)


def render_template(template: tuple[str, str, str], event: StatusChanged) -> tuple[str, str, str]:
    """Return (title, message, notification_type) for an event."""
    title, message_template, notification_type = template
    message = message_template.format(
        title=event.idea_title or event.idea_id,
        status=event.to_status.value,
    )
    return title, message, notification_type


class NotificationProducer:
    """Translates ``StatusChanged`` events into notification outbox rows.

    All rows for one event are written in a single transaction, so a
    failure leaves none of them behind and propagates to the dispatcher.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        notify_stakeholders: bool = True,
    ) -> None:
        self._session_factory = session_factory
        self.notify_stakeholders = notify_stakeholders

    def build_notifications(self, event: StatusChanged) -> list[dict[str, Any]]:
        """Return the keyword arguments of every notification for ``event``."""
        data = {
            "idea_id": event.idea_id,
            "idea_title": event.idea_title,
            "old_status": event.from_status.value,
            "new_status": event.to_status.value,
            "reviewer_id": event.actor_id,
            "reviewer_role": event.actor_role.value,
            "feedback": event.feedback,
        }

        template = STATUS_NOTIFICATION_TEMPLATES.get(event.to_status, DEFAULT_TEMPLATE)
        title, message, notification_type = render_template(template, event)
        notifications = [
            {
                "recipient_type": "student",
                "recipient_id": event.student_id,
                "title": title,
                "message": message,
                "notification_type": notification_type,
                "data": data,
            }
        ]

        if not self.notify_stakeholders:
            return notifications

        if event.to_status is IdeaStatus.FORWARDED and event.incubator_id:
            title, message, notification_type = render_template(INCUBATOR_FORWARDED_TEMPLATE, event)
            notifications.append({
                "recipient_type": "incubator",
                "recipient_id": event.incubator_id,
                "title": title,
                "message": message,
                "notification_type": notification_type,
                "data": {**data, "student_id": event.student_id, "college_id": event.college_id},
            })

        if event.to_status is IdeaStatus.INCUBATED:
            title, message, notification_type = render_template(COLLEGE_INCUBATED_TEMPLATE, event)
            notifications.append({
                "recipient_type": "college",
                "recipient_id": event.college_id,
                "title": title,
                "message": message,
                "notification_type": notification_type,
                "data": {**data, "student_id": event.student_id, "incubator_id": event.incubator_id},
            })

        return notifications

    async def handle_status_changed(self, event: StatusChanged) -> None:
        notifications = self.build_notifications(event)

        async with self._session_factory() as session:
            service = NotificationService(session)
            try:
                for kwargs in notifications:
                    await service.create_notification(**kwargs)
                await session.commit()
            except SQLAlchemyError:
                await session.rollback()
                logger.exception(
                    "notification_creation_failed",
                    idea_id=event.idea_id,
                    event_id=event.event_id,
                )
                raise

        logger.info(
            "notifications_produced",
            idea_id=event.idea_id,
            to_status=event.to_status.value,
            recipient_count=len(notifications),
        )


__all__ = [
    "NotificationProducer",
    "STATUS_NOTIFICATION_TEMPLATES",
    "render_template",
]
