"""Notification outbox service.

Writes ``NotificationRecord`` rows that a delivery transport (email, push,
in-app) picks up later. Delivery itself is not part of this package.
"""

from __future__ import annotations

from typing import Any
from uuid import uuid4

from sqlalchemy import and_, select
from sqlalchemy.ext.asyncio import AsyncSession

from ideaflow.infrastructure.database.models import NotificationRecord
from ideaflow.shared.utils.datetime_utils import utcnow
from ideaflow.shared.utils.logging import get_logger

logger = get_logger(__name__)

RECIPIENT_TYPES = ("student", "college", "incubator")
NOTIFICATION_TYPES = ("info", "success", "warning", "error")


def _notification_to_dict(notification: NotificationRecord) -> dict[str, Any]:
    """Serialise a NotificationRecord row to a plain dictionary."""
    return {
        "id": notification.id,
        "recipient_type": notification.recipient_type,
        "recipient_id": notification.recipient_id,
        "title": notification.title,
        "message": notification.message,
        "notification_type": notification.notification_type,
        "data": notification.data,
        "read_at": notification.read_at.isoformat() if notification.read_at else None,
        "created_at": notification.created_at.isoformat() if notification.created_at else None,
    }


class NotificationService:
    """Outbox writes and reads.

    All methods operate within the caller-provided ``AsyncSession``.
    The caller is responsible for committing or rolling back.
    """

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def create_notification(
        self,
        recipient_type: str,
        recipient_id: str,
        title: str,
        message: str,
        notification_type: str = "info",
        data: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Queue a notification for a student, college or incubator audience.

        Args:
            recipient_type: One of ``student``, ``college``, ``incubator``.
            recipient_id: Id of the recipient within that audience.
            title: Short human-readable title.
            message: Full notification text.
            notification_type: One of ``info``, ``success``, ``warning``, ``error``.
            data: Optional JSON payload for the transport / UI.

        Returns:
            Serialised notification dict.

        Raises:
            ValueError: If ``recipient_type`` or ``notification_type`` is unknown.
        """
        if recipient_type not in RECIPIENT_TYPES:
            raise ValueError(f"Unknown recipient type '{recipient_type}'")
        if notification_type not in NOTIFICATION_TYPES:
            raise ValueError(f"Unknown notification type '{notification_type}'")

        notification = NotificationRecord(
            id=str(uuid4()),
            recipient_type=recipient_type,
            recipient_id=recipient_id,
            title=title,
            message=message,
            notification_type=notification_type,
            data=data,
            created_at=utcnow(),
        )
        self.session.add(notification)
        await self.session.flush()

        logger.info(
            "notification_created",
            notification_id=notification.id,
            recipient_type=recipient_type,
            recipient_id=recipient_id,
            notification_type=notification_type,
        )
        return _notification_to_dict(notification)

    async def get_notifications(
        self,
        recipient_type: str,
        recipient_id: str,
        unread_only: bool = False,
        limit: int = 50,
    ) -> list[dict[str, Any]]:
        """Return a recipient's notifications, newest first."""
        conditions = [
            NotificationRecord.recipient_type == recipient_type,
            NotificationRecord.recipient_id == recipient_id,
        ]
        if unread_only:
            conditions.append(NotificationRecord.read_at.is_(None))

        result = await self.session.execute(
            select(NotificationRecord)
            .where(and_(*conditions))
            .order_by(NotificationRecord.created_at.desc())
            .limit(limit)
        )
        return [_notification_to_dict(n) for n in result.scalars().all()]
