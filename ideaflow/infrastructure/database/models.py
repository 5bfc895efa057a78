"""SQLAlchemy ORM models for the workflow database."""

from datetime import datetime
from typing import Any
from uuid import uuid4

from sqlalchemy import (
    JSON,
    CheckConstraint,
    DateTime,
    Index,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from ideaflow.shared.utils.datetime_utils import utcnow


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    type_annotation_map = {
        dict[str, Any]: JSON,
    }


def _uuid_str() -> str:
    return str(uuid4())


# ===========================================
# IDEA LIFECYCLE TABLES
# ===========================================


class IdeaRecord(Base):
    """Workflow-relevant columns of a submitted idea."""

    __tablename__ = "ideas"

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=_uuid_str)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="submitted")
    student_id: Mapped[str] = mapped_column(String(64), nullable=False)
    college_id: Mapped[str] = mapped_column(String(64), nullable=False)
    incubator_id: Mapped[str | None] = mapped_column(String(64))
    reviewer_id: Mapped[str | None] = mapped_column(String(64))
    reviewer_role: Mapped[str | None] = mapped_column(String(30))
    feedback: Mapped[str | None] = mapped_column(Text)
    title: Mapped[str | None] = mapped_column(String(200))
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    status_changed_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)

    __table_args__ = (
        CheckConstraint(
            "status IN ('draft', 'submitted', 'under_review', 'endorsed', "
            "'forwarded', 'incubated', 'nurture', 'rejected')",
            name="valid_idea_status",
        ),
        CheckConstraint(
            "(incubator_id IS NOT NULL) = (status IN ('forwarded', 'incubated'))",
            name="incubator_matches_status",
        ),
        CheckConstraint("version >= 1", name="positive_idea_version"),
        Index("idx_ideas_status", "status"),
        Index("idx_ideas_college", "college_id"),
        Index("idx_ideas_incubator", "incubator_id"),
    )


class AuditLogRecord(Base):
    """Append-only audit trail of workflow actions."""

    __tablename__ = "audit_logs"

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=_uuid_str)
    event_id: Mapped[str] = mapped_column(String(64), nullable=False, unique=True)
    user_id: Mapped[str | None] = mapped_column(String(64))
    user_role: Mapped[str | None] = mapped_column(String(30))
    action: Mapped[str] = mapped_column(String(100), nullable=False)
    action_category: Mapped[str] = mapped_column(String(30), nullable=False, default="WORKFLOW")
    resource_type: Mapped[str] = mapped_column(String(50), nullable=False, default="idea")
    resource_id: Mapped[str] = mapped_column(String(64), nullable=False)
    description: Mapped[str | None] = mapped_column(Text)
    old_values: Mapped[dict[str, Any] | None] = mapped_column(JSON)
    new_values: Mapped[dict[str, Any] | None] = mapped_column(JSON)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)

    __table_args__ = (
        Index("idx_audit_logs_resource", "resource_type", "resource_id"),
        Index("idx_audit_logs_user", "user_id"),
        Index("idx_audit_logs_created", "created_at"),
    )


class NotificationRecord(Base):
    """Outbox of notifications awaiting delivery by the transport layer."""

    __tablename__ = "notifications"

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=_uuid_str)
    recipient_type: Mapped[str] = mapped_column(String(20), nullable=False, default="student")
    recipient_id: Mapped[str] = mapped_column(String(64), nullable=False)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    message: Mapped[str] = mapped_column(Text, nullable=False)
    notification_type: Mapped[str] = mapped_column(String(20), nullable=False, default="info")
    data: Mapped[dict[str, Any] | None] = mapped_column(JSON)
    read_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)

    __table_args__ = (
        CheckConstraint(
            "recipient_type IN ('student', 'college', 'incubator')",
            name="valid_recipient_type",
        ),
        CheckConstraint(
            "notification_type IN ('info', 'success', 'warning', 'error')",
            name="valid_notification_type",
        ),
        Index("idx_notifications_recipient", "recipient_type", "recipient_id"),
    )
