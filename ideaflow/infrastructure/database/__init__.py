"""Database infrastructure package."""

from ideaflow.infrastructure.database.models import (
    AuditLogRecord,
    Base,
    IdeaRecord,
    NotificationRecord,
)
from ideaflow.infrastructure.database.session import (
    close_db,
    get_engine,
    get_session_factory,
    init_db,
)

__all__ = [
    "AuditLogRecord",
    "Base",
    "IdeaRecord",
    "NotificationRecord",
    "close_db",
    "get_engine",
    "get_session_factory",
    "init_db",
]
