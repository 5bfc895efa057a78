"""SQLAlchemy-backed Idea Store.

Each call opens its own short-lived session from the factory, so every
compare-and-swap is an independent transaction and concurrent bulk tasks
never share a session. The swap is a conditional
``UPDATE ... WHERE id = :id AND version = :expected``; a zero row count
means another writer won the race (or the row is gone).
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from ideaflow.infrastructure.database.models import IdeaRecord
from ideaflow.repositories.base import IdeaStore
from ideaflow.repositories.exceptions import (
    ConcurrencyError,
    DuplicateEntityError,
    EntityNotFoundError,
    RepositoryError,
)
from ideaflow.shared.utils.datetime_utils import ensure_utc
from ideaflow.shared.utils.logging import get_logger
from ideaflow.workflow.models import ActorRole, Idea, IdeaStatus

logger = get_logger(__name__)


def record_to_idea(record: IdeaRecord) -> Idea:
    """Convert an ORM row into the immutable domain snapshot."""
    return Idea(
        id=record.id,
        status=IdeaStatus(record.status),
        student_id=record.student_id,
        college_id=record.college_id,
        version=record.version,
        created_at=ensure_utc(record.created_at),
        updated_at=ensure_utc(record.updated_at),
        status_changed_at=ensure_utc(record.status_changed_at),
        incubator_id=record.incubator_id,
        reviewer_id=record.reviewer_id,
        reviewer_role=ActorRole(record.reviewer_role) if record.reviewer_role else None,
        feedback=record.feedback,
        title=record.title,
    )


def _mutable_values(idea: Idea) -> dict[str, Any]:
    # student_id, college_id and created_at are immutable after creation.
    return {
        "status": idea.status.value,
        "incubator_id": idea.incubator_id,
        "reviewer_id": idea.reviewer_id,
        "reviewer_role": idea.reviewer_role.value if idea.reviewer_role else None,
        "feedback": idea.feedback,
        "version": idea.version,
        "updated_at": idea.updated_at,
        "status_changed_at": idea.status_changed_at,
    }


class SqlAlchemyIdeaStore(IdeaStore):
    """Idea Store over the ``ideas`` table."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def add(self, idea: Idea) -> Idea:
        """Insert a newly created idea."""
        record = IdeaRecord(
            id=idea.id,
            student_id=idea.student_id,
            college_id=idea.college_id,
            title=idea.title,
            created_at=idea.created_at,
            **_mutable_values(idea),
        )
        async with self._session_factory() as session:
            try:
                session.add(record)
                await session.commit()
            except IntegrityError as e:
                await session.rollback()
                raise DuplicateEntityError("Idea", idea.id) from e
            except SQLAlchemyError as e:
                await session.rollback()
                raise RepositoryError("Failed to insert idea", {"idea_id": idea.id}) from e
        logger.debug("idea_added", idea_id=idea.id, status=idea.status.value)
        return idea

    async def get(self, idea_id: str) -> Idea | None:
        async with self._session_factory() as session:
            try:
                result = await session.execute(
                    select(IdeaRecord).where(IdeaRecord.id == idea_id)
                )
            except SQLAlchemyError as e:
                raise RepositoryError("Failed to load idea", {"idea_id": idea_id}) from e
            record = result.scalar_one_or_none()
        return record_to_idea(record) if record is not None else None

    async def get_many(self, idea_ids: Iterable[str]) -> list[Idea]:
        ids = list(dict.fromkeys(idea_ids))
        if not ids:
            return []
        async with self._session_factory() as session:
            try:
                result = await session.execute(
                    select(IdeaRecord).where(IdeaRecord.id.in_(ids))
                )
            except SQLAlchemyError as e:
                raise RepositoryError("Failed to load ideas", {"count": len(ids)}) from e
            by_id = {record.id: record_to_idea(record) for record in result.scalars().all()}
        return [by_id[i] for i in ids if i in by_id]

    async def list_all(self) -> list[Idea]:
        """Return every stored idea, e.g. to seed derived counters at startup."""
        async with self._session_factory() as session:
            try:
                result = await session.execute(select(IdeaRecord).order_by(IdeaRecord.created_at))
            except SQLAlchemyError as e:
                raise RepositoryError("Failed to list ideas") from e
            return [record_to_idea(record) for record in result.scalars().all()]

    async def compare_and_swap(
        self,
        idea_id: str,
        expected_version: int,
        new_idea: Idea,
    ) -> Idea:
        async with self._session_factory() as session:
            try:
                result = await session.execute(
                    update(IdeaRecord)
                    .where(
                        IdeaRecord.id == idea_id,
                        IdeaRecord.version == expected_version,
                    )
                    .values(**_mutable_values(new_idea))
                )
                if result.rowcount == 1:
                    await session.commit()
                    return new_idea

                await session.rollback()
                current = await session.execute(
                    select(IdeaRecord.version).where(IdeaRecord.id == idea_id)
                )
                actual_version = current.scalar_one_or_none()
            except SQLAlchemyError as e:
                await session.rollback()
                raise RepositoryError(
                    "Failed to write idea",
                    {"idea_id": idea_id, "expected_version": expected_version},
                ) from e

        if actual_version is None:
            raise EntityNotFoundError("Idea", idea_id)
        raise ConcurrencyError("Idea", idea_id, expected_version, actual_version)
