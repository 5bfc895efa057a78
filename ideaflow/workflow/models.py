"""Domain vocabulary for the idea lifecycle.

Statuses and actor roles are closed enumerations; every component matches
on these members instead of comparing free-form strings.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from enum import Enum
from uuid import uuid4

from ideaflow.shared.utils.datetime_utils import utcnow


class IdeaStatus(str, Enum):
    """Lifecycle status of an idea."""

    DRAFT = "draft"
    SUBMITTED = "submitted"
    UNDER_REVIEW = "under_review"
    ENDORSED = "endorsed"
    FORWARDED = "forwarded"
    INCUBATED = "incubated"
    NURTURE = "nurture"
    REJECTED = "rejected"


class ActorRole(str, Enum):
    """Role an actor holds when requesting a transition."""

    STUDENT = "student"
    COLLEGE_ADMIN = "college_admin"
    INCUBATOR_MANAGER = "incubator_manager"
    ADMIN = "admin"


INITIAL_STATUSES: frozenset[IdeaStatus] = frozenset({IdeaStatus.DRAFT, IdeaStatus.SUBMITTED})
TERMINAL_STATUSES: frozenset[IdeaStatus] = frozenset({IdeaStatus.INCUBATED, IdeaStatus.REJECTED})

# Statuses that carry an assigned incubator; every other status must not.
INCUBATOR_STATUSES: frozenset[IdeaStatus] = frozenset({IdeaStatus.FORWARDED, IdeaStatus.INCUBATED})


def is_terminal(status: IdeaStatus) -> bool:
    return status in TERMINAL_STATUSES


def parse_status(value: IdeaStatus | str) -> IdeaStatus | None:
    """Coerce a raw status value, returning None when it is not a known status."""
    if isinstance(value, IdeaStatus):
        return value
    try:
        return IdeaStatus(value)
    except ValueError:
        return None


def parse_role(value: ActorRole | str) -> ActorRole | None:
    """Coerce a raw role value, returning None when it is not a known role."""
    if isinstance(value, ActorRole):
        return value
    try:
        return ActorRole(value)
    except ValueError:
        return None


@dataclass(frozen=True)
class Idea:
    """Snapshot of an idea as held by the Idea Store.

    Instances are immutable; the engine derives the next state with
    ``dataclasses.replace`` and hands it to the store's compare-and-swap.
    """

    id: str
    status: IdeaStatus
    student_id: str
    college_id: str
    version: int
    created_at: datetime
    updated_at: datetime
    status_changed_at: datetime
    incubator_id: str | None = None
    reviewer_id: str | None = None
    reviewer_role: ActorRole | None = None
    feedback: str | None = None
    title: str | None = None

    @classmethod
    def create(
        cls,
        student_id: str,
        college_id: str,
        status: IdeaStatus = IdeaStatus.SUBMITTED,
        title: str | None = None,
        idea_id: str | None = None,
        now: datetime | None = None,
    ) -> Idea:
        """Build a newly submitted idea at version 1.

        Raises:
            ValueError: If ``status`` is not an initial status.
        """
        if status not in INITIAL_STATUSES:
            raise ValueError(
                f"Ideas can only be created as {sorted(s.value for s in INITIAL_STATUSES)}, "
                f"got '{status.value}'"
            )
        created = now or utcnow()
        return cls(
            id=idea_id or str(uuid4()),
            status=status,
            student_id=student_id,
            college_id=college_id,
            version=1,
            created_at=created,
            updated_at=created,
            status_changed_at=created,
            title=title,
        )

    @property
    def is_terminal(self) -> bool:
        return is_terminal(self.status)

    def with_transition(
        self,
        target: IdeaStatus,
        reviewer_id: str,
        reviewer_role: ActorRole,
        feedback: str | None,
        incubator_id: str | None,
        now: datetime,
    ) -> Idea:
        """Return the next state of this idea after a validated transition.

        The incubator assignment is kept only for statuses that carry one.
        """
        return replace(
            self,
            status=target,
            reviewer_id=reviewer_id,
            reviewer_role=reviewer_role,
            feedback=feedback,
            incubator_id=incubator_id if target in INCUBATOR_STATUSES else None,
            version=self.version + 1,
            updated_at=now,
            status_changed_at=now,
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "status": self.status.value,
            "student_id": self.student_id,
            "college_id": self.college_id,
            "incubator_id": self.incubator_id,
            "reviewer_id": self.reviewer_id,
            "reviewer_role": self.reviewer_role.value if self.reviewer_role else None,
            "feedback": self.feedback,
            "title": self.title,
            "version": self.version,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
            "status_changed_at": self.status_changed_at.isoformat(),
        }


@dataclass(frozen=True)
class ActorScope:
    """Tenancy of the acting reviewer.

    ``college_id`` applies to college admins and ``incubator_id`` to
    incubator managers. Admins are never scoped.
    """

    college_id: str | None = None
    incubator_id: str | None = None
