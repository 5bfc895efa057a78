"""Transition validation against the role policy.

Pure functions: no I/O, no shared state, safe to call from any number of
concurrent tasks.
"""

from __future__ import annotations

from ideaflow.workflow.exceptions import (
    ActorOutOfScopeError,
    AlreadyTerminalError,
    IllegalTransitionError,
    MissingIncubatorAssignmentError,
    WorkflowError,
)
from ideaflow.workflow.models import (
    INCUBATOR_STATUSES,
    ActorRole,
    ActorScope,
    Idea,
    IdeaStatus,
    parse_role,
    parse_status,
)
from ideaflow.workflow.state_machine import can_transition


def check_transition(
    idea: Idea,
    actor_role: ActorRole | str,
    target_status: IdeaStatus | str,
    incubator_id: str | None = None,
) -> WorkflowError | None:
    """Return the first policy violation for the request, or None if it is legal.

    Checks run in a fixed order: terminal status, role policy edge, then the
    incubator assignment required by ``forwarded`` and ``incubated``.
    """
    if idea.is_terminal:
        return AlreadyTerminalError(idea.id, idea.status.value)

    role = parse_role(actor_role)
    target = parse_status(target_status)
    if role is None or target is None or not can_transition(role, idea.status, target):
        return IllegalTransitionError(
            _raw(actor_role), idea.status.value, _raw(target_status),
        )

    if target in INCUBATOR_STATUSES and not incubator_id:
        return MissingIncubatorAssignmentError(target.value)

    return None


def validate_transition(
    idea: Idea,
    actor_role: ActorRole | str,
    target_status: IdeaStatus | str,
    incubator_id: str | None = None,
) -> None:
    """Validate a transition request, raising the matching WorkflowError if invalid."""
    error = check_transition(idea, actor_role, target_status, incubator_id)
    if error is not None:
        raise error


def check_actor_scope(
    idea: Idea,
    actor_role: ActorRole,
    scope: ActorScope | None,
    incubator_id: str | None = None,
) -> ActorOutOfScopeError | None:
    """Return an error when a scoped reviewer acts outside their tenancy.

    College admins may only act on ideas of their own college. Incubator
    managers may only act on ideas assigned to their incubator (or not yet
    assigned) and may only assign their own incubator.
    """
    if scope is None:
        return None

    if actor_role is ActorRole.COLLEGE_ADMIN and scope.college_id is not None:
        if idea.college_id != scope.college_id:
            return ActorOutOfScopeError(
                actor_role.value, idea.id, "idea belongs to a different college",
            )

    if actor_role is ActorRole.INCUBATOR_MANAGER and scope.incubator_id is not None:
        if idea.incubator_id is not None and idea.incubator_id != scope.incubator_id:
            return ActorOutOfScopeError(
                actor_role.value, idea.id, "idea is assigned to a different incubator",
            )
        if incubator_id is not None and incubator_id != scope.incubator_id:
            return ActorOutOfScopeError(
                actor_role.value, idea.id, "cannot assign an idea to another incubator",
            )

    return None


def _raw(value: object) -> str:
    return value.value if isinstance(value, (ActorRole, IdeaStatus)) else str(value)
