"""Role policy for the idea lifecycle.

Statuses: draft | submitted → under_review → endorsed → forwarded → incubated
Terminal: incubated, rejected. Admins may additionally reject any
non-terminal idea.

The table below is the single authority on which (role, from, to) moves
are legal; anything absent is illegal.
"""

from __future__ import annotations

from ideaflow.workflow.models import (
    TERMINAL_STATUSES,
    ActorRole,
    IdeaStatus,
)

Edges = dict[IdeaStatus, frozenset[IdeaStatus]]

_COLLEGE_ADMIN_EDGES: Edges = {
    IdeaStatus.SUBMITTED: frozenset({
        IdeaStatus.UNDER_REVIEW,
        IdeaStatus.ENDORSED,
        IdeaStatus.REJECTED,
    }),
    IdeaStatus.UNDER_REVIEW: frozenset({IdeaStatus.ENDORSED, IdeaStatus.REJECTED}),
    IdeaStatus.ENDORSED: frozenset({IdeaStatus.FORWARDED}),
}

_INCUBATOR_MANAGER_EDGES: Edges = {
    IdeaStatus.FORWARDED: frozenset({IdeaStatus.INCUBATED, IdeaStatus.REJECTED}),
    # Direct path when the forwarding step is skipped.
    IdeaStatus.ENDORSED: frozenset({IdeaStatus.INCUBATED, IdeaStatus.REJECTED}),
}


def _merge(*tables: Edges) -> Edges:
    merged: dict[IdeaStatus, set[IdeaStatus]] = {}
    for table in tables:
        for source, targets in table.items():
            merged.setdefault(source, set()).update(targets)
    return {source: frozenset(targets) for source, targets in merged.items()}


def _admin_edges() -> Edges:
    override: Edges = {
        status: frozenset({IdeaStatus.REJECTED})
        for status in IdeaStatus
        if status not in TERMINAL_STATUSES
    }
    return _merge(_COLLEGE_ADMIN_EDGES, _INCUBATOR_MANAGER_EDGES, override)


ROLE_POLICY: dict[ActorRole, Edges] = {
    ActorRole.STUDENT: {},
    ActorRole.COLLEGE_ADMIN: _COLLEGE_ADMIN_EDGES,
    ActorRole.INCUBATOR_MANAGER: _INCUBATOR_MANAGER_EDGES,
    ActorRole.ADMIN: _admin_edges(),
}


def allowed(role: ActorRole, from_status: IdeaStatus) -> frozenset[IdeaStatus]:
    """Return the statuses ``role`` may move an idea to from ``from_status``."""
    if from_status in TERMINAL_STATUSES:
        return frozenset()
    return ROLE_POLICY.get(role, {}).get(from_status, frozenset())


def can_transition(role: ActorRole, from_status: IdeaStatus, to_status: IdeaStatus) -> bool:
    """Check whether the policy has an edge for (role, from, to)."""
    return to_status in allowed(role, from_status)


def outgoing_statuses(from_status: IdeaStatus) -> frozenset[IdeaStatus]:
    """Union of targets reachable from ``from_status`` by any role."""
    targets: set[IdeaStatus] = set()
    for role in ActorRole:
        targets |= allowed(role, from_status)
    return frozenset(targets)


def policy_edges() -> frozenset[tuple[ActorRole, IdeaStatus, IdeaStatus]]:
    """Enumerate every legal (role, from, to) triple."""
    return frozenset(
        (role, source, target)
        for role in ActorRole
        for source in IdeaStatus
        for target in allowed(role, source)
    )


def dead_end_statuses() -> frozenset[IdeaStatus]:
    """Non-terminal statuses that no role can leave. Expected to be empty."""
    return frozenset(
        status
        for status in IdeaStatus
        if status not in TERMINAL_STATUSES and not outgoing_statuses(status)
    )
