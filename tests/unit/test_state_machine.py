"""Tests for the idea lifecycle role policy."""

from itertools import product

import pytest

from ideaflow.workflow.models import TERMINAL_STATUSES, ActorRole, IdeaStatus
from ideaflow.workflow.state_machine import (
    ROLE_POLICY,
    allowed,
    can_transition,
    dead_end_statuses,
    outgoing_statuses,
    policy_edges,
)

S = IdeaStatus
R = ActorRole

COLLEGE_ADMIN_EDGES = {
    (S.SUBMITTED, S.UNDER_REVIEW),
    (S.SUBMITTED, S.ENDORSED),
    (S.SUBMITTED, S.REJECTED),
    (S.UNDER_REVIEW, S.ENDORSED),
    (S.UNDER_REVIEW, S.REJECTED),
    (S.ENDORSED, S.FORWARDED),
}

INCUBATOR_MANAGER_EDGES = {
    (S.FORWARDED, S.INCUBATED),
    (S.ENDORSED, S.INCUBATED),
    (S.FORWARDED, S.REJECTED),
    (S.ENDORSED, S.REJECTED),
}

ADMIN_EDGES = (
    COLLEGE_ADMIN_EDGES
    | INCUBATOR_MANAGER_EDGES
    | {(s, S.REJECTED) for s in S if s not in TERMINAL_STATUSES}
)

EXPECTED = (
    {(R.COLLEGE_ADMIN, f, t) for f, t in COLLEGE_ADMIN_EDGES}
    | {(R.INCUBATOR_MANAGER, f, t) for f, t in INCUBATOR_MANAGER_EDGES}
    | {(R.ADMIN, f, t) for f, t in ADMIN_EDGES}
)


class TestCanTransition:
    """Test can_transition against the full (role, from, to) space."""

    @pytest.mark.parametrize("role,source,target", list(product(R, S, S)))
    def test_matches_policy_table(self, role, source, target):
        assert can_transition(role, source, target) is ((role, source, target) in EXPECTED)

    def test_college_admin_endorses_submitted(self):
        assert can_transition(R.COLLEGE_ADMIN, S.SUBMITTED, S.ENDORSED) is True

    def test_college_admin_cannot_incubate(self):
        assert can_transition(R.COLLEGE_ADMIN, S.ENDORSED, S.INCUBATED) is False

    def test_incubator_manager_cannot_endorse(self):
        assert can_transition(R.INCUBATOR_MANAGER, S.SUBMITTED, S.ENDORSED) is False

    def test_admin_rejects_draft(self):
        assert can_transition(R.ADMIN, S.DRAFT, S.REJECTED) is True

    def test_admin_rejects_nurture(self):
        assert can_transition(R.ADMIN, S.NURTURE, S.REJECTED) is True

    def test_backward_move_invalid(self):
        assert can_transition(R.ADMIN, S.ENDORSED, S.SUBMITTED) is False


class TestAllowed:
    """Test allowed() lookups."""

    def test_student_has_no_edges(self):
        for status in S:
            assert allowed(R.STUDENT, status) == frozenset()

    @pytest.mark.parametrize("role", list(R))
    @pytest.mark.parametrize("status", sorted(TERMINAL_STATUSES, key=lambda s: s.value))
    def test_terminal_has_no_outgoing_edges(self, role, status):
        assert allowed(role, status) == frozenset()

    def test_college_admin_from_submitted(self):
        assert allowed(R.COLLEGE_ADMIN, S.SUBMITTED) == {
            S.UNDER_REVIEW, S.ENDORSED, S.REJECTED,
        }

    def test_incubator_manager_from_endorsed(self):
        assert allowed(R.INCUBATOR_MANAGER, S.ENDORSED) == {S.INCUBATED, S.REJECTED}

    def test_admin_from_endorsed_is_union(self):
        assert allowed(R.ADMIN, S.ENDORSED) == {S.FORWARDED, S.INCUBATED, S.REJECTED}

    def test_every_role_has_a_policy_row(self):
        assert set(ROLE_POLICY) == set(R)


class TestPolicyShape:
    """Structural properties of the policy table."""

    def test_policy_edges_enumerates_table(self):
        assert policy_edges() == EXPECTED

    def test_no_dead_end_statuses(self):
        assert dead_end_statuses() == frozenset()

    def test_outgoing_statuses_from_draft(self):
        assert outgoing_statuses(S.DRAFT) == {S.REJECTED}

    def test_outgoing_statuses_from_forwarded(self):
        assert outgoing_statuses(S.FORWARDED) == {S.INCUBATED, S.REJECTED}

    def test_nothing_targets_draft_or_submitted(self):
        targets = {target for _, _, target in policy_edges()}
        assert S.DRAFT not in targets
        assert S.SUBMITTED not in targets
