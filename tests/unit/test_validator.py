"""Tests for transition validation and actor scope checks."""

import pytest

from ideaflow.workflow.exceptions import (
    ActorOutOfScopeError,
    AlreadyTerminalError,
    ErrorKind,
    IllegalTransitionError,
    MissingIncubatorAssignmentError,
)
from ideaflow.workflow.models import ActorRole, ActorScope, IdeaStatus
from ideaflow.workflow.validator import (
    check_actor_scope,
    check_transition,
    validate_transition,
)

from tests.factories import make_idea


class TestCheckTransition:
    """Test check_transition ordering and outcomes."""

    @pytest.mark.parametrize("status", [IdeaStatus.INCUBATED, IdeaStatus.REJECTED])
    @pytest.mark.parametrize("role", list(ActorRole))
    @pytest.mark.parametrize("target", list(IdeaStatus))
    def test_terminal_always_already_terminal(self, status, role, target):
        idea = make_idea(status=status)
        error = check_transition(idea, role, target, incubator_id="incubator-1")
        assert isinstance(error, AlreadyTerminalError)
        assert error.error_type is ErrorKind.ALREADY_TERMINAL

    def test_legal_transition_returns_none(self):
        idea = make_idea(status=IdeaStatus.SUBMITTED)
        assert check_transition(idea, ActorRole.COLLEGE_ADMIN, IdeaStatus.ENDORSED) is None

    def test_accepts_raw_strings(self):
        idea = make_idea(status=IdeaStatus.SUBMITTED)
        assert check_transition(idea, "college_admin", "under_review") is None

    def test_student_cannot_move_endorsed(self):
        idea = make_idea(status=IdeaStatus.ENDORSED)
        for target in IdeaStatus:
            error = check_transition(idea, ActorRole.STUDENT, target, incubator_id="incubator-1")
            assert isinstance(error, IllegalTransitionError)

    def test_unknown_role_is_illegal(self):
        idea = make_idea(status=IdeaStatus.SUBMITTED)
        error = check_transition(idea, "dean", IdeaStatus.ENDORSED)
        assert isinstance(error, IllegalTransitionError)
        assert error.actor_role == "dean"

    def test_unknown_target_is_illegal(self):
        idea = make_idea(status=IdeaStatus.SUBMITTED)
        error = check_transition(idea, ActorRole.ADMIN, "archived")
        assert isinstance(error, IllegalTransitionError)
        assert error.target_status == "archived"

    def test_illegal_checked_before_missing_incubator(self):
        idea = make_idea(status=IdeaStatus.SUBMITTED)
        error = check_transition(idea, ActorRole.COLLEGE_ADMIN, IdeaStatus.FORWARDED)
        assert isinstance(error, IllegalTransitionError)

    def test_forward_without_incubator(self):
        idea = make_idea(status=IdeaStatus.ENDORSED)
        error = check_transition(idea, ActorRole.COLLEGE_ADMIN, IdeaStatus.FORWARDED)
        assert isinstance(error, MissingIncubatorAssignmentError)
        assert error.target_status == "forwarded"

    def test_forward_with_incubator(self):
        idea = make_idea(status=IdeaStatus.ENDORSED)
        assert check_transition(
            idea, ActorRole.COLLEGE_ADMIN, IdeaStatus.FORWARDED, incubator_id="incubator-9",
        ) is None

    def test_incubate_from_endorsed_needs_incubator(self):
        idea = make_idea(status=IdeaStatus.ENDORSED)
        error = check_transition(idea, ActorRole.INCUBATOR_MANAGER, IdeaStatus.INCUBATED)
        assert isinstance(error, MissingIncubatorAssignmentError)

    def test_incubate_from_forwarded_needs_incubator(self):
        idea = make_idea(status=IdeaStatus.FORWARDED)
        error = check_transition(idea, ActorRole.INCUBATOR_MANAGER, IdeaStatus.INCUBATED, "")
        assert isinstance(error, MissingIncubatorAssignmentError)


class TestValidateTransition:
    """Test the raising variant."""

    def test_raises_on_violation(self):
        idea = make_idea(status=IdeaStatus.REJECTED)
        with pytest.raises(AlreadyTerminalError):
            validate_transition(idea, ActorRole.ADMIN, IdeaStatus.SUBMITTED)

    def test_passes_silently(self):
        idea = make_idea(status=IdeaStatus.UNDER_REVIEW)
        validate_transition(idea, ActorRole.COLLEGE_ADMIN, IdeaStatus.ENDORSED)


class TestCheckActorScope:
    """Test tenancy checks for scoped reviewers."""

    def test_no_scope_skips_check(self):
        idea = make_idea(college_id="college-2")
        assert check_actor_scope(idea, ActorRole.COLLEGE_ADMIN, None) is None

    def test_college_admin_own_college(self):
        idea = make_idea(college_id="college-1")
        scope = ActorScope(college_id="college-1")
        assert check_actor_scope(idea, ActorRole.COLLEGE_ADMIN, scope) is None

    def test_college_admin_other_college(self):
        idea = make_idea(college_id="college-2")
        scope = ActorScope(college_id="college-1")
        error = check_actor_scope(idea, ActorRole.COLLEGE_ADMIN, scope)
        assert isinstance(error, ActorOutOfScopeError)
        assert error.error_type is ErrorKind.ACTOR_OUT_OF_SCOPE

    def test_incubator_manager_other_incubator(self):
        idea = make_idea(status=IdeaStatus.FORWARDED, incubator_id="incubator-2")
        scope = ActorScope(incubator_id="incubator-1")
        error = check_actor_scope(
            idea, ActorRole.INCUBATOR_MANAGER, scope, incubator_id="incubator-1",
        )
        assert isinstance(error, ActorOutOfScopeError)

    def test_incubator_manager_assigns_other_incubator(self):
        idea = make_idea(status=IdeaStatus.ENDORSED)
        scope = ActorScope(incubator_id="incubator-1")
        error = check_actor_scope(
            idea, ActorRole.INCUBATOR_MANAGER, scope, incubator_id="incubator-2",
        )
        assert isinstance(error, ActorOutOfScopeError)

    def test_incubator_manager_own_incubator(self):
        idea = make_idea(status=IdeaStatus.FORWARDED, incubator_id="incubator-1")
        scope = ActorScope(incubator_id="incubator-1")
        assert check_actor_scope(
            idea, ActorRole.INCUBATOR_MANAGER, scope, incubator_id="incubator-1",
        ) is None

    def test_admin_is_never_scoped(self):
        idea = make_idea(college_id="college-2")
        scope = ActorScope(college_id="college-1", incubator_id="incubator-1")
        assert check_actor_scope(idea, ActorRole.ADMIN, scope) is None
