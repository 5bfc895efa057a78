"""Tests for the idea domain model."""

import pytest

from ideaflow.workflow.models import (
    ActorRole,
    Idea,
    IdeaStatus,
    parse_role,
    parse_status,
)

from tests.factories import FIXED_NOW, make_idea


class TestIdeaCreate:

    def test_defaults_to_submitted_version_one(self):
        idea = Idea.create("student-1", "college-1", title="Drone seeding", now=FIXED_NOW)

        assert idea.status is IdeaStatus.SUBMITTED
        assert idea.version == 1
        assert idea.incubator_id is None
        assert idea.created_at == idea.status_changed_at == FIXED_NOW

    def test_draft_allowed(self):
        assert Idea.create("s", "c", status=IdeaStatus.DRAFT).status is IdeaStatus.DRAFT

    def test_non_initial_status_rejected(self):
        with pytest.raises(ValueError):
            Idea.create("s", "c", status=IdeaStatus.ENDORSED)


class TestWithTransition:

    def test_increments_version_and_records_reviewer(self):
        idea = make_idea(version=3)

        updated = idea.with_transition(
            IdeaStatus.UNDER_REVIEW, "r-1", ActorRole.COLLEGE_ADMIN, "Looks promising", None,
            FIXED_NOW,
        )

        assert updated.version == 4
        assert updated.reviewer_id == "r-1"
        assert updated.feedback == "Looks promising"
        assert updated.updated_at == FIXED_NOW
        assert idea.version == 3

    def test_incubator_cleared_outside_incubator_statuses(self):
        idea = make_idea(status=IdeaStatus.FORWARDED, incubator_id="incubator-1")

        updated = idea.with_transition(
            IdeaStatus.REJECTED, "a-1", ActorRole.ADMIN, None, "incubator-1", FIXED_NOW,
        )

        assert updated.incubator_id is None

    def test_terminal_property(self):
        assert make_idea(status=IdeaStatus.INCUBATED).is_terminal
        assert not make_idea(status=IdeaStatus.NURTURE).is_terminal

    def test_to_dict(self):
        data = make_idea(idea_id="idea-1").to_dict()

        assert data["id"] == "idea-1"
        assert data["status"] == "submitted"
        assert data["reviewer_role"] is None


class TestParsing:

    def test_parse_status(self):
        assert parse_status("nurture") is IdeaStatus.NURTURE
        assert parse_status(IdeaStatus.DRAFT) is IdeaStatus.DRAFT
        assert parse_status("archived") is None

    def test_parse_role(self):
        assert parse_role("incubator_manager") is ActorRole.INCUBATOR_MANAGER
        assert parse_role("dean") is None
