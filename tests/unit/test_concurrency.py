"""Tests for concurrent transitions racing on the same idea."""

import asyncio

import pytest

from ideaflow.workflow.engine import Outcome
from ideaflow.workflow.exceptions import ErrorKind
from ideaflow.workflow.models import ActorRole, IdeaStatus

from tests.factories import make_idea


class TestOptimisticConcurrency:
    """Exactly one writer wins per expected version."""

    @pytest.mark.asyncio
    async def test_two_reviewers_same_version(self, engine, store, dispatcher):
        idea = await store.add(make_idea(status=IdeaStatus.SUBMITTED))

        results = await asyncio.gather(
            engine.transition(idea.id, 1, ActorRole.COLLEGE_ADMIN, "r-1", IdeaStatus.ENDORSED),
            engine.transition(idea.id, 1, ActorRole.COLLEGE_ADMIN, "r-2", IdeaStatus.REJECTED),
        )

        outcomes = sorted(r.outcome.value for r in results)
        assert outcomes == ["failure", "success"]
        winner = next(r for r in results if r.outcome is Outcome.SUCCESS)
        loser = next(r for r in results if r.outcome is Outcome.FAILURE)
        assert loser.error_kind is ErrorKind.VERSION_CONFLICT

        stored = await store.get(idea.id)
        assert stored.version == 2
        assert stored.status is winner.idea.status
        assert len(dispatcher.events) == 1

    @pytest.mark.asyncio
    async def test_many_concurrent_writers(self, engine, store):
        idea = await store.add(make_idea(status=IdeaStatus.UNDER_REVIEW))

        results = await asyncio.gather(*(
            engine.transition(idea.id, 1, ActorRole.ADMIN, f"a-{i}", IdeaStatus.REJECTED)
            for i in range(10)
        ))

        assert sum(r.succeeded for r in results) == 1
        assert all(
            r.error_kind is ErrorKind.VERSION_CONFLICT for r in results if not r.succeeded
        )
        assert (await store.get(idea.id)).version == 2

    @pytest.mark.asyncio
    async def test_different_ideas_do_not_interfere(self, engine, store):
        ideas = [await store.add(make_idea(status=IdeaStatus.SUBMITTED)) for _ in range(5)]

        results = await asyncio.gather(*(
            engine.transition(i.id, 1, ActorRole.COLLEGE_ADMIN, "r-1", IdeaStatus.UNDER_REVIEW)
            for i in ideas
        ))

        assert all(r.succeeded for r in results)
        for idea in ideas:
            assert (await store.get(idea.id)).status is IdeaStatus.UNDER_REVIEW

    @pytest.mark.asyncio
    async def test_retry_after_reread_succeeds(self, engine, store):
        idea = await store.add(make_idea(status=IdeaStatus.SUBMITTED))
        await engine.transition(idea.id, 1, ActorRole.COLLEGE_ADMIN, "r-1", IdeaStatus.UNDER_REVIEW)

        stale = await engine.transition(
            idea.id, 1, ActorRole.COLLEGE_ADMIN, "r-2", IdeaStatus.ENDORSED,
        )
        current = await store.get(idea.id)
        retried = await engine.transition(
            idea.id, current.version, ActorRole.COLLEGE_ADMIN, "r-2", IdeaStatus.ENDORSED,
        )

        assert stale.error_kind is ErrorKind.VERSION_CONFLICT
        assert retried.succeeded
        assert retried.new_version == 3
