"""In-process Idea Store.

Holds ideas in a dict keyed by id. Every call yields to the event loop
once, the way a network round-trip would, so concurrent transitions
interleave realistically. The version check and the write in
``compare_and_swap`` run without an await in between, which makes the
swap atomic for all tasks on the same event loop.
"""

from __future__ import annotations

import asyncio
from collections.abc import Iterable

from ideaflow.repositories.base import IdeaStore
from ideaflow.repositories.exceptions import (
    ConcurrencyError,
    DuplicateEntityError,
    EntityNotFoundError,
)
from ideaflow.shared.utils.logging import get_logger
from ideaflow.workflow.models import Idea

logger = get_logger(__name__)


class InMemoryIdeaStore(IdeaStore):
    """Dict-backed Idea Store for tests, tooling and single-process use."""

    def __init__(self, ideas: Iterable[Idea] = ()) -> None:
        self._ideas: dict[str, Idea] = {}
        for idea in ideas:
            self._insert(idea)

    def _insert(self, idea: Idea) -> None:
        if idea.id in self._ideas:
            raise DuplicateEntityError("Idea", idea.id)
        self._ideas[idea.id] = idea

    async def add(self, idea: Idea) -> Idea:
        """Store a newly created idea (the submission collaborator's write)."""
        await asyncio.sleep(0)
        self._insert(idea)
        logger.debug("idea_added", idea_id=idea.id, status=idea.status.value)
        return idea

    async def get(self, idea_id: str) -> Idea | None:
        await asyncio.sleep(0)
        return self._ideas.get(idea_id)

    async def get_many(self, idea_ids: Iterable[str]) -> list[Idea]:
        await asyncio.sleep(0)
        return [self._ideas[i] for i in dict.fromkeys(idea_ids) if i in self._ideas]

    async def compare_and_swap(
        self,
        idea_id: str,
        expected_version: int,
        new_idea: Idea,
    ) -> Idea:
        await asyncio.sleep(0)
        current = self._ideas.get(idea_id)
        if current is None:
            raise EntityNotFoundError("Idea", idea_id)
        if current.version != expected_version:
            raise ConcurrencyError("Idea", idea_id, expected_version, current.version)
        self._ideas[idea_id] = new_idea
        return new_idea

    def snapshot(self) -> list[Idea]:
        """Return every stored idea (used to seed derived counters)."""
        return list(self._ideas.values())

    def __len__(self) -> int:
        return len(self._ideas)
