"""Idea Store port.

The workflow engine depends on persistence only through this narrow
interface: read one, read many, and an optimistic compare-and-swap write.
"""

from abc import ABC, abstractmethod
from collections.abc import Iterable

from ideaflow.workflow.models import Idea


class IdeaStore(ABC):
    """Abstract Idea Store with optimistic-concurrency writes."""

    @abstractmethod
    async def get(self, idea_id: str) -> Idea | None:
        """Return the stored idea, or None if the id is unknown."""

    @abstractmethod
    async def get_many(self, idea_ids: Iterable[str]) -> list[Idea]:
        """Best-effort batch read. Unknown ids are omitted from the result."""

    @abstractmethod
    async def compare_and_swap(
        self,
        idea_id: str,
        expected_version: int,
        new_idea: Idea,
    ) -> Idea:
        """Replace the stored idea if its version still equals ``expected_version``.

        Returns:
            The idea as stored after the write.

        Raises:
            ConcurrencyError: If the stored version differs from ``expected_version``.
            EntityNotFoundError: If no idea with ``idea_id`` exists.
        """
