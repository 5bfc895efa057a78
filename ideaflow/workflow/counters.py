"""Per-college and per-incubator status counters.

Kept current from ``StatusChanged`` events so dashboards can read counts
without scanning the idea table. Counts are derived data: ``seed`` rebuilds
them from a store snapshot after a restart.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable

from ideaflow.shared.utils.logging import get_logger
from ideaflow.workflow.events import StatusChanged
from ideaflow.workflow.models import INCUBATOR_STATUSES, Idea, IdeaStatus

logger = get_logger(__name__)

COLLEGE = "college"
INCUBATOR = "incubator"


class StatusCounters:
    """In-memory status counts keyed by (scope type, scope id)."""

    def __init__(self) -> None:
        self._counts: dict[tuple[str, str], Counter[IdeaStatus]] = {}

    def seed(self, ideas: Iterable[Idea]) -> None:
        """Replace all counts with those derived from ``ideas``."""
        self._counts.clear()
        total = 0
        for idea in ideas:
            self._bump(COLLEGE, idea.college_id, idea.status, 1)
            if idea.incubator_id:
                self._bump(INCUBATOR, idea.incubator_id, idea.status, 1)
            total += 1
        logger.info("status_counters_seeded", ideas=total, scopes=len(self._counts))

    async def handle_status_changed(self, event: StatusChanged) -> None:
        self._bump(COLLEGE, event.college_id, event.from_status, -1)
        self._bump(COLLEGE, event.college_id, event.to_status, 1)

        if event.from_incubator_id and event.from_status in INCUBATOR_STATUSES:
            self._bump(INCUBATOR, event.from_incubator_id, event.from_status, -1)
        if event.incubator_id and event.to_status in INCUBATOR_STATUSES:
            self._bump(INCUBATOR, event.incubator_id, event.to_status, 1)

    def count(self, scope_type: str, scope_id: str, status: IdeaStatus) -> int:
        counter = self._counts.get((scope_type, scope_id))
        return counter[status] if counter else 0

    def snapshot(self) -> dict[str, dict[str, dict[str, int]]]:
        """Return counts as ``{scope_type: {scope_id: {status: n}}}``."""
        result: dict[str, dict[str, dict[str, int]]] = {}
        for (scope_type, scope_id), counter in self._counts.items():
            result.setdefault(scope_type, {})[scope_id] = {
                status.value: n for status, n in counter.items() if n
            }
        return result

    def _bump(self, scope_type: str, scope_id: str, status: IdeaStatus, delta: int) -> None:
        counter = self._counts.setdefault((scope_type, scope_id), Counter())
        counter[status] += delta
        if counter[status] < 0:
            # Event arrived for an idea the seed did not see.
            logger.warning(
                "status_counter_negative",
                scope_type=scope_type,
                scope_id=scope_id,
                status=status.value,
            )
            counter[status] = 0
