"""Bulk Operator: applies one transition to many ideas.

Each id is handed to the workflow engine independently, so one idea's
failure never blocks or rolls back another's success. Ids run concurrently
up to ``bulk_concurrency`` and the report always lists every requested id,
in the order it was first requested.
"""

from __future__ import annotations

import asyncio
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

from ideaflow.repositories.base import IdeaStore
from ideaflow.repositories.exceptions import RepositoryError
from ideaflow.shared.utils.logging import get_logger
from ideaflow.workflow.config import WorkflowSettings, get_workflow_settings
from ideaflow.workflow.engine import Outcome, TransitionResult, WorkflowEngine
from ideaflow.workflow.exceptions import (
    BulkLimitExceededError,
    ErrorKind,
    IdeaNotFoundError,
    StoreUnavailableError,
)
from ideaflow.workflow.models import ActorRole, ActorScope, IdeaStatus

logger = get_logger(__name__)

CANCELLED_MESSAGE = "Bulk operation was cancelled before this idea was attempted"


@dataclass
class BulkResult:
    """Per-id report of a bulk transition, in request order."""

    results: list[TransitionResult] = field(default_factory=list)

    @property
    def succeeded(self) -> list[TransitionResult]:
        return [r for r in self.results if r.outcome is Outcome.SUCCESS]

    @property
    def failed(self) -> list[TransitionResult]:
        return [
            r for r in self.results
            if r.outcome is Outcome.FAILURE and r.error_kind is not ErrorKind.CANCELLED
        ]

    @property
    def cancelled(self) -> list[str]:
        return [r.idea_id for r in self.results if r.error_kind is ErrorKind.CANCELLED]

    def result_for(self, idea_id: str) -> TransitionResult | None:
        for result in self.results:
            if result.idea_id == idea_id:
                return result
        return None

    def to_dict(self) -> dict[str, Any]:
        return {
            "succeeded": [
                {"idea_id": r.idea_id, "new_version": r.new_version} for r in self.succeeded
            ],
            "failed": [
                {
                    "idea_id": r.idea_id,
                    "error_kind": r.error_kind.value if r.error_kind else None,
                    "error_message": r.error_message,
                }
                for r in self.failed
            ],
            "cancelled": self.cancelled,
        }


class BulkOperator:
    """Runs the same transition over a batch of ideas through the engine."""

    def __init__(
        self,
        engine: WorkflowEngine,
        store: IdeaStore,
        settings: WorkflowSettings | None = None,
    ) -> None:
        self.engine = engine
        self.store = store
        self.settings = settings or get_workflow_settings()

    async def apply_bulk(
        self,
        idea_ids: Iterable[str],
        actor_role: ActorRole | str,
        actor_id: str,
        target_status: IdeaStatus | str,
        feedback: str | None = None,
        incubator_id: str | None = None,
        *,
        scope: ActorScope | None = None,
        cancel_event: asyncio.Event | None = None,
    ) -> BulkResult:
        """Apply ``target_status`` to every id in ``idea_ids``.

        Duplicate ids are collapsed, first occurrence wins. Current versions
        come from one batch read; ids it does not return are reported as
        ``not_found``. Setting ``cancel_event`` stops ids that have not
        started yet, which are reported as ``cancelled``; ids already
        committed stay committed.

        Raises:
            BulkLimitExceededError: If the batch is larger than
                ``bulk_max_batch_size``. Nothing is attempted in that case.
        """
        ids = list(dict.fromkeys(idea_ids))
        if len(ids) > self.settings.bulk_max_batch_size:
            raise BulkLimitExceededError(len(ids), self.settings.bulk_max_batch_size)
        if not ids:
            return BulkResult()

        try:
            versions = {idea.id: idea.version for idea in await self.store.get_many(ids)}
        except Exception as e:
            reason = e.message if isinstance(e, RepositoryError) else str(e)
            logger.error("bulk_batch_read_failed", count=len(ids), error=reason)
            return BulkResult([
                TransitionResult.failure(idea_id, StoreUnavailableError(idea_id, reason))
                for idea_id in ids
            ])

        semaphore = asyncio.Semaphore(self.settings.bulk_concurrency)

        async def run_one(idea_id: str) -> TransitionResult:
            if idea_id not in versions:
                return TransitionResult.failure(idea_id, IdeaNotFoundError(idea_id))
            async with semaphore:
                if cancel_event is not None and cancel_event.is_set():
                    return TransitionResult(
                        idea_id=idea_id,
                        outcome=Outcome.FAILURE,
                        error_kind=ErrorKind.CANCELLED,
                        error_message=CANCELLED_MESSAGE,
                    )
                return await self.engine.transition(
                    idea_id,
                    versions[idea_id],
                    actor_role,
                    actor_id,
                    target_status,
                    feedback=feedback,
                    incubator_id=incubator_id,
                    scope=scope,
                )

        results = await asyncio.gather(*(run_one(idea_id) for idea_id in ids))
        report = BulkResult(list(results))

        logger.info(
            "bulk_transition_completed",
            actor_id=actor_id,
            target_status=str(getattr(target_status, "value", target_status)),
            requested=len(ids),
            succeeded=len(report.succeeded),
            failed=len(report.failed),
            cancelled=len(report.cancelled),
        )
        return report
