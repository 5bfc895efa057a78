"""Custom exceptions for the idea workflow engine.

Each exception carries a machine-readable ``error_type`` drawn from
``ErrorKind``. The engine catches these at its boundary and reports them
as typed ``TransitionResult`` failures; they are only raised directly by
the validator helpers and the bulk batch-size guard.
"""

from enum import Enum


class ErrorKind(str, Enum):
    """Closed taxonomy of workflow failure reasons."""

    NOT_FOUND = "not_found"
    ILLEGAL_TRANSITION = "illegal_transition"
    ALREADY_TERMINAL = "already_terminal"
    MISSING_INCUBATOR_ASSIGNMENT = "missing_incubator_assignment"
    VERSION_CONFLICT = "version_conflict"
    ACTOR_OUT_OF_SCOPE = "actor_out_of_scope"
    STORE_UNAVAILABLE = "store_unavailable"
    CANCELLED = "cancelled"
    NOTIFICATION_DISPATCH_FAILED = "notification_dispatch_failed"
    BULK_LIMIT_EXCEEDED = "bulk_limit_exceeded"


# Kinds a caller may reissue after re-reading state (or simply later).
RETRYABLE_KINDS: frozenset[ErrorKind] = frozenset({
    ErrorKind.VERSION_CONFLICT,
    ErrorKind.STORE_UNAVAILABLE,
    ErrorKind.CANCELLED,
})


class WorkflowError(Exception):
    """Base exception for workflow engine errors."""

    def __init__(self, message: str, error_type: ErrorKind):
        self.message = message
        self.error_type = error_type
        super().__init__(message)

    @property
    def retryable(self) -> bool:
        return self.error_type in RETRYABLE_KINDS


class IdeaNotFoundError(WorkflowError):
    """Raised when an idea id does not exist in the store."""

    def __init__(self, idea_id: str):
        super().__init__(f"Idea '{idea_id}' not found", ErrorKind.NOT_FOUND)
        self.idea_id = idea_id


class IllegalTransitionError(WorkflowError):
    """Raised when the role policy has no edge for (role, from, to)."""

    def __init__(self, actor_role: str, current_status: str, target_status: str):
        super().__init__(
            f"Role '{actor_role}' cannot move an idea from '{current_status}' to '{target_status}'",
            ErrorKind.ILLEGAL_TRANSITION,
        )
        self.actor_role = actor_role
        self.current_status = current_status
        self.target_status = target_status


class AlreadyTerminalError(WorkflowError):
    """Raised when the idea is already incubated or rejected."""

    def __init__(self, idea_id: str, current_status: str):
        super().__init__(
            f"Idea '{idea_id}' is already '{current_status}' and cannot change status",
            ErrorKind.ALREADY_TERMINAL,
        )
        self.idea_id = idea_id
        self.current_status = current_status


class MissingIncubatorAssignmentError(WorkflowError):
    """Raised when forwarding or incubating without an incubator id."""

    def __init__(self, target_status: str):
        super().__init__(
            f"An incubator id is required to move an idea to '{target_status}'",
            ErrorKind.MISSING_INCUBATOR_ASSIGNMENT,
        )
        self.target_status = target_status


class VersionConflictError(WorkflowError):
    """Raised when the stored version no longer matches the expected version."""

    def __init__(self, idea_id: str, expected_version: int, actual_version: int | None = None):
        message = f"Idea '{idea_id}' was modified concurrently: expected version {expected_version}"
        if actual_version is not None:
            message += f", found {actual_version}"
        super().__init__(message, ErrorKind.VERSION_CONFLICT)
        self.idea_id = idea_id
        self.expected_version = expected_version
        self.actual_version = actual_version


class ActorOutOfScopeError(WorkflowError):
    """Raised when a reviewer acts on an idea outside their college or incubator."""

    def __init__(self, actor_role: str, idea_id: str, reason: str):
        super().__init__(
            f"Role '{actor_role}' cannot act on idea '{idea_id}': {reason}",
            ErrorKind.ACTOR_OUT_OF_SCOPE,
        )
        self.actor_role = actor_role
        self.idea_id = idea_id
        self.reason = reason


class StoreUnavailableError(WorkflowError):
    """Raised when the Idea Store fails for reasons other than a conflict."""

    def __init__(self, idea_id: str, detail: str):
        super().__init__(
            f"Idea store failed while processing '{idea_id}': {detail}",
            ErrorKind.STORE_UNAVAILABLE,
        )
        self.idea_id = idea_id
        self.detail = detail


class NotificationDispatchError(WorkflowError):
    """Raised by the dispatcher when one or more event handlers failed."""

    def __init__(self, event_type: str, failures: list[str]):
        super().__init__(
            f"Dispatch of '{event_type}' failed in {len(failures)} handler(s): {', '.join(failures)}",
            ErrorKind.NOTIFICATION_DISPATCH_FAILED,
        )
        self.event_type = event_type
        self.failures = failures


class BulkLimitExceededError(WorkflowError):
    """Raised when a bulk request exceeds the configured batch size."""

    def __init__(self, requested: int, limit: int):
        super().__init__(
            f"Bulk request of {requested} ideas exceeds the limit of {limit}",
            ErrorKind.BULK_LIMIT_EXCEEDED,
        )
        self.requested = requested
        self.limit = limit
