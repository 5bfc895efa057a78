"""Repository layer exceptions.

Provides a typed exception hierarchy for Idea Store operations so the
engine can tell a lost compare-and-swap apart from a vanished row or an
infrastructure failure.
"""

from typing import Any


class RepositoryError(Exception):
    """Base exception for all repository errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} - {self.details}"
        return self.message


class EntityNotFoundError(RepositoryError):
    """Raised when an entity is not found in the store."""

    def __init__(self, entity_type: str, entity_id: str | None = None) -> None:
        details: dict[str, Any] = {"entity_type": entity_type}
        message = f"{entity_type} not found"
        if entity_id:
            details["entity_id"] = entity_id
            message = f"{entity_type} with id '{entity_id}' not found"

        super().__init__(message, details)
        self.entity_type = entity_type
        self.entity_id = entity_id


class DuplicateEntityError(RepositoryError):
    """Raised when adding an entity whose id already exists."""

    def __init__(self, entity_type: str, entity_id: str) -> None:
        super().__init__(
            f"{entity_type} with id '{entity_id}' already exists",
            {"entity_type": entity_type, "entity_id": entity_id},
        )
        self.entity_type = entity_type
        self.entity_id = entity_id


class ConcurrencyError(RepositoryError):
    """Raised when a compare-and-swap finds a different stored version."""

    def __init__(
        self,
        entity_type: str,
        entity_id: str,
        expected_version: int,
        actual_version: int | None,
    ) -> None:
        message = (
            f"Concurrent modification detected for {entity_type} '{entity_id}': "
            f"expected version {expected_version}, found {actual_version}"
        )
        details = {
            "entity_type": entity_type,
            "entity_id": entity_id,
            "expected_version": expected_version,
            "actual_version": actual_version,
        }
        super().__init__(message, details)
        self.entity_type = entity_type
        self.entity_id = entity_id
        self.expected_version = expected_version
        self.actual_version = actual_version


__all__ = [
    "RepositoryError",
    "EntityNotFoundError",
    "DuplicateEntityError",
    "ConcurrencyError",
]
