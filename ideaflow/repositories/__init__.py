"""Idea Store port and its adapters."""

from ideaflow.repositories.base import IdeaStore
from ideaflow.repositories.exceptions import (
    ConcurrencyError,
    DuplicateEntityError,
    EntityNotFoundError,
    RepositoryError,
)
from ideaflow.repositories.memory import InMemoryIdeaStore

__all__ = [
    "IdeaStore",
    "InMemoryIdeaStore",
    "RepositoryError",
    "EntityNotFoundError",
    "DuplicateEntityError",
    "ConcurrencyError",
]
