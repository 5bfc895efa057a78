"""Global pytest fixtures for the ideaflow test suite.

This module provides shared fixtures for testing including:
- An in-memory Idea Store and a recording notification dispatcher
- Workflow engine and bulk operator wired to those doubles
- Mock async database sessions for the SQL-backed components
"""

from unittest.mock import AsyncMock, MagicMock

import pytest

from ideaflow.repositories.memory import InMemoryIdeaStore
from ideaflow.workflow.bulk import BulkOperator
from ideaflow.workflow.config import WorkflowSettings
from ideaflow.workflow.engine import WorkflowEngine

from tests.factories.dispatcher_factory import FIXED_NOW, RecordingDispatcher


# ===========================================
# WORKFLOW FIXTURES
# ===========================================


@pytest.fixture
def store() -> InMemoryIdeaStore:
    return InMemoryIdeaStore()


@pytest.fixture
def dispatcher() -> RecordingDispatcher:
    return RecordingDispatcher()


@pytest.fixture
def engine(store, dispatcher) -> WorkflowEngine:
    return WorkflowEngine(store, dispatcher, clock=lambda: FIXED_NOW)


@pytest.fixture
def settings() -> WorkflowSettings:
    return WorkflowSettings(
        _env_file=None,
        bulk_concurrency=4,
        bulk_max_batch_size=10,
    )


@pytest.fixture
def bulk(engine, store, settings) -> BulkOperator:
    return BulkOperator(engine, store, settings)


# ===========================================
# DATABASE SESSION FIXTURES
# ===========================================


@pytest.fixture
def mock_session() -> AsyncMock:
    """Create a mock async database session."""
    session = AsyncMock()
    session.add = MagicMock()
    session.execute = AsyncMock()
    session.commit = AsyncMock()
    session.flush = AsyncMock()
    session.rollback = AsyncMock()

    # Mock context manager behavior
    session.__aenter__ = AsyncMock(return_value=session)
    session.__aexit__ = AsyncMock(return_value=None)
    return session


@pytest.fixture
def session_factory(mock_session) -> MagicMock:
    """Session factory double returning ``mock_session`` on every call."""
    return MagicMock(return_value=mock_session)
