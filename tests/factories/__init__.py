"""Test data factories for the ideaflow test suite."""

from tests.factories.dispatcher_factory import FIXED_NOW, RecordingDispatcher
from tests.factories.idea_factory import (
    CREATED_AT,
    make_feedback_recorded,
    make_idea,
    make_idea_id,
    make_status_changed,
)

__all__ = [
    "CREATED_AT",
    "FIXED_NOW",
    "RecordingDispatcher",
    "make_feedback_recorded",
    "make_idea",
    "make_idea_id",
    "make_status_changed",
]
