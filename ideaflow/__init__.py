"""Idea lifecycle workflow engine.

Governs how student innovation ideas move between review statuses in a
multi-tenant incubation platform.

Modules:
    - workflow: role policy, transition validation, engine, bulk operator, events
    - repositories: Idea Store port with in-memory and SQLAlchemy adapters
    - notifications: student and stakeholder notification outbox
    - audit: audit trail of status changes and reviewer feedback
    - infrastructure: ORM models and async session management
"""

__version__ = "0.1.0"
