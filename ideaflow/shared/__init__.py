"""Shared utilities used across ideaflow modules."""
