"""Idea lifecycle workflow: status policy, validation, engine and bulk operator."""
