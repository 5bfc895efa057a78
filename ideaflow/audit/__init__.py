"""Audit trail of workflow actions."""
