"""Student and stakeholder notifications produced from workflow events."""
