"""Infrastructure modules: ORM models and database session management."""
