"""Infrastructure layer: SQLAlchemy integration and provider implementations."""
