"""Database models, session, and types."""
