"""Database engine, session factory and seeding."""
