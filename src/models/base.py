"""
SQLAlchemy ORM Base Configuration
Provides declarative base and session management for ORM models.

The session factory is bound lazily by database.connection so importing the
models never opens a connection.
"""

from sqlalchemy.orm import DeclarativeBase, scoped_session, sessionmaker


class Base(DeclarativeBase):
    """Base class for all ORM models"""
    pass


# Session factory, bound to an engine by database.connection
SessionLocal = sessionmaker(
    expire_on_commit=False,  # Allow access to objects after commit
    autoflush=True,
)

# Scoped session for Flask request context (thread-local session management)
db_session = scoped_session(SessionLocal)
