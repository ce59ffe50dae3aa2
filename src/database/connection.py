"""
PPE Safety Violation Tracker - Database Connection Management
Provides SQLAlchemy connection pooling and ORM session management.

- get_db_session() returns ORM sessions used by repositories and services
- configure_engine() swaps the engine (tests bind an in-memory SQLite engine)
"""

import functools
from contextlib import contextmanager
from sqlalchemy import create_engine, text
from sqlalchemy.pool import QueuePool
from sqlalchemy.engine import Engine, URL
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from typing import Generator, Optional

from utils.config import (
    DATABASE_URL, DB_HOST, DB_PORT, DB_NAME, DB_USER, DB_PASSWORD,
    DB_POOL_SIZE, DB_POOL_MAX_OVERFLOW, DB_POOL_RECYCLE, DB_POOL_PRE_PING,
    config
)
from utils.errors import StoreUnavailableError
from utils.logger import logger, log_database_error


class DatabaseConnection:
    """
    Manages database engine lifecycle.

    Features:
    - MySQL connection pooling (10 connections + 20 overflow) by default
    - Any SQLAlchemy URL through DATABASE_URL
    - Health checks before connection use (pool_pre_ping)
    """

    def __init__(self):
        self._engine: Optional[Engine] = None

    def get_engine(self) -> Engine:
        """
        Get or create the SQLAlchemy engine.

        Returns:
            SQLAlchemy Engine instance

        Raises:
            DatabaseConnectionError: If the engine cannot be created
        """
        if self._engine is None:
            try:
                if DATABASE_URL:
                    self._engine = create_engine(
                        DATABASE_URL,
                        pool_pre_ping=DB_POOL_PRE_PING,
                        hide_parameters=True,
                    )
                else:
                    # URL.create() keeps the password out of logs
                    connection_url = URL.create(
                        drivername="mysql+pymysql",
                        username=DB_USER,
                        password=DB_PASSWORD,
                        host=DB_HOST,
                        port=DB_PORT,
                        database=DB_NAME,
                        query={"charset": "utf8mb4"},
                    )
                    self._engine = create_engine(
                        connection_url,
                        poolclass=QueuePool,
                        pool_size=DB_POOL_SIZE,
                        max_overflow=DB_POOL_MAX_OVERFLOW,
                        pool_recycle=DB_POOL_RECYCLE,
                        pool_pre_ping=DB_POOL_PRE_PING,
                        echo=False,
                        hide_parameters=True,
                    )

                logger.info("Database engine initialized", extra={
                    "dialect": self._engine.dialect.name,
                    "database": DB_NAME if not DATABASE_URL else None,
                    "environment": config.environment
                })

            except Exception as e:
                log_database_error(e, "Failed to create database engine")
                raise DatabaseConnectionError(f"Failed to create database engine: {e}")

        return self._engine

    def set_engine(self, engine: Engine) -> None:
        """Replace the engine (disposing of the previous one)."""
        if self._engine is not None and self._engine is not engine:
            self._engine.dispose()
        self._engine = engine

    def test_connection(self) -> bool:
        """
        Test database connectivity.

        Returns:
            True if connection successful, False otherwise
        """
        try:
            with self.get_engine().connect() as conn:
                conn.execute(text("SELECT 1")).fetchone()
            return True
        except Exception as e:
            logger.error("Database connection test failed", extra={
                "error": str(e)
            })
            return False

    def close(self):
        """Close all connections in the pool."""
        if self._engine is not None:
            self._engine.dispose()
            self._engine = None
            logger.info("Database connection pool closed")


class DatabaseConnectionError(Exception):
    """Raised when database connection fails."""
    pass


# Global database connection instance
db = DatabaseConnection()


def test_database_connection() -> bool:
    """Test database connectivity."""
    return db.test_connection()


def configure_engine(engine: Engine) -> None:
    """
    Use `engine` for every session created from now on.

    Args:
        engine: SQLAlchemy engine (tests pass an in-memory SQLite engine)
    """
    from models.base import SessionLocal, db_session

    db_session.remove()
    db.set_engine(engine)
    SessionLocal.configure(bind=engine)


@contextmanager
def get_db_session() -> Generator[Session, None, None]:
    """
    Context manager for ORM database sessions.

    Sessions are committed on success or rolled back on error.

    Yields:
        SQLAlchemy Session object

    Example:
        >>> from database.repositories.violation_repository import ViolationRepository
        >>> with get_db_session() as session:
        ...     repo = ViolationRepository(session)
        ...     total = repo.count()
    """
    from models.base import SessionLocal, db_session

    if SessionLocal.kw.get('bind') is None:
        SessionLocal.configure(bind=db.get_engine())

    session = db_session()

    try:
        yield session
        session.commit()
    except Exception as e:
        session.rollback()
        if isinstance(e, SQLAlchemyError):
            log_database_error(e, "ORM transaction failed, rolled back")
        raise
    finally:
        session.close()
        db_session.remove()  # Remove scoped session to prevent connection leaks


def store_operation(context: str):
    """
    Decorator for repository methods: a SQLAlchemy failure is logged and
    re-raised as StoreUnavailableError so callers see one transient error type.

    Args:
        context: Description used in the database error log entry
    """
    def decorator(fn):
        @functools.wraps(fn)
        def wrapper(*args, **kwargs):
            try:
                return fn(*args, **kwargs)
            except SQLAlchemyError as e:
                log_database_error(e, context)
                raise StoreUnavailableError(f"{context}: {e}") from e
        return wrapper
    return decorator
