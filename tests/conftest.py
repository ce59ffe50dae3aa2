"""
PPE Safety Violation Tracker - pytest Configuration and Fixtures

Provides shared test fixtures for:
- Statistics settings and a controllable cache clock
- An in-memory SQLite record store bound to the ORM session factory
- Helpers for inserting users and violations

Integration tests use the SQLite store through the same get_db_session()
path the API uses; unit tests mock the repositories instead.
"""

import pytest
from datetime import datetime
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

from utils.config import StatisticsSettings


# ============================================================================
# Settings / Clock Fixtures
# ============================================================================

class FakeClock:
    """Manually advanced time source for QueryCache TTL tests."""

    def __init__(self, start: float = 1_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def fake_clock():
    """Cache clock starting at a fixed epoch second."""
    return FakeClock()


@pytest.fixture
def settings():
    """
    Statistics settings with small, readable defaults.

    Returns:
        StatisticsSettings with 300s TTLs and the default label vocabulary
    """
    return StatisticsSettings(
        dashboard_ttl_seconds=300,
        employee_stats_ttl_seconds=300,
        time_series_ttl_seconds=300,
        ranking_ttl_seconds=300,
        dashboard_top_violators=5,
        ranking_default_limit=10,
        time_series_default_days=30,
        report_recent_violations=10,
        report_top_labels=5,
        allowed_labels=frozenset({'Helmet', 'Vest', 'Head', 'Person', 'No Helmet', 'No Vest'}),
        timezone='UTC',
    )


# ============================================================================
# Record Store Fixtures
# ============================================================================

@pytest.fixture
def sqlite_engine():
    """
    In-memory SQLite engine with the full schema, bound to get_db_session().

    StaticPool keeps one shared connection so every session sees the same
    in-memory database, including sessions opened from other threads.
    """
    from database.connection import configure_engine
    from models import Base

    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    configure_engine(engine)

    yield engine

    Base.metadata.drop_all(engine)


@pytest.fixture
def db_session(sqlite_engine):
    """Plain ORM session on the SQLite store (caller commits)."""
    from models.base import SessionLocal

    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def make_user(db_session):
    """
    Factory inserting a committed user.

    Usage:
        alice = make_user("Alice Adams")
        admin = make_user("Root", role=Role.ADMIN)
    """
    from models.orm_user import Role
    from database.repositories.user_repository import UserRepository

    counter = {'n': 0}

    def _make(full_name: str, role=Role.EMPLOYEE):
        counter['n'] += 1
        username = f"user{counter['n']}"
        ref = UserRepository(db_session).create(
            username=username,
            email=f"{username}@example.com",
            full_name=full_name,
            role=role
        )
        db_session.commit()
        return ref

    return _make


@pytest.fixture
def make_violation(db_session):
    """
    Factory inserting a committed violation directly (no eviction hook).

    Usage:
        make_violation(alice, ["No Helmet"], datetime(2025, 6, 10, 9, 0))
    """
    from database.repositories.violation_repository import ViolationRepository

    def _make(employee, labels, timestamp: datetime, reporter=None, location=None):
        record = ViolationRepository(db_session).create(
            image_url="https://images.example.com/frame.jpg",
            labels=labels,
            employee_id=employee.user_id,
            reported_by_id=(reporter or employee).user_id,
            timestamp=timestamp,
            location=location
        )
        db_session.commit()
        return record

    return _make
