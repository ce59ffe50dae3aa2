# PPE Safety Violation Tracker - Models Package

# Import all ORM models to register them with SQLAlchemy's declarative base
# This ensures string-based relationship() forward references can be resolved
# IMPORTANT: Use relative imports to avoid duplicate module loading issues
from .base import Base, SessionLocal, db_session
from .orm_user import User, Role
from .orm_violation import Violation, ViolationLabel

__all__ = [
    'Base',
    'SessionLocal',
    'db_session',
    'User',
    'Role',
    'Violation',
    'ViolationLabel',
]
