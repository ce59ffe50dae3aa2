"""
SQLAlchemy ORM Model: User
Represents people known to the system: admins, safety specialists and employees.

Users are owned by the user-management side of the application; the statistics
engine only reads them (display names, emails, roles).
"""

import enum
from sqlalchemy import String, DateTime, Enum, func
from sqlalchemy.orm import Mapped, mapped_column
from models.base import Base
from datetime import datetime


class Role(str, enum.Enum):
    ADMIN = 'ROLE_ADMIN'
    SAFETY_SPECIALIST = 'ROLE_SAFETY_SPECIALIST'
    EMPLOYEE = 'ROLE_EMPLOYEE'


class User(Base):
    __tablename__ = "users"
    __table_args__ = {'extend_existing': True}

    # Primary Key
    user_id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)

    username: Mapped[str] = mapped_column(String(50), nullable=False, unique=True)
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    full_name: Mapped[str] = mapped_column(String(255), nullable=False)

    role: Mapped[Role] = mapped_column(
        Enum(Role, name='user_role_enum', values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=Role.EMPLOYEE,
        index=True,
        comment="Only ROLE_EMPLOYEE users can be the subject of a violation"
    )

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime,
        nullable=False,
        server_default=func.now()
    )

    def __repr__(self) -> str:
        return f"<User(user_id={self.user_id}, username='{self.username}', role={self.role.value})>"
