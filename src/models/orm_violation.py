"""
SQLAlchemy ORM Models: Violation, ViolationLabel
Represents PPE violation reports and the labels detected on each report.

Labels live in their own table so per-label tallies are a GROUP BY, and the
label_id sequence records the order in which each label was first seen.
"""

from sqlalchemy import String, DateTime, ForeignKey, Index, Integer
from sqlalchemy.orm import Mapped, mapped_column, relationship
from models.base import Base
from models.orm_user import User
from datetime import datetime
from typing import List, Optional


class Violation(Base):
    __tablename__ = "violations"
    __table_args__ = (
        Index('idx_violations_timestamp', 'timestamp'),
        Index('idx_violations_employee_timestamp', 'employee_id', 'timestamp'),
        {'extend_existing': True},
    )

    # Primary Key
    violation_id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)

    image_url: Mapped[str] = mapped_column(String(500), nullable=False)

    employee_id: Mapped[int] = mapped_column(
        ForeignKey("users.user_id"),
        nullable=False,
        comment="Employee caught without the required equipment"
    )
    reported_by_id: Mapped[int] = mapped_column(
        ForeignKey("users.user_id"),
        nullable=False,
        comment="User who submitted the report"
    )

    location: Mapped[Optional[str]] = mapped_column(String(200))

    timestamp: Mapped[datetime] = mapped_column(
        DateTime,
        nullable=False,
        comment="Naive local time in REPORTING_TIMEZONE"
    )

    # Relationships
    employee: Mapped[User] = relationship(foreign_keys=[employee_id], lazy="joined")
    reported_by: Mapped[User] = relationship(foreign_keys=[reported_by_id], lazy="joined")
    labels: Mapped[List["ViolationLabel"]] = relationship(
        back_populates="violation",
        cascade="all, delete-orphan",
        order_by="ViolationLabel.position",
        lazy="selectin",
    )

    def __repr__(self) -> str:
        return f"<Violation(violation_id={self.violation_id}, employee_id={self.employee_id}, timestamp={self.timestamp})>"


class ViolationLabel(Base):
    __tablename__ = "violation_labels"
    __table_args__ = (
        Index('idx_violation_labels_label', 'label'),
        {'extend_existing': True},
    )

    label_id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    violation_id: Mapped[int] = mapped_column(
        ForeignKey("violations.violation_id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    label: Mapped[str] = mapped_column(String(50), nullable=False)
    position: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
        comment="Order of the label within the submitted report"
    )

    violation: Mapped[Violation] = relationship(back_populates="labels")
