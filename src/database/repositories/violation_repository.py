"""
PPE Safety Violation Tracker - Violation Repository
Provides the record-store query contract over the violations tables using
SQLAlchemy ORM. Returns ViolationRecord dataclasses, never ORM objects.

All ranges are inclusive at both ends (start <= timestamp <= end).
"""

from datetime import datetime
from typing import List, Optional, Dict, Tuple, Sequence
from sqlalchemy import select, func, delete
from sqlalchemy.orm import Session

from database.connection import store_operation
from models.orm_violation import Violation, ViolationLabel
from models.violation import ViolationRecord
from utils.logger import logger


class ViolationRepository:
    """
    Repository for violation records.

    Implements:
    - Count queries (total, by time range, by employee)
    - Full, range and per-employee lookups, ordered by timestamp then id
    - Label tallies and top-employee tallies for a time range
    - Create / delete used by the violation write path

    Every query reflects the store's state at call time. SQLAlchemy errors
    surface as StoreUnavailableError.
    """

    def __init__(self, session: Session):
        """
        Initialize repository with SQLAlchemy session.

        Args:
            session: SQLAlchemy session object
        """
        self.session = session

    @store_operation("Failed to count violations")
    def count(self) -> int:
        return self.session.scalar(select(func.count(Violation.violation_id)))

    @store_operation("Failed to count violations in range")
    def count_in_range(self, start: datetime, end: datetime) -> int:
        stmt = (
            select(func.count(Violation.violation_id))
            .where(Violation.timestamp.between(start, end))
        )
        return self.session.scalar(stmt)

    @store_operation("Failed to count employee violations")
    def count_by_employee(self, employee_id: int) -> int:
        stmt = (
            select(func.count(Violation.violation_id))
            .where(Violation.employee_id == employee_id)
        )
        return self.session.scalar(stmt)

    @store_operation("Failed to count employee violations in range")
    def count_by_employee_in_range(self, employee_id: int, start: datetime, end: datetime) -> int:
        stmt = (
            select(func.count(Violation.violation_id))
            .where(Violation.employee_id == employee_id)
            .where(Violation.timestamp.between(start, end))
        )
        return self.session.scalar(stmt)

    @store_operation("Failed to fetch violations")
    def find_all(self) -> List[ViolationRecord]:
        """
        Fetch every violation.

        Returns:
            ViolationRecord list ordered by timestamp, then id
        """
        stmt = select(Violation).order_by(Violation.timestamp, Violation.violation_id)
        return self._to_records(self.session.scalars(stmt).unique().all())

    @store_operation("Failed to fetch violations in range")
    def find_in_range(self, start: datetime, end: datetime) -> List[ViolationRecord]:
        """
        Fetch all violations whose timestamp falls in [start, end].

        Returns:
            ViolationRecord list ordered by timestamp, then id
        """
        stmt = (
            select(Violation)
            .where(Violation.timestamp.between(start, end))
            .order_by(Violation.timestamp, Violation.violation_id)
        )
        return self._to_records(self.session.scalars(stmt).unique().all())

    @store_operation("Failed to fetch employee violations")
    def find_by_employee(self, employee_id: int) -> List[ViolationRecord]:
        """
        Fetch all violations of one employee.

        Returns:
            ViolationRecord list ordered by timestamp, then id
        """
        stmt = (
            select(Violation)
            .where(Violation.employee_id == employee_id)
            .order_by(Violation.timestamp, Violation.violation_id)
        )
        return self._to_records(self.session.scalars(stmt).unique().all())

    @store_operation("Failed to count labels in range")
    def label_counts_in_range(self, start: datetime, end: datetime) -> Dict[str, int]:
        """
        Count how many violations in [start, end] carry each label.

        Ordered by count descending. Equal counts keep the order in which the
        labels were first stored (lowest label_id first), so the first key
        is a deterministic "most violated" label.

        Returns:
            Ordered mapping label -> count
        """
        label_count = func.count(ViolationLabel.label_id).label('label_count')
        first_seen = func.min(ViolationLabel.label_id).label('first_seen')
        stmt = (
            select(ViolationLabel.label, label_count, first_seen)
            .join(Violation, Violation.violation_id == ViolationLabel.violation_id)
            .where(Violation.timestamp.between(start, end))
            .group_by(ViolationLabel.label)
            .order_by(label_count.desc(), first_seen.asc())
        )
        return {row.label: row.label_count for row in self.session.execute(stmt)}

    @store_operation("Failed to rank employees in range")
    def top_employee_counts_in_range(
        self,
        start: datetime,
        end: datetime,
        limit: int
    ) -> List[Tuple[int, int]]:
        """
        Get the employees with the most violations in [start, end].

        Returns:
            (employee_id, count) pairs, count descending, employee_id ascending on ties
        """
        violation_count = func.count(Violation.violation_id).label('violation_count')
        stmt = (
            select(Violation.employee_id, violation_count)
            .where(Violation.timestamp.between(start, end))
            .group_by(Violation.employee_id)
            .order_by(violation_count.desc(), Violation.employee_id.asc())
            .limit(limit)
        )
        return [(row.employee_id, row.violation_count) for row in self.session.execute(stmt)]

    @store_operation("Failed to fetch violation")
    def get_by_id(self, violation_id: int) -> Optional[ViolationRecord]:
        violation = self.session.get(Violation, violation_id)
        if violation is None:
            return None
        return ViolationRecord.from_orm(violation)

    @store_operation("Failed to check violation existence")
    def exists(self, violation_id: int) -> bool:
        stmt = select(Violation.violation_id).where(Violation.violation_id == violation_id)
        return self.session.scalar(stmt) is not None

    @store_operation("Failed to create violation")
    def create(
        self,
        image_url: str,
        labels: Sequence[str],
        employee_id: int,
        reported_by_id: int,
        timestamp: datetime,
        location: Optional[str] = None
    ) -> ViolationRecord:
        """
        Insert a violation with its labels.

        The caller validates labels and ids and owns the commit.

        Returns:
            Created ViolationRecord
        """
        violation = Violation(
            image_url=image_url,
            employee_id=employee_id,
            reported_by_id=reported_by_id,
            location=location,
            timestamp=timestamp,
            labels=[
                ViolationLabel(label=label, position=position)
                for position, label in enumerate(labels)
            ],
        )
        self.session.add(violation)
        self.session.flush()  # Get the violation_id without committing
        self.session.refresh(violation)

        logger.info(f"Stored violation ID {violation.violation_id} for employee {employee_id}")
        return ViolationRecord.from_orm(violation)

    @store_operation("Failed to delete violation")
    def delete(self, violation_id: int) -> bool:
        """
        Delete a violation and its labels.

        Returns:
            True if a row was deleted, False if the id did not exist
        """
        self.session.execute(
            delete(ViolationLabel).where(ViolationLabel.violation_id == violation_id)
        )
        result = self.session.execute(
            delete(Violation).where(Violation.violation_id == violation_id)
        )
        self.session.flush()
        return result.rowcount > 0

    def _to_records(self, violations: Sequence[Violation]) -> List[ViolationRecord]:
        return [ViolationRecord.from_orm(violation) for violation in violations]
