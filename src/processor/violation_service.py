"""
PPE Safety Violation Tracker - Violation Service
Violation report listings, plus the write path: validate, store, commit, then evict
statistics before returning to the caller.
"""

from datetime import datetime
from typing import List, Optional, Sequence

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from database.repositories.user_repository import UserRepository
from database.repositories.violation_repository import ViolationRepository
from models.violation import ViolationRecord
from processor.statistics_coordinator import StatisticsCoordinator
from utils.config import StatisticsSettings
from utils.errors import InvalidArgumentError, ResourceNotFoundError, StoreUnavailableError
from utils.logger import log_violation_created, log_violation_deleted, log_database_error
from utils.time_windows import get_now


class ViolationService:
    """
    Lists, creates and deletes violation reports.

    Ordering guarantee: the mutation is committed before the coordinator's
    eviction hook runs, and the hook runs before the method returns. Any read
    that starts after a create/delete returns cannot see a pre-mutation
    cached statistic.
    """

    def __init__(
        self,
        session: Session,
        coordinator: StatisticsCoordinator,
        settings: StatisticsSettings
    ):
        """
        Initialize violation service.

        Args:
            session: SQLAlchemy session (committed by this service)
            coordinator: Statistics coordinator notified after each mutation
            settings: Statistics configuration (allowed label vocabulary)
        """
        self.session = session
        self.violations = ViolationRepository(session)
        self.users = UserRepository(session)
        self.coordinator = coordinator
        self.settings = settings

    def get_violation(self, violation_id: int) -> ViolationRecord:
        """
        Fetch one violation.

        Raises:
            ResourceNotFoundError: If the violation does not exist
        """
        record = self.violations.get_by_id(violation_id)
        if record is None:
            raise ResourceNotFoundError("Violation", violation_id)
        return record

    def list_violations(self) -> List[ViolationRecord]:
        return self.violations.find_all()

    def list_employee_violations(self, employee_id: int) -> List[ViolationRecord]:
        """Violations of one employee; empty when the id has none."""
        return self.violations.find_by_employee(employee_id)

    def list_violations_in_range(self, start: datetime, end: datetime) -> List[ViolationRecord]:
        """
        Violations with start <= timestamp <= end.

        Raises:
            InvalidArgumentError: If start is after end
        """
        if start > end:
            raise InvalidArgumentError(f"start {start.isoformat()} is after end {end.isoformat()}")
        return self.violations.find_in_range(start, end)

    def create_violation(
        self,
        image_url: str,
        labels: Sequence[str],
        employee_id: int,
        reported_by_id: int,
        location: Optional[str] = None,
        timestamp: Optional[datetime] = None
    ) -> ViolationRecord:
        """
        Validate and store a violation report.

        Args:
            image_url: Reference to the evidence image (non-empty)
            labels: Detected labels, each from the allowed vocabulary
            employee_id: User with the employee role
            reported_by_id: Reporting user
            location: Optional free-text location
            timestamp: When it happened (defaults to now)

        Returns:
            Stored ViolationRecord

        Raises:
            InvalidArgumentError: Bad image reference, labels, or non-employee target
            ResourceNotFoundError: Employee or reporter does not exist
        """
        if not image_url or not image_url.strip():
            raise InvalidArgumentError("Image URL is required")
        if not labels:
            raise InvalidArgumentError("At least one label is required")

        allowed = self.settings.allowed_labels
        for label in labels:
            if label not in allowed:
                raise InvalidArgumentError(
                    f"Invalid label: {label}. Allowed: {sorted(allowed)}"
                )

        employee = self.users.get_by_id(employee_id)
        if employee is None:
            raise ResourceNotFoundError("Employee", employee_id)
        if not employee.is_employee:
            raise InvalidArgumentError(f"User with ID {employee_id} is not an employee")

        if self.users.get_by_id(reported_by_id) is None:
            raise ResourceNotFoundError("User", reported_by_id)

        record = self.violations.create(
            image_url=image_url.strip(),
            labels=list(dict.fromkeys(labels)),
            employee_id=employee_id,
            reported_by_id=reported_by_id,
            timestamp=timestamp or get_now(self.settings.timezone),
            location=location
        )
        self._commit()

        self.coordinator.on_violation_created(record)
        log_violation_created(record.violation_id, employee_id, reported_by_id)
        return record

    def delete_violation(self, violation_id: int) -> None:
        """
        Delete a violation report.

        Raises:
            ResourceNotFoundError: If the violation does not exist
        """
        if not self.violations.exists(violation_id):
            raise ResourceNotFoundError("Violation", violation_id)

        self.violations.delete(violation_id)
        self._commit()

        self.coordinator.on_violation_deleted(violation_id)
        log_violation_deleted(violation_id)

    def _commit(self) -> None:
        try:
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            log_database_error(e, "Failed to commit violation change")
            raise StoreUnavailableError(f"Failed to commit violation change: {e}") from e
