"""
PPE Safety Violation Tracker - Violation Entity Model
Represents one violation report from the violations table.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Tuple


@dataclass(frozen=True)
class ViolationRecord:
    """
    Violation report projection.

    Immutable after creation; the only other lifecycle event is deletion.
    Labels keep the order in which they were submitted.
    """
    violation_id: int
    image_reference: str
    labels: Tuple[str, ...]
    employee_id: int
    employee_name: Optional[str]
    reported_by_id: int
    reported_by_name: Optional[str]
    location: Optional[str]
    timestamp: datetime

    def to_dict(self) -> dict:
        """
        Convert violation to dictionary for API responses.

        Returns:
            Dictionary representation of the violation
        """
        return {
            "id": self.violation_id,
            "imageUrl": self.image_reference,
            "labels": list(self.labels),
            "employeeId": self.employee_id,
            "employeeName": self.employee_name,
            "reportedById": self.reported_by_id,
            "reportedByName": self.reported_by_name,
            "location": self.location,
            "timestamp": self.timestamp.isoformat()
        }

    @classmethod
    def from_orm(cls, violation) -> 'ViolationRecord':
        """
        Create ViolationRecord from an ORM Violation.

        Args:
            violation: models.orm_violation.Violation instance

        Returns:
            ViolationRecord instance
        """
        return cls(
            violation_id=violation.violation_id,
            image_reference=violation.image_url,
            labels=tuple(item.label for item in violation.labels),
            employee_id=violation.employee_id,
            employee_name=violation.employee.full_name if violation.employee else None,
            reported_by_id=violation.reported_by_id,
            reported_by_name=violation.reported_by.full_name if violation.reported_by else None,
            location=violation.location,
            timestamp=violation.timestamp
        )
