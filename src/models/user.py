"""
PPE Safety Violation Tracker - Employee Reference Model
Read-only projection of a row in the users table.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class EmployeeRef:
    """
    Identity of a user as seen by the statistics engine.

    role holds the raw role string ('ROLE_EMPLOYEE', 'ROLE_ADMIN', ...).
    """
    user_id: int
    full_name: str
    email: str
    role: str

    @property
    def is_employee(self) -> bool:
        """Check if this user can be the subject of a violation."""
        return self.role == 'ROLE_EMPLOYEE'

    def to_dict(self) -> dict:
        """Convert to dictionary for API responses."""
        return {
            "id": self.user_id,
            "fullName": self.full_name,
            "email": self.email,
            "role": self.role
        }

    @classmethod
    def from_orm(cls, user) -> 'EmployeeRef':
        """
        Create EmployeeRef from an ORM User.

        Args:
            user: models.orm_user.User instance

        Returns:
            EmployeeRef instance
        """
        return cls(
            user_id=user.user_id,
            full_name=user.full_name,
            email=user.email,
            role=user.role.value if hasattr(user.role, 'value') else user.role
        )
