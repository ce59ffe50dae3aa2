"""
PPE Safety Violation Tracker - User Repository
Identity lookups used by the statistics engine and the violation write path.
"""

from typing import List, Optional
from sqlalchemy import select
from sqlalchemy.orm import Session

from database.connection import store_operation
from models.orm_user import User, Role
from models.user import EmployeeRef
from utils.logger import logger


class UserRepository:
    """
    Repository for user records.

    Statistics only ever read users; create() exists for seeding and tests.
    """

    def __init__(self, session: Session):
        """
        Initialize repository with SQLAlchemy session.

        Args:
            session: SQLAlchemy session object
        """
        self.session = session

    @store_operation("Failed to fetch user")
    def get_by_id(self, user_id: int) -> Optional[EmployeeRef]:
        """
        Fetch user by ID.

        Args:
            user_id: User ID

        Returns:
            EmployeeRef or None if not found
        """
        user = self.session.get(User, user_id)
        if user is None:
            return None
        return EmployeeRef.from_orm(user)

    @store_operation("Failed to fetch users by role")
    def get_by_role(self, role: Role) -> List[EmployeeRef]:
        """
        Fetch every user holding `role`.

        Returns:
            EmployeeRef list ordered by user_id
        """
        stmt = select(User).where(User.role == role).order_by(User.user_id)
        return [EmployeeRef.from_orm(user) for user in self.session.scalars(stmt)]

    @store_operation("Failed to create user")
    def create(self, username: str, email: str, full_name: str, role: Role = Role.EMPLOYEE) -> EmployeeRef:
        """
        Create new user record.

        Returns:
            Created EmployeeRef
        """
        user = User(username=username, email=email, full_name=full_name, role=role)
        self.session.add(user)
        self.session.flush()  # Get the user_id without committing

        logger.info(f"Created user: {username} (ID: {user.user_id}, role: {role.value})")
        return EmployeeRef.from_orm(user)
