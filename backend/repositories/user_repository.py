"""
User repository for database operations.
"""

from typing import Optional

from sqlalchemy.orm import Session

import repositories.db_models as db_models
from .base import BaseRepository


class UserRepository(BaseRepository[db_models.User]):
    """Repository for User entity database operations."""

    def __init__(self, db: Session):
        """
        Initialize user repository.

        Args:
            db: Database session
        """
        super().__init__(db_models.User, db)

    def get_by_email(self, email: str) -> Optional[db_models.User]:
        """
        Get user by email.

        Args:
            email: User email

        Returns:
            User if found, None otherwise
        """
        return (
            self.db.query(db_models.User).filter(db_models.User.email == email).first()
        )

    def get_display_names(self, user_ids: list[int]) -> dict[int, str]:
        """
        Map user IDs to display names (for batch loading).

        Args:
            user_ids: IDs to look up

        Returns:
            Dictionary of user_id -> display_name
        """
        if not user_ids:
            return {}
        rows = (
            self.db.query(db_models.User.id, db_models.User.display_name)
            .filter(db_models.User.id.in_(user_ids))
            .all()
        )
        return {row.id: row.display_name for row in rows}
