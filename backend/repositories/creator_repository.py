"""
Repository for creator application operations.
"""

from typing import Any, Optional

from sqlalchemy.orm import Session

from repositories.base import BaseRepository
from repositories.db_models import Creator, CreatorStatus, User


class CreatorRepository(BaseRepository[Creator]):
    """Repository for Creator entity database operations."""

    def __init__(self, db: Session):
        super().__init__(Creator, db)

    def get_by_user_id(self, user_id: int) -> Optional[Creator]:
        """
        Get the creator profile of a user.

        Args:
            user_id: User ID

        Returns:
            Creator if the user has applied, None otherwise
        """
        return self.db.query(Creator).filter(Creator.user_id == user_id).first()

    def get_applications(
        self,
        status: Optional[CreatorStatus] = None,
        skip: int = 0,
        limit: int = 50,
    ) -> tuple[list[Any], int]:
        """
        Get creator applications with applicant e-mail.

        Args:
            status: Filter by status
            skip: Pagination offset
            limit: Pagination limit

        Returns:
            Tuple of (list of (creator, email), total_count)
        """
        query = self.db.query(Creator, User.email).join(User, Creator.user_id == User.id)
        if status:
            query = query.filter(Creator.status == status)

        total = query.count()
        results = (
            query.order_by(Creator.created_at.desc()).offset(skip).limit(limit).all()
        )
        return results, total
