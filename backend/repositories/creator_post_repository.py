"""Repository for creator post operations."""

from typing import Optional

from sqlalchemy.orm import Session

from repositories.base import BaseRepository
from repositories.db_models import CreatorPost


class CreatorPostRepository(BaseRepository[CreatorPost]):
    """Repository for CreatorPost CRUD operations."""

    def __init__(self, db: Session):
        super().__init__(CreatorPost, db)

    def get_visible(
        self,
        creator_id: Optional[int] = None,
        title_id: Optional[int] = None,
        limit: int = 20,
    ) -> list[CreatorPost]:
        """
        Get posts that are not hidden, newest first.

        Args:
            creator_id: Restrict to one creator
            title_id: Restrict to one title
            limit: Maximum number of posts

        Returns:
            List of posts
        """
        query = self.db.query(CreatorPost).filter(
            CreatorPost.is_hidden == False  # noqa: E712
        )
        if creator_id is not None:
            query = query.filter(CreatorPost.creator_id == creator_id)
        if title_id is not None:
            query = query.filter(CreatorPost.title_id == title_id)

        return (
            query.order_by(CreatorPost.created_at.desc(), CreatorPost.id.desc())
            .limit(limit)
            .all()
        )
