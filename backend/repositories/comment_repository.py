"""
Comment repository for database operations.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

import repositories.db_models as db_models
from .base import BaseRepository


class CommentRepository(BaseRepository[db_models.Comment]):
    """Repository for Comment entity database operations."""

    def __init__(self, db: Session):
        """
        Initialize comment repository.

        Args:
            db: Database session
        """
        super().__init__(db_models.Comment, db)

    def get_visible_for_title(
        self,
        title_id: int,
        episode_id: Optional[int] = None,
        skip: int = 0,
        limit: int = 50,
    ) -> list[db_models.Comment]:
        """
        Get comments for a title that are neither deleted nor hidden.

        Args:
            title_id: Title ID
            episode_id: Restrict to one episode (all episodes if None)
            skip: Number of records to skip
            limit: Maximum number of records to return

        Returns:
            List of comments, newest first
        """
        query = self.db.query(db_models.Comment).filter(
            db_models.Comment.title_id == title_id,
            db_models.Comment.is_deleted == False,  # noqa: E712
            db_models.Comment.is_hidden == False,  # noqa: E712
        )
        if episode_id is not None:
            query = query.filter(db_models.Comment.episode_id == episode_id)

        return (
            query.order_by(
                db_models.Comment.created_at.desc(), db_models.Comment.id.desc()
            )
            .offset(skip)
            .limit(limit)
            .all()
        )

    def find_recent_duplicate(
        self,
        user_id: int,
        title_id: int,
        content: str,
        since: datetime,
    ) -> Optional[db_models.Comment]:
        """
        Find an identical comment by the same user on the same title.

        Args:
            user_id: Author ID
            title_id: Title ID
            content: Trimmed comment text
            since: Inclusive lower bound on created_at

        Returns:
            Matching comment if any
        """
        return (
            self.db.query(db_models.Comment)
            .filter(
                db_models.Comment.user_id == user_id,
                db_models.Comment.title_id == title_id,
                db_models.Comment.content == content,
                db_models.Comment.is_deleted == False,  # noqa: E712
                db_models.Comment.created_at >= since,
            )
            .first()
        )
