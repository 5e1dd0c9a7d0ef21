"""Repository for comment reaction operations."""

from collections import defaultdict

from sqlalchemy import func
from sqlalchemy.orm import Session

import repositories.db_models as db_models
from repositories.base import BaseRepository


class ReactionRepository(BaseRepository[db_models.CommentReaction]):
    """Repository for CommentReaction CRUD operations."""

    def __init__(self, db: Session):
        """
        Initialize reaction repository.

        Args:
            db: Database session
        """
        super().__init__(db_models.CommentReaction, db)

    def get_by_comment_and_user(
        self, comment_id: int, user_id: int
    ) -> db_models.CommentReaction | None:
        """
        Get a reaction by comment and user IDs.

        Args:
            comment_id: Comment ID
            user_id: User ID

        Returns:
            CommentReaction if found, None otherwise
        """
        return (
            self.db.query(db_models.CommentReaction)
            .filter(
                db_models.CommentReaction.comment_id == comment_id,
                db_models.CommentReaction.user_id == user_id,
            )
            .first()
        )

    def count_by_type(self, comment_ids: list[int]) -> dict[int, dict[str, int]]:
        """
        Count reactions per comment and type (for batch loading).

        Args:
            comment_ids: Comment IDs to aggregate

        Returns:
            Dictionary of comment_id -> {reaction_type value: count}
        """
        if not comment_ids:
            return {}
        rows = (
            self.db.query(
                db_models.CommentReaction.comment_id,
                db_models.CommentReaction.reaction_type,
                func.count(db_models.CommentReaction.id),
            )
            .filter(db_models.CommentReaction.comment_id.in_(comment_ids))
            .group_by(
                db_models.CommentReaction.comment_id,
                db_models.CommentReaction.reaction_type,
            )
            .all()
        )
        counts: dict[int, dict[str, int]] = defaultdict(dict)
        for comment_id, reaction_type, count in rows:
            counts[comment_id][reaction_type.value] = count
        return dict(counts)

    def get_user_reactions(
        self, user_id: int, comment_ids: list[int]
    ) -> dict[int, str]:
        """
        Get the user's own reaction for each comment (for batch loading).

        Args:
            user_id: User ID
            comment_ids: Comment IDs to check

        Returns:
            Dictionary of comment_id -> reaction_type value
        """
        if not comment_ids:
            return {}
        rows = (
            self.db.query(
                db_models.CommentReaction.comment_id,
                db_models.CommentReaction.reaction_type,
            )
            .filter(
                db_models.CommentReaction.user_id == user_id,
                db_models.CommentReaction.comment_id.in_(comment_ids),
            )
            .all()
        )
        return {row.comment_id: row.reaction_type.value for row in rows}
