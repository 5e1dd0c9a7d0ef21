"""
Service for comment reactions.
"""

from sqlalchemy.orm import Session

import repositories.db_models as db_models
from models.exceptions import CommentNotFoundException, ValidationException
from repositories.comment_repository import CommentRepository
from repositories.database import store_operation
from repositories.reaction_repository import ReactionRepository
from services.ban_service import BanService
from services.rate_limit_service import RateLimitService

ADDED = "added"
UPDATED = "updated"
REMOVED = "removed"


class ReactionService:
    """Service for reaction toggling."""

    @staticmethod
    def toggle_reaction(
        db: Session,
        user: db_models.User,
        comment_id: int,
        reaction_type: str | db_models.ReactionType,
    ) -> str:
        """
        Toggle a reaction on a comment.

        Reacting with the current reaction removes it, a different reaction
        replaces it, and no reaction adds one. Only additions count towards
        the reaction rate limit.

        Args:
            db: Database session
            user: Reacting user
            comment_id: Comment ID
            reaction_type: like, love or laugh

        Returns:
            "added", "updated" or "removed"

        Raises:
            UserBannedException: If the user is banned
            RateLimitExceededException: If the user is reacting too quickly
            ValidationException: If the reaction type is invalid
            CommentNotFoundException: If comment not found or not visible
        """
        BanService.ensure_not_banned(db, user.id, "reacting to comments")
        RateLimitService.enforce(db, user.id, db_models.ActionType.REACTION)

        try:
            reaction = db_models.ReactionType(reaction_type)
        except ValueError:
            raise ValidationException("Invalid reaction type") from None

        with store_operation(db, "toggle_reaction"):
            comment = CommentRepository(db).get_by_id(comment_id)
            if not comment or comment.is_deleted or comment.is_hidden:
                raise CommentNotFoundException(f"Comment with ID {comment_id} not found")

            reaction_repo = ReactionRepository(db)
            existing = reaction_repo.get_by_comment_and_user(comment_id, user.id)

            if existing and existing.reaction_type == reaction:
                reaction_repo.delete(existing)
                return REMOVED

            if existing:
                existing.reaction_type = reaction
                reaction_repo.commit()
                return UPDATED

            reaction_repo.create(
                db_models.CommentReaction(
                    comment_id=comment_id, user_id=user.id, reaction_type=reaction
                )
            )

        RateLimitService.record_event(db, user.id, db_models.ActionType.REACTION)
        return ADDED
