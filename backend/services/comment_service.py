"""
Comment service for business logic.
"""

from datetime import timedelta
from typing import List, Optional

from loguru import logger
from sqlalchemy.orm import Session

import models.schemas as schemas
import repositories.db_models as db_models
from helpers.time_utils import utc_now
from models.exceptions import (
    CannotDeleteOthersCommentException,
    CommentNotFoundException,
    DuplicateCommentException,
    TitleNotFoundException,
    ValidationException,
)
from repositories.comment_repository import CommentRepository
from repositories.database import store_operation
from repositories.reaction_repository import ReactionRepository
from repositories.title_repository import TitleRepository
from repositories.user_repository import UserRepository
from services.ban_service import BanService
from services.rate_limit_service import RateLimitService

MAX_COMMENT_LENGTH = 1000
DUPLICATE_WINDOW = timedelta(minutes=1)


class CommentService:
    """Service for comment-related business logic."""

    @staticmethod
    def list_comments(
        db: Session,
        title_id: int,
        episode_id: Optional[int] = None,
        viewer_id: Optional[int] = None,
        skip: int = 0,
        limit: int = 50,
    ) -> List[schemas.Comment]:
        """
        Get visible comments for a title with reaction summaries.

        Args:
            db: Database session
            title_id: Title ID
            episode_id: Restrict to one episode
            viewer_id: Current user ID (for own reaction), None if anonymous
            skip: Number of records to skip
            limit: Maximum number of records to return

        Returns:
            List of comments, newest first
        """
        with store_operation(db, "list_comments"):
            comments = CommentRepository(db).get_visible_for_title(
                title_id, episode_id, skip, limit
            )
            comment_ids = [c.id for c in comments]

            reaction_repo = ReactionRepository(db)
            counts = reaction_repo.count_by_type(comment_ids)
            own = (
                reaction_repo.get_user_reactions(viewer_id, comment_ids)
                if viewer_id
                else {}
            )
            names = UserRepository(db).get_display_names(
                list({c.user_id for c in comments})
            )

        result = []
        for comment in comments:
            reaction_counts = schemas.ReactionCounts(**counts.get(comment.id, {}))
            result.append(
                schemas.Comment(
                    id=comment.id,
                    user_id=comment.user_id,
                    title_id=comment.title_id,
                    episode_id=comment.episode_id,
                    parent_comment_id=comment.parent_comment_id,
                    content=comment.content,
                    created_at=comment.created_at,
                    display_name=names.get(comment.user_id, "Anonymous"),
                    reactions=reaction_counts,
                    total_reactions=(
                        reaction_counts.like + reaction_counts.love + reaction_counts.laugh
                    ),
                    user_reaction=own.get(comment.id),
                )
            )
        return result

    @staticmethod
    def create_comment(
        db: Session,
        user: db_models.User,
        title_id: int,
        content: str,
        episode_id: Optional[int] = None,
        parent_comment_id: Optional[int] = None,
    ) -> db_models.Comment:
        """
        Post a comment on a title.

        Checks run in a fixed order: ban, rate limit, input validation,
        duplicate detection.

        Args:
            db: Database session
            user: Author
            title_id: Title ID
            content: Comment text
            episode_id: Episode the comment is about
            parent_comment_id: Comment being replied to

        Returns:
            Created comment

        Raises:
            UserBannedException: If the author is banned
            RateLimitExceededException: If the author is posting too quickly
            ValidationException: If the content is empty or too long
            TitleNotFoundException: If title not found
            CommentNotFoundException: If the parent comment is not found
            DuplicateCommentException: If the same text was posted within a minute
        """
        BanService.ensure_not_banned(db, user.id, "posting comments")
        RateLimitService.enforce(db, user.id, db_models.ActionType.COMMENT)

        text = (content or "").strip()
        if not title_id or not text:
            raise ValidationException("Title ID and content are required")
        if len(text) > MAX_COMMENT_LENGTH:
            raise ValidationException(
                f"Comment must be {MAX_COMMENT_LENGTH} characters or less"
            )

        with store_operation(db, "create_comment"):
            if not TitleRepository(db).exists(title_id):
                raise TitleNotFoundException(f"Title with ID {title_id} not found")

            comment_repo = CommentRepository(db)
            if parent_comment_id is not None:
                parent = comment_repo.get_by_id(parent_comment_id)
                if not parent or parent.title_id != title_id or parent.is_deleted:
                    raise CommentNotFoundException(
                        f"Comment with ID {parent_comment_id} not found"
                    )

            if comment_repo.find_recent_duplicate(
                user.id, title_id, text, utc_now() - DUPLICATE_WINDOW
            ):
                raise DuplicateCommentException()

            comment = comment_repo.create(
                db_models.Comment(
                    user_id=user.id,
                    title_id=title_id,
                    episode_id=episode_id,
                    parent_comment_id=parent_comment_id,
                    content=text,
                )
            )

        RateLimitService.record_event(db, user.id, db_models.ActionType.COMMENT)
        logger.debug(f"Comment {comment.id} created by user {user.id} on title {title_id}")
        return comment

    @staticmethod
    def delete_comment(db: Session, comment_id: int, user_id: int) -> None:
        """
        Soft-delete a comment (owner only).

        Args:
            db: Database session
            comment_id: Comment ID
            user_id: ID of the user deleting

        Raises:
            CommentNotFoundException: If comment not found
            CannotDeleteOthersCommentException: If user is not the author
        """
        with store_operation(db, "delete_comment"):
            comment_repo = CommentRepository(db)
            comment = comment_repo.get_by_id(comment_id)
            if not comment or comment.is_deleted:
                raise CommentNotFoundException(f"Comment with ID {comment_id} not found")

            if comment.user_id != user_id:
                raise CannotDeleteOthersCommentException()

            comment.is_deleted = True
            comment_repo.commit()
