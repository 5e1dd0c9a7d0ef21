"""
Service for creator posts, gated by the enable_creator_posts flag.
"""

from typing import Optional

from sqlalchemy.orm import Session

import repositories.db_models as db_models
from models.exceptions import TitleNotFoundException, ValidationException
from repositories.creator_post_repository import CreatorPostRepository
from repositories.database import store_operation
from repositories.title_repository import TitleRepository
from services.ban_service import BanService
from services.creator_service import CreatorService
from services.feature_flag_service import ENABLE_CREATOR_POSTS, FeatureFlagService
from services.rate_limit_service import RateLimitService

MAX_POST_LENGTH = 2000
POSTS_PAGE_SIZE = 20


class CreatorPostService:
    """Service for creator post business logic."""

    @staticmethod
    def list_posts(
        db: Session,
        creator_id: Optional[int] = None,
        title_id: Optional[int] = None,
    ) -> list[db_models.CreatorPost]:
        """
        Get the latest visible posts.

        Returns an empty list while creator posts are switched off.
        """
        if not FeatureFlagService.is_enabled(db, ENABLE_CREATOR_POSTS):
            return []

        with store_operation(db, "list_creator_posts"):
            return CreatorPostRepository(db).get_visible(
                creator_id, title_id, POSTS_PAGE_SIZE
            )

    @staticmethod
    def create_post(
        db: Session,
        user: db_models.User,
        content: str,
        image_url: Optional[str] = None,
        title_id: Optional[int] = None,
    ) -> db_models.CreatorPost:
        """
        Publish a post as an approved creator.

        Args:
            db: Database session
            user: Posting user
            content: Post text
            image_url: Optional image
            title_id: Title the post is about

        Returns:
            Created post

        Raises:
            FeatureDisabledException: If creator posts are switched off
            UserBannedException: If the user is banned
            NotApprovedCreatorException: If the user is not an approved creator
            RateLimitExceededException: If the creator posted too often
            ValidationException: If the content is empty or too long
            TitleNotFoundException: If title not found
        """
        FeatureFlagService.require_enabled(
            db, ENABLE_CREATOR_POSTS, "Creator posts are currently disabled"
        )
        BanService.ensure_not_banned(db, user.id, "creating posts")
        creator = CreatorService.get_approved_creator(db, user.id)
        RateLimitService.enforce(db, user.id, db_models.ActionType.CREATOR_POST)

        text = (content or "").strip()
        if not text:
            raise ValidationException("Content is required")
        if len(text) > MAX_POST_LENGTH:
            raise ValidationException(
                f"Content must be {MAX_POST_LENGTH} characters or less"
            )

        with store_operation(db, "create_creator_post"):
            if title_id is not None and not TitleRepository(db).exists(title_id):
                raise TitleNotFoundException(f"Title with ID {title_id} not found")

            post = CreatorPostRepository(db).create(
                db_models.CreatorPost(
                    creator_id=creator.id,
                    title_id=title_id,
                    content=text,
                    image_url=image_url,
                )
            )

        RateLimitService.record_event(db, user.id, db_models.ActionType.CREATOR_POST)
        return post
