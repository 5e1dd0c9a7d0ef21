"""
Service for creator applications.
"""

from typing import Any, Optional

from loguru import logger
from sqlalchemy.orm import Session

from helpers.time_utils import utc_now
from models.exceptions import (
    CreatorAlreadyReviewedException,
    CreatorApplicationExistsException,
    CreatorNotFoundException,
    NotApprovedCreatorException,
    ValidationException,
)
from repositories.creator_repository import CreatorRepository
from repositories.database import store_operation
from repositories.db_models import Creator, CreatorStatus


class CreatorService:
    """Service for creator application business logic."""

    @staticmethod
    def apply(
        db: Session,
        user_id: int,
        name: str,
        bio: Optional[str] = None,
        application_notes: Optional[str] = None,
    ) -> Creator:
        """
        Submit a creator application.

        Args:
            db: Database session
            user_id: Applying user
            name: Public creator name
            bio: Short biography
            application_notes: Free text for the reviewers

        Returns:
            Created pending application

        Raises:
            ValidationException: If name is empty
            CreatorApplicationExistsException: If the user already applied
        """
        name = (name or "").strip()
        if not name:
            raise ValidationException("Creator name is required")

        with store_operation(db, "apply_creator"):
            creator_repo = CreatorRepository(db)
            if creator_repo.get_by_user_id(user_id):
                raise CreatorApplicationExistsException()

            creator = creator_repo.create(
                Creator(
                    user_id=user_id,
                    name=name,
                    bio=bio,
                    application_notes=application_notes,
                    status=CreatorStatus.PENDING,
                )
            )

        logger.info(f"Creator application {creator.id} submitted by user {user_id}")
        return creator

    @staticmethod
    def get_by_user(db: Session, user_id: int) -> Optional[Creator]:
        """Get the creator profile of a user, if any."""
        with store_operation(db, "get_creator"):
            return CreatorRepository(db).get_by_user_id(user_id)

    @staticmethod
    def get_approved_creator(db: Session, user_id: int) -> Creator:
        """
        Get the user's creator profile, which must be approved.

        Raises:
            NotApprovedCreatorException: If the user is not an approved creator
        """
        creator = CreatorService.get_by_user(db, user_id)
        if not creator or creator.status != CreatorStatus.APPROVED:
            raise NotApprovedCreatorException()
        return creator

    @staticmethod
    def list_applications(
        db: Session,
        status: Optional[CreatorStatus] = None,
        skip: int = 0,
        limit: int = 50,
    ) -> tuple[list[dict[str, Any]], int]:
        """
        Get creator applications for the admin console.

        Returns:
            Tuple of (list of application dicts, total_count)
        """
        with store_operation(db, "list_creator_applications"):
            results, total = CreatorRepository(db).get_applications(status, skip, limit)

        items = [
            {
                "id": creator.id,
                "user_id": creator.user_id,
                "email": email,
                "name": creator.name,
                "bio": creator.bio,
                "application_notes": creator.application_notes,
                "status": creator.status,
                "admin_notes": creator.admin_notes,
                "reviewed_at": creator.reviewed_at,
                "created_at": creator.created_at,
            }
            for creator, email in results
        ]
        return items, total

    @staticmethod
    def review(
        db: Session,
        creator_id: int,
        status: CreatorStatus,
        reviewer_id: int,
        admin_notes: Optional[str] = None,
    ) -> Creator:
        """
        Approve or reject a pending application.

        Args:
            db: Database session
            creator_id: Application ID
            status: approved or rejected
            reviewer_id: ID of reviewing admin
            admin_notes: Notes shown to the applicant

        Returns:
            Updated application

        Raises:
            ValidationException: If status is pending
            CreatorNotFoundException: If application not found
            CreatorAlreadyReviewedException: If it was already reviewed
        """
        if status == CreatorStatus.PENDING:
            raise ValidationException("Review status must be approved or rejected")

        with store_operation(db, "review_creator"):
            creator_repo = CreatorRepository(db)
            creator = creator_repo.get_by_id(creator_id)
            if not creator:
                raise CreatorNotFoundException(creator_id)
            if creator.status != CreatorStatus.PENDING:
                raise CreatorAlreadyReviewedException(creator_id)

            creator.status = status
            creator.admin_notes = admin_notes
            creator.reviewed_by = reviewer_id
            creator.reviewed_at = utc_now()
            creator_repo.update(creator)

        logger.info(f"Creator application {creator_id} {status.value} by {reviewer_id}")
        return creator
