"""
Service for the title catalog.
"""

from typing import Any, Optional

from loguru import logger
from sqlalchemy.orm import Session

from models.exceptions import (
    TitleInUseException,
    TitleNotFoundException,
    ValidationException,
)
from repositories.database import store_operation
from repositories.db_models import Title, TitleContentType
from repositories.title_repository import TitleRepository

TITLE_CATEGORIES = ("trending", "originals", "new_releases", "music_videos")

# Columns an admin may change after creation
EDITABLE_FIELDS = (
    "title",
    "content_type",
    "category",
    "playback_id",
    "runtime_seconds",
    "description",
)


def _clean_title(title: Optional[str]) -> str:
    text = (title or "").strip()
    if not text:
        raise ValidationException("Title is required")
    return text


def _check_category(category: Optional[str]) -> None:
    if category is not None and category not in TITLE_CATEGORIES:
        raise ValidationException(
            f"Category must be one of: {', '.join(TITLE_CATEGORIES)}"
        )


class TitleService:
    """Service for catalog title business logic."""

    @staticmethod
    def list_titles(
        db: Session,
        category: Optional[str] = None,
        content_type: Optional[TitleContentType] = None,
        skip: int = 0,
        limit: int = 50,
    ) -> tuple[list[Title], int]:
        """Get a page of titles, newest first, with the total count."""
        with store_operation(db, "list_titles"):
            return TitleRepository(db).list_titles(category, content_type, skip, limit)

    @staticmethod
    def get_title(db: Session, title_id: int) -> Title:
        """
        Get a title by ID.

        Raises:
            TitleNotFoundException: If title not found
        """
        with store_operation(db, "get_title"):
            title = TitleRepository(db).get_by_id(title_id)
        if not title:
            raise TitleNotFoundException(f"Title with ID {title_id} not found")
        return title

    @staticmethod
    def create_title(
        db: Session,
        title: str,
        content_type: TitleContentType = TitleContentType.FILM,
        category: Optional[str] = None,
        playback_id: Optional[str] = None,
        runtime_seconds: int = 0,
        description: Optional[str] = None,
    ) -> Title:
        """
        Add a title to the catalog.

        Args:
            db: Database session
            title: Display title
            content_type: Film, series, music video or podcast
            category: One of TITLE_CATEGORIES
            playback_id: Video pipeline playback ID
            runtime_seconds: Running time
            description: Synopsis

        Returns:
            Created title

        Raises:
            ValidationException: If title is empty or the category is unknown
        """
        text = _clean_title(title)
        _check_category(category)

        with store_operation(db, "create_title"):
            created = TitleRepository(db).create(
                Title(
                    title=text,
                    content_type=content_type,
                    category=category,
                    playback_id=playback_id,
                    runtime_seconds=runtime_seconds,
                    description=description,
                )
            )

        logger.info(f"Title {created.id} created: {text!r}")
        return created

    @staticmethod
    def update_title(db: Session, title_id: int, changes: dict[str, Any]) -> Title:
        """
        Change some fields of a title.

        Keys outside EDITABLE_FIELDS are ignored.

        Raises:
            TitleNotFoundException: If title not found
            ValidationException: If the new title is empty or the category unknown
        """
        changes = {k: v for k, v in changes.items() if k in EDITABLE_FIELDS}
        if "title" in changes:
            changes["title"] = _clean_title(changes["title"])
        if "category" in changes:
            _check_category(changes["category"])

        with store_operation(db, "update_title"):
            title_repo = TitleRepository(db)
            title = title_repo.get_by_id(title_id)
            if not title:
                raise TitleNotFoundException(f"Title with ID {title_id} not found")
            for field, value in changes.items():
                setattr(title, field, value)
            title_repo.update(title)

        logger.info(f"Title {title_id} updated: {sorted(changes)}")
        return title

    @staticmethod
    def delete_title(db: Session, title_id: int) -> None:
        """
        Remove a title with its ad config and resume positions.

        Analytics events are kept without the title reference.

        Raises:
            TitleNotFoundException: If title not found
            TitleInUseException: If comments or creator posts reference it
        """
        with store_operation(db, "delete_title"):
            title_repo = TitleRepository(db)
            title = title_repo.get_by_id(title_id)
            if not title:
                raise TitleNotFoundException(f"Title with ID {title_id} not found")
            if title_repo.has_discussion(title_id):
                raise TitleInUseException(title_id)

            title_repo.detach_playback_data(title_id)
            title_repo.delete(title)

        logger.info(f"Title {title_id} deleted")
