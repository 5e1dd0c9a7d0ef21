"""Repository for catalog title operations."""

from typing import Optional

from sqlalchemy.orm import Session

import repositories.db_models as db_models
from repositories.base import BaseRepository


class TitleRepository(BaseRepository[db_models.Title]):
    """Repository for Title CRUD operations."""

    def __init__(self, db: Session):
        super().__init__(db_models.Title, db)

    def exists(self, title_id: int) -> bool:
        """Check whether a title with this ID exists."""
        return (
            self.db.query(db_models.Title.id)
            .filter(db_models.Title.id == title_id)
            .first()
            is not None
        )

    def list_titles(
        self,
        category: Optional[str] = None,
        content_type: Optional[db_models.TitleContentType] = None,
        skip: int = 0,
        limit: int = 50,
    ) -> tuple[list[db_models.Title], int]:
        """
        Get titles, newest first.

        Returns:
            Tuple of (page of titles, total matching)
        """
        query = self.db.query(db_models.Title)
        if category is not None:
            query = query.filter(db_models.Title.category == category)
        if content_type is not None:
            query = query.filter(db_models.Title.content_type == content_type)
        total = query.count()
        items = (
            query.order_by(db_models.Title.created_at.desc(), db_models.Title.id.desc())
            .offset(skip)
            .limit(limit)
            .all()
        )
        return items, total

    def has_discussion(self, title_id: int) -> bool:
        """Whether comments or creator posts reference the title."""
        for model in (db_models.Comment, db_models.CreatorPost):
            found = (
                self.db.query(model.id).filter(model.title_id == title_id).first()
            )
            if found is not None:
                return True
        return False

    def detach_playback_data(self, title_id: int) -> None:
        """
        Drop the ad config and resume positions of a title and unlink its
        analytics events. Does not commit.
        """
        self.db.query(db_models.TitleAdConfig).filter(
            db_models.TitleAdConfig.title_id == title_id
        ).delete(synchronize_session=False)
        self.db.query(db_models.PlaybackProgress).filter(
            db_models.PlaybackProgress.title_id == title_id
        ).delete(synchronize_session=False)
        self.db.query(db_models.PlaybackEvent).filter(
            db_models.PlaybackEvent.title_id == title_id
        ).update({db_models.PlaybackEvent.title_id: None}, synchronize_session=False)
