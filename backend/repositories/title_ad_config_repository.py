"""
Repository for per-title ad configuration.
"""

from typing import Optional

from sqlalchemy.orm import Session

from repositories.base import BaseRepository
from repositories.db_models import Title, TitleAdConfig, TitleContentType


class TitleAdConfigRepository(BaseRepository[TitleAdConfig]):
    """Repository for TitleAdConfig entity database operations."""

    def __init__(self, db: Session):
        super().__init__(TitleAdConfig, db)

    def get_by_title(self, title_id: int) -> Optional[TitleAdConfig]:
        return (
            self.db.query(TitleAdConfig)
            .filter(TitleAdConfig.title_id == title_id)
            .first()
        )

    def list_with_titles(self) -> list[tuple[Title, Optional[TitleAdConfig]]]:
        """
        Every non-series title paired with its ad config, if any.

        Series are excluded since pre-roll ads attach to single videos.
        """
        return (
            self.db.query(Title, TitleAdConfig)
            .outerjoin(TitleAdConfig, TitleAdConfig.title_id == Title.id)
            .filter(Title.content_type != TitleContentType.SERIES)
            .order_by(Title.title.asc())
            .all()
        )
