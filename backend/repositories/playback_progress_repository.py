"""
Repository for per-user playback resume positions.
"""

from typing import Optional

from sqlalchemy.orm import Session, joinedload

from repositories.base import BaseRepository
from repositories.db_models import PlaybackProgress


class PlaybackProgressRepository(BaseRepository[PlaybackProgress]):
    """Repository for PlaybackProgress entity database operations."""

    def __init__(self, db: Session):
        super().__init__(PlaybackProgress, db)

    def get_position(
        self, user_id: int, title_id: int, episode_id: Optional[int] = None
    ) -> Optional[PlaybackProgress]:
        """Stored progress for one title (and episode), if any."""
        query = self.db.query(PlaybackProgress).filter(
            PlaybackProgress.user_id == user_id,
            PlaybackProgress.title_id == title_id,
        )
        if episode_id is None:
            query = query.filter(PlaybackProgress.episode_id.is_(None))
        else:
            query = query.filter(PlaybackProgress.episode_id == episode_id)
        return query.first()

    def get_in_progress(
        self, user_id: int, min_position: float, limit: int = 20
    ) -> list[PlaybackProgress]:
        """
        Progress rows past min_position, most recently watched first.

        Args:
            user_id: Owner of the progress rows
            min_position: Positions at or below this are left out
            limit: Maximum number of rows to return

        Returns:
            Progress rows with their title loaded
        """
        return (
            self.db.query(PlaybackProgress)
            .options(joinedload(PlaybackProgress.title))
            .filter(
                PlaybackProgress.user_id == user_id,
                PlaybackProgress.position_seconds > min_position,
            )
            .order_by(PlaybackProgress.updated_at.desc(), PlaybackProgress.id.desc())
            .limit(limit)
            .all()
        )
