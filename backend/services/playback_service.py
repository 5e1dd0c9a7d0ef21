"""
Service for playback resume positions ("continue watching").
"""

from typing import Optional

from sqlalchemy.orm import Session

from models.exceptions import TitleNotFoundException
from repositories.database import store_operation
from repositories.db_models import PlaybackProgress
from repositories.playback_progress_repository import PlaybackProgressRepository
from repositories.title_repository import TitleRepository

# Positions this close to the start are not worth resuming
MIN_RESUME_SECONDS = 2.0
# Positions this close to the end count as finished
END_MARGIN_SECONDS = 5.0


class PlaybackProgressService:
    """Service for per-user playback progress."""

    @staticmethod
    def save_progress(
        db: Session,
        user_id: int,
        title_id: int,
        position_seconds: float,
        duration_seconds: Optional[float] = None,
        episode_id: Optional[int] = None,
    ) -> Optional[PlaybackProgress]:
        """
        Store where a user stopped watching.

        Positions under MIN_RESUME_SECONDS, or within END_MARGIN_SECONDS of
        the known duration, are not saved.

        Args:
            db: Database session
            user_id: Viewer
            title_id: Title being played
            position_seconds: Current playhead
            duration_seconds: Video length, if the player knows it
            episode_id: Episode being played

        Returns:
            Stored progress, or None if the position was skipped

        Raises:
            TitleNotFoundException: If title not found
        """
        if position_seconds < MIN_RESUME_SECONDS:
            return None
        if (
            duration_seconds is not None
            and position_seconds > duration_seconds - END_MARGIN_SECONDS
        ):
            return None

        with store_operation(db, "save_progress"):
            if not TitleRepository(db).exists(title_id):
                raise TitleNotFoundException(f"Title with ID {title_id} not found")

            progress_repo = PlaybackProgressRepository(db)
            progress = progress_repo.get_position(user_id, title_id, episode_id)
            if progress is None:
                return progress_repo.create(
                    PlaybackProgress(
                        user_id=user_id,
                        title_id=title_id,
                        episode_id=episode_id,
                        position_seconds=position_seconds,
                    )
                )
            progress.position_seconds = position_seconds
            return progress_repo.update(progress)

    @staticmethod
    def get_resume_position(
        db: Session, user_id: int, title_id: int, episode_id: Optional[int] = None
    ) -> float:
        """Where to resume a title, 0.0 to start from the beginning."""
        with store_operation(db, "get_resume_position"):
            progress = PlaybackProgressRepository(db).get_position(
                user_id, title_id, episode_id
            )
        if progress is None or progress.position_seconds <= MIN_RESUME_SECONDS:
            return 0.0
        return progress.position_seconds

    @staticmethod
    def continue_watching(
        db: Session, user_id: int, limit: int = 20
    ) -> list[PlaybackProgress]:
        """Started titles of a user, most recently watched first."""
        with store_operation(db, "continue_watching"):
            return PlaybackProgressRepository(db).get_in_progress(
                user_id, MIN_RESUME_SECONDS, limit
            )
