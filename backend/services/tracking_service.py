"""
Tracking Service - playback analytics behind the tracking_enabled flag.

Players report plays, completions and ad impressions. While the flag is off
events are dropped without touching the store, so turning tracking off also
stops collection immediately.
"""

from typing import Any, Optional

from loguru import logger
from sqlalchemy.orm import Session

from models.exceptions import TitleNotFoundException, ValidationException
from repositories.database import store_operation
from repositories.db_models import PlaybackEvent, PlaybackEventType
from repositories.playback_event_repository import PlaybackEventRepository
from repositories.title_repository import TitleRepository
from services.feature_flag_service import TRACKING_ENABLED, FeatureFlagService


class TrackingService:
    """Service for playback analytics events."""

    @staticmethod
    def record_event(
        db: Session,
        event_type: PlaybackEventType,
        user_id: Optional[int] = None,
        title_id: Optional[int] = None,
        episode_id: Optional[int] = None,
        session_id: Optional[str] = None,
        watch_percentage: Optional[float] = None,
        ad_duration_seconds: Optional[int] = None,
        ad_completed: Optional[bool] = None,
    ) -> Optional[PlaybackEvent]:
        """
        Store one analytics event.

        Args:
            db: Database session
            event_type: play, completion or ad_impression
            user_id: Viewer, None for anonymous playback
            title_id: Title being played
            episode_id: Episode being played
            session_id: Player session, groups events of one viewing
            watch_percentage: Share watched, required for completions
            ad_duration_seconds: Ad length, required for ad impressions
            ad_completed: Whether the ad ran to the end

        Returns:
            Stored event, or None while tracking is off

        Raises:
            ValidationException: If a completion lacks a 0-100 watch percentage
                or an ad impression lacks its duration
            TitleNotFoundException: If title_id is given but not found
        """
        if not FeatureFlagService.is_enabled(db, TRACKING_ENABLED):
            return None

        if event_type == PlaybackEventType.COMPLETION and (
            watch_percentage is None or not 0 <= watch_percentage <= 100
        ):
            raise ValidationException(
                "Completion events need a watch percentage between 0 and 100"
            )
        if event_type == PlaybackEventType.AD_IMPRESSION and ad_duration_seconds is None:
            raise ValidationException("Ad impression events need the ad duration")

        with store_operation(db, "record_playback_event"):
            if title_id is not None and not TitleRepository(db).exists(title_id):
                raise TitleNotFoundException(f"Title with ID {title_id} not found")
            event = PlaybackEventRepository(db).create(
                PlaybackEvent(
                    event_type=event_type,
                    user_id=user_id,
                    title_id=title_id,
                    episode_id=episode_id,
                    session_id=session_id,
                    watch_percentage=watch_percentage,
                    ad_duration_seconds=ad_duration_seconds,
                    ad_completed=ad_completed,
                )
            )

        logger.debug(f"Playback event {event_type.value} for title {title_id}")
        return event

    @staticmethod
    def get_stats(db: Session) -> dict[str, Any]:
        """Totals per event type and the mean completion watch percentage."""
        with store_operation(db, "playback_stats"):
            event_repo = PlaybackEventRepository(db)
            counts = event_repo.count_by_type()
            avg_watch = event_repo.average_watch_percentage()

        return {
            "tracking_enabled": FeatureFlagService.is_enabled(db, TRACKING_ENABLED),
            "play_events": counts[PlaybackEventType.PLAY],
            "completion_events": counts[PlaybackEventType.COMPLETION],
            "ad_impressions": counts[PlaybackEventType.AD_IMPRESSION],
            "avg_watch_percentage": round(avg_watch, 1),
        }
