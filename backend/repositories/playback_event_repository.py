"""
Repository for playback analytics events.
"""

from sqlalchemy import func
from sqlalchemy.orm import Session

from repositories.base import BaseRepository
from repositories.db_models import PlaybackEvent, PlaybackEventType


class PlaybackEventRepository(BaseRepository[PlaybackEvent]):
    """Repository for PlaybackEvent entity database operations."""

    def __init__(self, db: Session):
        super().__init__(PlaybackEvent, db)

    def count_by_type(self) -> dict[PlaybackEventType, int]:
        """Number of stored events per type; types without events are 0."""
        rows = (
            self.db.query(PlaybackEvent.event_type, func.count(PlaybackEvent.id))
            .group_by(PlaybackEvent.event_type)
            .all()
        )
        counts = {event_type: 0 for event_type in PlaybackEventType}
        counts.update({event_type: count for event_type, count in rows})
        return counts

    def average_watch_percentage(self) -> float:
        """Mean watch percentage over completion events, 0.0 when none."""
        value = (
            self.db.query(func.avg(PlaybackEvent.watch_percentage))
            .filter(
                PlaybackEvent.event_type == PlaybackEventType.COMPLETION,
                PlaybackEvent.watch_percentage.isnot(None),
            )
            .scalar()
        )
        return float(value or 0.0)
