"""
Repository for rate limit event operations.

Events are append-only: this repository inserts and counts, it never
updates or deletes rows.
"""

from datetime import datetime

from sqlalchemy import func
from sqlalchemy.orm import Session

from repositories.base import BaseRepository
from repositories.db_models import ActionType, RateLimitEvent


class RateLimitRepository(BaseRepository[RateLimitEvent]):
    """Repository for rate limit event data access."""

    def __init__(self, db: Session):
        super().__init__(RateLimitEvent, db)

    def count_since(
        self, actor_id: str, action_type: ActionType, since: datetime
    ) -> int:
        """
        Count events of an actor for one action type at or after since.

        Args:
            actor_id: Actor key (stringified user id, e-mail or IP)
            action_type: Rate-limited action
            since: Inclusive lower bound

        Returns:
            Number of matching events
        """
        return (
            self.db.query(func.count(RateLimitEvent.id))
            .filter(
                RateLimitEvent.actor_id == actor_id,
                RateLimitEvent.action_type == action_type,
                RateLimitEvent.created_at >= since,
            )
            .scalar()
            or 0
        )

    def timestamps_since(
        self, actor_id: str, action_type: ActionType, since: datetime
    ) -> list[datetime]:
        """
        Event timestamps of an actor for one action type, oldest first.

        Args:
            actor_id: Actor key
            action_type: Rate-limited action
            since: Inclusive lower bound

        Returns:
            List of created_at values
        """
        rows = (
            self.db.query(RateLimitEvent.created_at)
            .filter(
                RateLimitEvent.actor_id == actor_id,
                RateLimitEvent.action_type == action_type,
                RateLimitEvent.created_at >= since,
            )
            .order_by(RateLimitEvent.created_at.asc())
            .all()
        )
        return [row[0] for row in rows]

    def record(
        self,
        actor_id: str,
        action_type: ActionType,
        created_at: datetime | None = None,
    ) -> RateLimitEvent:
        """
        Append one event and commit.

        Args:
            actor_id: Actor key
            action_type: Rate-limited action
            created_at: Event time (defaults to now)

        Returns:
            The stored event
        """
        event = RateLimitEvent(actor_id=actor_id, action_type=action_type)
        if created_at is not None:
            event.created_at = created_at
        return self.create(event)
