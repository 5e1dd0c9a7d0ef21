"""
Repository for user ban operations.
"""

from datetime import datetime
from typing import Any, Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session

from repositories.base import BaseRepository
from repositories.db_models import Ban, BanScope, User


class BanRepository(BaseRepository[Ban]):
    """Repository for ban data access."""

    def __init__(self, db: Session):
        super().__init__(Ban, db)

    @staticmethod
    def _in_force(now: datetime):
        """Filter clauses for bans that are active and not yet expired."""
        return (
            Ban.is_active == True,  # noqa: E712
            or_(
                Ban.expires_at.is_(None),  # Permanent
                Ban.expires_at > now,  # Not yet expired
            ),
        )

    def get_active_ban(
        self,
        actor_id: int,
        now: datetime,
        scopes: Optional[list[BanScope]] = None,
    ) -> Optional[Ban]:
        """
        Get the most recent ban in force for a user.

        Rows flagged active whose expires_at has passed are ignored.

        Args:
            actor_id: ID of the user
            now: Reference time
            scopes: Restrict to these scopes (any scope if None)

        Returns:
            Ban if one is in force, None otherwise
        """
        query = self.db.query(Ban).filter(
            Ban.actor_id == actor_id, *self._in_force(now)
        )
        if scopes:
            query = query.filter(Ban.scope.in_(scopes))
        return query.order_by(Ban.created_at.desc(), Ban.id.desc()).first()

    def get_active_bans(
        self,
        now: datetime,
        skip: int = 0,
        limit: int = 50,
    ) -> tuple[list[Any], int]:
        """
        Get all bans in force with the banned user's names.

        Args:
            now: Reference time
            skip: Pagination offset
            limit: Pagination limit

        Returns:
            Tuple of (list of (ban, username, display_name), total_count)
        """
        query = (
            self.db.query(Ban, User.username, User.display_name)
            .join(User, Ban.actor_id == User.id)
            .filter(*self._in_force(now))
        )

        total = query.count()
        results = query.order_by(Ban.created_at.desc()).offset(skip).limit(limit).all()
        return results, total

    def deactivate(self, ban_id: int, lifted_by: int, now: datetime) -> int:
        """
        Flip is_active to false if it is still true.

        Args:
            ban_id: ID of the ban
            lifted_by: ID of the moderator lifting it
            now: Time of lifting

        Returns:
            Number of rows changed (0 when the ban was already inactive)
        """
        result = (
            self.db.query(Ban)
            .filter(Ban.id == ban_id, Ban.is_active == True)  # noqa: E712
            .update(
                {
                    Ban.is_active: False,
                    Ban.lifted_by: lifted_by,
                    Ban.lifted_at: now,
                },
                synchronize_session=False,
            )
        )
        self.db.commit()
        return result

    def deactivate_expired(self, now: datetime) -> int:
        """
        Mark active bans whose expiry has passed as inactive.

        Returns:
            Number of bans deactivated
        """
        result = (
            self.db.query(Ban)
            .filter(
                Ban.is_active == True,  # noqa: E712
                Ban.expires_at.isnot(None),
                Ban.expires_at <= now,
            )
            .update({Ban.is_active: False}, synchronize_session=False)
        )
        self.db.commit()
        return result
