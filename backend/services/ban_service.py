"""
Service for user ban business logic.

A ban is in force when it is active and its expiry, if any, lies in the
future. Expiry is checked on every read, so a ban stops counting the moment
it expires even if the background sweep has not flagged it inactive yet.

Unlike the rate limiter, ban checks fail closed: store errors surface as
StoreException instead of letting the action through.
"""

from datetime import datetime, timedelta
from typing import Any, Optional

from loguru import logger
from sqlalchemy.orm import Session

from helpers.time_utils import ensure_utc, utc_now
from models.exceptions import (
    BanAlreadyLiftedException,
    BanNotFoundException,
    UserBannedException,
    UserNotFoundException,
    ValidationException,
)
from repositories.ban_repository import BanRepository
from repositories.database import store_operation
from repositories.db_models import Ban, BanScope
from repositories.user_repository import UserRepository


class BanService:
    """Service for ban operations."""

    @staticmethod
    def get_active_ban(
        db: Session,
        actor_id: int,
        scope: Optional[BanScope] = None,
        now: Optional[datetime] = None,
    ) -> Optional[Ban]:
        """
        Get the most recent ban in force for a user.

        Args:
            db: Database session
            actor_id: ID of the user
            scope: Only consider bans of this scope (any scope if None)
            now: Reference time (defaults to current UTC time)

        Returns:
            Ban if one is in force, None otherwise

        Raises:
            StoreException: If the store cannot be read
        """
        now = ensure_utc(now) or utc_now()
        with store_operation(db, "get_active_ban"):
            return BanRepository(db).get_active_ban(
                actor_id, now, [scope] if scope else None
            )

    @staticmethod
    def is_banned(db: Session, actor_id: int, now: Optional[datetime] = None) -> bool:
        """
        Check whether any ban is in force for a user.

        Raises:
            StoreException: If the store cannot be read
        """
        return BanService.get_active_ban(db, actor_id, now=now) is not None

    @staticmethod
    def ensure_not_banned(db: Session, actor_id: int, action: str) -> None:
        """
        Refuse a restricted action for a banned user.

        Args:
            db: Database session
            actor_id: ID of the user
            action: Human-readable action, e.g. "posting comments"

        Raises:
            UserBannedException: If a ban is in force
            StoreException: If the store cannot be read
        """
        ban = BanService.get_active_ban(db, actor_id)
        if ban:
            raise UserBannedException(action, ensure_utc(ban.expires_at))

    @staticmethod
    def issue_ban(
        db: Session,
        actor_id: int,
        issued_by: int,
        reason: str,
        scope: BanScope = BanScope.COMMENT,
        duration_hours: Optional[int] = None,
        commit: bool = True,
    ) -> Ban:
        """
        Ban a user.

        Args:
            db: Database session
            actor_id: ID of user to ban
            issued_by: ID of moderator issuing the ban
            reason: Reason for the ban
            scope: What the ban restricts
            duration_hours: Ban length (permanent if None)
            commit: Commit immediately; pass False to join the caller's
                transaction (the ban is flushed so it gets an ID)

        Returns:
            Created ban

        Raises:
            ValidationException: If reason is empty or duration not positive
            UserNotFoundException: If user not found
            StoreException: If the store call fails
        """
        if not reason or not reason.strip():
            raise ValidationException("Ban reason is required")
        if duration_hours is not None and duration_hours <= 0:
            raise ValidationException("Ban duration must be positive")

        with store_operation(db, "issue_ban"):
            if not UserRepository(db).get_by_id(actor_id):
                raise UserNotFoundException(f"User with ID {actor_id} not found")

            now = utc_now()
            ban = Ban(
                actor_id=actor_id,
                issued_by=issued_by,
                reason=reason.strip(),
                scope=scope,
                expires_at=(
                    now + timedelta(hours=duration_hours) if duration_hours else None
                ),
                is_active=True,
                created_at=now,
            )
            ban_repo = BanRepository(db)
            ban_repo.add(ban)
            if commit:
                ban_repo.commit()
                ban_repo.refresh(ban)
            else:
                ban_repo.flush()

        logger.info(
            f"Ban {ban.id} issued: user={actor_id} scope={scope.value} "
            f"by={issued_by} expires_at={ban.expires_at}"
        )
        return ban

    @staticmethod
    def lift_ban(db: Session, ban_id: int, lifted_by: int) -> Ban:
        """
        Lift an active ban.

        Args:
            db: Database session
            ban_id: ID of ban to lift
            lifted_by: ID of moderator lifting it

        Returns:
            Updated ban

        Raises:
            BanNotFoundException: If ban not found
            BanAlreadyLiftedException: If ban is no longer active
            StoreException: If the store call fails
        """
        with store_operation(db, "lift_ban"):
            ban_repo = BanRepository(db)
            ban = ban_repo.get_by_id(ban_id)
            if not ban:
                raise BanNotFoundException(ban_id)

            if ban_repo.deactivate(ban_id, lifted_by, utc_now()) == 0:
                raise BanAlreadyLiftedException(ban_id)

            ban_repo.refresh(ban)

        logger.info(f"Ban {ban_id} lifted by {lifted_by}")
        return ban

    @staticmethod
    def list_active_bans(
        db: Session,
        skip: int = 0,
        limit: int = 50,
    ) -> tuple[list[dict[str, Any]], int]:
        """
        Get bans in force with the banned user's names.

        Returns:
            Tuple of (list of ban dicts, total_count)
        """
        with store_operation(db, "list_active_bans"):
            results, total = BanRepository(db).get_active_bans(utc_now(), skip, limit)

        items = [
            {
                "id": ban.id,
                "actor_id": ban.actor_id,
                "username": username,
                "display_name": display_name,
                "issued_by": ban.issued_by,
                "reason": ban.reason,
                "scope": ban.scope,
                "expires_at": ban.expires_at,
                "is_active": ban.is_active,
                "created_at": ban.created_at,
            }
            for ban, username, display_name in results
        ]
        return items, total

    @staticmethod
    def deactivate_expired_bans(db: Session) -> int:
        """
        Flag expired bans as inactive.

        Housekeeping only; is_banned already ignores expired rows.

        Returns:
            Number of bans deactivated
        """
        with store_operation(db, "deactivate_expired_bans"):
            count = BanRepository(db).deactivate_expired(utc_now())
        if count:
            logger.info(f"Deactivated {count} expired bans")
        return count
