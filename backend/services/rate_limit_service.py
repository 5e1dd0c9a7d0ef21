"""
Rate Limit Service - per-actor quotas over a trailing time window.

Every gated action appends a RateLimitEvent once it has succeeded; the next
attempt counts the actor's events inside the window and is refused when the
count has reached the policy limit. This service follows the pattern of other
services (static methods, domain exceptions).

The limiter fails open: if the store cannot be read the action is allowed
and the error is logged. Count-then-insert is not atomic, so a burst of
concurrent requests from one actor can overshoot a limit slightly.
"""

from datetime import datetime, timedelta
from typing import NamedTuple, Optional

from loguru import logger
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from helpers.time_utils import ensure_utc, seconds_until, utc_now, window_start
from models.config import settings
from models.exceptions import RateLimitExceededException
from repositories.db_models import ActionType, RateLimitEvent
from repositories.rate_limit_repository import RateLimitRepository


class RateLimitPolicy(NamedTuple):
    limit: int
    window_minutes: int


class AuthAttemptCheck(NamedTuple):
    within_limit: bool
    retry_after: Optional[int] = None


RATE_LIMIT_POLICIES: dict[ActionType, RateLimitPolicy] = {
    ActionType.COMMENT: RateLimitPolicy(
        settings.RATE_LIMIT_COMMENT_LIMIT, settings.RATE_LIMIT_COMMENT_WINDOW_MINUTES
    ),
    ActionType.REACTION: RateLimitPolicy(
        settings.RATE_LIMIT_REACTION_LIMIT, settings.RATE_LIMIT_REACTION_WINDOW_MINUTES
    ),
    ActionType.REPORT: RateLimitPolicy(
        settings.RATE_LIMIT_REPORT_LIMIT, settings.RATE_LIMIT_REPORT_WINDOW_MINUTES
    ),
    ActionType.CREATOR_POST: RateLimitPolicy(
        settings.RATE_LIMIT_CREATOR_POST_LIMIT,
        settings.RATE_LIMIT_CREATOR_POST_WINDOW_MINUTES,
    ),
    ActionType.UPLOAD: RateLimitPolicy(
        settings.RATE_LIMIT_UPLOAD_LIMIT, settings.RATE_LIMIT_UPLOAD_WINDOW_MINUTES
    ),
    ActionType.AUTH_ATTEMPT: RateLimitPolicy(
        settings.AUTH_ATTEMPT_LIMIT, settings.AUTH_ATTEMPT_WINDOW_MINUTES
    ),
}

RATE_LIMIT_MESSAGES: dict[ActionType, str] = {
    ActionType.COMMENT: "You are posting too quickly. Please wait a moment.",
    ActionType.REACTION: "You are reacting too quickly. Please slow down.",
    ActionType.REPORT: "Too many reports. Please try again later.",
    ActionType.CREATOR_POST: "You can only create {limit} posts per {window}.",
    ActionType.UPLOAD: "Upload limit reached. Please try again later.",
    ActionType.AUTH_ATTEMPT: "Too many attempts. Please try again later.",
}


def describe_window(window_minutes: int) -> str:
    """Human-readable window length, e.g. "minute", "hour" or "24 hours"."""
    if window_minutes % 60 == 0:
        hours = window_minutes // 60
        return "hour" if hours == 1 else f"{hours} hours"
    return "minute" if window_minutes == 1 else f"{window_minutes} minutes"


def lockout_until(
    timestamps: list[datetime],
    limit: int,
    window: timedelta,
    lockout: timedelta,
) -> Optional[datetime]:
    """
    Latest end of a lockout triggered by the given attempt timestamps.

    A lockout starts at every attempt that is the limit-th one inside a
    window and lasts for the lockout duration.

    Args:
        timestamps: Attempt times, oldest first
        limit: Attempts allowed per window
        window: Window length
        lockout: Lockout duration

    Returns:
        End of the latest lockout, or None if the limit was never reached
    """
    until: Optional[datetime] = None
    for i in range(limit - 1, len(timestamps)):
        first = ensure_utc(timestamps[i - limit + 1])
        hit = ensure_utc(timestamps[i])
        if hit - first <= window:  # type: ignore[operator]
            candidate = hit + lockout  # type: ignore[operator]
            if until is None or candidate > until:
                until = candidate
    return until


class RateLimitService:
    """Service for per-actor rate limits."""

    @staticmethod
    def get_policy(action_type: ActionType) -> RateLimitPolicy:
        """Configured policy for an action type."""
        return RATE_LIMIT_POLICIES[action_type]

    @staticmethod
    def limit_message(action_type: ActionType) -> str:
        """Refusal message for an action type, filled in from its policy."""
        policy = RateLimitService.get_policy(action_type)
        return RATE_LIMIT_MESSAGES[action_type].format(
            limit=policy.limit, window=describe_window(policy.window_minutes)
        )

    @staticmethod
    def within_limit(
        db: Session,
        actor_id: int | str,
        action_type: ActionType,
        limit: int,
        window_minutes: int,
        now: Optional[datetime] = None,
    ) -> bool:
        """
        Check whether an actor may perform an action once more.

        Read-only. Returns True when the store cannot be queried.

        Args:
            db: Database session
            actor_id: User ID, e-mail or IP
            action_type: Rate-limited action
            limit: Maximum events allowed in the window
            window_minutes: Trailing window length
            now: Reference time (defaults to current UTC time)

        Returns:
            True if fewer than limit events fall inside the window
        """
        now = ensure_utc(now) or utc_now()
        since = window_start(now, window_minutes)
        try:
            count = RateLimitRepository(db).count_since(
                str(actor_id), action_type, since
            )
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(
                f"Rate limit check failed for {action_type.value}, allowing: {e!r}"
            )
            return True
        return count < limit

    @staticmethod
    def record_event(
        db: Session,
        actor_id: int | str,
        action_type: ActionType,
    ) -> Optional[RateLimitEvent]:
        """
        Append an event for an action that has just succeeded.

        A failed insert is logged and swallowed so the already completed
        action is not reported as an error.

        Args:
            db: Database session
            actor_id: User ID, e-mail or IP
            action_type: Rate-limited action

        Returns:
            The stored event, or None if it could not be written
        """
        try:
            return RateLimitRepository(db).record(str(actor_id), action_type)
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Failed to record {action_type.value} event: {e!r}")
            return None

    @staticmethod
    def enforce(
        db: Session,
        actor_id: int | str,
        action_type: ActionType,
        message: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> None:
        """
        Refuse the action if the actor is over its configured quota.

        Args:
            db: Database session
            actor_id: User ID, e-mail or IP
            action_type: Rate-limited action
            message: Error message override
            now: Reference time (defaults to current UTC time)

        Raises:
            RateLimitExceededException: If the quota is used up
        """
        policy = RateLimitService.get_policy(action_type)
        now = ensure_utc(now) or utc_now()
        since = window_start(now, policy.window_minutes)
        try:
            timestamps = RateLimitRepository(db).timestamps_since(
                str(actor_id), action_type, since
            )
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(
                f"Rate limit check failed for {action_type.value}, allowing: {e!r}"
            )
            return

        if len(timestamps) < policy.limit:
            return

        # Oldest event that has to leave the window before one more fits
        releasing = ensure_utc(timestamps[len(timestamps) - policy.limit])
        retry_after = seconds_until(
            releasing + timedelta(minutes=policy.window_minutes), now  # type: ignore[operator]
        )
        logger.info(
            f"Rate limit hit: actor={actor_id} action={action_type.value} "
            f"count={len(timestamps)} limit={policy.limit}"
        )
        raise RateLimitExceededException(
            message=message or RateLimitService.limit_message(action_type),
            retry_after=max(retry_after, 1),
        )

    @staticmethod
    def check_auth_attempts(
        db: Session,
        identifier: str,
        now: Optional[datetime] = None,
    ) -> AuthAttemptCheck:
        """
        Check whether an identifier may attempt to authenticate.

        Reaching the limit inside one window locks the identifier out for
        the lockout period counted from the attempt that hit the limit.

        Args:
            db: Database session
            identifier: E-mail or client IP
            now: Reference time (defaults to current UTC time)

        Returns:
            AuthAttemptCheck with retry_after set when refused
        """
        now = ensure_utc(now) or utc_now()
        window = timedelta(minutes=settings.AUTH_ATTEMPT_WINDOW_MINUTES)
        lockout = timedelta(minutes=settings.AUTH_LOCKOUT_MINUTES)
        try:
            timestamps = RateLimitRepository(db).timestamps_since(
                identifier, ActionType.AUTH_ATTEMPT, now - lockout - window
            )
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Auth attempt check failed, allowing: {e!r}")
            return AuthAttemptCheck(within_limit=True)

        until = lockout_until(timestamps, settings.AUTH_ATTEMPT_LIMIT, window, lockout)
        if until is not None and until > now:
            return AuthAttemptCheck(
                within_limit=False, retry_after=seconds_until(until, now)
            )
        return AuthAttemptCheck(within_limit=True)

    @staticmethod
    def record_auth_attempt(db: Session, identifier: str) -> Optional[RateLimitEvent]:
        """Record a failed authentication attempt for an identifier."""
        return RateLimitService.record_event(db, identifier, ActionType.AUTH_ATTEMPT)
