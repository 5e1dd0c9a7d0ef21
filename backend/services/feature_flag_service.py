"""
Service for feature flags.

Reads are fail-closed: a missing flag or a store error means "disabled".
Lookups go through a small per-process cache so hot paths do not hit the
database on every request; a flag change made in another process becomes
visible here after at most FEATURE_FLAG_CACHE_TTL_SECONDS.
"""

import threading
import time
from typing import Optional

from loguru import logger
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from helpers.time_utils import utc_now
from models.config import settings
from models.exceptions import FeatureDisabledException, ValidationException
from repositories.database import store_operation
from repositories.db_models import FeatureFlag
from repositories.feature_flag_repository import FeatureFlagRepository

CREATOR_UPLOADS = "creator_uploads"
ENABLE_CREATOR_POSTS = "enable_creator_posts"
ADS_ENABLED = "ads_enabled"
TRACKING_ENABLED = "tracking_enabled"

# Flags created (disabled) by init_db.py
KNOWN_FLAGS: dict[str, str] = {
    CREATOR_UPLOADS: "Allow approved creators to upload videos",
    ENABLE_CREATOR_POSTS: "Show and accept creator posts",
    ADS_ENABLED: "Serve per-title pre-roll ads before playback",
    TRACKING_ENABLED: "Record play, completion and ad impression events",
}


class FeatureFlagService:
    """Service for feature flag reads and updates."""

    # Cache storage: {flag_name: (enabled, timestamp)}
    _cache: dict[str, tuple[bool, float]] = {}
    _lock = threading.Lock()

    @classmethod
    def _get_from_cache(cls, name: str, ttl: float) -> Optional[bool]:
        with cls._lock:
            entry = cls._cache.get(name)
            if entry is None:
                return None
            enabled, cached_time = entry
            if time.monotonic() - cached_time > ttl:
                del cls._cache[name]
                return None
            return enabled

    @classmethod
    def _set_cache(cls, name: str, enabled: bool) -> None:
        with cls._lock:
            cls._cache[name] = (enabled, time.monotonic())

    @classmethod
    def invalidate_cache(cls, name: Optional[str] = None) -> None:
        """
        Invalidate cache.

        Args:
            name: Specific flag to invalidate, or None for all.
        """
        with cls._lock:
            if name:
                cls._cache.pop(name, None)
            else:
                cls._cache.clear()

    @classmethod
    def is_enabled(cls, db: Session, name: str) -> bool:
        """
        Check whether a flag is on.

        Args:
            db: Database session
            name: Flag name

        Returns:
            True only if the flag exists and is enabled
        """
        ttl = settings.FEATURE_FLAG_CACHE_TTL_SECONDS
        if ttl > 0:
            cached = cls._get_from_cache(name, ttl)
            if cached is not None:
                return cached

        try:
            flag = FeatureFlagRepository(db).get_by_name(name)
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Feature flag lookup for '{name}' failed, treating as off: {e!r}")
            return False

        enabled = bool(flag and flag.enabled)
        if ttl > 0:
            cls._set_cache(name, enabled)
        return enabled

    @classmethod
    def require_enabled(
        cls, db: Session, name: str, message: Optional[str] = None
    ) -> None:
        """
        Refuse an action behind a disabled flag.

        Raises:
            FeatureDisabledException: If the flag is off or missing
        """
        if not cls.is_enabled(db, name):
            raise FeatureDisabledException(name, message)

    @classmethod
    def set_flag(
        cls,
        db: Session,
        name: str,
        enabled: bool,
        updated_by: Optional[int] = None,
        description: Optional[str] = None,
    ) -> FeatureFlag:
        """
        Create or update a flag.

        Args:
            db: Database session
            name: Flag name
            enabled: New state
            updated_by: ID of the admin making the change
            description: New description (kept unchanged if None)

        Returns:
            The stored flag

        Raises:
            ValidationException: If name is empty
            StoreException: If the store call fails
        """
        name = name.strip() if name else ""
        if not name:
            raise ValidationException("Feature flag name is required")

        with store_operation(db, "set_flag"):
            flag_repo = FeatureFlagRepository(db)
            flag = flag_repo.get_by_name(name)
            if flag is None:
                flag = FeatureFlag(name=name)
                flag_repo.add(flag)
            flag.enabled = enabled
            flag.updated_by = updated_by
            flag.updated_at = utc_now()
            if description is not None:
                flag.description = description
            flag_repo.commit()
            flag_repo.refresh(flag)

        cls.invalidate_cache(name)
        logger.info(f"Feature flag '{name}' set to {enabled} by {updated_by}")
        return flag

    @staticmethod
    def list_flags(db: Session) -> list[FeatureFlag]:
        """Get all flags ordered by name."""
        with store_operation(db, "list_flags"):
            return FeatureFlagRepository(db).get_all_ordered()

    @staticmethod
    def seed_known_flags(db: Session) -> int:
        """
        Create any missing known flag, disabled.

        Returns:
            Number of flags created
        """
        with store_operation(db, "seed_known_flags"):
            flag_repo = FeatureFlagRepository(db)
            missing = [
                FeatureFlag(name=name, enabled=False, description=description)
                for name, description in KNOWN_FLAGS.items()
                if flag_repo.get_by_name(name) is None
            ]
            flag_repo.add_all(missing)
            flag_repo.commit()
        return len(missing)
