"""
Ad Service - per-title pre-roll ads behind the ads_enabled flag.

Admins keep one config per title (on/off, length, creative URL). The player
asks for the ad of a title before playback; nothing is served while the
ads_enabled flag is off, whatever the per-title settings say.
"""

from typing import Any, Optional

from loguru import logger
from sqlalchemy.orm import Session

from models.exceptions import TitleNotFoundException, ValidationException
from repositories.database import store_operation
from repositories.db_models import TitleAdConfig, TitleContentType
from repositories.title_ad_config_repository import TitleAdConfigRepository
from repositories.title_repository import TitleRepository
from services.feature_flag_service import ADS_ENABLED, FeatureFlagService

MIN_AD_SECONDS = 5
MAX_AD_SECONDS = 30
DEFAULT_AD_SECONDS = 15


class AdService:
    """Service for pre-roll ad configuration and serving."""

    @staticmethod
    def get_preroll(db: Session, title_id: int) -> Optional[TitleAdConfig]:
        """
        Ad to play before a title, if any.

        Returns None when the ads_enabled flag is off, the title has no
        config, its ads are switched off or no creative URL is set.

        Raises:
            TitleNotFoundException: If title not found
        """
        if not FeatureFlagService.is_enabled(db, ADS_ENABLED):
            return None

        with store_operation(db, "get_preroll"):
            if not TitleRepository(db).exists(title_id):
                raise TitleNotFoundException(f"Title with ID {title_id} not found")
            config = TitleAdConfigRepository(db).get_by_title(title_id)

        if config is None or not config.ads_enabled or not config.ad_url:
            return None
        return config

    @staticmethod
    def list_ad_configs(db: Session) -> list[dict[str, Any]]:
        """
        Ad settings of every non-series title, defaults where none is stored.
        """
        with store_operation(db, "list_ad_configs"):
            rows = TitleAdConfigRepository(db).list_with_titles()

        return [
            {
                "title_id": title.id,
                "title": title.title,
                "content_type": title.content_type,
                "ads_enabled": bool(config.ads_enabled) if config else False,
                "ad_duration_seconds": (
                    config.ad_duration_seconds if config else DEFAULT_AD_SECONDS
                ),
                "ad_url": config.ad_url if config else None,
                "updated_at": config.updated_at if config else None,
            }
            for title, config in rows
        ]

    @staticmethod
    def update_ad_config(
        db: Session,
        title_id: int,
        updated_by: int,
        ads_enabled: Optional[bool] = None,
        ad_duration_seconds: Optional[int] = None,
        ad_url: Optional[str] = None,
    ) -> TitleAdConfig:
        """
        Create or change the ad config of a title.

        Fields left as None keep their stored value (or the default on
        first save: ads off, 15 seconds, no URL).

        Args:
            db: Database session
            title_id: Title to configure
            updated_by: ID of the admin making the change
            ads_enabled: Play a pre-roll before this title
            ad_duration_seconds: Ad length, 5 to 30 seconds
            ad_url: HTTP(S) URL of the ad video, empty string clears it

        Returns:
            Stored config

        Raises:
            TitleNotFoundException: If title not found
            ValidationException: If the title is a series, the duration is
                out of range or the URL is not http(s)
        """
        if ad_duration_seconds is not None and not (
            MIN_AD_SECONDS <= ad_duration_seconds <= MAX_AD_SECONDS
        ):
            raise ValidationException(
                f"Ad duration must be between {MIN_AD_SECONDS} and "
                f"{MAX_AD_SECONDS} seconds"
            )
        if ad_url is not None:
            ad_url = ad_url.strip()
            if ad_url and not ad_url.startswith(("http://", "https://")):
                raise ValidationException("Ad URL must start with http:// or https://")

        with store_operation(db, "update_ad_config"):
            title = TitleRepository(db).get_by_id(title_id)
            if not title:
                raise TitleNotFoundException(f"Title with ID {title_id} not found")
            if title.content_type == TitleContentType.SERIES:
                raise ValidationException("Pre-roll ads cannot be set on a series")

            config_repo = TitleAdConfigRepository(db)
            config = config_repo.get_by_title(title_id)
            if config is None:
                config = TitleAdConfig(
                    title_id=title_id,
                    ads_enabled=False,
                    ad_duration_seconds=DEFAULT_AD_SECONDS,
                )
                config_repo.add(config)

            if ads_enabled is not None:
                config.ads_enabled = ads_enabled
            if ad_duration_seconds is not None:
                config.ad_duration_seconds = ad_duration_seconds
            if ad_url is not None:
                config.ad_url = ad_url or None
            config.updated_by = updated_by
            config_repo.update(config)

        logger.info(
            f"Ad config for title {title_id} set by {updated_by}: "
            f"enabled={config.ads_enabled} duration={config.ad_duration_seconds}"
        )
        return config
