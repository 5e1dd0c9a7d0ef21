"""
Service for creator video uploads.

The server only brokers upload targets and mirrors their status; the file
itself goes straight from the client to the video pipeline.
"""

import time
from typing import Callable, Optional

from loguru import logger
from sqlalchemy.orm import Session

import repositories.db_models as db_models
from models.config import settings
from models.exceptions import (
    StoreException,
    ValidationException,
    VideoUploadNotFoundException,
)
from repositories.database import store_operation
from repositories.video_upload_repository import VideoUploadRepository
from services.ban_service import BanService
from services.creator_service import CreatorService
from services.feature_flag_service import CREATOR_UPLOADS, FeatureFlagService
from services.rate_limit_service import RateLimitService
from services.video_pipeline_client import UploadTarget, VideoPipelineClient


class VideoUploadService:
    """Service for video upload business logic."""

    @staticmethod
    def create_upload(
        db: Session,
        user: db_models.User,
        title: str,
        description: Optional[str] = None,
        client: Optional[VideoPipelineClient] = None,
    ) -> UploadTarget:
        """
        Create an upload target for an approved creator.

        Args:
            db: Database session
            user: Uploading user
            title: Video title
            description: Video description
            client: Pipeline client (a default one if None)

        Returns:
            Upload ID and URL for the client

        Raises:
            FeatureDisabledException: If creator uploads are switched off
            UserBannedException: If the user is banned
            NotApprovedCreatorException: If the user is not an approved creator
            RateLimitExceededException: If the creator uploaded too often
            ValidationException: If title is empty
            VideoPipelineException: If the pipeline call fails
        """
        FeatureFlagService.require_enabled(
            db, CREATOR_UPLOADS, "Creator uploads are currently disabled"
        )
        BanService.ensure_not_banned(db, user.id, "uploading videos")
        creator = CreatorService.get_approved_creator(db, user.id)
        RateLimitService.enforce(db, user.id, db_models.ActionType.UPLOAD)

        title = (title or "").strip()
        if not title:
            raise ValidationException("Title is required")

        client = client or VideoPipelineClient()
        target = client.create_upload(
            {"creator_id": creator.id, "title": title, "description": description}
        )

        try:
            with store_operation(db, "create_upload"):
                VideoUploadRepository(db).create(
                    db_models.VideoUpload(
                        creator_id=creator.id,
                        upload_id=target.upload_id,
                        title=title,
                        description=description,
                    )
                )
        except StoreException:
            # Remote upload exists without a local row
            logger.error(
                f"Upload {target.upload_id} created on the pipeline for creator "
                f"{creator.id} but not stored locally"
            )
            raise

        RateLimitService.record_event(db, user.id, db_models.ActionType.UPLOAD)
        logger.info(f"Upload {target.upload_id} created for creator {creator.id}")
        return target

    @staticmethod
    def _get_owned_upload(
        db: Session, upload_id: str, user: db_models.User
    ) -> db_models.VideoUpload:
        creator = CreatorService.get_by_user(db, user.id)
        with store_operation(db, "get_upload"):
            upload = VideoUploadRepository(db).get_by_upload_id(upload_id)
        if not upload or not creator or upload.creator_id != creator.id:
            raise VideoUploadNotFoundException(upload_id)
        return upload

    @staticmethod
    def refresh_status(
        db: Session,
        upload_id: str,
        user: db_models.User,
        client: Optional[VideoPipelineClient] = None,
    ) -> db_models.VideoUpload:
        """
        Poll the pipeline once and update the local upload row.

        Raises:
            VideoUploadNotFoundException: If the upload is unknown or not the
                caller's
            VideoPipelineException: If the pipeline call fails
        """
        upload = VideoUploadService._get_owned_upload(db, upload_id, user)
        if upload.is_ready:
            return upload

        client = client or VideoPipelineClient()
        status = client.get_upload_status(upload_id)

        with store_operation(db, "refresh_upload_status"):
            upload.status = status.status
            upload.asset_id = status.asset_id or upload.asset_id
            upload.playback_id = status.playback_id or upload.playback_id
            upload.is_ready = status.ready
            if status.duration is not None:
                upload.duration_seconds = status.duration
            VideoUploadRepository(db).update(upload)
        return upload

    @staticmethod
    def wait_until_ready(
        db: Session,
        upload_id: str,
        user: db_models.User,
        max_attempts: Optional[int] = None,
        delay_seconds: Optional[float] = None,
        sleep: Callable[[float], None] = time.sleep,
        client: Optional[VideoPipelineClient] = None,
    ) -> db_models.VideoUpload:
        """
        Poll until the upload is ready or the attempts run out.

        Args:
            db: Database session
            upload_id: Pipeline upload ID
            user: Owning user
            max_attempts: Maximum polls (settings default if None)
            delay_seconds: Fixed delay between polls (settings default if None)
            sleep: Sleep function
            client: Pipeline client (a default one if None)

        Returns:
            The upload row after the last poll; check is_ready
        """
        attempts = max_attempts or settings.UPLOAD_POLL_MAX_ATTEMPTS
        delay = settings.UPLOAD_POLL_DELAY_SECONDS if delay_seconds is None else delay_seconds
        client = client or VideoPipelineClient()

        upload = VideoUploadService.refresh_status(db, upload_id, user, client)
        attempt = 1
        while not upload.is_ready and attempt < attempts:
            sleep(delay)
            upload = VideoUploadService.refresh_status(db, upload_id, user, client)
            attempt += 1

        if not upload.is_ready:
            logger.warning(f"Upload {upload_id} not ready after {attempt} polls")
        return upload
