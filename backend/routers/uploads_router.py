"""
Router for creator video upload endpoints.
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

import authentication.auth as auth
import models.schemas as schemas
import repositories.db_models as db_models
from repositories.database import get_db
from services.feature_flag_service import CREATOR_UPLOADS
from services.video_upload_service import VideoUploadService

router = APIRouter(prefix="/uploads", tags=["uploads"])


@router.post(
    "", response_model=schemas.VideoUploadTarget, status_code=status.HTTP_201_CREATED
)
def create_upload(
    body: schemas.VideoUploadCreate,
    db: Session = Depends(get_db),
    current_user: db_models.User = Depends(
        auth.require_unbanned_user(
            "uploading videos",
            feature=CREATOR_UPLOADS,
            disabled_message="Creator uploads are currently disabled",
        )
    ),
) -> schemas.VideoUploadTarget:
    """
    Create a direct-upload URL on the video pipeline.

    Returns 503 when the pipeline is not configured.
    """
    target = VideoUploadService.create_upload(
        db, current_user, body.title, body.description
    )
    return schemas.VideoUploadTarget(
        upload_id=target.upload_id, upload_url=target.upload_url
    )


@router.get("/{upload_id}/status", response_model=schemas.VideoUploadStatus)
def get_upload_status(
    upload_id: str,
    db: Session = Depends(get_db),
    current_user: db_models.User = Depends(auth.get_current_active_user),
) -> schemas.VideoUploadStatus:
    """Poll processing status of an own upload."""
    upload = VideoUploadService.refresh_status(db, upload_id, current_user)
    return schemas.VideoUploadStatus(
        upload_id=upload.upload_id,
        status=upload.status,
        asset_id=upload.asset_id,
        playback_id=upload.playback_id,
        ready=upload.is_ready,
        duration=upload.duration_seconds,
    )
