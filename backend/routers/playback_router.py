"""
Router for player analytics and resume position endpoints.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.orm import Session

import authentication.auth as auth
import models.schemas as schemas
import repositories.db_models as db_models
from helpers.pagination import PaginationLimit
from helpers.rate_limiter import limiter
from repositories.database import get_db
from services.playback_service import PlaybackProgressService
from services.tracking_service import TrackingService

router = APIRouter(prefix="/playback", tags=["playback"])


@router.post(
    "/events",
    response_model=schemas.PlaybackEventResult,
    status_code=status.HTTP_202_ACCEPTED,
)
@limiter.limit("120/minute")
def record_playback_event(
    request: Request,
    event: schemas.PlaybackEventCreate,
    db: Session = Depends(get_db),
    current_user: Optional[db_models.User] = Depends(auth.get_current_user_optional),
) -> schemas.PlaybackEventResult:
    """
    Report a play, completion or ad impression.

    Anonymous players may report too. recorded is false while the
    tracking_enabled flag is off.
    """
    stored = TrackingService.record_event(
        db,
        event.event_type,
        user_id=current_user.id if current_user else None,
        title_id=event.title_id,
        episode_id=event.episode_id,
        session_id=event.session_id,
        watch_percentage=event.watch_percentage,
        ad_duration_seconds=event.ad_duration_seconds,
        ad_completed=event.ad_completed,
    )
    return schemas.PlaybackEventResult(recorded=stored is not None)


@router.put("/progress", response_model=schemas.ProgressSaveResult)
def save_progress(
    body: schemas.ProgressUpdate,
    db: Session = Depends(get_db),
    current_user: db_models.User = Depends(auth.get_current_active_user),
) -> schemas.ProgressSaveResult:
    """Save the playhead; positions near the start or end are skipped."""
    saved = PlaybackProgressService.save_progress(
        db,
        current_user.id,
        body.title_id,
        body.position_seconds,
        duration_seconds=body.duration_seconds,
        episode_id=body.episode_id,
    )
    return schemas.ProgressSaveResult(saved=saved is not None)


@router.get("/progress", response_model=list[schemas.ContinueWatchingItem])
def continue_watching(
    limit: PaginationLimit = 20,
    db: Session = Depends(get_db),
    current_user: db_models.User = Depends(auth.get_current_active_user),
) -> list[db_models.PlaybackProgress]:
    """Started titles, most recently watched first."""
    return PlaybackProgressService.continue_watching(db, current_user.id, limit)


@router.get("/progress/{title_id}", response_model=schemas.ResumePosition)
def get_resume_position(
    title_id: int,
    episode_id: Optional[int] = None,
    db: Session = Depends(get_db),
    current_user: db_models.User = Depends(auth.get_current_active_user),
) -> schemas.ResumePosition:
    position = PlaybackProgressService.get_resume_position(
        db, current_user.id, title_id, episode_id
    )
    return schemas.ResumePosition(
        title_id=title_id, episode_id=episode_id, position_seconds=position
    )
