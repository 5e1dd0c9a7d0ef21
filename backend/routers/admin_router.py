"""
Router for admin endpoints: creator review, catalog, ads and analytics.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

import authentication.auth as auth
import models.schemas as schemas
import repositories.db_models as db_models
from helpers.pagination import PaginationLimitLarge, PaginationSkip
from repositories.database import get_db
from services.ad_service import AdService
from services.creator_service import CreatorService
from services.title_service import TitleService
from services.tracking_service import TrackingService

router = APIRouter(prefix="/admin", tags=["admin"])


@router.get("/creators", response_model=schemas.CreatorApplicationList)
def get_creator_applications(
    creator_status: Optional[db_models.CreatorStatus] = None,
    skip: PaginationSkip = 0,
    limit: PaginationLimitLarge = 50,
    db: Session = Depends(get_db),
    current_user: db_models.User = Depends(auth.get_moderator_user),
) -> dict:
    """Get creator applications, optionally filtered by status."""
    items, total = CreatorService.list_applications(db, creator_status, skip, limit)
    return {"items": items, "total": total}


@router.put("/creators/{creator_id}/review", response_model=schemas.CreatorResponse)
def review_creator_application(
    creator_id: int,
    review: schemas.CreatorReview,
    db: Session = Depends(get_db),
    current_user: db_models.User = Depends(auth.get_moderator_user),
) -> db_models.Creator:
    """Approve or reject a pending creator application."""
    return CreatorService.review(
        db, creator_id, review.status, int(current_user.id), review.admin_notes
    )


# --- Catalog ---


@router.get("/titles", response_model=schemas.TitleListResponse)
def list_titles(
    content_type: Optional[db_models.TitleContentType] = None,
    skip: PaginationSkip = 0,
    limit: PaginationLimitLarge = 100,
    db: Session = Depends(get_db),
    current_user: db_models.User = Depends(auth.get_moderator_user),
) -> dict:
    """Get all titles, newest first."""
    items, total = TitleService.list_titles(
        db, content_type=content_type, skip=skip, limit=limit
    )
    return {"items": items, "total": total}


@router.post(
    "/titles", response_model=schemas.TitleResponse, status_code=status.HTTP_201_CREATED
)
def create_title(
    body: schemas.TitleCreate,
    db: Session = Depends(get_db),
    current_user: db_models.User = Depends(auth.get_moderator_user),
) -> db_models.Title:
    return TitleService.create_title(
        db,
        body.title,
        content_type=body.content_type,
        category=body.category,
        playback_id=body.playback_id,
        runtime_seconds=body.runtime_seconds,
        description=body.description,
    )


@router.put("/titles/{title_id}", response_model=schemas.TitleResponse)
def update_title(
    title_id: int,
    body: schemas.TitleUpdate,
    db: Session = Depends(get_db),
    current_user: db_models.User = Depends(auth.get_moderator_user),
) -> db_models.Title:
    """Change the fields sent in the body."""
    return TitleService.update_title(
        db, title_id, body.model_dump(exclude_unset=True)
    )


@router.delete("/titles/{title_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_title(
    title_id: int,
    db: Session = Depends(get_db),
    current_user: db_models.User = Depends(auth.get_moderator_user),
) -> Response:
    """Delete a title. Titles with comments or creator posts get 409."""
    TitleService.delete_title(db, title_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# --- Ads ---


@router.get("/ads", response_model=list[schemas.AdConfigItem])
def list_ad_configs(
    db: Session = Depends(get_db),
    current_user: db_models.User = Depends(auth.get_moderator_user),
) -> list[dict]:
    """Ad settings of every non-series title."""
    return AdService.list_ad_configs(db)


@router.put("/ads/{title_id}", response_model=schemas.AdConfigResponse)
def update_ad_config(
    title_id: int,
    body: schemas.AdConfigUpdate,
    db: Session = Depends(get_db),
    current_user: db_models.User = Depends(auth.get_moderator_user),
) -> db_models.TitleAdConfig:
    """
    Configure the pre-roll ad of a title.

    Settings are kept while the ads_enabled flag is off; they only take
    effect once it is switched on.
    """
    return AdService.update_ad_config(
        db,
        title_id,
        int(current_user.id),
        ads_enabled=body.ads_enabled,
        ad_duration_seconds=body.ad_duration_seconds,
        ad_url=body.ad_url,
    )


# --- Analytics ---


@router.get("/analytics", response_model=schemas.PlaybackStats)
def get_playback_stats(
    db: Session = Depends(get_db),
    current_user: db_models.User = Depends(auth.get_moderator_user),
) -> dict:
    """Event totals collected while the tracking_enabled flag was on."""
    return TrackingService.get_stats(db)
