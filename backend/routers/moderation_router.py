"""
Router for admin moderation endpoints.
"""

from typing import Optional

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

import authentication.auth as auth
import models.schemas as schemas
import repositories.db_models as db_models
from helpers.pagination import PaginationLimitLarge, PaginationSkip
from repositories.database import get_db
from services.ban_service import BanService
from services.moderation_service import ModerationService

router = APIRouter(prefix="/admin/moderation", tags=["admin-moderation"])


# ============================================================================
# Report Queue Endpoints
# ============================================================================


@router.get("/reports", response_model=schemas.ReportQueueResponse)
def get_reports(
    report_status: Optional[db_models.ReportStatus] = db_models.ReportStatus.PENDING,
    skip: PaginationSkip = 0,
    limit: PaginationLimitLarge = 50,
    db: Session = Depends(get_db),
    current_user: db_models.User = Depends(auth.get_moderator_user),
) -> dict:
    """
    Get the report queue with reported content details.

    Defaults to pending reports, newest first.
    """
    items, total = ModerationService.list_reports(db, report_status, skip, limit)
    return {"items": items, "total": total}


@router.post("/reports/{report_id}/hide", response_model=schemas.ReportResponse)
def hide_reported_content(
    report_id: int,
    db: Session = Depends(get_db),
    current_user: db_models.User = Depends(auth.get_moderator_user),
) -> db_models.Report:
    """
    Hide the reported comment or post and mark the report actioned.

    Returns 409 if another moderator already resolved the report.
    """
    return ModerationService.hide(db, report_id, int(current_user.id))


@router.post("/reports/{report_id}/ban", response_model=schemas.ReportBanResponse)
def ban_reported_author(
    report_id: int,
    action: schemas.ReportBanAction,
    db: Session = Depends(get_db),
    current_user: db_models.User = Depends(auth.get_moderator_user),
) -> dict:
    """Ban the author of the reported content and mark the report actioned."""
    report, ban = ModerationService.ban_actor(
        db, report_id, int(current_user.id), action.reason, action.duration_hours
    )
    return {"report": report, "ban": ban}


@router.post("/reports/{report_id}/dismiss", response_model=schemas.ReportResponse)
def dismiss_report(
    report_id: int,
    action: Optional[schemas.ReportDismissAction] = None,
    db: Session = Depends(get_db),
    current_user: db_models.User = Depends(auth.get_moderator_user),
) -> db_models.Report:
    """Dismiss a report without touching the content."""
    return ModerationService.dismiss(
        db, report_id, int(current_user.id), action.notes if action else None
    )


# ============================================================================
# Ban Endpoints
# ============================================================================


@router.get("/bans", response_model=schemas.BanListResponse)
def get_active_bans(
    skip: PaginationSkip = 0,
    limit: PaginationLimitLarge = 50,
    db: Session = Depends(get_db),
    current_user: db_models.User = Depends(auth.get_moderator_user),
) -> dict:
    """Get bans currently in force."""
    items, total = BanService.list_active_bans(db, skip, limit)
    return {"items": items, "total": total}


@router.post(
    "/bans", response_model=schemas.BanResponse, status_code=status.HTTP_201_CREATED
)
def issue_ban(
    ban_data: schemas.BanCreate,
    db: Session = Depends(get_db),
    current_user: db_models.User = Depends(auth.get_moderator_user),
) -> db_models.Ban:
    """Ban a user directly, without a report."""
    return BanService.issue_ban(
        db,
        actor_id=ban_data.user_id,
        issued_by=int(current_user.id),
        reason=ban_data.reason,
        scope=ban_data.scope,
        duration_hours=ban_data.duration_hours,
    )


@router.put("/bans/{ban_id}/lift", response_model=schemas.BanResponse)
def lift_ban(
    ban_id: int,
    db: Session = Depends(get_db),
    current_user: db_models.User = Depends(auth.get_moderator_user),
) -> db_models.Ban:
    """Lift an active ban. Returns 409 if it is no longer active."""
    return BanService.lift_ban(db, ban_id, int(current_user.id))
