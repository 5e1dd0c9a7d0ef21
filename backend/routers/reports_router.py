"""
Router for content report endpoints.
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

import authentication.auth as auth
import models.schemas as schemas
import repositories.db_models as db_models
from helpers.pagination import PaginationLimit, PaginationSkip
from repositories.database import get_db
from services.report_service import ReportService

router = APIRouter(prefix="/reports", tags=["reports"])


@router.post(
    "", response_model=schemas.ReportResponse, status_code=status.HTTP_201_CREATED
)
def create_report(
    report_data: schemas.ReportCreate,
    db: Session = Depends(get_db),
    current_user: db_models.User = Depends(auth.get_current_active_user),
) -> db_models.Report:
    """
    Report a comment, creator post or user.

    One pending report per user per content item.

    Domain exceptions are caught by centralized exception handlers.
    """
    return ReportService.create_report(
        db=db,
        content_kind=report_data.content_type,
        content_id=report_data.content_id,
        reporter_id=int(current_user.id),
        reason=report_data.reason,
    )


@router.get("/mine", response_model=list[schemas.ReportResponse])
def get_my_reports(
    skip: PaginationSkip = 0,
    limit: PaginationLimit = 50,
    db: Session = Depends(get_db),
    current_user: db_models.User = Depends(auth.get_current_active_user),
) -> list[db_models.Report]:
    """Get reports submitted by current user, newest first."""
    return ReportService.get_user_reports(db, int(current_user.id), skip, limit)
