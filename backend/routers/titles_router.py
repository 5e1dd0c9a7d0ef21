"""
Router for public catalog endpoints.
"""

from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

import models.schemas as schemas
import repositories.db_models as db_models
from helpers.pagination import PaginationLimit, PaginationSkip
from repositories.database import get_db
from services.ad_service import AdService
from services.title_service import TitleService

router = APIRouter(prefix="/titles", tags=["titles"])


@router.get("", response_model=schemas.TitleListResponse)
def list_titles(
    category: Optional[str] = None,
    content_type: Optional[db_models.TitleContentType] = None,
    skip: PaginationSkip = 0,
    limit: PaginationLimit = 50,
    db: Session = Depends(get_db),
) -> dict:
    """Get titles, newest first."""
    items, total = TitleService.list_titles(db, category, content_type, skip, limit)
    return {"items": items, "total": total}


@router.get("/{title_id}", response_model=schemas.TitleResponse)
def get_title(title_id: int, db: Session = Depends(get_db)) -> db_models.Title:
    return TitleService.get_title(db, title_id)


@router.get("/{title_id}/ad", response_model=schemas.TitleAdResponse)
def get_title_ad(title_id: int, db: Session = Depends(get_db)) -> dict:
    """
    Pre-roll ad to play before a title.

    ad is null while the ads_enabled flag is off or the title has no
    active ad.
    """
    return {"title_id": title_id, "ad": AdService.get_preroll(db, title_id)}
