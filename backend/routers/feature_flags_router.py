"""
Router for feature flag endpoints.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

import authentication.auth as auth
import models.schemas as schemas
import repositories.db_models as db_models
from repositories.database import get_db
from services.feature_flag_service import FeatureFlagService

router = APIRouter(tags=["feature-flags"])


@router.get("/feature-flags/{name}", response_model=schemas.FeatureFlagState)
def get_feature_flag(name: str, db: Session = Depends(get_db)) -> schemas.FeatureFlagState:
    """Public on/off state of a flag. Unknown flags read as off."""
    return schemas.FeatureFlagState(
        name=name, enabled=FeatureFlagService.is_enabled(db, name)
    )


@router.get("/admin/feature-flags", response_model=list[schemas.FeatureFlagResponse])
def list_feature_flags(
    db: Session = Depends(get_db),
    current_user: db_models.User = Depends(auth.get_moderator_user),
) -> list[db_models.FeatureFlag]:
    """Get all flags."""
    return FeatureFlagService.list_flags(db)


@router.put("/admin/feature-flags/{name}", response_model=schemas.FeatureFlagResponse)
def update_feature_flag(
    name: str,
    update: schemas.FeatureFlagUpdate,
    db: Session = Depends(get_db),
    current_user: db_models.User = Depends(auth.get_moderator_user),
) -> db_models.FeatureFlag:
    """Switch a flag on or off, creating it if needed."""
    return FeatureFlagService.set_flag(
        db, name, update.enabled, int(current_user.id), update.description
    )
