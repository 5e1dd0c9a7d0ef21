"""
Router for creator application and creator post endpoints.
"""

from typing import Optional

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

import authentication.auth as auth
import models.schemas as schemas
import repositories.db_models as db_models
from models.exceptions import NotFoundException
from repositories.database import get_db
from services.creator_post_service import CreatorPostService
from services.creator_service import CreatorService
from services.feature_flag_service import ENABLE_CREATOR_POSTS

router = APIRouter(tags=["creators"])


@router.post(
    "/creators/apply",
    response_model=schemas.CreatorResponse,
    status_code=status.HTTP_201_CREATED,
)
def apply_as_creator(
    application: schemas.CreatorApply,
    db: Session = Depends(get_db),
    current_user: db_models.User = Depends(auth.get_current_active_user),
) -> db_models.Creator:
    """Apply to become a creator. One application per user."""
    return CreatorService.apply(
        db,
        int(current_user.id),
        application.name,
        application.bio,
        application.application_notes,
    )


@router.get("/creators/me", response_model=schemas.CreatorResponse)
def get_my_creator_profile(
    db: Session = Depends(get_db),
    current_user: db_models.User = Depends(auth.get_current_active_user),
) -> db_models.Creator:
    """Get own creator application and its review status."""
    creator = CreatorService.get_by_user(db, int(current_user.id))
    if not creator:
        raise NotFoundException("You have not applied to become a creator")
    return creator


@router.get("/creator-posts", response_model=list[schemas.CreatorPostResponse])
def list_creator_posts(
    creator_id: Optional[int] = None,
    title_id: Optional[int] = None,
    db: Session = Depends(get_db),
) -> list[db_models.CreatorPost]:
    """
    Get the 20 latest creator posts.

    Empty while creator posts are switched off.
    """
    return CreatorPostService.list_posts(db, creator_id, title_id)


@router.post(
    "/creator-posts",
    response_model=schemas.CreatorPostResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_creator_post(
    post: schemas.CreatorPostCreate,
    db: Session = Depends(get_db),
    current_user: db_models.User = Depends(
        auth.require_unbanned_user(
            "creating posts",
            feature=ENABLE_CREATOR_POSTS,
            disabled_message="Creator posts are currently disabled",
        )
    ),
) -> db_models.CreatorPost:
    """
    Publish a creator post.

    Approved creators only, limited by RATE_LIMIT_CREATOR_POST_LIMIT per window.
    """
    return CreatorPostService.create_post(
        db, current_user, post.content, post.image_url, post.title_id
    )
