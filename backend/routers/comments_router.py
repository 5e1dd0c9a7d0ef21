"""
Router for comment endpoints.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

import authentication.auth as auth
import models.schemas as schemas
import repositories.db_models as db_models
from helpers.pagination import PaginationLimit, PaginationSkip
from repositories.database import get_db
from services.comment_service import CommentService
from services.reaction_service import ReactionService

router = APIRouter(prefix="/comments", tags=["comments"])


@router.get("", response_model=List[schemas.Comment])
def list_comments(
    title_id: int,
    episode_id: Optional[int] = None,
    skip: PaginationSkip = 0,
    limit: PaginationLimit = 50,
    db: Session = Depends(get_db),
    current_user: Optional[db_models.User] = Depends(auth.get_current_user_optional),
) -> List[schemas.Comment]:
    """
    Get visible comments for a title, newest first.

    Includes reaction counts and, for logged-in users, their own reaction.
    """
    viewer_id = int(current_user.id) if current_user else None
    return CommentService.list_comments(
        db, title_id, episode_id, viewer_id, skip=skip, limit=limit
    )


@router.post("", status_code=status.HTTP_201_CREATED)
def create_comment(
    comment: schemas.CommentCreate,
    db: Session = Depends(get_db),
    current_user: db_models.User = Depends(
        auth.require_unbanned_user("posting comments")
    ),
) -> dict:
    """
    Post a comment.

    Banned users get 403 and users posting more than 5 comments a minute
    get 429. Domain exceptions are caught by centralized exception handlers.
    """
    created = CommentService.create_comment(
        db,
        current_user,
        title_id=comment.title_id,
        content=comment.content,
        episode_id=comment.episode_id,
        parent_comment_id=comment.parent_comment_id,
    )
    return {"success": True, "comment_id": created.id}


@router.delete("/{comment_id}")
def delete_comment(
    comment_id: int,
    db: Session = Depends(get_db),
    current_user: db_models.User = Depends(auth.get_current_active_user),
) -> dict:
    """Delete own comment (soft delete)."""
    CommentService.delete_comment(db, comment_id, int(current_user.id))
    return {"success": True}


@router.post("/react", response_model=schemas.ReactionToggleResponse)
def toggle_reaction(
    body: schemas.ReactionToggle,
    db: Session = Depends(get_db),
    current_user: db_models.User = Depends(
        auth.require_unbanned_user("reacting to comments")
    ),
) -> schemas.ReactionToggleResponse:
    """
    Toggle a like, love or laugh reaction on a comment.

    Same reaction removes it, a different one replaces it.
    """
    action = ReactionService.toggle_reaction(
        db, current_user, body.comment_id, body.reaction_type
    )
    return schemas.ReactionToggleResponse(action=action)
