"""
Router for authentication endpoints.
"""

from fastapi import APIRouter, Depends, Request
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.orm import Session

import authentication.auth as auth
import models.schemas as schemas
import repositories.db_models as db_models
from helpers.rate_limiter import limiter
from helpers.request_utils import get_auth_identifier
from repositories.database import get_db
from services.auth_service import AuthService

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/login", response_model=schemas.Token)
@limiter.limit("10/minute")
def login(
    request: Request,
    form_data: OAuth2PasswordRequestForm = Depends(),
    db: Session = Depends(get_db),
) -> schemas.Token:
    """
    Login user. Rate limited to 10 per minute per IP.

    Failed attempts count against the e-mail; five failures within 15
    minutes lock it out for 30 minutes.

    Domain exceptions are caught by centralized exception handlers.
    """
    return AuthService.login(
        db,
        form_data.username,
        form_data.password,
        identifier=get_auth_identifier(request, form_data.username),
    )


@router.post("/rate-limit", response_model=schemas.AuthRateLimitResponse)
def check_auth_rate_limit(
    request: Request,
    body: schemas.AuthRateLimitCheck,
    db: Session = Depends(get_db),
) -> schemas.AuthRateLimitResponse:
    """
    Check whether a login attempt would be allowed.

    The identifier defaults to the caller's IP address.
    """
    return AuthService.check_rate_limit(db, get_auth_identifier(request, body.identifier))


@router.get("/me", response_model=schemas.User)
async def read_users_me(
    current_user: db_models.User = Depends(auth.get_current_active_user),
) -> db_models.User:
    """Get current user."""
    return current_user
