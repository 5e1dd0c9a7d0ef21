from datetime import datetime, timedelta, timezone
from typing import Optional

import bcrypt
from fastapi import Depends
from fastapi.security import (
    HTTPAuthorizationCredentials,
    HTTPBearer,
    OAuth2PasswordBearer,
)
import jwt
from sqlalchemy.orm import Session

import models.schemas as schemas
import repositories.db_models as db_models
from helpers.time_utils import ensure_utc
from models.config import settings
from models.exceptions import (
    AuthenticationException,
    InactiveUserException,
    InsufficientPermissionsException,
    UserBannedException,
)
from repositories.database import get_db
from repositories.db_models import BanScope
from repositories.user_repository import UserRepository
from services.ban_service import BanService
from services.feature_flag_service import FeatureFlagService

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="api/auth/login")
optional_oauth2_scheme = HTTPBearer(auto_error=False)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return bcrypt.checkpw(plain_password.encode(), hashed_password.encode())


def get_password_hash(password: str) -> str:
    return bcrypt.hashpw(password.encode(), bcrypt.gensalt()).decode()


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    to_encode = data.copy()
    if expires_delta:
        expire = datetime.now(timezone.utc) + expires_delta
    else:
        expire = datetime.now(timezone.utc) + timedelta(minutes=15)
    to_encode.update({"exp": expire})
    encoded_jwt = jwt.encode(
        to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM
    )
    return encoded_jwt


def authenticate_user(db: Session, email: str, password: str) -> db_models.User | None:
    user = UserRepository(db).get_by_email(email)
    if not user:
        return None
    if not verify_password(password, str(user.hashed_password)):
        return None
    return user


def _decode_subject(token: str) -> str | None:
    payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    email_value = payload.get("sub")
    return None if email_value is None else str(email_value)


async def get_current_user(
    token: str = Depends(oauth2_scheme), db: Session = Depends(get_db)
) -> db_models.User:
    """
    Get the current authenticated user from the JWT token.

    Raises:
        AuthenticationException: If credentials are invalid or user not found.
    """
    try:
        email = _decode_subject(token)
        if email is None:
            raise AuthenticationException("Could not validate credentials")
        token_data = schemas.TokenData(email=email)
    except jwt.exceptions.InvalidTokenError:
        raise AuthenticationException("Could not validate credentials")

    user = UserRepository(db).get_by_email(str(token_data.email))
    if user is None:
        raise AuthenticationException("Could not validate credentials")
    return user


async def get_current_active_user(
    current_user: db_models.User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> db_models.User:
    """
    Get the current active user and verify they are not fully banned.

    Comment-scoped bans are checked by the individual actions they restrict.

    Raises:
        InactiveUserException: If the user account has been deactivated.
        UserBannedException: If the user has a full ban in force.
    """
    if not bool(current_user.is_active):
        raise InactiveUserException("Account has been deactivated")

    ban = BanService.get_active_ban(db, int(current_user.id), scope=BanScope.FULL)
    if ban:
        raise UserBannedException(expires_at=ensure_utc(ban.expires_at))

    return current_user


async def get_current_user_optional(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(
        optional_oauth2_scheme
    ),
    db: Session = Depends(get_db),
) -> Optional[db_models.User]:
    """
    Get current user if authenticated, otherwise return None.

    If no credentials are provided, returns None (anonymous access).
    If credentials are provided but expired, raises AuthenticationException
    so the user knows to re-login (returns 401).
    If credentials are malformed or invalid, returns None.
    """
    if credentials is None:
        return None

    try:
        email = _decode_subject(credentials.credentials)
        if email is None:
            return None
        return UserRepository(db).get_by_email(email)
    except jwt.exceptions.ExpiredSignatureError:
        # Token was provided but expired - user should re-login
        raise AuthenticationException("Session expired. Please log in again.")
    except jwt.exceptions.InvalidTokenError:
        # Other JWT errors (malformed token, etc.) - treat as anonymous
        return None


async def get_moderator_user(
    current_user: db_models.User = Depends(get_current_active_user),
) -> db_models.User:
    """
    Require moderator permissions.

    Raises:
        InsufficientPermissionsException: If user is not a moderator.
    """
    if not bool(current_user.is_moderator):
        raise InsufficientPermissionsException("Not enough permissions")
    return current_user


def require_unbanned_user(
    action: str, feature: Optional[str] = None, disabled_message: Optional[str] = None
):
    """
    Build a dependency that rejects banned users before the request body is read.

    FastAPI resolves dependencies ahead of body validation, so a banned
    user gets 403 even when the payload is malformed.

    Args:
        action: Action name used in the ban message (e.g. "posting comments")
        feature: Optional feature flag that must be enabled first
        disabled_message: Message used when the feature is switched off

    Returns:
        Dependency returning the current active user
    """

    async def dependency(
        current_user: db_models.User = Depends(get_current_active_user),
        db: Session = Depends(get_db),
    ) -> db_models.User:
        if feature is not None:
            FeatureFlagService.require_enabled(db, feature, disabled_message)
        BanService.ensure_not_banned(db, current_user.id, action)
        return current_user

    return dependency
