"""
Authentication Service

Handles authentication business logic including login, token management and
the failed-attempt lockout.
"""

import math
from datetime import timedelta
from typing import Optional

from loguru import logger
from sqlalchemy.orm import Session

import models.schemas as schemas
from authentication.auth import authenticate_user, create_access_token
from models.config import settings
from models.exceptions import InvalidCredentialsException, RateLimitExceededException
from services.rate_limit_service import RateLimitService


def _lockout_message(retry_after: Optional[int]) -> str:
    minutes = max(1, math.ceil((retry_after or 0) / 60))
    return f"Too many attempts. Please try again in {minutes} minutes."


class AuthService:
    """Service for authentication business logic."""

    @staticmethod
    def check_rate_limit(db: Session, identifier: str) -> schemas.AuthRateLimitResponse:
        """
        Tell a client whether it may attempt to log in.

        Args:
            db: Database session
            identifier: E-mail or client IP

        Returns:
            within_limit flag, with a message and retry_after when locked out
        """
        check = RateLimitService.check_auth_attempts(db, identifier)
        if check.within_limit:
            return schemas.AuthRateLimitResponse(within_limit=True)
        return schemas.AuthRateLimitResponse(
            within_limit=False,
            message=_lockout_message(check.retry_after),
            retry_after=check.retry_after,
        )

    @staticmethod
    def login(
        db: Session,
        email: str,
        password: str,
        identifier: Optional[str] = None,
    ) -> schemas.Token:
        """
        Authenticate a user and create an access token.

        Failed attempts are recorded against the identifier (the e-mail when
        none is given) and lock it out once the attempt limit is reached.

        Args:
            db: Database session
            email: User email
            password: User password
            identifier: Key for the attempt limiter

        Returns:
            Token object with access_token and token_type

        Raises:
            RateLimitExceededException: If the identifier is locked out
            InvalidCredentialsException: If email or password is incorrect
        """
        identifier = identifier or email.strip().lower()
        check = RateLimitService.check_auth_attempts(db, identifier)
        if not check.within_limit:
            raise RateLimitExceededException(
                message=_lockout_message(check.retry_after),
                retry_after=check.retry_after,
            )

        user = authenticate_user(db, email, password)
        if not user:
            RateLimitService.record_auth_attempt(db, identifier)
            logger.info(f"Failed login attempt for {identifier}")
            raise InvalidCredentialsException("Incorrect email or password")

        access_token_expires = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
        access_token = create_access_token(
            data={"sub": str(user.email)}, expires_delta=access_token_expires
        )
        # nosec B106: "bearer" is OAuth2 token type, not a password
        return schemas.Token(access_token=access_token, token_type="bearer")  # nosec B106
