# ruff: noqa: E402
# E402 disabled: load_dotenv() must run before other imports for Sentry DSN

import os
import time
from collections.abc import Awaitable, Callable
from contextlib import asynccontextmanager

from dotenv import load_dotenv

load_dotenv()

import sentry_sdk
from fastapi import FastAPI, Request, Response, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from loguru import logger
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from starlette.middleware.base import BaseHTTPMiddleware

from core.correlation import (
    generate_correlation_id,
    get_correlation_id,
    set_correlation_id,
)
from core.logging_config import configure_logging
from core.sentry_config import init_sentry
from helpers.rate_limiter import limiter
from models.config import settings
from models.exceptions import (
    AuthenticationException,
    ConflictException,
    DomainException,
    NotFoundException,
    PermissionDeniedException,
    RateLimitExceededException,
    StoreException,
    UserBannedException,
    ValidationException,
    VideoPipelineException,
    VideoPipelineNotConfiguredException,
)
from repositories.database import Base, engine
from routers import (
    admin_router,
    auth_router,
    comments_router,
    creators_router,
    feature_flags_router,
    moderation_router,
    playback_router,
    reports_router,
    titles_router,
    uploads_router,
)

# Initialize Sentry BEFORE app creation
init_sentry()

# Configure logging with Loguru
configure_logging(os.getenv("ENVIRONMENT", "development"))

# Latest alembic revision the code expects (update when adding new migrations)
EXPECTED_REVISION = "8c2d4e6f1a3b"  # add_ads_tracking_and_progress


def check_schema_version() -> None:
    """Verify database schema version matches expected migration.

    This helps catch cases where the application code expects a newer schema
    than what's deployed in the database.
    """
    from sqlalchemy import text
    from sqlalchemy.exc import SQLAlchemyError

    from repositories.database import SessionLocal

    db = SessionLocal()
    try:
        result = db.execute(text("SELECT version_num FROM alembic_version LIMIT 1"))
        row = result.fetchone()
        if row:
            current_revision = row[0]
            if current_revision != EXPECTED_REVISION:
                logger.warning(
                    f"Database schema mismatch! "
                    f"Current: {current_revision}, Expected: {EXPECTED_REVISION}. "
                    f"Run 'alembic upgrade head' to update the database schema."
                )
            else:
                logger.info(f"Database schema version: {current_revision} (up to date)")
        else:
            logger.warning(
                "No alembic_version found. Database may not be initialized with migrations."
            )
    except SQLAlchemyError as e:
        logger.warning(f"Could not verify schema version: {e}")
    finally:
        db.close()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler.

    - Verify database schema version matches expected migration.
    - Optionally create tables when `AUTO_CREATE_DB` is enabled (development).
    - Start the background scheduler that sweeps expired bans.
    """
    check_schema_version()

    if settings.AUTO_CREATE_DB:
        logger.info(
            "AUTO_CREATE_DB enabled; creating database tables via SQLAlchemy create_all()"
        )
        Base.metadata.create_all(bind=engine)
    else:
        logger.info("AUTO_CREATE_DB disabled; skipping automatic create_all()")

    from core.scheduler import setup_scheduler, shutdown_scheduler

    if settings.ENVIRONMENT != "test":
        setup_scheduler()

    try:
        yield
    finally:
        if settings.ENVIRONMENT != "test":
            shutdown_scheduler()


app = FastAPI(title="StreamVault API", lifespan=lifespan)

# Attach IP rate limiter to app
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)  # type: ignore[arg-type]


class CorrelationIdMiddleware(BaseHTTPMiddleware):
    """Inject correlation ID into request context and Sentry."""

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        """Process request with correlation ID tracking."""
        # Check for incoming correlation ID (from frontend)
        correlation_id = (
            request.headers.get("X-Correlation-ID") or generate_correlation_id()
        )
        set_correlation_id(correlation_id)

        sentry_sdk.set_tag("correlation_id", correlation_id)

        response = await call_next(request)
        response.headers["X-Correlation-ID"] = correlation_id
        return response


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log all incoming requests with performance monitoring."""

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        """Process request and log timing information."""
        start_time = time.perf_counter()

        client_host = request.client.host if request.client else "unknown"
        logger.info(f"Request: {request.method} {request.url.path} from {client_host}")

        response = await call_next(request)

        duration = time.perf_counter() - start_time
        logger.info(
            f"Response: {request.method} {request.url.path} "
            f"status={response.status_code} duration={duration:.3f}s"
        )

        # Warn on slow requests (configurable threshold)
        if duration > settings.SLOW_REQUEST_THRESHOLD:
            logger.warning(
                f"Slow request: {request.method} {request.url.path} "
                f"took {duration:.2f}s (threshold: {settings.SLOW_REQUEST_THRESHOLD}s)"
            )

        response.headers["X-Response-Time"] = f"{duration:.3f}s"
        return response


# Middleware runs in reverse order of registration
app.add_middleware(CorrelationIdMiddleware)
app.add_middleware(RequestLoggingMiddleware)

# Configure CORS from environment settings
cors_origins = ["*"] if settings.ENVIRONMENT == "development" else settings.CORS_ORIGINS
app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    allow_credentials=True if settings.ENVIRONMENT != "development" else False,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _error_response(
    status_code: int,
    exc: DomainException,
    headers: dict[str, str] | None = None,
    **extra: object,
) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"detail": exc.message, "correlation_id": exc.correlation_id, **extra},
        headers=headers,
    )


# Global unhandled exception handler (returns generic 500 and logs details)
@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch all unhandled exceptions with full Sentry capture."""
    correlation_id = get_correlation_id() or generate_correlation_id()

    sentry_sdk.set_tag("correlation_id", correlation_id)
    sentry_sdk.capture_exception(exc)

    # Use repr() to escape curly braces in exception message
    # (loguru's .format() interprets them as placeholders otherwise)
    logger.exception(
        f"Unhandled exception: {exc!r}",
        correlation_id=correlation_id,
        path=str(request.url.path),
        method=request.method,
    )

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "detail": "Internal server error",
            "correlation_id": correlation_id,
        },
    )


# Centralized exception handlers
@app.exception_handler(NotFoundException)
async def not_found_exception_handler(
    request: Request, exc: NotFoundException
) -> JSONResponse:
    """Handle not found exceptions."""
    sentry_sdk.set_tag("correlation_id", exc.correlation_id)
    sentry_sdk.set_tag("exception_type", exc.__class__.__name__)
    logger.warning(
        f"Not found: {exc.message}",
        exception_type=exc.__class__.__name__,
        path=str(request.url.path),
    )
    return _error_response(status.HTTP_404_NOT_FOUND, exc)


def _format_validation_errors(exc: RequestValidationError) -> str:
    parts = []
    for error in exc.errors():
        location = ".".join(
            str(part) for part in error.get("loc", ()) if part != "body"
        )
        message = error.get("msg", "Invalid value")
        parts.append(f"{location}: {message}" if location else message)
    return "Invalid request: " + "; ".join(parts)


@app.exception_handler(RequestValidationError)
async def request_validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Map malformed bodies, paths and queries to 400 with a correlation ID."""
    error = ValidationException(_format_validation_errors(exc))
    sentry_sdk.set_tag("correlation_id", error.correlation_id)
    sentry_sdk.set_tag("exception_type", exc.__class__.__name__)
    # bind() keeps braces in pydantic messages away from loguru's format()
    logger.bind(
        exception_type=exc.__class__.__name__,
        path=str(request.url.path),
    ).warning(f"Request validation error: {error.message}")
    return _error_response(status.HTTP_400_BAD_REQUEST, error)


@app.exception_handler(ValidationException)
async def validation_exception_handler(
    request: Request, exc: ValidationException
) -> JSONResponse:
    """Handle validation exceptions."""
    sentry_sdk.set_tag("correlation_id", exc.correlation_id)
    sentry_sdk.set_tag("exception_type", exc.__class__.__name__)
    logger.warning(
        f"Validation error: {exc.message}",
        exception_type=exc.__class__.__name__,
        path=str(request.url.path),
    )
    return _error_response(status.HTTP_400_BAD_REQUEST, exc)


@app.exception_handler(PermissionDeniedException)
async def permission_denied_exception_handler(
    request: Request, exc: PermissionDeniedException
) -> JSONResponse:
    """Handle permission denied exceptions."""
    sentry_sdk.set_tag("correlation_id", exc.correlation_id)
    sentry_sdk.set_tag("exception_type", exc.__class__.__name__)
    logger.warning(
        f"Permission denied: {exc.message}",
        exception_type=exc.__class__.__name__,
        path=str(request.url.path),
    )
    return _error_response(status.HTTP_403_FORBIDDEN, exc)


@app.exception_handler(UserBannedException)
async def user_banned_handler(
    request: Request, exc: UserBannedException
) -> JSONResponse:
    """Handle user banned exception."""
    sentry_sdk.set_tag("correlation_id", exc.correlation_id)
    logger.warning(f"User banned: {exc.message}", path=str(request.url.path))
    return _error_response(
        status.HTTP_403_FORBIDDEN,
        exc,
        expires_at=exc.expires_at.isoformat() if exc.expires_at else None,
    )


@app.exception_handler(AuthenticationException)
async def authentication_exception_handler(
    request: Request, exc: AuthenticationException
) -> JSONResponse:
    """Handle authentication exceptions."""
    sentry_sdk.set_tag("correlation_id", exc.correlation_id)
    sentry_sdk.set_tag("exception_type", exc.__class__.__name__)
    logger.warning(
        f"Authentication failed: {exc.message}",
        exception_type=exc.__class__.__name__,
        path=str(request.url.path),
    )
    return _error_response(
        status.HTTP_401_UNAUTHORIZED, exc, headers={"WWW-Authenticate": "Bearer"}
    )


@app.exception_handler(ConflictException)
async def conflict_exception_handler(
    request: Request, exc: ConflictException
) -> JSONResponse:
    """Handle conflict exceptions (duplicates, already resolved, already lifted)."""
    sentry_sdk.set_tag("correlation_id", exc.correlation_id)
    sentry_sdk.set_tag("exception_type", exc.__class__.__name__)
    logger.warning(
        f"Conflict: {exc.message}",
        exception_type=exc.__class__.__name__,
        path=str(request.url.path),
    )
    return _error_response(status.HTTP_409_CONFLICT, exc)


@app.exception_handler(RateLimitExceededException)
async def rate_limit_exceeded_handler(
    request: Request, exc: RateLimitExceededException
) -> JSONResponse:
    """Handle rate limit exceeded exception."""
    sentry_sdk.set_tag("correlation_id", exc.correlation_id)
    logger.warning(f"Rate limit exceeded: {exc.message}", path=str(request.url.path))

    headers = {}
    if exc.retry_after:
        headers["Retry-After"] = str(exc.retry_after)
    return _error_response(status.HTTP_429_TOO_MANY_REQUESTS, exc, headers=headers)


@app.exception_handler(StoreException)
async def store_exception_handler(
    request: Request, exc: StoreException
) -> JSONResponse:
    """Handle backing-store failures."""
    sentry_sdk.set_tag("correlation_id", exc.correlation_id)
    sentry_sdk.set_tag("exception_type", exc.__class__.__name__)
    sentry_sdk.capture_exception(exc)
    logger.error(
        f"Store failure: {exc.message}",
        operation=exc.operation,
        path=str(request.url.path),
    )
    return _error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, exc)


@app.exception_handler(VideoPipelineNotConfiguredException)
async def video_pipeline_not_configured_handler(
    request: Request, exc: VideoPipelineNotConfiguredException
) -> JSONResponse:
    """Handle missing video pipeline credentials."""
    sentry_sdk.set_tag("correlation_id", exc.correlation_id)
    logger.warning(f"Video pipeline unavailable: {exc.message}")
    return _error_response(status.HTTP_503_SERVICE_UNAVAILABLE, exc)


@app.exception_handler(VideoPipelineException)
async def video_pipeline_exception_handler(
    request: Request, exc: VideoPipelineException
) -> JSONResponse:
    """Handle video pipeline call failures."""
    sentry_sdk.set_tag("correlation_id", exc.correlation_id)
    sentry_sdk.capture_exception(exc)
    logger.error(f"Video pipeline error: {exc.message}", path=str(request.url.path))
    return _error_response(status.HTTP_502_BAD_GATEWAY, exc)


@app.exception_handler(DomainException)
async def domain_exception_handler(
    request: Request, exc: DomainException
) -> JSONResponse:
    """Handle generic domain exceptions with Sentry integration."""
    sentry_sdk.set_tag("correlation_id", exc.correlation_id)
    sentry_sdk.set_tag("exception_type", exc.__class__.__name__)

    # Capture unexpected domain exceptions
    sentry_sdk.capture_exception(exc)

    logger.warning(
        f"Domain exception: {exc.message}",
        exception_type=exc.__class__.__name__,
        path=str(request.url.path),
    )
    return _error_response(
        status.HTTP_400_BAD_REQUEST, exc, type=exc.__class__.__name__
    )


# Include routers
app.include_router(auth_router.router, prefix="/api")
app.include_router(titles_router.router, prefix="/api")
app.include_router(comments_router.router, prefix="/api")
app.include_router(reports_router.router, prefix="/api")
app.include_router(creators_router.router, prefix="/api")
app.include_router(uploads_router.router, prefix="/api")
app.include_router(playback_router.router, prefix="/api")
app.include_router(feature_flags_router.router, prefix="/api")
app.include_router(moderation_router.router, prefix="/api")
app.include_router(admin_router.router, prefix="/api")


@app.get("/")
def root() -> dict:
    """Root endpoint."""
    return {"message": "Welcome to StreamVault API"}


@app.get("/api/health")
def health_check() -> dict:
    """Health check endpoint."""
    return {"status": "healthy"}
