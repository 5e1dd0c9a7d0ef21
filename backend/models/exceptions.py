"""
Custom domain exceptions for the application.

These exceptions are raised by the service layer and converted to HTTP exceptions
by centralized exception handlers in main.py, maintaining proper separation of concerns.

The authentication module (auth.py) also uses these domain exceptions to remain
HTTP-agnostic, allowing reuse in non-HTTP contexts (CLI tools, background tasks).

Enhanced with correlation IDs for Sentry integration and user error reporting.
"""

from datetime import datetime

from core.correlation import generate_correlation_id, get_correlation_id


class DomainException(Exception):
    """
    Base class for all domain exceptions.

    Attributes:
        message: Human-readable error message.
        correlation_id: Unique ID for error tracking (auto-generated if not provided).
    """

    def __init__(self, message: str, correlation_id: str | None = None):
        self.message = message
        # Use request correlation ID if available, otherwise generate new one
        self.correlation_id = (
            correlation_id or get_correlation_id() or generate_correlation_id()
        )
        super().__init__(self.message)


class NotFoundException(DomainException):
    """Raised when a requested resource is not found."""

    pass


class PermissionDeniedException(DomainException):
    """Raised when user lacks required permissions."""

    pass


class ValidationException(DomainException):
    """Raised when input validation fails."""

    pass


class ConflictException(DomainException):
    """Raised when operation conflicts with existing data."""

    pass


class AuthenticationException(DomainException):
    """Raised when authentication fails."""

    pass


class StoreException(DomainException):
    """Raised when a backing-store call fails."""

    def __init__(self, operation: str, detail: str):
        super().__init__(f"Store operation '{operation}' failed: {detail}")
        self.operation = operation
        self.detail = detail


# Specific exceptions for domain entities


class UserNotFoundException(NotFoundException):
    """User not found."""

    pass


class TitleNotFoundException(NotFoundException):
    """Title not found."""

    pass


class TitleInUseException(ConflictException):
    """Raised when deleting a title that comments or posts still reference."""

    def __init__(self, title_id: int):
        super().__init__(
            f"Title {title_id} has comments or creator posts and cannot be deleted"
        )
        self.title_id = title_id


class CommentNotFoundException(NotFoundException):
    """Comment not found."""

    pass


class InvalidCredentialsException(AuthenticationException):
    """Invalid username or password."""

    pass


class InactiveUserException(PermissionDeniedException):
    """User account is inactive."""

    pass


class InsufficientPermissionsException(PermissionDeniedException):
    """User doesn't have sufficient permissions."""

    pass


class CannotDeleteOthersCommentException(PermissionDeniedException):
    """Raised when user tries to delete a comment they don't own."""

    def __init__(self) -> None:
        super().__init__("Not authorized to delete this comment")


class DuplicateCommentException(ValidationException):
    """Raised when the same user posts identical content within a minute."""

    def __init__(self, message: str = "Duplicate comment detected"):
        super().__init__(message)


# ============================================================================
# Content Moderation Exceptions
# ============================================================================


class ReportNotFoundException(NotFoundException):
    """Raised when report is not found."""

    def __init__(self, report_id: int):
        super().__init__(f"Report with ID {report_id} not found")
        self.report_id = report_id


class DuplicateReportException(ConflictException):
    """Raised when user reports the same content again while still pending."""

    def __init__(self, message: str = "You have already reported this content"):
        super().__init__(message)


class ReportAlreadyResolvedException(ConflictException):
    """Raised when trying to resolve a report that is no longer pending."""

    def __init__(self, report_id: int):
        super().__init__(f"Report {report_id} has already been resolved")
        self.report_id = report_id


class BanNotFoundException(NotFoundException):
    """Raised when ban is not found."""

    def __init__(self, ban_id: int):
        super().__init__(f"Ban with ID {ban_id} not found")
        self.ban_id = ban_id


class BanAlreadyLiftedException(ConflictException):
    """Raised when trying to lift a ban that is no longer active."""

    def __init__(self, ban_id: int):
        super().__init__(f"Ban {ban_id} is no longer active")
        self.ban_id = ban_id


class UserBannedException(PermissionDeniedException):
    """Raised when banned user tries to perform restricted action."""

    def __init__(self, action: str | None = None, expires_at: datetime | None = None):
        if action:
            message = f"You are banned from {action}"
        else:
            message = "Your account has been banned"
        if expires_at:
            message = f"{message} until {expires_at.isoformat()}"
        super().__init__(message)
        self.action = action
        self.expires_at = expires_at


# ============================================================================
# Feature Flag and Creator Exceptions
# ============================================================================


class FeatureDisabledException(PermissionDeniedException):
    """Raised when a gated feature is turned off."""

    def __init__(self, feature_name: str, message: str | None = None):
        super().__init__(message or f"Feature '{feature_name}' is disabled")
        self.feature_name = feature_name


class CreatorNotFoundException(NotFoundException):
    """Creator not found."""

    def __init__(self, creator_id: int):
        super().__init__(f"Creator with ID {creator_id} not found")
        self.creator_id = creator_id


class NotApprovedCreatorException(PermissionDeniedException):
    """Raised when a non-creator tries a creator-only action."""

    def __init__(self, message: str = "Only approved creators can do this"):
        super().__init__(message)


class CreatorApplicationExistsException(ConflictException):
    """Raised when a user applies to become a creator twice."""

    def __init__(self, message: str = "You have already applied to become a creator"):
        super().__init__(message)


class CreatorAlreadyReviewedException(ConflictException):
    """Raised when a creator application was already reviewed."""

    def __init__(self, creator_id: int):
        super().__init__(f"Creator application {creator_id} was already reviewed")
        self.creator_id = creator_id


class VideoUploadNotFoundException(NotFoundException):
    """Raised when an upload is unknown or not owned by the caller."""

    def __init__(self, upload_id: str):
        super().__init__(f"Upload '{upload_id}' not found")
        self.upload_id = upload_id


# ============================================================================
# Video Pipeline Exceptions
# ============================================================================


class VideoPipelineException(DomainException):
    """Raised when the video pipeline API call fails."""

    pass


class VideoPipelineNotConfiguredException(VideoPipelineException):
    """Raised when video pipeline credentials are missing."""

    def __init__(
        self,
        message: str = "Video pipeline credentials are not configured",
    ):
        super().__init__(message)


# ============================================================================
# Rate Limiting Exceptions
# ============================================================================


class RateLimitExceededException(DomainException):
    """Raised when rate limit is exceeded."""

    def __init__(
        self,
        message: str = "Rate limit exceeded. Please try again later.",
        retry_after: int | None = None,
    ):
        super().__init__(message)
        self.retry_after = retry_after
