"""
Service for content report intake.
"""

from sqlalchemy.orm import Session

from models.exceptions import (
    DuplicateReportException,
    NotFoundException,
    ValidationException,
)
from repositories.database import store_operation
from repositories.db_models import ActionType, Report, ReportContentKind, ReportStatus
from repositories.report_repository import ReportRepository
from services.rate_limit_service import RateLimitService
from services.reportable_content import get_handler

MAX_REASON_LENGTH = 500


class ReportService:
    """Service for user-submitted reports."""

    @staticmethod
    def create_report(
        db: Session,
        content_kind: str | ReportContentKind,
        content_id: int,
        reporter_id: int,
        reason: str,
    ) -> Report:
        """
        Report a comment, creator post or user.

        Args:
            db: Database session
            content_kind: Kind of content being reported
            content_id: ID of the content
            reporter_id: ID of the reporting user
            reason: Free-text reason

        Returns:
            Created report

        Raises:
            RateLimitExceededException: If the reporter is over the report quota
            ValidationException: If the kind or reason is invalid
            NotFoundException: If the content does not exist
            DuplicateReportException: If the reporter has a pending report
                on the same content
            StoreException: If the store call fails
        """
        RateLimitService.enforce(db, reporter_id, ActionType.REPORT)

        handler = get_handler(content_kind)
        reason = (reason or "").strip()
        if not reason:
            raise ValidationException("A reason is required")
        if len(reason) > MAX_REASON_LENGTH:
            raise ValidationException(
                f"Reason must be {MAX_REASON_LENGTH} characters or less"
            )

        with store_operation(db, "create_report"):
            if handler.fetch(db, content_id) is None:
                raise NotFoundException(
                    f"Reported {handler.kind.value} {content_id} not found"
                )

            report_repo = ReportRepository(db)
            if report_repo.get_pending_by_content_and_reporter(
                handler.kind, content_id, reporter_id
            ):
                raise DuplicateReportException()

            report = report_repo.create(
                Report(
                    content_kind=handler.kind,
                    content_id=content_id,
                    reporter_id=reporter_id,
                    reason=reason,
                    status=ReportStatus.PENDING,
                )
            )

        RateLimitService.record_event(db, reporter_id, ActionType.REPORT)
        return report

    @staticmethod
    def get_user_reports(
        db: Session,
        reporter_id: int,
        skip: int = 0,
        limit: int = 50,
    ) -> list[Report]:
        """Get reports submitted by a user, newest first."""
        with store_operation(db, "get_user_reports"):
            return ReportRepository(db).get_user_submitted_reports(
                reporter_id, skip, limit
            )
