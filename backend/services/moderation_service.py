"""
Moderation Service - resolves user reports.

A report moves from pending to actioned or dismissed exactly once. The move
is claimed with a conditional update on the pending status, and any content
change or ban commits in the same transaction as the claim, so two
moderators acting on the same report cannot both succeed.
"""

from typing import Any, Optional

from loguru import logger
from sqlalchemy.orm import Session

from helpers.time_utils import utc_now
from models.exceptions import (
    DomainException,
    NotFoundException,
    ReportAlreadyResolvedException,
    ReportNotFoundException,
    ValidationException,
)
from repositories.database import store_operation
from repositories.db_models import Ban, BanScope, Report, ReportStatus
from repositories.report_repository import ReportRepository
from services.ban_service import BanService
from services.reportable_content import ReportableContent, get_handler

HIDDEN_NOTE = "Content hidden"
BANNED_NOTE = "User banned"


class ModerationService:
    """Service for moderator actions on reports."""

    @staticmethod
    def _get_pending_report(db: Session, report_id: int) -> Report:
        report = ReportRepository(db).get_by_id(report_id)
        if not report:
            raise ReportNotFoundException(report_id)
        if report.status != ReportStatus.PENDING:
            raise ReportAlreadyResolvedException(report_id)
        return report

    @staticmethod
    def _get_content(db: Session, report: Report) -> tuple[ReportableContent, Any]:
        handler = get_handler(report.content_kind)
        content = handler.fetch(db, report.content_id)
        if content is None:
            raise NotFoundException(
                f"Reported {handler.kind.value} {report.content_id} no longer exists"
            )
        return handler, content

    @staticmethod
    def _claim(
        db: Session,
        report_id: int,
        status: ReportStatus,
        moderator_id: int,
        notes: Optional[str],
    ) -> None:
        """Claim the report or raise if someone else resolved it first."""
        claimed = ReportRepository(db).claim(
            report_id, status, moderator_id, notes, utc_now()
        )
        if claimed == 0:
            raise ReportAlreadyResolvedException(report_id)

    @staticmethod
    def get_report(db: Session, report_id: int) -> Report:
        """
        Get a report by ID.

        Raises:
            ReportNotFoundException: If report not found
        """
        with store_operation(db, "get_report"):
            report = ReportRepository(db).get_by_id(report_id)
        if not report:
            raise ReportNotFoundException(report_id)
        return report

    @staticmethod
    def list_reports(
        db: Session,
        status: Optional[ReportStatus] = None,
        skip: int = 0,
        limit: int = 50,
    ) -> tuple[list[dict[str, Any]], int]:
        """
        Get the moderation queue with details of the reported content.

        Content that no longer exists is listed with empty details.

        Args:
            db: Database session
            status: Filter by status (all statuses if None)
            skip: Pagination offset
            limit: Pagination limit

        Returns:
            Tuple of (list of report dicts, total_count)
        """
        with store_operation(db, "list_reports"):
            results, total = ReportRepository(db).get_reports_queue(status, skip, limit)

            items = []
            for report, reporter_username in results:
                handler = get_handler(report.content_kind)
                content = handler.fetch(db, report.content_id)
                items.append(
                    {
                        "id": report.id,
                        "content_kind": report.content_kind,
                        "content_id": report.content_id,
                        "reporter_id": report.reporter_id,
                        "reporter_username": reporter_username,
                        "reason": report.reason,
                        "status": report.status,
                        "reviewer_id": report.reviewer_id,
                        "reviewed_at": report.reviewed_at,
                        "resolution_notes": report.resolution_notes,
                        "created_at": report.created_at,
                        "content_text": handler.text_of(content) if content else None,
                        "content_author_id": (
                            handler.author_of(db, content) if content else None
                        ),
                        "content_hidden": bool(getattr(content, "is_hidden", False)),
                    }
                )
        return items, total

    @staticmethod
    def hide(db: Session, report_id: int, moderator_id: int) -> Report:
        """
        Hide the reported comment or creator post and action the report.

        Args:
            db: Database session
            report_id: ID of the report
            moderator_id: ID of the acting moderator

        Returns:
            Updated report

        Raises:
            ReportNotFoundException: If report not found
            ReportAlreadyResolvedException: If the report is not pending
            ValidationException: If the report targets a user
            NotFoundException: If the content no longer exists
            StoreException: If the store call fails
        """
        with store_operation(db, "hide"):
            report = ModerationService._get_pending_report(db, report_id)
            handler, content = ModerationService._get_content(db, report)
            if handler.hide is None:
                raise ValidationException(
                    f"A reported {handler.kind.value} cannot be hidden; ban instead"
                )

            try:
                ModerationService._claim(
                    db, report_id, ReportStatus.ACTIONED, moderator_id, HIDDEN_NOTE
                )
                handler.hide(content, moderator_id, report.reason, utc_now())
                db.commit()
            except DomainException:
                db.rollback()
                raise
            db.refresh(report)

        logger.info(
            f"Report {report_id}: {handler.kind.value} {report.content_id} "
            f"hidden by moderator {moderator_id}"
        )
        return report

    @staticmethod
    def ban_actor(
        db: Session,
        report_id: int,
        moderator_id: int,
        reason: Optional[str] = None,
        duration_hours: Optional[int] = None,
    ) -> tuple[Report, Ban]:
        """
        Ban the author of the reported content and action the report.

        The ban is comment-scoped: it blocks commenting, reacting, posting
        and uploading but not browsing.

        Args:
            db: Database session
            report_id: ID of the report
            moderator_id: ID of the acting moderator
            reason: Ban reason (defaults to the report reason)
            duration_hours: Ban length (permanent if None)

        Returns:
            Tuple of (updated report, created ban)

        Raises:
            ReportNotFoundException: If report not found
            ReportAlreadyResolvedException: If the report is not pending
            NotFoundException: If the content or its author no longer exists
            ValidationException: If duration is not positive
            StoreException: If the store call fails
        """
        if duration_hours is not None and duration_hours <= 0:
            raise ValidationException("Ban duration must be positive")

        with store_operation(db, "ban_actor"):
            report = ModerationService._get_pending_report(db, report_id)
            handler, content = ModerationService._get_content(db, report)
            actor_id = handler.author_of(db, content)
            if actor_id is None:
                raise NotFoundException(
                    f"Author of {handler.kind.value} {report.content_id} not found"
                )

            try:
                ModerationService._claim(
                    db, report_id, ReportStatus.ACTIONED, moderator_id, BANNED_NOTE
                )
                ban = BanService.issue_ban(
                    db,
                    actor_id=actor_id,
                    issued_by=moderator_id,
                    reason=(reason or "").strip() or report.reason,
                    scope=BanScope.COMMENT,
                    duration_hours=duration_hours,
                    commit=False,
                )
                db.commit()
            except DomainException:
                db.rollback()
                raise
            db.refresh(report)
            db.refresh(ban)

        logger.info(
            f"Report {report_id}: user {actor_id} banned by moderator {moderator_id}"
        )
        return report, ban

    @staticmethod
    def dismiss(
        db: Session,
        report_id: int,
        moderator_id: int,
        notes: Optional[str] = None,
    ) -> Report:
        """
        Dismiss a report without touching the content.

        Raises:
            ReportNotFoundException: If report not found
            ReportAlreadyResolvedException: If the report is not pending
            StoreException: If the store call fails
        """
        with store_operation(db, "dismiss"):
            report = ModerationService._get_pending_report(db, report_id)
            try:
                ModerationService._claim(
                    db, report_id, ReportStatus.DISMISSED, moderator_id, notes
                )
                db.commit()
            except DomainException:
                db.rollback()
                raise
            db.refresh(report)

        logger.info(f"Report {report_id} dismissed by moderator {moderator_id}")
        return report
