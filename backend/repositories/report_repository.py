"""
Repository for content report operations.
"""

from datetime import datetime
from typing import Any

from sqlalchemy.orm import Session

from repositories.base import BaseRepository
from repositories.db_models import Report, ReportContentKind, ReportStatus, User


class ReportRepository(BaseRepository[Report]):
    """Repository for report data access."""

    def __init__(self, db: Session):
        """
        Initialize report repository.

        Args:
            db: Database session
        """
        super().__init__(Report, db)

    def get_pending_by_content_and_reporter(
        self,
        content_kind: ReportContentKind,
        content_id: int,
        reporter_id: int,
    ) -> Report | None:
        """
        Find a still-pending report of this content by this reporter.

        Resolved reports are ignored so users may report content again
        after a moderator has dealt with their earlier report.

        Args:
            content_kind: Kind of reported content
            content_id: ID of the content
            reporter_id: ID of the reporting user

        Returns:
            Pending report if found, None otherwise
        """
        return (
            self.db.query(Report)
            .filter(
                Report.content_kind == content_kind,
                Report.content_id == content_id,
                Report.reporter_id == reporter_id,
                Report.status == ReportStatus.PENDING,
            )
            .first()
        )

    def get_user_submitted_reports(
        self,
        user_id: int,
        skip: int = 0,
        limit: int = 50,
    ) -> list[Report]:
        """
        Get reports submitted by a user, newest first.
        """
        return (
            self.db.query(Report)
            .filter(Report.reporter_id == user_id)
            .order_by(Report.created_at.desc(), Report.id.desc())
            .offset(skip)
            .limit(limit)
            .all()
        )

    def get_reports_queue(
        self,
        status: ReportStatus | None = None,
        skip: int = 0,
        limit: int = 50,
    ) -> tuple[list[Any], int]:
        """
        Get reports for the moderation queue with reporter names.

        Args:
            status: Filter by status (all statuses if None)
            skip: Pagination offset
            limit: Pagination limit

        Returns:
            Tuple of (list of (report, reporter_username), total_count)
        """
        query = self.db.query(Report, User.username).join(
            User, Report.reporter_id == User.id
        )
        if status:
            query = query.filter(Report.status == status)

        total = query.count()
        results = (
            query.order_by(Report.created_at.desc(), Report.id.desc())
            .offset(skip)
            .limit(limit)
            .all()
        )
        return results, total

    def claim(
        self,
        report_id: int,
        status: ReportStatus,
        reviewer_id: int,
        resolution_notes: str | None,
        now: datetime,
    ) -> int:
        """
        Move a pending report to a terminal status in a single statement.

        Does not commit: the caller commits together with any content change.

        Args:
            report_id: ID of the report
            status: Terminal status (actioned or dismissed)
            reviewer_id: ID of the moderator
            resolution_notes: Note stored on the report
            now: Review time

        Returns:
            Number of rows changed (0 when the report was no longer pending)
        """
        return (
            self.db.query(Report)
            .filter(Report.id == report_id, Report.status == ReportStatus.PENDING)
            .update(
                {
                    Report.status: status,
                    Report.reviewer_id: reviewer_id,
                    Report.reviewed_at: now,
                    Report.resolution_notes: resolution_notes,
                },
                synchronize_session=False,
            )
        )
