"""
Background scheduler for moderation housekeeping.

Uses APScheduler to sweep bans whose expiry has passed. Ban checks already
ignore expired rows at read time; the sweep only keeps is_active truthful
for listings and reporting.
"""

from typing import Optional

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.interval import IntervalTrigger
from loguru import logger

from core.correlation import correlation_scope
from models.config import settings
from repositories.database import SessionLocal

# Global scheduler instance
scheduler: BackgroundScheduler | None = None

BAN_SWEEP_JOB_ID = "expired_ban_sweep"


def expired_ban_sweep_job() -> int:
    """
    Deactivate bans that have expired.

    Creates its own database session for isolation.

    Returns:
        Number of bans deactivated
    """
    from services.ban_service import BanService

    with correlation_scope():
        db = SessionLocal()
        try:
            return BanService.deactivate_expired_bans(db)
        except Exception as e:
            logger.error(f"Expired ban sweep failed: {e!r}")
            raise
        finally:
            db.close()


def setup_scheduler(interval_minutes: Optional[int] = None) -> None:
    """
    Configure and start the background scheduler.

    Schedules:
    - Expired ban sweep: every BAN_SWEEP_INTERVAL_MINUTES
    """
    global scheduler

    if scheduler is not None:
        logger.warning("Scheduler already initialized")
        return

    minutes = interval_minutes or settings.BAN_SWEEP_INTERVAL_MINUTES

    scheduler = BackgroundScheduler()
    scheduler.add_job(
        expired_ban_sweep_job,
        IntervalTrigger(minutes=minutes),
        id=BAN_SWEEP_JOB_ID,
        name="Expired Ban Sweep",
        replace_existing=True,
        coalesce=True,
        max_instances=1,
    )

    scheduler.start()
    logger.info(f"Background scheduler started, ban sweep every {minutes} min")


def shutdown_scheduler() -> None:
    """Gracefully shutdown the scheduler."""
    global scheduler

    if scheduler is not None and scheduler.running:
        scheduler.shutdown(wait=True)
        logger.info("Background scheduler stopped")
    scheduler = None


def get_scheduler_status() -> dict:
    """Get current scheduler status for monitoring."""
    if scheduler is None:
        return {"running": False, "jobs": []}

    jobs = [
        {
            "id": job.id,
            "name": job.name,
            "next_run_time": (
                job.next_run_time.isoformat() if job.next_run_time else None
            ),
        }
        for job in scheduler.get_jobs()
    ]
    return {"running": scheduler.running, "jobs": jobs}
