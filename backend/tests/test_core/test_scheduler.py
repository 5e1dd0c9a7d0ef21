"""Tests for the background scheduler."""

from datetime import datetime, timedelta, timezone
from unittest.mock import patch

import pytest

import core.scheduler as scheduler_module
from core.scheduler import (
    BAN_SWEEP_JOB_ID,
    expired_ban_sweep_job,
    get_scheduler_status,
    setup_scheduler,
    shutdown_scheduler,
)
from repositories.db_models import Ban


@pytest.fixture
def expired_ban(db_session, test_user, moderator_user) -> Ban:
    ban = Ban(
        actor_id=test_user.id,
        issued_by=moderator_user.id,
        reason="Spam",
        expires_at=datetime.now(timezone.utc) - timedelta(hours=1),
    )
    db_session.add(ban)
    db_session.commit()
    return ban


class TestExpiredBanSweepJob:
    """Tests for expired_ban_sweep_job."""

    def test_deactivates_expired_bans(self, db_session, expired_ban):
        ban_id = expired_ban.id
        with patch("core.scheduler.SessionLocal", return_value=db_session):
            count = expired_ban_sweep_job()

        assert count == 1
        assert db_session.get(Ban, ban_id).is_active is False

    def test_errors_propagate(self, db_session):
        with patch("core.scheduler.SessionLocal", return_value=db_session):
            with patch(
                "services.ban_service.BanService.deactivate_expired_bans",
                side_effect=RuntimeError("boom"),
            ):
                with pytest.raises(RuntimeError):
                    expired_ban_sweep_job()


class TestSchedulerLifecycle:
    """Tests for setup/shutdown."""

    def teardown_method(self) -> None:
        shutdown_scheduler()

    def test_not_running(self):
        assert get_scheduler_status() == {"running": False, "jobs": []}

    def test_setup_registers_sweep(self):
        setup_scheduler(interval_minutes=60)

        status = get_scheduler_status()
        assert status["running"] is True
        assert [job["id"] for job in status["jobs"]] == [BAN_SWEEP_JOB_ID]

    def test_setup_twice_keeps_one_scheduler(self):
        setup_scheduler(interval_minutes=60)
        first = scheduler_module.scheduler

        setup_scheduler(interval_minutes=60)

        assert scheduler_module.scheduler is first
