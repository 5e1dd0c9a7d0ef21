"""Tests for the sweep_expired_bans script."""

import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path
from unittest.mock import patch

import pytest

# Add scripts to path
scripts_dir = Path(__file__).parent.parent.parent / "scripts"
sys.path.insert(0, str(scripts_dir))

import sweep_expired_bans  # noqa: E402
from models.exceptions import StoreException  # noqa: E402
from repositories.db_models import Ban  # noqa: E402


@pytest.fixture
def expired_ban(db_session, test_user, moderator_user) -> Ban:
    ban = Ban(
        actor_id=test_user.id,
        issued_by=moderator_user.id,
        reason="Spam",
        expires_at=datetime.now(timezone.utc) - timedelta(minutes=5),
    )
    db_session.add(ban)
    db_session.commit()
    return ban


class TestSweepExpiredBans:
    """Tests for main()."""

    def test_dry_run_changes_nothing(self, db_session, expired_ban):
        ban_id = expired_ban.id
        with patch.object(sweep_expired_bans, "SessionLocal", return_value=db_session):
            assert sweep_expired_bans.main(["--dry-run"]) == 0

        assert db_session.get(Ban, ban_id).is_active is True

    def test_sweep(self, db_session, expired_ban):
        ban_id = expired_ban.id
        with patch.object(sweep_expired_bans, "SessionLocal", return_value=db_session):
            assert sweep_expired_bans.main([]) == 0

        assert db_session.get(Ban, ban_id).is_active is False

    def test_store_error(self, db_session):
        with patch.object(sweep_expired_bans, "SessionLocal", return_value=db_session):
            with patch.object(
                sweep_expired_bans.BanService,
                "deactivate_expired_bans",
                side_effect=StoreException("deactivate_expired_bans", "locked"),
            ):
                assert sweep_expired_bans.main([]) == 1
