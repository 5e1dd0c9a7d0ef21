"""Unit tests for init_db functionality."""

from init_db import ensure_moderator, init_db
from models.config import settings
from repositories.db_models import FeatureFlag, User
from services.feature_flag_service import KNOWN_FLAGS


class TestEnsureModerator:
    """Tests for ensure_moderator."""

    def test_creates_moderator(self, db_session):
        assert ensure_moderator(db_session) is True

        user = db_session.query(User).filter(User.email == settings.ADMIN_EMAIL).one()
        assert user.is_moderator is True

    def test_existing_account_is_left_alone(self, db_session):
        ensure_moderator(db_session)

        assert ensure_moderator(db_session) is False
        assert db_session.query(User).count() == 1


class TestInitDb:
    """Tests for init_db."""

    def test_seeds_moderator_and_flags(self, db_session, capsys):
        init_db(db_session)

        assert db_session.query(User).count() == 1
        flags = db_session.query(FeatureFlag).all()
        assert {flag.name for flag in flags} == set(KNOWN_FLAGS)
        assert not any(flag.enabled for flag in flags)
        assert "initialization complete" in capsys.readouterr().out

    def test_is_idempotent(self, db_session):
        init_db(db_session)
        init_db(db_session)

        assert db_session.query(User).count() == 1
        assert db_session.query(FeatureFlag).count() == len(KNOWN_FLAGS)
