"""
Unit tests for FeatureFlagService.
"""

from unittest.mock import patch

import pytest
from sqlalchemy.exc import OperationalError

from models.exceptions import FeatureDisabledException, ValidationException
from repositories.db_models import FeatureFlag
from repositories.feature_flag_repository import FeatureFlagRepository
from services.feature_flag_service import (
    CREATOR_UPLOADS,
    ENABLE_CREATOR_POSTS,
    KNOWN_FLAGS,
    FeatureFlagService,
)


class TestIsEnabled:
    """Tests for FeatureFlagService.is_enabled"""

    def test_missing_flag_is_off(self, db_session):
        assert FeatureFlagService.is_enabled(db_session, "does_not_exist") is False

    def test_enabled_flag(self, db_session):
        db_session.add(FeatureFlag(name=CREATOR_UPLOADS, enabled=True))
        db_session.commit()

        assert FeatureFlagService.is_enabled(db_session, CREATOR_UPLOADS) is True

    def test_disabled_flag(self, db_session):
        db_session.add(FeatureFlag(name=CREATOR_UPLOADS, enabled=False))
        db_session.commit()

        assert FeatureFlagService.is_enabled(db_session, CREATOR_UPLOADS) is False

    def test_store_error_reads_as_off(self, db_session):
        def store_down(*args, **kwargs):
            raise OperationalError("SELECT 1", {}, Exception("no connection"))

        with patch.object(FeatureFlagRepository, "get_by_name", side_effect=store_down):
            assert FeatureFlagService.is_enabled(db_session, CREATOR_UPLOADS) is False

    def test_reads_are_cached(self, db_session):
        db_session.add(FeatureFlag(name=CREATOR_UPLOADS, enabled=True))
        db_session.commit()
        FeatureFlagService.is_enabled(db_session, CREATOR_UPLOADS)

        with patch.object(FeatureFlagRepository, "get_by_name") as mock_get:
            assert FeatureFlagService.is_enabled(db_session, CREATOR_UPLOADS) is True
            mock_get.assert_not_called()

    def test_cache_expires(self, db_session):
        db_session.add(FeatureFlag(name=CREATOR_UPLOADS, enabled=True))
        db_session.commit()

        with patch("services.feature_flag_service.time.monotonic", return_value=100.0):
            FeatureFlagService.is_enabled(db_session, CREATOR_UPLOADS)

        flag = FeatureFlagRepository(db_session).get_by_name(CREATOR_UPLOADS)
        flag.enabled = False
        db_session.commit()

        with patch("services.feature_flag_service.time.monotonic", return_value=106.0):
            assert FeatureFlagService.is_enabled(db_session, CREATOR_UPLOADS) is False


class TestRequireEnabled:
    """Tests for FeatureFlagService.require_enabled"""

    def test_raises_when_off(self, db_session):
        with pytest.raises(FeatureDisabledException) as exc_info:
            FeatureFlagService.require_enabled(db_session, ENABLE_CREATOR_POSTS)

        assert exc_info.value.feature_name == ENABLE_CREATOR_POSTS

    def test_custom_message(self, db_session):
        with pytest.raises(FeatureDisabledException) as exc_info:
            FeatureFlagService.require_enabled(
                db_session, ENABLE_CREATOR_POSTS, "Posts are off"
            )

        assert exc_info.value.message == "Posts are off"

    def test_passes_when_on(self, db_session, set_flag):
        set_flag(ENABLE_CREATOR_POSTS, True)

        FeatureFlagService.require_enabled(db_session, ENABLE_CREATOR_POSTS)


class TestSetFlag:
    """Tests for FeatureFlagService.set_flag"""

    def test_creates_flag(self, db_session, moderator_user):
        flag = FeatureFlagService.set_flag(
            db_session, "ads_enabled", True, updated_by=moderator_user.id
        )

        assert flag.id is not None
        assert flag.enabled is True
        assert flag.updated_by == moderator_user.id

    def test_update_invalidates_cache(self, db_session):
        FeatureFlagService.set_flag(db_session, CREATOR_UPLOADS, False)
        assert FeatureFlagService.is_enabled(db_session, CREATOR_UPLOADS) is False

        FeatureFlagService.set_flag(db_session, CREATOR_UPLOADS, True)

        assert FeatureFlagService.is_enabled(db_session, CREATOR_UPLOADS) is True

    def test_keeps_description_when_not_given(self, db_session):
        FeatureFlagService.set_flag(db_session, CREATOR_UPLOADS, False, description="d")

        flag = FeatureFlagService.set_flag(db_session, CREATOR_UPLOADS, True)

        assert flag.description == "d"

    def test_empty_name(self, db_session):
        with pytest.raises(ValidationException):
            FeatureFlagService.set_flag(db_session, " ", True)


class TestSeedKnownFlags:
    """Tests for FeatureFlagService.seed_known_flags"""

    def test_seeds_disabled_flags_once(self, db_session):
        assert FeatureFlagService.seed_known_flags(db_session) == len(KNOWN_FLAGS)
        assert FeatureFlagService.seed_known_flags(db_session) == 0

        flags = FeatureFlagService.list_flags(db_session)
        assert {f.name for f in flags} == set(KNOWN_FLAGS)
        assert not any(f.enabled for f in flags)

    def test_does_not_touch_existing_flags(self, db_session, set_flag):
        set_flag(CREATOR_UPLOADS, True)

        FeatureFlagService.seed_known_flags(db_session)

        assert FeatureFlagService.is_enabled(db_session, CREATOR_UPLOADS) is True
