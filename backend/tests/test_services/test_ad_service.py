"""
Unit tests for AdService.
"""

import pytest

from models.exceptions import TitleNotFoundException, ValidationException
from repositories.db_models import Title, TitleAdConfig, TitleContentType
from services.ad_service import DEFAULT_AD_SECONDS, AdService
from services.feature_flag_service import ADS_ENABLED


@pytest.fixture
def title_with_ad(db_session, test_title, moderator_user) -> TitleAdConfig:
    config = TitleAdConfig(
        title_id=test_title.id,
        ads_enabled=True,
        ad_duration_seconds=10,
        ad_url="https://ads.test/spot.mp4",
        updated_by=moderator_user.id,
    )
    db_session.add(config)
    db_session.commit()
    return config


class TestGetPreroll:
    """Tests for AdService.get_preroll"""

    def test_flag_off_serves_nothing(self, db_session, test_title, title_with_ad):
        assert AdService.get_preroll(db_session, test_title.id) is None

    def test_flag_on_serves_ad(self, db_session, test_title, title_with_ad, set_flag):
        set_flag(ADS_ENABLED)

        ad = AdService.get_preroll(db_session, test_title.id)

        assert ad is not None
        assert ad.ad_url == "https://ads.test/spot.mp4"
        assert ad.ad_duration_seconds == 10

    def test_title_ads_switched_off(
        self, db_session, test_title, title_with_ad, set_flag
    ):
        set_flag(ADS_ENABLED)
        title_with_ad.ads_enabled = False
        db_session.commit()

        assert AdService.get_preroll(db_session, test_title.id) is None

    def test_no_config(self, db_session, test_title, set_flag):
        set_flag(ADS_ENABLED)

        assert AdService.get_preroll(db_session, test_title.id) is None

    def test_unknown_title(self, db_session, set_flag):
        set_flag(ADS_ENABLED)

        with pytest.raises(TitleNotFoundException):
            AdService.get_preroll(db_session, 9999)


class TestUpdateAdConfig:
    """Tests for AdService.update_ad_config"""

    def test_first_save_uses_defaults(self, db_session, test_title, moderator_user):
        config = AdService.update_ad_config(
            db_session,
            test_title.id,
            moderator_user.id,
            ad_url="https://ads.test/a.mp4",
        )

        assert config.ads_enabled is False
        assert config.ad_duration_seconds == DEFAULT_AD_SECONDS
        assert config.updated_by == moderator_user.id

    def test_second_save_updates_same_row(
        self, db_session, test_title, title_with_ad, moderator_user
    ):
        AdService.update_ad_config(
            db_session, test_title.id, moderator_user.id, ad_duration_seconds=30
        )

        config = db_session.query(TitleAdConfig).one()
        assert config.ad_duration_seconds == 30
        assert config.ad_url == "https://ads.test/spot.mp4"

    def test_empty_url_clears(self, db_session, test_title, title_with_ad, moderator_user):
        config = AdService.update_ad_config(
            db_session, test_title.id, moderator_user.id, ad_url=""
        )

        assert config.ad_url is None

    @pytest.mark.parametrize("seconds", [4, 31])
    def test_duration_out_of_range(self, db_session, test_title, moderator_user, seconds):
        with pytest.raises(ValidationException):
            AdService.update_ad_config(
                db_session, test_title.id, moderator_user.id, ad_duration_seconds=seconds
            )

    def test_rejects_non_http_url(self, db_session, test_title, moderator_user):
        with pytest.raises(ValidationException):
            AdService.update_ad_config(
                db_session, test_title.id, moderator_user.id, ad_url="ftp://ads.test/a"
            )

    def test_rejects_series(self, db_session, moderator_user):
        series = Title(title="Saga", content_type=TitleContentType.SERIES)
        db_session.add(series)
        db_session.commit()

        with pytest.raises(ValidationException):
            AdService.update_ad_config(
                db_session, series.id, moderator_user.id, ads_enabled=True
            )


class TestListAdConfigs:
    """Tests for AdService.list_ad_configs"""

    def test_defaults_and_series_excluded(self, db_session, test_title):
        db_session.add(Title(title="Saga", content_type=TitleContentType.SERIES))
        db_session.commit()

        rows = AdService.list_ad_configs(db_session)

        assert [row["title"] for row in rows] == ["Night Train"]
        assert rows[0]["ads_enabled"] is False
        assert rows[0]["ad_duration_seconds"] == DEFAULT_AD_SECONDS
