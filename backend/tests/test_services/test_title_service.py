"""
Unit tests for TitleService.
"""

import pytest

from models.exceptions import (
    TitleInUseException,
    TitleNotFoundException,
    ValidationException,
)
from repositories.db_models import (
    PlaybackEvent,
    PlaybackEventType,
    PlaybackProgress,
    Title,
    TitleAdConfig,
    TitleContentType,
)
from services.title_service import TitleService


class TestCreateTitle:
    """Tests for TitleService.create_title"""

    def test_create(self, db_session):
        title = TitleService.create_title(
            db_session,
            "  Deep Water  ",
            content_type=TitleContentType.SERIES,
            category="originals",
            runtime_seconds=3000,
        )

        assert title.id is not None
        assert title.title == "Deep Water"
        assert title.content_type == TitleContentType.SERIES

    def test_blank_title(self, db_session):
        with pytest.raises(ValidationException):
            TitleService.create_title(db_session, "   ")

    def test_unknown_category(self, db_session):
        with pytest.raises(ValidationException) as exc_info:
            TitleService.create_title(db_session, "Deep Water", category="horror")

        assert "trending" in exc_info.value.message


class TestListTitles:
    """Tests for TitleService.list_titles"""

    def test_newest_first_with_filter(self, db_session, test_title):
        TitleService.create_title(db_session, "Clip", TitleContentType.MUSIC_VIDEO)
        TitleService.create_title(db_session, "Later Film")

        items, total = TitleService.list_titles(db_session)
        films, film_total = TitleService.list_titles(
            db_session, content_type=TitleContentType.FILM
        )

        assert total == 3
        assert items[0].title == "Later Film"
        assert film_total == 2
        assert {t.title for t in films} == {"Night Train", "Later Film"}


class TestUpdateTitle:
    """Tests for TitleService.update_title"""

    def test_partial_update(self, db_session, test_title):
        updated = TitleService.update_title(
            db_session, test_title.id, {"category": "trending", "id": 999}
        )

        assert updated.id == test_title.id
        assert updated.category == "trending"
        assert updated.title == "Night Train"

    def test_unknown_title(self, db_session):
        with pytest.raises(TitleNotFoundException):
            TitleService.update_title(db_session, 9999, {"title": "X"})


class TestDeleteTitle:
    """Tests for TitleService.delete_title"""

    def test_delete_drops_playback_data(self, db_session, test_title, test_user):
        title_id = test_title.id
        db_session.add_all(
            [
                TitleAdConfig(title_id=title_id, ads_enabled=True),
                PlaybackProgress(
                    user_id=test_user.id, title_id=title_id, position_seconds=60
                ),
                PlaybackEvent(event_type=PlaybackEventType.PLAY, title_id=title_id),
            ]
        )
        db_session.commit()

        TitleService.delete_title(db_session, title_id)

        assert db_session.get(Title, title_id) is None
        assert db_session.query(TitleAdConfig).count() == 0
        assert db_session.query(PlaybackProgress).count() == 0
        event = db_session.query(PlaybackEvent).one()
        assert event.title_id is None

    def test_title_with_comments_is_kept(self, db_session, test_comment, test_title):
        with pytest.raises(TitleInUseException):
            TitleService.delete_title(db_session, test_title.id)

        assert db_session.get(Title, test_title.id) is not None

    def test_unknown_title(self, db_session):
        with pytest.raises(TitleNotFoundException):
            TitleService.delete_title(db_session, 9999)
