"""
Unit tests for VideoPipelineClient and VideoUploadService.
"""

import json
from unittest.mock import MagicMock, patch

import httpx
import pytest
from sqlalchemy.exc import OperationalError

from models.exceptions import (
    FeatureDisabledException,
    NotApprovedCreatorException,
    StoreException,
    ValidationException,
    VideoPipelineException,
    VideoPipelineNotConfiguredException,
    VideoUploadNotFoundException,
)
from repositories.db_models import VideoUpload
from services.feature_flag_service import CREATOR_UPLOADS
from services.video_pipeline_client import (
    UploadStatus,
    UploadTarget,
    VideoPipelineClient,
)
from services.video_upload_service import VideoUploadService


def _response(data: dict, status_code: int = 200) -> httpx.Response:
    return httpx.Response(
        status_code,
        json={"data": data},
        request=httpx.Request("GET", "https://video.test/v1"),
    )


@pytest.fixture
def client() -> VideoPipelineClient:
    return VideoPipelineClient(
        base_url="https://video.test/v1/", token_id="id", token_secret="secret"
    )


class TestVideoPipelineClient:
    """Tests for VideoPipelineClient"""

    def test_not_configured(self):
        unconfigured = VideoPipelineClient(token_id="", token_secret="")

        with pytest.raises(VideoPipelineNotConfiguredException):
            unconfigured.create_upload({})

    def test_create_upload(self, client):
        with patch(
            "services.video_pipeline_client.httpx.request",
            return_value=_response({"id": "up_1", "url": "https://upload.test/up_1"}),
        ) as mock_request:
            target = client.create_upload({"creator_id": 7})

        assert target == UploadTarget("up_1", "https://upload.test/up_1")
        args, kwargs = mock_request.call_args
        assert args == ("POST", "https://video.test/v1/uploads")
        assert kwargs["auth"] == ("id", "secret")
        body = kwargs["json"]
        assert body["new_asset_settings"]["playback_policy"] == ["public"]
        assert json.loads(body["new_asset_settings"]["passthrough"]) == {"creator_id": 7}

    def test_incomplete_upload_response(self, client):
        with patch(
            "services.video_pipeline_client.httpx.request",
            return_value=_response({"id": "up_1"}),
        ):
            with pytest.raises(VideoPipelineException):
                client.create_upload({})

    def test_http_error(self, client):
        with patch(
            "services.video_pipeline_client.httpx.request",
            return_value=_response({}, status_code=500),
        ):
            with pytest.raises(VideoPipelineException, match="HTTP 500"):
                client.create_upload({})

    def test_timeout(self, client):
        with patch(
            "services.video_pipeline_client.httpx.request",
            side_effect=httpx.ReadTimeout("slow"),
        ):
            with pytest.raises(VideoPipelineException, match="timed out"):
                client.get_upload_status("up_1")

    def test_status_without_asset(self, client):
        with patch(
            "services.video_pipeline_client.httpx.request",
            return_value=_response({"status": "waiting"}),
        ):
            status = client.get_upload_status("up_1")

        assert status == UploadStatus(status="waiting")

    def test_status_with_ready_asset(self, client):
        responses = [
            _response({"status": "asset_created", "asset_id": "as_1"}),
            _response(
                {
                    "id": "as_1",
                    "status": "ready",
                    "duration": 12.5,
                    "playback_ids": [{"id": "pb_1"}],
                }
            ),
        ]
        with patch(
            "services.video_pipeline_client.httpx.request", side_effect=responses
        ):
            status = client.get_upload_status("up_1")

        assert status.ready is True
        assert status.playback_id == "pb_1"
        assert status.duration == 12.5

    def test_asset_lookup_failure_is_not_fatal(self, client):
        responses = [
            _response({"status": "asset_created", "asset_id": "as_1"}),
            _response({}, status_code=404),
        ]
        with patch(
            "services.video_pipeline_client.httpx.request", side_effect=responses
        ):
            status = client.get_upload_status("up_1")

        assert status.asset_id == "as_1"
        assert status.ready is False


def _fake_client(*statuses: UploadStatus) -> MagicMock:
    fake = MagicMock(spec=VideoPipelineClient)
    fake.create_upload.return_value = UploadTarget("up_1", "https://upload.test/up_1")
    fake.get_upload_status.side_effect = list(statuses)
    return fake


class TestVideoUploadService:
    """Tests for VideoUploadService"""

    def test_flag_off(self, db_session, test_user, approved_creator):
        with pytest.raises(FeatureDisabledException):
            VideoUploadService.create_upload(
                db_session, test_user, "Trailer", client=_fake_client()
            )

    def test_requires_approved_creator(self, db_session, other_user, set_flag):
        set_flag(CREATOR_UPLOADS)

        with pytest.raises(NotApprovedCreatorException):
            VideoUploadService.create_upload(
                db_session, other_user, "Trailer", client=_fake_client()
            )

    def test_empty_title(self, db_session, test_user, approved_creator, set_flag):
        set_flag(CREATOR_UPLOADS)

        with pytest.raises(ValidationException):
            VideoUploadService.create_upload(
                db_session, test_user, "  ", client=_fake_client()
            )

    def test_create_upload(self, db_session, test_user, approved_creator, set_flag):
        set_flag(CREATOR_UPLOADS)
        fake = _fake_client()

        target = VideoUploadService.create_upload(
            db_session, test_user, "Trailer", client=fake
        )

        assert target.upload_id == "up_1"
        upload = db_session.query(VideoUpload).one()
        assert upload.creator_id == approved_creator.id
        assert upload.is_ready is False

    def test_local_store_failure_logs_remote_upload(
        self, db_session, test_user, approved_creator, set_flag
    ):
        set_flag(CREATOR_UPLOADS)

        with patch(
            "services.video_upload_service.VideoUploadRepository.create",
            side_effect=OperationalError("INSERT", {}, Exception("disk full")),
        ):
            with patch("services.video_upload_service.logger") as mock_logger:
                with pytest.raises(StoreException):
                    VideoUploadService.create_upload(
                        db_session, test_user, "Trailer", client=_fake_client()
                    )

        logged = mock_logger.error.call_args.args[0]
        assert "up_1" in logged
        assert db_session.query(VideoUpload).count() == 0

    def test_wait_until_ready(self, db_session, test_user, approved_creator, set_flag):
        set_flag(CREATOR_UPLOADS)
        fake = _fake_client(
            UploadStatus(status="waiting"),
            UploadStatus(status="asset_created", asset_id="as_1"),
            UploadStatus(
                status="asset_created",
                asset_id="as_1",
                playback_id="pb_1",
                ready=True,
                duration=30.0,
            ),
        )
        VideoUploadService.create_upload(db_session, test_user, "Trailer", client=fake)
        sleeps: list[float] = []

        upload = VideoUploadService.wait_until_ready(
            db_session,
            "up_1",
            test_user,
            max_attempts=5,
            delay_seconds=2,
            sleep=sleeps.append,
            client=fake,
        )

        assert upload.is_ready is True
        assert upload.playback_id == "pb_1"
        assert upload.duration_seconds == 30.0
        assert sleeps == [2, 2]

    def test_wait_gives_up(self, db_session, test_user, approved_creator, set_flag):
        set_flag(CREATOR_UPLOADS)
        fake = _fake_client(*[UploadStatus(status="waiting")] * 3)
        VideoUploadService.create_upload(db_session, test_user, "Trailer", client=fake)

        upload = VideoUploadService.wait_until_ready(
            db_session,
            "up_1",
            test_user,
            max_attempts=3,
            delay_seconds=0,
            sleep=lambda _: None,
            client=fake,
        )

        assert upload.is_ready is False
        assert fake.get_upload_status.call_count == 3

    def test_other_users_upload(
        self, db_session, test_user, other_user, approved_creator, set_flag
    ):
        set_flag(CREATOR_UPLOADS)
        fake = _fake_client()
        VideoUploadService.create_upload(db_session, test_user, "Trailer", client=fake)

        with pytest.raises(VideoUploadNotFoundException):
            VideoUploadService.refresh_status(db_session, "up_1", other_user, client=fake)
