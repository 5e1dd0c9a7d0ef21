"""
HTTP client for the third-party video pipeline (Mux-compatible API).

Creates direct-upload targets and reads their processing status. Credentials
come from settings; without them every call raises
VideoPipelineNotConfiguredException.
"""

import json
from typing import Any, NamedTuple, Optional

import httpx
from loguru import logger

from models.config import settings
from models.exceptions import (
    VideoPipelineException,
    VideoPipelineNotConfiguredException,
)


class UploadTarget(NamedTuple):
    upload_id: str
    upload_url: str


class UploadStatus(NamedTuple):
    status: str
    asset_id: Optional[str] = None
    playback_id: Optional[str] = None
    ready: bool = False
    duration: Optional[float] = None


class VideoPipelineClient:
    """Thin synchronous wrapper around the video pipeline REST API."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        token_id: Optional[str] = None,
        token_secret: Optional[str] = None,
        timeout: Optional[float] = None,
    ):
        self.base_url = (base_url or settings.VIDEO_API_URL).rstrip("/")
        self.token_id = settings.VIDEO_API_TOKEN_ID if token_id is None else token_id
        self.token_secret = (
            settings.VIDEO_API_TOKEN_SECRET if token_secret is None else token_secret
        )
        self.timeout = timeout or settings.VIDEO_API_TIMEOUT_SECONDS

    @property
    def is_configured(self) -> bool:
        return bool(self.token_id and self.token_secret)

    def _request(self, method: str, path: str, **kwargs: Any) -> dict[str, Any]:
        """
        Call the API and return the "data" member of the JSON body.

        Raises:
            VideoPipelineNotConfiguredException: If credentials are missing
            VideoPipelineException: On timeouts, transport or HTTP errors
        """
        if not self.is_configured:
            raise VideoPipelineNotConfiguredException()

        url = f"{self.base_url}{path}"
        try:
            response = httpx.request(
                method,
                url,
                auth=(self.token_id, self.token_secret),
                timeout=self.timeout,
                **kwargs,
            )
            response.raise_for_status()
        except httpx.TimeoutException as e:
            logger.warning(f"Video pipeline timeout: {method} {path}")
            raise VideoPipelineException("Video pipeline timed out") from e
        except httpx.HTTPStatusError as e:
            logger.warning(
                f"Video pipeline HTTP error {e.response.status_code}: {method} {path}"
            )
            raise VideoPipelineException(
                f"Video pipeline returned HTTP {e.response.status_code}"
            ) from e
        except httpx.HTTPError as e:
            logger.warning(f"Video pipeline error: {method} {path}: {e}")
            raise VideoPipelineException("Video pipeline request failed") from e

        return response.json().get("data") or {}

    def create_upload(self, passthrough: dict[str, Any]) -> UploadTarget:
        """
        Create a direct-upload target for a new public asset.

        Args:
            passthrough: Metadata echoed back on the asset (JSON-encoded)

        Returns:
            Upload ID and the URL the client uploads the file to
        """
        data = self._request(
            "POST",
            "/uploads",
            json={
                "cors_origin": settings.VIDEO_UPLOAD_CORS_ORIGIN,
                "new_asset_settings": {
                    "playback_policy": ["public"],
                    "passthrough": json.dumps(passthrough),
                },
            },
        )
        if not data.get("id") or not data.get("url"):
            raise VideoPipelineException("Video pipeline returned an incomplete upload")
        return UploadTarget(upload_id=data["id"], upload_url=data["url"])

    def get_upload_status(self, upload_id: str) -> UploadStatus:
        """
        Get processing status of an upload and, once it exists, its asset.

        An asset lookup failure is not fatal: the upload-level status is
        returned with ready=False.
        """
        upload = self._request("GET", f"/uploads/{upload_id}")
        status = upload.get("status", "unknown")
        asset_id = upload.get("asset_id")
        if not asset_id:
            return UploadStatus(status=status)

        try:
            asset = self._request("GET", f"/assets/{asset_id}")
        except VideoPipelineException:
            logger.warning(f"Asset {asset_id} lookup failed for upload {upload_id}")
            return UploadStatus(status=status, asset_id=asset_id)

        playback_ids = asset.get("playback_ids") or []
        return UploadStatus(
            status=status,
            asset_id=asset.get("id", asset_id),
            playback_id=playback_ids[0].get("id") if playback_ids else None,
            ready=asset.get("status") == "ready",
            duration=asset.get("duration"),
        )
