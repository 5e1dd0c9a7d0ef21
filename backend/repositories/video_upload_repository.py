"""Repository for video upload operations."""

from typing import Optional

from sqlalchemy.orm import Session

from repositories.base import BaseRepository
from repositories.db_models import VideoUpload


class VideoUploadRepository(BaseRepository[VideoUpload]):
    """Repository for VideoUpload CRUD operations."""

    def __init__(self, db: Session):
        super().__init__(VideoUpload, db)

    def get_by_upload_id(self, upload_id: str) -> Optional[VideoUpload]:
        """
        Get an upload by its pipeline upload ID.

        Args:
            upload_id: Upload ID assigned by the video pipeline

        Returns:
            VideoUpload if found, None otherwise
        """
        return (
            self.db.query(VideoUpload).filter(VideoUpload.upload_id == upload_id).first()
        )
