"""
Repository for feature flag operations.
"""

from typing import Optional

from sqlalchemy.orm import Session

from repositories.base import BaseRepository
from repositories.db_models import FeatureFlag


class FeatureFlagRepository(BaseRepository[FeatureFlag]):
    """Repository for FeatureFlag entity database operations."""

    def __init__(self, db: Session):
        super().__init__(FeatureFlag, db)

    def get_by_name(self, name: str) -> Optional[FeatureFlag]:
        """
        Get flag by name.

        Args:
            name: Flag name

        Returns:
            Flag if found, None otherwise
        """
        return self.db.query(FeatureFlag).filter(FeatureFlag.name == name).first()

    def get_all_ordered(self) -> list[FeatureFlag]:
        """Get all flags ordered by name."""
        return self.db.query(FeatureFlag).order_by(FeatureFlag.name.asc()).all()
