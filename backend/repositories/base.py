"""
Generic repository shared by the StreamVault store layer.
"""

from typing import Generic, TypeVar

from sqlalchemy.orm import Session

from repositories.database import Base

T = TypeVar("T", bound=Base)  # type: ignore[type-arg]


class BaseRepository(Generic[T]):
    """
    Primary-key lookup and unit-of-work helpers for one model.

    Methods named after a write (create, update, delete) commit. The
    add/add_all/flush trio leaves the commit to the caller so several
    changes can land in one transaction.
    """

    def __init__(self, model: type[T], db: Session):
        self.model = model
        self.db = db

    def get_by_id(self, id: int) -> T | None:
        return self.db.get(self.model, id)

    def add(self, entity: T) -> None:
        self.db.add(entity)

    def add_all(self, entities: list[T]) -> None:
        self.db.add_all(entities)

    def create(self, entity: T) -> T:
        """Insert, commit and reload server defaults."""
        self.db.add(entity)
        self.db.commit()
        self.db.refresh(entity)
        return entity

    def update(self, entity: T) -> T:
        """Commit pending attribute changes on entity and reload it."""
        self.db.commit()
        self.db.refresh(entity)
        return entity

    def delete(self, entity: T, commit: bool = True) -> None:
        self.db.delete(entity)
        if commit:
            self.db.commit()

    def commit(self) -> None:
        self.db.commit()

    def flush(self) -> None:
        self.db.flush()

    def refresh(self, entity: T) -> None:
        self.db.refresh(entity)
