"""Initialize the database with the moderator account and known feature flags."""

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from authentication.auth import get_password_hash
from models.config import settings
from models.exceptions import StoreException
from repositories.database import Base, SessionLocal, engine
from repositories.db_models import User
from repositories.user_repository import UserRepository
from services.feature_flag_service import FeatureFlagService


def ensure_moderator(db: Session) -> bool:
    """Create the moderator from ADMIN_EMAIL/ADMIN_PASSWORD if missing.

    Returns:
        True if the account was created
    """
    user_repo = UserRepository(db)
    if user_repo.get_by_email(settings.ADMIN_EMAIL):
        return False

    user_repo.create(
        User(
            email=settings.ADMIN_EMAIL,
            username="moderator",
            display_name="Moderator",
            hashed_password=get_password_hash(settings.ADMIN_PASSWORD),
            is_moderator=True,
        )
    )
    return True


def init_db(db: Session | None = None) -> None:
    """Initialize the database with default data."""
    Base.metadata.create_all(bind=engine)

    own_session = db is None
    db = db or SessionLocal()

    try:
        if ensure_moderator(db):
            print("[OK] Moderator user created")
            print(f"  Email: {settings.ADMIN_EMAIL}")
            print("  Password: (from ADMIN_PASSWORD in .env)")
            print("  IMPORTANT: Change this password in production!")

        created = FeatureFlagService.seed_known_flags(db)
        if created:
            print(f"[OK] {created} feature flags created (disabled)")

        print("\n[OK] Database initialization complete!")

    except (SQLAlchemyError, StoreException) as e:
        print(f"Error initializing database: {e}")
        db.rollback()
    finally:
        if own_session:
            db.close()


if __name__ == "__main__":
    init_db()
