"""
Pytest configuration and fixtures for backend tests.
"""

import os
import sys
from pathlib import Path

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

# Add backend directory to path for imports
backend_dir = Path(__file__).parent.parent
sys.path.insert(0, str(backend_dir))

# Set test environment variables before importing config
os.environ["SECRET_KEY"] = "test-secret-key-for-testing-only"
os.environ["CORS_ORIGINS"] = '["http://localhost:3000"]'
os.environ["ADMIN_EMAIL"] = "admin@test.com"
os.environ["ADMIN_PASSWORD"] = "TestAdmin123!"
os.environ["ENVIRONMENT"] = "test"
os.environ["DATABASE_URL"] = "sqlite:///:memory:"
os.environ["FEATURE_FLAG_CACHE_TTL_SECONDS"] = "5"

from authentication.auth import create_access_token, get_password_hash  # noqa: E402
from repositories.database import Base, get_db  # noqa: E402
import repositories.db_models as db_models  # noqa: E402
from services.feature_flag_service import FeatureFlagService  # noqa: E402

# Test database engine (in-memory SQLite)
TEST_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(autouse=True)
def clear_feature_flag_cache():
    """Flag reads are cached per process; start every test cold."""
    FeatureFlagService.invalidate_cache()
    yield
    FeatureFlagService.invalidate_cache()


@pytest.fixture(scope="function")
def db_session():
    """Create a fresh in-memory database session for each test."""
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def client(db_session):
    """Create a test client with overridden database dependency."""
    from main import app
    from helpers.rate_limiter import limiter

    # Reset IP limiter storage so login tests do not leak into each other
    limiter.reset()

    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def _make_user(db_session, email: str, username: str, password: str, **kwargs):
    user = db_models.User(
        email=email,
        username=username,
        display_name=kwargs.pop("display_name", username.title()),
        hashed_password=get_password_hash(password),
        is_active=kwargs.pop("is_active", True),
        is_moderator=kwargs.pop("is_moderator", False),
    )
    db_session.add(user)
    db_session.commit()
    db_session.refresh(user)
    return user


@pytest.fixture
def test_user(db_session) -> db_models.User:
    """Create a regular viewer."""
    return _make_user(
        db_session,
        "test@example.com",
        "testuser",
        "testpassword123",
        display_name="Test User",
    )


@pytest.fixture
def other_user(db_session) -> db_models.User:
    """Create another viewer (for reporter and permission tests)."""
    return _make_user(
        db_session,
        "other@example.com",
        "otheruser",
        "otherpassword123",
        display_name="Other User",
    )


@pytest.fixture
def moderator_user(db_session) -> db_models.User:
    """Create a moderator."""
    return _make_user(
        db_session,
        "moderator@example.com",
        "moderator",
        "moderatorpassword123",
        display_name="Moderator",
        is_moderator=True,
    )


@pytest.fixture
def test_title(db_session) -> db_models.Title:
    """Create a catalog title."""
    title = db_models.Title(
        title="Night Train",
        content_type=db_models.TitleContentType.FILM,
        runtime_seconds=5400,
    )
    db_session.add(title)
    db_session.commit()
    db_session.refresh(title)
    return title


@pytest.fixture
def test_comment(db_session, test_user, test_title) -> db_models.Comment:
    """Create a comment by test_user."""
    comment = db_models.Comment(
        user_id=test_user.id,
        title_id=test_title.id,
        content="That ending was wild.",
    )
    db_session.add(comment)
    db_session.commit()
    db_session.refresh(comment)
    return comment


@pytest.fixture
def approved_creator(db_session, test_user) -> db_models.Creator:
    """Make test_user an approved creator."""
    creator = db_models.Creator(
        user_id=test_user.id,
        name="Test Studio",
        status=db_models.CreatorStatus.APPROVED,
    )
    db_session.add(creator)
    db_session.commit()
    db_session.refresh(creator)
    return creator


@pytest.fixture
def test_creator_post(db_session, approved_creator) -> db_models.CreatorPost:
    """Create a post by the approved creator."""
    post = db_models.CreatorPost(
        creator_id=approved_creator.id,
        content="Behind the scenes footage drops Friday.",
    )
    db_session.add(post)
    db_session.commit()
    db_session.refresh(post)
    return post


@pytest.fixture
def set_flag(db_session):
    """Factory fixture to store a feature flag."""

    def _set_flag(name: str, enabled: bool = True) -> db_models.FeatureFlag:
        return FeatureFlagService.set_flag(db_session, name, enabled)

    return _set_flag


@pytest.fixture
def auth_headers(test_user) -> dict:
    """Get authentication headers for test user."""
    token = create_access_token(data={"sub": test_user.email})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def other_auth_headers(other_user) -> dict:
    """Get authentication headers for other user."""
    token = create_access_token(data={"sub": other_user.email})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def moderator_auth_headers(moderator_user) -> dict:
    """Get authentication headers for the moderator."""
    token = create_access_token(data={"sub": moderator_user.email})
    return {"Authorization": f"Bearer {token}"}
