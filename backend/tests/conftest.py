"""
Shared pytest fixtures for the Session Issuer test suite.

Uses an in-memory SQLite database shared across threads (``StaticPool``) so
that FastAPI's ``TestClient`` worker threads and the test body see the same
data.
"""

import os
import uuid

os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key-for-tests-only")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from issuer.db.models import Base, User


def _create_sqlite_engine():
    """Create an in-memory SQLite engine with the credential store schema."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    return engine


@pytest.fixture()
def engine():
    engine = _create_sqlite_engine()
    yield engine
    engine.dispose()


@pytest.fixture()
def db_session(engine):
    """In-memory SQLite session for unit tests."""
    Session = sessionmaker(bind=engine, expire_on_commit=False)
    session = Session()
    yield session
    session.close()


@pytest.fixture()
def test_user(db_session):
    """Create and return a test user in the in-memory DB."""
    from issuer.auth_utils import hash_password

    user = User(
        id=uuid.uuid4(),
        username="tester",
        password_hash=hash_password("TestPass123!"),
        display_name="Test User",
    )
    db_session.add(user)
    db_session.flush()
    return user


class FakeSettings:
    """Minimal settings object for issuer tests."""

    JWT_SECRET_KEY = "test-secret-key-for-tests-only"
    JWT_ALGORITHM = "HS256"
    JWT_EXPIRY_DAYS = 7
    PASSWORD_MIN_LENGTH = 3
    LOGIN_RATE_LIMIT = 100
    REGISTER_RATE_LIMIT = 100
    RATE_LIMIT_WINDOW_SECS = 60
    TRUST_PROXY_HEADERS = False


@pytest.fixture()
def settings():
    return FakeSettings()


@pytest.fixture()
def app(engine, settings):
    """The issuer app wired to the in-memory database and test settings."""
    from issuer.config import get_settings
    from issuer.db.connection import get_db_session
    from issuer.main import app
    from issuer.rate_limit import RateLimiter, get_login_limiter, get_register_limiter

    factory = sessionmaker(bind=engine, expire_on_commit=False)

    def override_get_db_session():
        session = factory()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    login_limiter = RateLimiter(settings.LOGIN_RATE_LIMIT, settings.RATE_LIMIT_WINDOW_SECS)
    register_limiter = RateLimiter(settings.REGISTER_RATE_LIMIT, settings.RATE_LIMIT_WINDOW_SECS)

    app.dependency_overrides[get_db_session] = override_get_db_session
    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[get_login_limiter] = lambda: login_limiter
    app.dependency_overrides[get_register_limiter] = lambda: register_limiter
    yield app
    app.dependency_overrides.clear()


@pytest.fixture()
def client(app):
    """HTTP client for the issuer app."""
    with TestClient(app) as test_client:
        yield test_client
