"""Pytest configuration and shared fixtures."""

import shutil
import tempfile
import uuid
from datetime import datetime
from pathlib import Path
from typing import Optional

import pytest
from fastapi.testclient import TestClient
from starlette.requests import Request

from app.application import create_app
from app.models.config import AppConfig, AuthSettings, EncryptionSettings, LoggingSettings, PathSettings
from app.models.user import Profile, User

TEST_JWT_SECRET = "test-jwt-secret-with-enough-entropy-0123456789"
TEST_ENCRYPTION_KEY = "test-encryption-key"


class FakeClock:
    """Manually advanced wall clock, in seconds."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def make_request(
    path: str = "/api/test",
    method: str = "GET",
    cookies: Optional[dict[str, str]] = None,
    headers: Optional[dict[str, str]] = None,
    client: Optional[tuple[str, int]] = ("127.0.0.1", 50000),
) -> Request:
    """Build a bare ASGI request for unit tests."""
    raw_headers = [(k.lower().encode(), v.encode()) for k, v in (headers or {}).items()]
    if cookies:
        cookie_header = "; ".join(f"{k}={v}" for k, v in cookies.items())
        raw_headers.append((b"cookie", cookie_header.encode()))

    scope = {
        "type": "http",
        "method": method,
        "path": path,
        "raw_path": path.encode(),
        "root_path": "",
        "scheme": "http",
        "query_string": b"",
        "headers": raw_headers,
        "client": client,
        "server": ("testserver", 80),
    }
    return Request(scope)


@pytest.fixture(scope="session")
def test_data_dir():
    """Create a temporary directory for test data."""
    temp_dir = tempfile.mkdtemp(prefix="wellness_test_")
    yield Path(temp_dir)
    # Cleanup
    shutil.rmtree(temp_dir, ignore_errors=True)


@pytest.fixture
def data_dir(test_data_dir):
    """Create a fresh data directory for each test."""
    path = test_data_dir / f"data_{uuid.uuid4().hex}"
    path.mkdir(parents=True, exist_ok=True)
    yield path
    # Cleanup after test
    shutil.rmtree(path, ignore_errors=True)


@pytest.fixture
def test_config(data_dir):
    """Development configuration pointing at the per-test data directory."""
    return AppConfig(
        paths=PathSettings(data=str(data_dir), logs=str(data_dir / "logs")),
        logging=LoggingSettings(file=None),
        auth=AuthSettings(jwt_secret=TEST_JWT_SECRET, bcrypt_rounds=4),
        encryption=EncryptionSettings(key=TEST_ENCRYPTION_KEY),
    )


@pytest.fixture
def clock():
    """Clock shared by the application's rate limiters."""
    return FakeClock()


@pytest.fixture
def app(test_config, clock):
    """Application built from the test configuration."""
    return create_app(test_config, clock=clock)


@pytest.fixture
def client(app):
    """Create FastAPI test client."""
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def token_service(app):
    return app.state.token_service


@pytest.fixture
def auth_service(app):
    return app.state.auth_service


@pytest.fixture
def user_service(app):
    return app.state.user_service


@pytest.fixture
def existing_user(user_service, auth_service):
    """A pre-existing user test@example.com / password123 with a profile."""
    user = User(
        id=str(uuid.uuid4()),
        email="test@example.com",
        password_hash=auth_service.hash_password("password123"),
        created_at=datetime(2024, 1, 1, 12, 0, 0),
    )
    user_service.store.save_user(user)
    user_service.store.save_profile(Profile(user_id=user.id, first_name="Test", last_name="User"))
    return user


@pytest.fixture
def auth_token(existing_user, token_service):
    """A valid session token for the existing user."""
    return token_service.issue(existing_user.id)


@pytest.fixture
def auth_cookie(auth_token):
    """Cookie header carrying the session token."""
    return {"Cookie": f"auth_token={auth_token}"}
