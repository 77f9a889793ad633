"""
Pytest configuration for TaskForge backend tests.

Runs the app in-process against an in-memory SQLite database with
external providers replaced by recording fakes.
"""

import os

os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key-that-is-at-least-32-chars")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("COOKIE_SECURE", "false")
os.environ.setdefault("FRONTEND_URL", "http://frontend.test")
os.environ.setdefault("CLOUDINARY_CLOUD_NAME", "demo")

import httpx
import pytest
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from taskforge.core.config import get_settings
from taskforge.core.database import create_tables, get_db
from taskforge.core.dependencies import (
    get_google_client,
    get_image_host,
    get_notification_dispatcher,
)
from taskforge.core.exceptions import ExternalDeliveryError
from taskforge.main import app
from taskforge.schemas.auth import GoogleProfile


def pytest_configure(config):
    """Configure pytest-asyncio mode."""
    config.addinivalue_line(
        "markers", "asyncio: mark test as async"
    )


# ---------------------------------------------------------------------------
# Provider fakes
# ---------------------------------------------------------------------------

class FakeDispatcher:
    """Records reset messages instead of sending them."""

    def __init__(self) -> None:
        self.emails: list[tuple[str, str]] = []
        self.sms: list[tuple[str, str]] = []
        self.fail = False

    async def send_password_reset_email(self, to_email: str, reset_token: str) -> None:
        if self.fail:
            raise ExternalDeliveryError("Failed to send reset email.")
        self.emails.append((to_email, reset_token))

    async def send_password_reset_sms(self, to_number: str, code: str) -> None:
        if self.fail:
            raise ExternalDeliveryError("Failed to send reset SMS.")
        self.sms.append((to_number, code))


class FakeGoogleClient:
    def __init__(self) -> None:
        self.profile = GoogleProfile(
            google_id="google-123",
            email="gina@example.com",
            email_verified=True,
            display_name="Gina Green",
            picture="https://lh3.googleusercontent.com/gina.png",
        )
        self.fail = False

    def authorization_url(self, state: str) -> str:
        return f"https://accounts.google.com/o/oauth2/v2/auth?state={state}"

    async def fetch_profile(self, code: str) -> GoogleProfile:
        if self.fail:
            raise ExternalDeliveryError("Google sign-in failed.")
        return self.profile


class FakeImageHost:
    def __init__(self) -> None:
        self.uploads: list[tuple[str, bytes, str]] = []
        self.destroyed: list[str] = []

    def hosts(self, url: str) -> bool:
        return "res.cloudinary.com/demo/" in url

    async def upload(self, user_id: str, content: bytes, content_type: str) -> str:
        self.uploads.append((user_id, content, content_type))
        return f"https://res.cloudinary.com/demo/image/upload/taskforge_profiles/user-{user_id}-profile.png"

    async def destroy(self, user_id: str) -> None:
        self.destroyed.append(user_id)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def settings():
    return get_settings()


@pytest.fixture
async def session_maker():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    await create_tables(engine)
    yield async_sessionmaker(engine, expire_on_commit=False)
    await engine.dispose()


@pytest.fixture
async def db(session_maker):
    async with session_maker() as session:
        yield session


@pytest.fixture
def dispatcher():
    return FakeDispatcher()


@pytest.fixture
def google():
    return FakeGoogleClient()


@pytest.fixture
def images():
    return FakeImageHost()


@pytest.fixture
async def client(session_maker, dispatcher, google, images):
    async def override_get_db():
        async with session_maker() as session:
            try:
                yield session
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_notification_dispatcher] = lambda: dispatcher
    app.dependency_overrides[get_google_client] = lambda: google
    app.dependency_overrides[get_image_host] = lambda: images

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()
