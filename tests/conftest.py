"""Pytest fixtures for testing."""

import os
from collections.abc import AsyncGenerator
from datetime import UTC, datetime, timedelta

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///./volunteer_portal_test.db")
os.environ.setdefault("JWT_SECRET", "test-secret-key-for-session-credentials")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("TIMEZONE_PREMIUM_KEY", "test-opencage-key")

from volunteer_portal.api.deps import get_notifier
from volunteer_portal.core.clock import FrozenClock, ReferenceClock, get_clock
from volunteer_portal.core.config import Settings, get_settings
from volunteer_portal.core.database import get_db
from volunteer_portal.core.security import hash_password
from volunteer_portal.main import app
from volunteer_portal.models.account import Account
from volunteer_portal.models.base import Base
from volunteer_portal.models.enums import AccountRole
from volunteer_portal.models.project import Project
from volunteer_portal.services.credential_service import CredentialIssuer

TEST_DATABASE_URL = "sqlite+aiosqlite://"


class RecordingNotifier:
    """Notifier that keeps dispatched messages instead of sending them."""

    def __init__(self):
        self.messages: list[dict] = []

    def dispatch(self, to: str, subject: str, html: str) -> None:
        self.messages.append({"to": to, "subject": subject, "html": html})


def upcoming_sunday(clock: ReferenceClock) -> datetime:
    """Start of the first Sunday strictly after today in the reference zone."""
    today = clock.today()
    days_ahead = (6 - today.weekday()) % 7 or 7
    return clock.start_of_day(today + timedelta(days=days_ahead, hours=12))


def day_string(day: datetime) -> str:
    return day.date().isoformat()


@pytest.fixture()
def settings() -> Settings:
    return get_settings()


@pytest.fixture()
def clock(settings: Settings) -> FrozenClock:
    """Clock frozen at the real current time so signed credentials stay valid."""
    return FrozenClock(datetime.now(UTC), settings.reference_timezone)


@pytest.fixture()
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest_asyncio.fixture(scope="function")
async def db() -> AsyncGenerator[AsyncSession, None]:
    """Create test database session.

    Each test gets its own in-memory database; a single shared connection
    keeps it alive for the duration of the test.
    """
    test_engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_factory = async_sessionmaker(
        test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )
    async with session_factory() as session:
        try:
            yield session
        finally:
            await session.rollback()
            await session.close()

    await test_engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def client(
    db: AsyncSession, clock: FrozenClock, notifier: RecordingNotifier
) -> AsyncGenerator[AsyncClient, None]:
    """Create test client with database, clock and notifier overrides."""

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        yield db

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_clock] = lambda: clock
    app.dependency_overrides[get_notifier] = lambda: notifier

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def default_project(db: AsyncSession, settings: Settings) -> Project:
    project = Project(project_name=settings.default_project_name, category="Other")
    db.add(project)
    await db.flush()
    return project


async def create_account(
    db: AsyncSession, email: str, role: AccountRole, first_name: str = "Test"
) -> Account:
    account = Account(
        email=email,
        password_hash=hash_password("TestPass123!"),
        role=role,
        first_name=first_name,
        last_name="User",
        time_zone="America/Los_Angeles",
    )
    db.add(account)
    await db.flush()
    return account


@pytest_asyncio.fixture
async def owner_account(db: AsyncSession) -> Account:
    return await create_account(db, "owner@onecommunity.org", AccountRole.OWNER, "Olive")


@pytest_asyncio.fixture
async def admin_account(db: AsyncSession) -> Account:
    return await create_account(db, "admin@onecommunity.org", AccountRole.ADMINISTRATOR, "Ada")


@pytest_asyncio.fixture
async def volunteer_account(db: AsyncSession) -> Account:
    return await create_account(db, "volunteer@onecommunity.org", AccountRole.VOLUNTEER, "Val")


@pytest.fixture()
def auth_headers(settings: Settings, clock: FrozenClock):
    """Build Authorization headers carrying a session credential."""

    def _headers(account: Account) -> dict[str, str]:
        token = CredentialIssuer(settings).issue(account, clock.now())
        return {"Authorization": f"Bearer {token}"}

    return _headers


def profile_payload(token: str, **overrides) -> dict:
    """Setup form body as the frontend submits it."""
    payload = {
        "token": token,
        "firstName": "Nora",
        "lastName": "Newcomer",
        "jobTitle": "Volunteer Coordinator",
        "phoneNumber": "15555550123",
        "weeklycommittedHours": 10,
        "email": "new@x.org",
        "password": "Welcome123!",
        "collaborationPreference": "Zoom",
        "location": {"userProvided": "Portland, OR", "country": "US", "city": "Portland"},
        "privacySettings": {"email": True, "phoneNumber": False},
    }
    payload.update(overrides)
    return payload
