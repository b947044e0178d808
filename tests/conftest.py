"""Shared fixtures for the AstroChat test suite."""

from datetime import date, datetime, timedelta, timezone

import pytest
import pytest_asyncio
from fastapi.testclient import TestClient

from astrochat.app.core.clock import Clock
from astrochat.app.core.config import Settings
from astrochat.app.db.database import Database
from astrochat.app.main import create_app
from astrochat.app.providers.mock import MockProvider
from astrochat.app.services.quota_tracker import (
    InMemoryQuotaStore,
    PersonData,
    QuotaTracker,
    SQLQuotaStore,
)

SQLITE_MEMORY_URL = "sqlite+aiosqlite:///:memory:"


class FrozenClock(Clock):
    """Clock that only moves when a test moves it."""

    def __init__(self, current: datetime):
        self.current = current

    def now(self) -> datetime:
        return self.current

    def set_date(self, day: date) -> None:
        self.current = datetime(day.year, day.month, day.day, 12, 0, tzinfo=timezone.utc)

    def advance(self, days: int = 1) -> None:
        self.current = self.current + timedelta(days=days)


def make_settings(**overrides) -> Settings:
    values = {
        "database_url": SQLITE_MEMORY_URL,
        "mock_provider": True,
        "gemini_api_key": "",
        "environment": "development",
        "debug": False,
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


@pytest.fixture
def clock() -> FrozenClock:
    return FrozenClock(datetime(2024, 1, 1, 9, 30, tzinfo=timezone.utc))


@pytest.fixture
def person() -> PersonData:
    return PersonData(
        first_name="Asha",
        last_name="Verma",
        date_of_birth="1990-05-15",
        place_of_birth="Jaipur, India",
        time_of_birth="06:45",
    )


@pytest.fixture
def memory_store() -> InMemoryQuotaStore:
    return InMemoryQuotaStore()


@pytest.fixture
def tracker(memory_store, clock) -> QuotaTracker:
    return QuotaTracker(memory_store, clock=clock, daily_limit=10)


@pytest_asyncio.fixture
async def database():
    db = Database(SQLITE_MEMORY_URL, make_settings())
    await db.create_all()
    try:
        yield db
    finally:
        await db.dispose()


@pytest_asyncio.fixture
async def sql_store(database) -> SQLQuotaStore:
    return SQLQuotaStore(database)


@pytest.fixture
def mock_provider() -> MockProvider:
    return MockProvider()


@pytest.fixture
def settings_factory():
    """Build Settings isolated from the environment and .env file."""
    return make_settings


@pytest.fixture
def app_settings() -> Settings:
    return make_settings()


@pytest.fixture
def client(app_settings, tracker, mock_provider):
    """TestClient over an app wired to the in-memory store and mock provider."""
    app = create_app(app_settings, tracker=tracker, provider=mock_provider)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def user_data() -> dict:
    return {
        "firstName": "Asha",
        "lastName": "Verma",
        "dateOfBirth": "1990-05-15",
        "placeOfBirth": "Jaipur, India",
        "timeOfBirth": "06:45",
    }
