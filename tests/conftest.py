"""
Pytest configuration and fixtures.
"""

from collections.abc import AsyncGenerator
from email.message import EmailMessage

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.pool import StaticPool

from nctrack.config import Settings
from nctrack.database import Database
from nctrack.errors import NotificationError
from nctrack.main import create_app
from nctrack.notifications import Notifier

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


class RecordingNotifier(Notifier):
    """Captures outgoing mail instead of talking to SMTP."""

    def __init__(self, settings: Settings):
        super().__init__(settings)
        self.sent: list[EmailMessage] = []
        self.fail = False

    def deliver(self, msg: EmailMessage) -> None:
        self.sent.append(msg)
        if self.fail:
            raise NotificationError("SMTP connection refused")


@pytest.fixture
def test_settings() -> Settings:
    return Settings(
        database_url=TEST_DATABASE_URL,
        create_schema_on_startup=True,
        notifications_enabled=False,
        app_base_url="http://nc.test",
    )


@pytest.fixture
async def database() -> AsyncGenerator[Database, None]:
    """Fresh in-memory database per test."""
    db = Database(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    await db.create_all()
    yield db
    await db.drop_all()
    await db.dispose()


@pytest.fixture
async def db_session(database: Database) -> AsyncGenerator[AsyncSession, None]:
    async with database.session_maker() as session:
        yield session


@pytest.fixture
def notifier(test_settings: Settings) -> RecordingNotifier:
    return RecordingNotifier(test_settings)


@pytest.fixture
async def client(
    database: Database, notifier: RecordingNotifier, test_settings: Settings
) -> AsyncGenerator[AsyncClient, None]:
    """
    Test client bound to the per-test database.
    ASGITransport does not run the lifespan, so state is wired here.
    """
    app = create_app(test_settings)
    app.state.database = database
    app.state.notifier = notifier
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


def nc_payload(**overrides) -> dict:
    payload = {
        "title": "Bore diameter out of tolerance",
        "description": "Part A123 measured 10.5mm against 10.0mm ±0.2mm.",
        "date_reported": "2024-01-01",
        "status": "Open",
        "severity": "Medium",
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def make_nc(client: AsyncClient):
    """Create a record through the API and return its JSON."""

    async def _make(**overrides) -> dict:
        resp = await client.post("/api/ncs", json=nc_payload(**overrides))
        assert resp.status_code == 201, resp.text
        return resp.json()

    return _make
