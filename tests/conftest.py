"""
School Records - Test Configuration and Fixtures
"""
import os
from datetime import datetime, timedelta, timezone
from typing import AsyncGenerator

import pytest
from faker import Faker
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

# Set testing environment before the app reads its settings
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///./test.db"
os.environ["SECRET_KEY"] = "test-secret-key-for-testing-only"
os.environ["MAIL_BACKEND"] = "console"
os.environ["APP_ENV"] = "test"
os.environ["DB_AUTO_CREATE"] = "false"

from school_records.main import app
from school_records.core.database import Base, get_db
from school_records.core.dependencies import get_otp_store
from school_records.core.email_service import Mailer, get_mailer
from school_records.core.exceptions import DeliveryFailed
from school_records.core.otp_store import InMemoryOtpStore
from school_records.models import document, principal  # noqa: F401  (register tables)

fake = Faker()

TEST_DATABASE_URL = "sqlite+aiosqlite:///./test.db"
# NullPool: no connection outlives the event loop of the test that opened it
test_engine = create_async_engine(TEST_DATABASE_URL, echo=False, poolclass=NullPool)
TestSessionLocal = async_sessionmaker(bind=test_engine, class_=AsyncSession, expire_on_commit=False)


class FakeClock:
    """Manually advanced UTC clock for expiry tests."""

    def __init__(self):
        self.now = datetime(2026, 1, 5, 9, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


class RecordingMailer(Mailer):
    """Keeps every message instead of sending it; can be told to fail."""

    def __init__(self):
        self.sent: list[dict] = []
        self.fail = False

    async def send(self, to_email, subject, text, html=None):
        if self.fail:
            raise DeliveryFailed()
        self.sent.append({"to": to_email, "subject": subject, "text": text, "html": html})

    def last_code_for(self, email: str) -> str:
        for msg in reversed(self.sent):
            if msg["to"] == email:
                return msg["text"].split("Your OTP code is: ", 1)[1][:6]
        raise AssertionError(f"no mail sent to {email}")


@pytest.fixture
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Fresh schema for each test"""
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with TestSessionLocal() as session:
        yield session
        await session.rollback()

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def otp_store(clock: FakeClock) -> InMemoryOtpStore:
    return InMemoryOtpStore(clock=clock)


@pytest.fixture
def mailer() -> RecordingMailer:
    return RecordingMailer()


@pytest.fixture
async def client(
    db_session: AsyncSession,
    otp_store: InMemoryOtpStore,
    mailer: RecordingMailer,
) -> AsyncGenerator[AsyncClient, None]:
    """Test client with database, OTP store and mailer overridden"""
    async def override_get_db():
        try:
            yield db_session
            await db_session.commit()
        except Exception:
            await db_session.rollback()
            raise

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_otp_store] = lambda: otp_store
    app.dependency_overrides[get_mailer] = lambda: mailer

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
def faculty_payload() -> dict:
    return {
        "id": f"FAC-{fake.unique.random_int(100, 999)}",
        "type": "faculty",
        "name": fake.name(),
        "email": "a@x.com",
        "designation": "Lecturer",
        "password": "Correct-Horse-9",
    }


@pytest.fixture
def issue_otp(client: AsyncClient, mailer: RecordingMailer):
    """Request an OTP over HTTP and return the code that was mailed"""
    async def _issue(email: str) -> str:
        r = await client.post("/request-otp", json={"email": email})
        assert r.status_code == 200, r.text
        return mailer.last_code_for(email)
    return _issue


@pytest.fixture
async def faculty_token(client: AsyncClient, issue_otp, faculty_payload: dict) -> str:
    """Registered faculty member's bearer token"""
    otp = await issue_otp(faculty_payload["email"])
    r = await client.post("/register-faculty", json={**faculty_payload, "otp": otp})
    assert r.status_code == 200, r.text
    return r.json()["token"]


@pytest.fixture
def auth_headers(faculty_token: str) -> dict:
    return {"Authorization": f"Bearer {faculty_token}"}
