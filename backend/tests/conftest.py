"""
Hebrew Study Backend - Test Configuration (conftest.py)
========================================================

What:  Shared pytest fixtures for the entire test suite.
How:   Unit tests use a mocked AsyncSession; integration tests use a real
       in-memory SQLite database (aiosqlite) with the ORM metadata, and an
       HTTPX AsyncClient talking to the app through ASGITransport.

Fixture Hierarchy (all function-scoped):
    ├── mock_db_session: AsyncMock standing in for AsyncSession
    ├── db_engine: in-memory SQLite engine with all tables created
    │   └── db_session: AsyncSession on that engine
    │       └── seeded_db: db_session with Bible books and vocab sets
    ├── identity_provider: FakeIdentityProvider with two known tokens
    └── test_client: AsyncClient against create_app(identity_provider=...)
"""

import base64
import json
import os
from datetime import datetime, timedelta, timezone
from typing import Dict, Optional
from unittest.mock import AsyncMock, MagicMock

# Must be set before any hebrewstudy import: settings load at import time
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///./test.db"
os.environ["SUPABASE_URL"] = "https://testref.supabase.co"
os.environ["SUPABASE_ANON_KEY"] = "test-anon-key-not-real"
os.environ["LOG_LEVEL"] = "WARNING"

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from hebrewstudy.database import Base, get_db_session
from hebrewstudy.exceptions import IdentityProviderError
from hebrewstudy.main import create_app
from hebrewstudy.models.bible_book import BibleBook
from hebrewstudy.models.study_session import StudySession  # noqa: F401
from hebrewstudy.models.vocab_set import VocabSet
from hebrewstudy.schemas.auth import AuthenticatedUser
from hebrewstudy.services.identity_base import IdentityProvider

ALICE_TOKEN = "alice-token"
BOB_TOKEN = "bob-token"
ALICE_ID = "5f0c8a1e-0000-4000-8000-00000000a11c"
BOB_ID = "5f0c8a1e-0000-4000-8000-000000000b0b"

SESSION_COOKIE = "sb-testref-auth-token"


def auth_header(token: str = ALICE_TOKEN) -> Dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


def session_cookie_value(access_token: str) -> str:
    """Cookie value as written by the Supabase SSR helpers (base64 form)."""
    payload = json.dumps({"access_token": access_token, "refresh_token": "r"})
    encoded = base64.urlsafe_b64encode(payload.encode("utf-8")).decode("ascii").rstrip("=")
    return f"base64-{encoded}"


class FakeIdentityProvider(IdentityProvider):
    """
    In-memory identity provider.

    Known tokens resolve to users; anything else is rejected (None).
    Setting `error` makes every lookup raise it, simulating an outage.
    """

    def __init__(self, users: Optional[Dict[str, AuthenticatedUser]] = None):
        self.users = users or {}
        self.error: Optional[Exception] = None
        self.calls = []
        self.closed = False

    async def get_user(self, access_token: str) -> Optional[AuthenticatedUser]:
        self.calls.append(access_token)
        if self.error is not None:
            raise self.error
        return self.users.get(access_token)

    async def health_check(self) -> bool:
        return self.error is None

    async def aclose(self) -> None:
        self.closed = True


# ══════════════════════════════════════════════════════════════════════════
# Unit Test Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def mock_db_session():
    """
    A mock async database session.

    `execute` results must be configured per test, e.g.:
        result = MagicMock()
        result.scalar_one_or_none.return_value = None
        mock_db_session.execute.return_value = result
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.flush = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.add = MagicMock()
    return session


# ══════════════════════════════════════════════════════════════════════════
# Database Fixtures (in-memory SQLite)
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def db_engine():
    # StaticPool: every session shares the one connection holding the database
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(db_engine):
    return async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(session_factory):
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def seeded_db(db_session):
    """Three Bible books (inserted out of order) and three vocab sets."""
    now = datetime.now(timezone.utc)
    db_session.add_all([
        BibleBook(
            id="leviticus", name="Leviticus", hebrew_name="ויקרא",
            abbreviation="Lev", chapter_count=27, testament="OT", order_index=3,
        ),
        BibleBook(
            id="genesis", name="Genesis", hebrew_name="בראשית",
            abbreviation="Gen", chapter_count=50, testament="OT", order_index=1,
        ),
        BibleBook(
            id="exodus", name="Exodus", hebrew_name="שמות",
            abbreviation="Exod", chapter_count=40, testament="OT", order_index=2,
        ),
        VocabSet(
            id="A", title="Genesis 1", total_words=40, is_active=False,
            created_at=now - timedelta(days=3), updated_at=now - timedelta(days=3),
        ),
        VocabSet(
            id="B", title="Common verbs", total_words=120, is_active=True,
            created_at=now - timedelta(days=2), updated_at=now - timedelta(days=2),
        ),
        VocabSet(
            id="C", title="Numbers", description="Cardinal numbers", total_words=20,
            is_active=False,
            created_at=now - timedelta(days=1), updated_at=now - timedelta(days=1),
        ),
    ])
    await db_session.commit()
    return db_session


# ══════════════════════════════════════════════════════════════════════════
# API Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def identity_provider():
    return FakeIdentityProvider(
        users={
            ALICE_TOKEN: AuthenticatedUser(id=ALICE_ID, email="alice@example.com"),
            BOB_TOKEN: AuthenticatedUser(id=BOB_ID, email="bob@example.com"),
        }
    )


@pytest.fixture
def app(identity_provider, session_factory, seeded_db):
    """Application wired to the fake provider and the seeded SQLite database."""
    application = create_app(identity_provider=identity_provider)

    async def override_get_db_session():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    application.dependency_overrides[get_db_session] = override_get_db_session
    return application


@pytest_asyncio.fixture
async def test_client(app):
    """
    Async HTTP client for endpoint tests.

    Usage:
        async def test_health(test_client):
            response = await test_client.get("/health")
            assert response.status_code == 200
    """
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def provider_outage(identity_provider):
    identity_provider.error = IdentityProviderError(status_code=503)
    return identity_provider
