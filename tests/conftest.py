"""Shared fixtures: in-memory SQLite, a fake magic-link provider, and an HTTP client."""

from __future__ import annotations

import asyncio
import itertools
import os
import uuid

# Force test-safe settings before any module imports Settings()
os.environ["STYTCH_PROJECT_ID"] = "project-test-11111111-2222-3333-4444-555555555555"
os.environ["STYTCH_SECRET"] = "secret-test-not-a-real-secret"
os.environ["POSTGRES_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["APP_URL"] = "http://testserver"
os.environ["DEBUG"] = "false"

import httpx  # noqa: E402
import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from devon_farm.api.dependencies.deps import get_db  # noqa: E402
from devon_farm.auth_strategies.base import MagicLinkProvider, ProviderSession  # noqa: E402
from devon_farm.core.config import settings as app_settings  # noqa: E402
from devon_farm.core.exceptions import (  # noqa: E402
    InvalidTokenError,
    ProviderUnavailableError,
    SessionExpiredError,
)
from devon_farm.core.postgres import Base  # noqa: E402
from devon_farm.main import app as fastapi_app  # noqa: E402
from devon_farm.models import FarmORM, UserORM  # noqa: E402

COOKIE = app_settings.SESSION_COOKIE_NAME


class FakeMagicLinkProvider(MagicLinkProvider):
    """
    In-memory stand-in for Stytch.

    Every email maps to one stable external id. send_login_link mints a
    one-time token the test can "click"; each validate_session rotates the
    credential, like the real provider does for session JWTs.
    """

    def __init__(self) -> None:
        super().__init__("fake")
        self._counter = itertools.count(1)
        self.external_ids: dict[str, str] = {}
        self.emails: dict[str, str] = {}
        self.tokens: dict[str, str] = {}
        self.sessions: dict[str, str] = {}
        self.sent_to: list[str] = []
        self.revoked: list[str] = []
        self.last_token: str | None = None

        self.fail_send = False
        self.unavailable = False
        self.validate_delay: float = 0.0
        self.revoke_fails = False
        self.rotate = True

    def _credential(self) -> str:
        return f"session-{uuid.uuid4().hex}"

    def start_session(self, external_id: str) -> str:
        credential = self._credential()
        self.sessions[credential] = external_id
        return credential

    async def send_login_link(self, email: str) -> str:
        if self.fail_send:
            raise ProviderUnavailableError()
        if email not in self.external_ids:
            external_id = f"user-test-{next(self._counter):04d}"
            self.external_ids[email] = external_id
            self.emails[external_id] = email
        self.sent_to.append(email)
        self.last_token = f"token-{uuid.uuid4().hex}"
        self.tokens[self.last_token] = self.external_ids[email]
        return self.external_ids[email]

    async def exchange_callback_token(self, token: str) -> ProviderSession:
        external_id = self.tokens.pop(token, None)
        if external_id is None:
            raise InvalidTokenError("Magic link token not found")
        return ProviderSession(
            external_id=external_id,
            credential=self.start_session(external_id),
            email=self.emails.get(external_id),
        )

    async def validate_session(self, credential: str) -> ProviderSession:
        if self.validate_delay:
            await asyncio.sleep(self.validate_delay)
        if self.unavailable:
            raise ProviderUnavailableError()
        external_id = self.sessions.get(credential)
        if external_id is None:
            raise SessionExpiredError()
        refreshed = self.start_session(external_id) if self.rotate else credential
        return ProviderSession(external_id=external_id, credential=refreshed)

    async def revoke_session(self, credential: str) -> None:
        self.revoked.append(credential)
        if self.revoke_fails:
            raise ProviderUnavailableError()
        self.sessions.pop(credential, None)


@pytest_asyncio.fixture
async def engine():
    test_engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield test_engine
    await test_engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(bind=engine, expire_on_commit=False, autoflush=False)


@pytest_asyncio.fixture
async def db_session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def provider() -> FakeMagicLinkProvider:
    return FakeMagicLinkProvider()


@pytest_asyncio.fixture
async def app(session_factory, provider):
    async def override_get_db():
        async with session_factory() as session:
            yield session

    fastapi_app.dependency_overrides[get_db] = override_get_db
    fastapi_app.state.provider = provider
    yield fastapi_app
    fastapi_app.dependency_overrides.clear()
    del fastapi_app.state.provider


@pytest_asyncio.fixture
async def client(app):
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(
        transport=transport, base_url="http://testserver", follow_redirects=False
    ) as http:
        yield http


# ---------------------------------------------------------------------------
# Data helpers
# ---------------------------------------------------------------------------


async def make_user(
    session, name: str = "Ana", email: str = "ana@example.com", external_id: str | None = None
) -> UserORM:
    user = UserORM(name=name, email=email, external_id=external_id or f"user-test-{uuid.uuid4()}")
    session.add(user)
    await session.commit()
    return user


async def make_farm(session, user: UserORM, name: str = "Sunny Acres") -> FarmORM:
    farm = FarmORM(name=name, owner_id=user.id)
    session.add(farm)
    await session.flush()
    user.farm_id = farm.id
    await session.commit()
    return farm


async def sign_in(client: httpx.AsyncClient, provider: FakeMagicLinkProvider, name: str, email: str):
    """Run the browser side of the magic-link flow; the client's jar ends up holding the cookie."""
    sent = await client.post("/login", data={"name": name, "email": email})
    assert sent.status_code == 200
    return await client.get("/auth/callback", params={"token": provider.last_token})
