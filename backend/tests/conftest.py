"""
Shared test fixtures.

- In-memory SQLite database (aiosqlite) with all tables created
- StravaApiFake: scripted Strava endpoints behind httpx.MockTransport
- App client with database, HTTP client and caller overridden
"""

from datetime import datetime, timedelta, timezone
from typing import Any

import httpx
import pytest
import pytest_asyncio
from cryptography.fernet import Fernet
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from fitdash.models.base import Base
from fitdash.features.users import models as _users  # noqa
from fitdash.features.strava import models as _strava  # noqa
from fitdash.features.garmin import models as _garmin  # noqa
from fitdash.features.connections import SessionContext, sessions
from fitdash.features.garmin import CredentialCipher
from fitdash.features.strava import StravaClient, StravaOAuth
from fitdash.features.strava.connection import StravaConnection


USER_ID = "5f0c7a52-8d1e-4c3a-9d7e-2b1f0a9e6c11"
USER_EMAIL = "runner@example.com"


# =============================================================================
# Builders
# =============================================================================

def make_strava_activity(activity_id: int, **overrides: Any) -> dict:
    """Strava activity summary as returned by /athlete/activities."""
    start = datetime(2024, 3, 1, 7, 30, tzinfo=timezone.utc) + timedelta(days=activity_id % 28)
    data = {
        "id": activity_id,
        "name": f"Activity {activity_id}",
        "type": "Run",
        "distance": 10000.0,
        "moving_time": 3000,
        "elapsed_time": 3100,
        "total_elevation_gain": 120.0,
        "start_date": start.isoformat().replace("+00:00", "Z"),
        "average_speed": 3.33,
        "max_speed": 5.1,
        "average_heartrate": 150.0,
        "max_heartrate": 178.0,
        "map": {"summary_polyline": "abc123"},
    }
    data.update(overrides)
    return data


def make_token_response(**overrides: Any) -> dict:
    data = {
        "token_type": "Bearer",
        "access_token": "new-access",
        "refresh_token": "new-refresh",
        "expires_at": 1_900_000_000,
        "expires_in": 21600,
        "athlete": {"id": 4242, "firstname": "Ada", "lastname": "Runner", "profile": "https://img/ada.jpg"},
    }
    data.update(overrides)
    return data


@pytest.fixture
def activity_factory():
    return make_strava_activity


@pytest.fixture
def token_factory():
    return make_token_response


# =============================================================================
# Strava API fake
# =============================================================================

class StravaApiFake:
    """
    Scripted Strava endpoints.

    token_status / token_body answer POST /oauth/token, pages maps a page
    number to the activities returned for it. Every request is recorded.
    """

    def __init__(self) -> None:
        self.token_status = 200
        self.token_body: Any = make_token_response()
        self.activities_status = 200
        self.pages: dict[int, list[dict]] = {}
        self.requests: list[httpx.Request] = []

    @property
    def token_requests(self) -> list[httpx.Request]:
        return [r for r in self.requests if r.url.path == "/oauth/token"]

    @property
    def activity_requests(self) -> list[httpx.Request]:
        return [r for r in self.requests if r.url.path == "/api/v3/athlete/activities"]

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)

        if request.url.path == "/oauth/token":
            return httpx.Response(self.token_status, json=self.token_body)

        if request.url.path == "/oauth/deauthorize":
            return httpx.Response(200, json={"access_token": "revoked"})

        if request.url.path == "/api/v3/athlete/activities":
            if self.activities_status != 200:
                return httpx.Response(self.activities_status, json={"message": "Upstream error"})
            page = int(request.url.params.get("page", "1"))
            return httpx.Response(
                200,
                json=self.pages.get(page, []),
                headers={"X-RateLimit-Limit": "200,2000", "X-RateLimit-Usage": "1,1"},
            )

        return httpx.Response(404, json={"message": "Not Found"})


@pytest.fixture
def strava_api() -> StravaApiFake:
    return StravaApiFake()


@pytest_asyncio.fixture
async def http_client(strava_api: StravaApiFake):
    async with httpx.AsyncClient(transport=httpx.MockTransport(strava_api.handler)) as client:
        yield client


# =============================================================================
# Database
# =============================================================================

@pytest_asyncio.fixture
async def db_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def db(db_engine):
    factory = async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)
    async with factory() as session:
        yield session


# =============================================================================
# Sessions & connections
# =============================================================================

@pytest.fixture(autouse=True)
def reset_sessions():
    """Session contexts are process-global; isolate every test."""
    sessions._sessions.clear()
    sessions._authorizations.clear()
    yield
    sessions._sessions.clear()
    sessions._authorizations.clear()


@pytest.fixture
def session() -> SessionContext:
    return sessions.open(USER_ID, USER_EMAIL)


@pytest.fixture
def strava_oauth(http_client: httpx.AsyncClient) -> StravaOAuth:
    return StravaOAuth(http_client, client_id="12345", client_secret="s3cret")


@pytest.fixture
def strava_connection(db, http_client, strava_oauth) -> StravaConnection:
    return StravaConnection(db, oauth=strava_oauth, client=StravaClient(http_client))


@pytest.fixture
def fernet_key() -> str:
    return Fernet.generate_key().decode("ascii")


@pytest.fixture
def cipher(fernet_key: str) -> CredentialCipher:
    return CredentialCipher(fernet_key)


# =============================================================================
# App client
# =============================================================================

@pytest_asyncio.fixture
async def app_client(db, http_client, strava_connection):
    """AsyncClient against the app with the caller fixed to USER_ID."""
    from fitdash.main import app
    from fitdash.db.session import get_async_db
    from fitdash.features.auth import AuthenticatedUser, get_current_user, get_http_client
    from fitdash.api.v1.routes.strava import get_strava_connection

    async def override_db():
        yield db

    async def override_http():
        yield http_client

    async def override_user():
        return AuthenticatedUser(id=USER_ID, email=USER_EMAIL)

    app.dependency_overrides[get_async_db] = override_db
    app.dependency_overrides[get_http_client] = override_http
    app.dependency_overrides[get_current_user] = override_user
    app.dependency_overrides[get_strava_connection] = lambda: strava_connection

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as client:
        yield client

    app.dependency_overrides.clear()
