"""Test configuration and fixtures.

Each test gets its own in-memory SQLite database:
1. The schema is created on a fresh engine per test
2. Route handlers and tests share one session, so commits made by
   endpoints are visible to assertions
3. Google sign-in is replaced by a fake client, so no network is used
"""

from pathlib import Path

from dotenv import load_dotenv

# Settings are read at import time, so the test environment must be loaded first
load_dotenv(Path(__file__).parent.parent / ".env.test", override=True)

from collections.abc import AsyncGenerator  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

import src.database.models  # noqa: E402, F401
from src.database.base import Base  # noqa: E402
from src.database.dependencies import get_db_session  # noqa: E402
from src.features.auth.exceptions import GoogleLoginException  # noqa: E402
from src.features.auth.google import GoogleIdentity, get_google_client  # noqa: E402
from src.features.auth.jwt_utils import create_access_token  # noqa: E402
from src.features.user.models import User  # noqa: E402
from src.main import app  # noqa: E402

# Database Setup - Function Scope (Fresh Database Per Test)


@pytest_asyncio.fixture
async def db_engine() -> AsyncGenerator[AsyncEngine]:
    """Create an in-memory database with the full schema.

    StaticPool keeps the single connection alive, otherwise every new
    connection would see an empty database.
    """
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture
async def session(db_engine: AsyncEngine) -> AsyncGenerator[AsyncSession]:
    """Create the database session shared by the test and the app."""
    async_session = AsyncSession(bind=db_engine, expire_on_commit=False)
    try:
        yield async_session
    finally:
        await async_session.close()


# Mock Database Initialization


@pytest.fixture(autouse=True)
def mock_db_initialization(monkeypatch):
    """Mock init_db and close_db so lifespan doesn't connect to a real database."""
    import src.main as main_module

    async def mock_init_db():
        pass

    async def mock_close_db():
        pass

    monkeypatch.setattr(main_module, "init_db", mock_init_db)
    monkeypatch.setattr(main_module, "close_db", mock_close_db)


# Fake Google Sign-In


class FakeGoogleClient:
    """Stands in for GoogleOAuthClient; codes map to identities."""

    def __init__(self):
        self.identities: dict[str, GoogleIdentity] = {}
        self.calls: list[str] = []

    def register(self, code: str, email: str, name: str | None = None, picture: str | None = None) -> None:
        self.identities[code] = GoogleIdentity(email=email, name=name, picture=picture)

    async def exchange_code(self, code: str) -> GoogleIdentity:
        self.calls.append(code)
        if code not in self.identities:
            raise GoogleLoginException()
        return self.identities[code]


@pytest.fixture
def google_client() -> FakeGoogleClient:
    return FakeGoogleClient()


# FastAPI Client & Dependency Overrides


@pytest_asyncio.fixture(autouse=True)
async def override_dependencies(session: AsyncSession, google_client: FakeGoogleClient):
    """Route the app's database session and Google client to the test doubles."""

    async def _get_test_session():
        yield session

    app.dependency_overrides[get_db_session] = _get_test_session
    app.dependency_overrides[get_google_client] = lambda: google_client
    yield
    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def client() -> AsyncGenerator[AsyncClient]:
    """Create an unauthenticated async HTTP test client."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


# Test User Factories


@pytest_asyncio.fixture
async def make_user(session: AsyncSession):
    """Factory fixture to create test users with custom fields.

    Usage:
        user = await make_user()                              # defaults
        alice = await make_user(username="alice", password="secret1")
    """
    counter = 0  # Counter for unique email/username generation

    async def _factory(
        username=None,
        email=None,
        name="Test User",
        password="secret1",
        **kwargs,
    ) -> User:
        nonlocal counter
        counter += 1

        if username is None:
            username = f"testuser{counter}"
        if email is None:
            email = f"{username}@example.com"

        user = User(
            username=username,
            email=email,
            name=name,
            hashed_password=User.hash_password(password),
            **kwargs,
        )

        session.add(user)
        await session.commit()
        await session.refresh(user)
        return user

    yield _factory


def _bearer(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def bearer():
    """Build an Authorization header carrying a raw token."""
    return _bearer


@pytest.fixture
def auth_headers():
    """Build Authorization headers with a fresh access token for a user."""

    def _headers(user: User) -> dict[str, str]:
        return _bearer(create_access_token(user.id))

    return _headers
