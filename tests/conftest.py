"""Pytest configuration and fixtures."""

from collections.abc import AsyncGenerator
from datetime import datetime, timedelta, timezone

import pytest
from httpx import ASGITransport, AsyncClient

from app.client.api_client import CatalogClient
from app.core.config import Settings, get_settings
from app.core.database import Storage, get_storage
from app.main import app
from app.services.books import BookRepository
from app.services.cart import CartRepository

# Use an in-memory SQLite database for testing
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"
TEST_TOKEN = "test-token"


class SteppingClock:
    """Clock that advances one second per reading."""

    def __init__(self, start: datetime | None = None) -> None:
        self.current = start or datetime(2024, 1, 1, tzinfo=timezone.utc)

    def now(self) -> datetime:
        self.current += timedelta(seconds=1)
        return self.current


@pytest.fixture
async def storage() -> AsyncGenerator[Storage, None]:
    """Create a test storage handle with fresh tables."""
    storage = Storage(TEST_DATABASE_URL)
    await storage.create_all()
    yield storage
    await storage.drop_all()
    await storage.dispose()


@pytest.fixture
def clock() -> SteppingClock:
    return SteppingClock()


@pytest.fixture
def cart_repository(storage: Storage, clock: SteppingClock) -> CartRepository:
    return CartRepository(storage, clock=clock)


@pytest.fixture
def book_repository(
    storage: Storage, cart_repository: CartRepository, clock: SteppingClock
) -> BookRepository:
    return BookRepository(storage, cart=cart_repository, clock=clock)


@pytest.fixture
def strict_book_repository(storage: Storage, clock: SteppingClock) -> BookRepository:
    return BookRepository(storage, strict=True, clock=clock)


@pytest.fixture
def test_settings() -> Settings:
    """Settings with auth disabled and lenient validation."""
    return Settings(_env_file=None, auth_tokens="", strict_validation=False)


@pytest.fixture
def secured_settings() -> Settings:
    """Settings that require a bearer token."""
    return Settings(_env_file=None, auth_tokens=f"{TEST_TOKEN},other-token")


@pytest.fixture
def override_dependencies(storage: Storage, test_settings: Settings):
    """Point the app at the test storage and settings."""
    app.dependency_overrides[get_storage] = lambda: storage
    app.dependency_overrides[get_settings] = lambda: test_settings
    yield
    app.dependency_overrides.clear()


@pytest.fixture
async def client(override_dependencies) -> AsyncGenerator[AsyncClient, None]:
    """Create an async test client."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
async def secured_client(
    storage: Storage, secured_settings: Settings
) -> AsyncGenerator[AsyncClient, None]:
    """Create an async test client with bearer auth enabled."""
    app.dependency_overrides[get_storage] = lambda: storage
    app.dependency_overrides[get_settings] = lambda: secured_settings

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
async def catalog_client(override_dependencies) -> AsyncGenerator[CatalogClient, None]:
    """Create a catalog API client wired straight to the app."""
    client = CatalogClient(
        base_url="http://test",
        token=TEST_TOKEN,
        transport=ASGITransport(app=app),
    )
    yield client
    await client.close()


@pytest.fixture
async def sample_book(book_repository: BookRepository):
    """Create a sample book for testing."""
    return await book_repository.create_book(
        {
            "title": "Test Book",
            "author": "Test Author",
            "price": 12.5,
            "published_year": 2001,
            "genre": "Fiction",
            "description": "A book for tests.",
            "image_url": "https://example.com/cover.jpg",
        }
    )


@pytest.fixture
async def other_book(book_repository: BookRepository):
    """Create a second book for testing."""
    return await book_repository.create_book(
        {"title": "Other Book", "author": "Other Author", "price": 7}
    )
