"""
Pytest configuration and fixtures for Libraria tests.
"""

import sys
import uuid
from pathlib import Path
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from libraria.api.main import create_app
from libraria.api.dependencies import Settings, get_settings, get_db
from libraria.security import Identity
from libraria.storage.models import Base, Role


API = "/api/v1"


# =============================================================================
# Test Settings
# =============================================================================

def get_test_settings() -> Settings:
    """Return settings configured for testing."""
    return Settings(
        database_url="sqlite+aiosqlite:///:memory:",
        database_echo=False,
        jwt_secret="test-secret",
        environment="test",
        debug=True,
    )


@pytest.fixture
def test_settings() -> Settings:
    return get_test_settings()


# =============================================================================
# Database Fixtures
# =============================================================================

@pytest_asyncio.fixture(scope="function")
async def async_engine(tmp_path):
    """Create async database engine backed by a temporary SQLite file."""
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'libraria-test.db'}",
        echo=False,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def session_factory(async_engine):
    return async_sessionmaker(
        async_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


@pytest_asyncio.fixture(scope="function")
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Provide database session for tests."""
    async with session_factory() as session:
        yield session


# =============================================================================
# Application Fixtures
# =============================================================================

@pytest_asyncio.fixture(scope="function")
async def app(session_factory, test_settings):
    """Create FastAPI application for testing."""
    application = create_app(test_settings)

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            yield session

    # Override dependencies
    application.dependency_overrides[get_settings] = lambda: test_settings
    application.dependency_overrides[get_db] = override_get_db

    yield application

    application.dependency_overrides.clear()


@pytest_asyncio.fixture(scope="function")
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    """Provide async HTTP client for API tests."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


# =============================================================================
# Account Fixtures
# =============================================================================

@pytest.fixture
def make_user(client):
    """
    Factory that registers and logs in a user through the API.

    Returns a dict with id, email, password, token and ready-to-use headers.
    """
    async def _make_user(role: str = "reader", email: str = None, password: str = "s3creto", name: str = None):
        email = email or f"{role}-{uuid.uuid4().hex[:8]}@biblioteca.com"
        name = name or f"{role.title()} User"

        response = await client.post(
            f"{API}/users/register",
            json={"name": name, "email": email, "password": password, "role": role},
        )
        assert response.status_code == 201, response.text

        response = await client.post(
            f"{API}/users/login",
            json={"email": email, "password": password},
        )
        assert response.status_code == 200, response.text
        data = response.json()

        return {
            "id": data["user"]["id"],
            "name": name,
            "email": email,
            "password": password,
            "token": data["token"],
            "headers": {"Authorization": f"Bearer {data['token']}"},
        }

    return _make_user


@pytest.fixture
def reader_identity() -> Identity:
    return Identity(id=str(uuid.uuid4()), role=Role.READER, name="Lectora")


@pytest.fixture
def admin_identity() -> Identity:
    return Identity(id=str(uuid.uuid4()), role=Role.ADMIN, name="Admin")


# =============================================================================
# Data Fixtures
# =============================================================================

@pytest.fixture
def sample_book_data() -> dict:
    """Sample book data for testing."""
    return {
        "title": "Cien años de soledad",
        "author": "Gabriel García Márquez",
        "genre": "Novela",
        "publisher": "Sudamericana",
        "publication_date": "1967-05-30",
    }


@pytest.fixture
def sample_books_batch() -> list[dict]:
    """Multiple sample books for listing tests."""
    return [
        {"title": "Rayuela", "author": "Julio Cortázar", "genre": "Novela", "publisher": "Sudamericana"},
        {"title": "Ficciones", "author": "Jorge Luis Borges", "genre": "Cuento", "publisher": "Sur"},
        {"title": "El Aleph", "author": "Jorge Luis Borges", "genre": "Cuento", "publisher": "Losada"},
        {"title": "Pedro Páramo", "author": "Juan Rulfo", "genre": "Novela", "publisher": "FCE",
         "publication_date": "1955-03-19"},
        {"title": "La ciudad y los perros", "author": "Mario Vargas Llosa", "genre": "Novela",
         "publisher": "Seix Barral"},
        {"title": "El túnel", "author": "Ernesto Sabato", "genre": "Novela", "publisher": "Sur"},
        {"title": "Los detectives salvajes", "author": "Roberto Bolaño", "genre": "Novela",
         "publisher": "Anagrama"},
    ]
