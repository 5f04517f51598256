"""
Pytest configuration and shared fixtures.
"""

import pytest
import pytest_asyncio
from fastapi.testclient import TestClient

from api.config import APIConfig
from api.database import BookStore, DatabaseManager
from api.main import create_app
from api.models import BookRequest
from api.service import BookService


@pytest.fixture
def database_url(tmp_path):
    """SQLite database file unique to each test."""
    return f"sqlite+aiosqlite:///{tmp_path / 'books.db'}"


@pytest.fixture
def app_config(database_url):
    """API configuration pointing at the test database."""
    return APIConfig(database_url=database_url, log_format="console")


@pytest_asyncio.fixture
async def db_manager(database_url):
    """Database manager with tables created."""
    manager = DatabaseManager(database_url)
    await manager.create_tables()
    yield manager
    await manager.disconnect()


@pytest_asyncio.fixture
async def book_store(db_manager):
    """Record store bound to a fresh session."""
    async with db_manager.session() as session:
        yield BookStore(session)


@pytest.fixture
def book_service(book_store):
    """Book service backed by the test database."""
    return BookService(book_store)


@pytest.fixture
def client(app_config):
    """Test client running the full application lifespan."""
    with TestClient(create_app(app_config)) as test_client:
        yield test_client


@pytest.fixture
def sample_book_request():
    """Valid book payload."""
    return BookRequest(title="Rajesh assignment", author="Rajesh", number_of_pages=1)


@pytest.fixture
def sample_book_json():
    """Valid book payload as sent over the wire."""
    return {"title": "Rajesh assignment", "author": "Rajesh", "numberOfPages": 1}
