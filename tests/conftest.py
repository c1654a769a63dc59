"""
Pytest configuration and shared fixtures for the DevEvent API tests.

This module provides:
- Isolated database and storage per test
- Test client fixtures with dependency overrides
- Sample images generated with Pillow
- Event form builders
"""

import io
import json
import os
import tempfile
from datetime import date, timedelta
from pathlib import Path
from typing import AsyncGenerator, Callable, Dict

# Keep import-time defaults (database file, static mount) out of the working tree
_TEST_ROOT = tempfile.mkdtemp(prefix="devevent-tests-")
os.environ.setdefault("DATABASE_URL", f"sqlite+aiosqlite:///{_TEST_ROOT}/app.db")
os.environ.setdefault("STORAGE_PATH", os.path.join(_TEST_ROOT, "storage"))
os.environ.setdefault("ENVIRONMENT", "test")

import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from PIL import Image  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession  # noqa: E402

from app.main import app  # noqa: E402
from app.db.session import DatabaseConnection, get_session  # noqa: E402
from app.services.image_uploader import ImageUploader  # noqa: E402
from app.storage import get_storage  # noqa: E402
from app.storage.local import LocalStorageBackend  # noqa: E402


# ============================================================================
# Test environment fixtures
# ============================================================================

@pytest.fixture(scope="function")
def test_env(tmp_path: Path) -> dict:
    """Create isolated test environment with temporary paths.

    Returns:
        dict: Environment configuration with temp paths
    """
    test_storage_path = tmp_path / "storage"
    test_storage_path.mkdir(parents=True, exist_ok=True)

    return {
        "db_path": str(tmp_path / "test.db"),
        "storage_path": str(test_storage_path),
        "tmp_path": tmp_path,
    }


# ============================================================================
# Database fixtures
# ============================================================================

@pytest.fixture
async def test_database(test_env: dict) -> AsyncGenerator[DatabaseConnection, None]:
    """A connected database on a fresh SQLite file."""
    database = DatabaseConnection(f"sqlite+aiosqlite:///{test_env['db_path']}")
    await database.connect()
    yield database
    await database.dispose()


@pytest.fixture
async def test_db_session(test_database: DatabaseConnection) -> AsyncGenerator[AsyncSession, None]:
    """A session on the per-test database."""
    session = await test_database.session()
    async with session:
        yield session


# ============================================================================
# Storage fixtures
# ============================================================================

@pytest.fixture
def test_storage(test_env: dict) -> LocalStorageBackend:
    """Create a test storage instance with temporary directory.

    Returns:
        LocalStorageBackend: Test storage instance
    """
    return LocalStorageBackend(base_path=test_env["storage_path"])


@pytest.fixture
def test_uploader(test_storage: LocalStorageBackend) -> ImageUploader:
    return ImageUploader(test_storage)


# ============================================================================
# API Client fixtures
# ============================================================================

@pytest.fixture
async def async_client(
    test_database: DatabaseConnection,
    test_storage: LocalStorageBackend,
) -> AsyncGenerator[AsyncClient, None]:
    """Create an asynchronous test client for the FastAPI app.

    Every request gets its own session on the per-test database, and
    images land in the per-test storage directory.

    Yields:
        AsyncClient: Asynchronous test client
    """
    async def override_get_session():
        session = await test_database.session()
        async with session:
            yield session

    app.dependency_overrides[get_session] = override_get_session
    app.dependency_overrides[get_storage] = lambda: test_storage

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


# ============================================================================
# Test data fixtures
# ============================================================================

def make_image(fmt: str = "PNG", size=(1600, 900), color=(200, 40, 40), mode: str = "RGB") -> bytes:
    """Encode a solid-colour image in the given format."""
    buffer = io.BytesIO()
    Image.new(mode, size, color).save(buffer, format=fmt)
    return buffer.getvalue()


@pytest.fixture
def sample_image_bytes() -> bytes:
    """A PNG larger than the 1200x630 box."""
    return make_image("PNG", (1600, 900))


@pytest.fixture
def small_jpeg_bytes() -> bytes:
    """A JPEG that already fits inside the box."""
    return make_image("JPEG", (400, 300))


@pytest.fixture
def future_date() -> str:
    return (date.today() + timedelta(days=30)).isoformat()


@pytest.fixture
def event_form(future_date: str) -> Callable[..., Dict[str, str]]:
    """Builder for a valid event form; keyword arguments override fields."""
    def build(**overrides) -> Dict[str, str]:
        form = {
            "title": "PyCon Workshop",
            "description": "Hands-on workshop on async Python services",
            "overview": "A full day of building and deploying async web services in Python.",
            "venue": "Main Hall",
            "location": "Berlin, Germany",
            "date": future_date,
            "time": "09:30",
            "mode": "hybrid",
            "audience": "Backend developers",
            "organizer": "Python Community",
            "agenda": json.dumps(["Welcome", "Async deep dive", "Q&A"]),
            "tags": json.dumps(["python", "async", "web"]),
        }
        form.update(overrides)
        return form

    return build


# ============================================================================
# Utility functions
# ============================================================================

def assert_iso_timestamp(value: str) -> None:
    """Assert that a string is a valid ISO 8601 timestamp.

    Raises:
        AssertionError: If value is not a valid ISO timestamp
    """
    from datetime import datetime
    try:
        datetime.fromisoformat(value.replace('Z', '+00:00'))
    except (ValueError, AttributeError):
        pytest.fail(f"'{value}' is not a valid ISO 8601 timestamp")
