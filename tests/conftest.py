# tests/conftest.py
import os
import tempfile
from pathlib import Path

# Settings are cached and the engine is built at import time, so the test
# environment must be in place before anything from meetcoord is imported.
_TEST_DB = Path(tempfile.gettempdir()) / "meetcoord_test.db"
if "DB_URL" not in os.environ:
    if _TEST_DB.exists():
        _TEST_DB.unlink()
    os.environ["DB_URL"] = f"sqlite+aiosqlite:///{_TEST_DB}"
os.environ.setdefault("APP_ENV", "test")

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from meetcoord.main import create_app  # noqa: E402
from meetcoord.repositories.meeting_requests import (  # noqa: E402
    InMemoryMeetingRequestRepository,
)


@pytest.fixture(scope="session")
def client() -> TestClient:
    """
    Shared TestClient fixture for all API tests.

    Uses the application factory so the lifespan handler creates the schema in
    the temporary SQLite database.
    """
    app = create_app()
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def repo() -> InMemoryMeetingRequestRepository:
    """
    Fresh in-memory store per test.
    """
    return InMemoryMeetingRequestRepository()
