"""
Integration test fixtures
"""

import pytest
from fastapi.testclient import TestClient

from timescale_backend.api.config import get_settings
from timescale_backend.api.dependencies import get_ingestion_service
from timescale_backend.api.main import create_app
from timescale_backend.db.session import configure, reset_engine
from timescale_backend.ingestion import CsvIngestionService, FileNameLockRegistry


@pytest.fixture
def app(engine, validator):
    """Application bound to the in-memory test database."""
    session_factory = configure(engine)
    app = create_app()
    locks = FileNameLockRegistry()
    app.dependency_overrides[get_ingestion_service] = lambda: CsvIngestionService(
        session_factory=session_factory, validator=validator, locks=locks
    )
    yield app
    app.dependency_overrides.clear()
    reset_engine()


@pytest.fixture
def client(app):
    """Create test API client."""
    with TestClient(app) as client:
        yield client


@pytest.fixture
def upload(client):
    """Upload CSV bytes under a file name."""

    def _upload(content: bytes, file_name: str = "run.csv"):
        return client.post(
            "/api/data/upload", files={"file": (file_name, content, "text/csv")}
        )

    return _upload


@pytest.fixture
def small_upload_limit(app):
    settings = get_settings().model_copy(update={"max_upload_bytes": 16})
    app.dependency_overrides[get_settings] = lambda: settings
    return settings
