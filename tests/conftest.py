"""
Pytest configuration and shared fixtures
"""

import sys
from datetime import datetime, timezone
from pathlib import Path

import pytest
from sqlalchemy.orm import sessionmaker

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from timescale_backend.db.models import Base
from timescale_backend.db.session import build_engine
from timescale_backend.ingestion import CsvIngestionService, FileNameLockRegistry, RowValidator

FIXED_NOW = datetime(2025, 6, 1, 12, 0, 0, tzinfo=timezone.utc)
CSV_HEADER = "Date;ExecutionTime;Value"


def make_csv(*lines: str, header: str = CSV_HEADER, newline: str = "\n") -> bytes:
    """Build CSV bytes from data lines."""
    return newline.join([header, *lines]).encode("utf-8") + newline.encode("utf-8")


@pytest.fixture
def engine():
    """In-memory SQLite engine with all tables created."""
    engine = build_engine("sqlite:///:memory:")
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db_session(session_factory):
    """Session for assertions against committed data."""
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def fixed_clock():
    return lambda: FIXED_NOW


@pytest.fixture
def validator(fixed_clock):
    return RowValidator(clock=fixed_clock)


@pytest.fixture
def ingestion_service(session_factory, validator):
    """Ingestion service with its own lock registry and a fixed clock."""
    return CsvIngestionService(
        session_factory=session_factory,
        validator=validator,
        locks=FileNameLockRegistry(),
    )


@pytest.fixture
def sample_csv():
    """Three-row file mixing both timestamp formats."""
    return make_csv(
        "2024-01-15T10-30-45.0000Z;1.5;100",
        "2024-01-15T10:30:47.0000Z;2.5;300",
        "2024-01-15T10-30-46.0000Z;0.5;200",
    )


@pytest.fixture
def csv_bytes():
    """Factory building CSV bytes from data lines."""
    return make_csv
