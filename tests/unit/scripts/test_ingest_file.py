"""
Tests for the command-line ingestion script.
"""

import pytest
from sqlalchemy import create_engine, text

from timescale_backend.db.session import reset_engine
from timescale_backend.scripts.ingest_file import build_parser, main


@pytest.fixture
def database_url(tmp_path):
    url = f"sqlite:///{tmp_path / 'ingest.db'}"
    yield url
    reset_engine()


def count_rows(database_url, table):
    engine = create_engine(database_url)
    try:
        with engine.connect() as conn:
            return conn.execute(text(f'SELECT COUNT(*) FROM "{table}"')).scalar()
    finally:
        engine.dispose()


def test_parser_defaults():
    args = build_parser().parse_args(["data.csv"])

    assert args.csv_path == "data.csv"
    assert args.name is None
    assert args.create_tables is False


def test_ingests_file(tmp_path, database_url, sample_csv):
    path = tmp_path / "run.csv"
    path.write_bytes(sample_csv)

    exit_code = main([str(path), "--database-url", database_url, "--create-tables"])

    assert exit_code == 0
    assert count_rows(database_url, "results") == 1
    assert count_rows(database_url, "values") == 3


def test_name_override_replaces_previous(tmp_path, database_url, sample_csv, csv_bytes):
    first = tmp_path / "first.csv"
    first.write_bytes(sample_csv)
    second = tmp_path / "second.csv"
    second.write_bytes(csv_bytes("2024-02-01T00-00-00.0000Z;1;1"))

    assert main([str(first), "--name", "shared.csv", "--database-url", database_url, "--create-tables"]) == 0
    assert main([str(second), "--name", "shared.csv", "--database-url", database_url]) == 0

    assert count_rows(database_url, "results") == 1
    assert count_rows(database_url, "values") == 1


def test_rejected_file_exit_code(tmp_path, database_url, csv_bytes):
    path = tmp_path / "bad.csv"
    path.write_bytes(csv_bytes("2024-01-15T10-30-45.0000Z;-1;1"))

    assert main([str(path), "--database-url", database_url, "--create-tables"]) == 2
    assert count_rows(database_url, "results") == 0


def test_missing_file(tmp_path, database_url):
    assert main([str(tmp_path / "absent.csv"), "--database-url", database_url]) == 1
