"""
Tests for timestamp parsing strategies.
"""

from datetime import datetime, timezone

import pytest

from timescale_backend.ingestion.dates import parse_timestamp


def test_hyphenated_time():
    assert parse_timestamp("2024-03-01T08-05-09.5000Z") == datetime(
        2024, 3, 1, 8, 5, 9, 500000, tzinfo=timezone.utc
    )


def test_colon_time():
    assert parse_timestamp("2024-03-01T08:05:09.5000Z") == datetime(
        2024, 3, 1, 8, 5, 9, 500000, tzinfo=timezone.utc
    )


def test_naive_iso_is_assumed_utc():
    parsed = parse_timestamp("2024-03-01 08:05:09")

    assert parsed == datetime(2024, 3, 1, 8, 5, 9, tzinfo=timezone.utc)
    assert parsed.utcoffset().total_seconds() == 0


def test_date_only_iso():
    assert parse_timestamp("2024-03-01") == datetime(2024, 3, 1, tzinfo=timezone.utc)


@pytest.mark.parametrize(
    "text",
    ["", "today", "now", "not a date", "01.03.2024", "T10:00:00"],
)
def test_unparseable_returns_none(text):
    assert parse_timestamp(text) is None
