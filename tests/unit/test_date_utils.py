"""Unit tests for date utilities"""

from datetime import date, datetime, timezone
from ecollect_gateway.utils.date_utils import parse_timestamp


def test_parse_timestamp_iso_with_z():
    """PostgREST UTC suffix is understood"""
    parsed = parse_timestamp("2024-03-01T09:00:00Z")
    assert parsed == datetime(2024, 3, 1, 9, 0, tzinfo=timezone.utc)


def test_parse_timestamp_with_offset():
    """Explicit offsets are kept"""
    parsed = parse_timestamp("2024-03-01T12:00:00+03:00")
    assert parsed.utcoffset().total_seconds() == 3 * 3600


def test_parse_timestamp_passthrough_and_invalid():
    """datetimes pass through; blanks and garbage become None"""
    now = datetime(2024, 3, 1, 9, 0)
    assert parse_timestamp(now) is now
    assert parse_timestamp(None) is None
    assert parse_timestamp("") is None
    assert parse_timestamp("yesterday") is None
    assert parse_timestamp(date(2024, 3, 1)) == datetime(2024, 3, 1)
