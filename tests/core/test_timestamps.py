"""Tests for spine_variants.core.timestamps module."""

from datetime import UTC, datetime, timedelta, timezone

import pytest

from spine_variants.core.timestamps import (
    ensure_utc,
    from_iso8601,
    to_iso8601,
    truncate,
    utc_now,
)


class TestUtcNow:
    def test_is_aware_utc(self):
        now = utc_now()
        assert now.tzinfo is not None
        assert now.utcoffset() == timedelta(0)


class TestTruncate:
    """Test precision truncation."""

    def test_seconds(self):
        dt = datetime(2024, 1, 2, 3, 4, 5, 123456, tzinfo=UTC)
        assert truncate(dt, "seconds").microsecond == 0

    def test_milliseconds(self):
        dt = datetime(2024, 1, 2, 3, 4, 5, 123456, tzinfo=UTC)
        assert truncate(dt, "milliseconds").microsecond == 123000

    def test_microseconds_unchanged(self):
        dt = datetime(2024, 1, 2, 3, 4, 5, 123456, tzinfo=UTC)
        assert truncate(dt, "microseconds") == dt

    def test_unknown_precision(self):
        with pytest.raises(ValueError):
            truncate(utc_now(), "minutes")


class TestIso8601:
    """Test ISO 8601 conversion."""

    def test_to_iso_uses_z_suffix(self):
        dt = datetime(2024, 1, 15, 10, 30, tzinfo=UTC)
        assert to_iso8601(dt) == "2024-01-15T10:30:00Z"

    def test_to_iso_converts_offsets(self):
        dt = datetime(2024, 1, 15, 12, 30, tzinfo=timezone(timedelta(hours=2)))
        assert to_iso8601(dt) == "2024-01-15T10:30:00Z"

    def test_to_iso_none(self):
        assert to_iso8601(None) is None

    def test_from_iso_z_suffix(self):
        assert from_iso8601("2024-01-15T10:30:00Z") == datetime(2024, 1, 15, 10, 30, tzinfo=UTC)

    def test_from_iso_date_only(self):
        """A date-only string is midnight UTC."""
        assert from_iso8601("2020-01-01") == datetime(2020, 1, 1, tzinfo=UTC)

    def test_from_iso_naive_is_utc(self):
        assert from_iso8601("2024-01-15T10:30:00").tzinfo is not None

    def test_from_iso_invalid(self):
        with pytest.raises(ValueError):
            from_iso8601("not a date")

    def test_round_trip(self):
        dt = datetime(2024, 1, 15, 10, 30, 0, 250000, tzinfo=UTC)
        assert from_iso8601(to_iso8601(dt)) == dt


class TestEnsureUtc:
    def test_naive(self):
        assert ensure_utc(datetime(2024, 1, 1)).tzinfo == UTC

    def test_aware(self):
        dt = datetime(2024, 1, 1, 2, tzinfo=timezone(timedelta(hours=2)))
        assert ensure_utc(dt) == datetime(2024, 1, 1, tzinfo=UTC)
