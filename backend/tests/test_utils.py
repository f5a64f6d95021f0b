"""Tests for utility modules."""

from datetime import UTC, date, datetime, timedelta, timezone

import pytest

from app.utils.datetime_utils import (
    datetime_from_iso,
    datetime_to_iso,
    parse_date_only,
    utc_date_str,
    utcnow,
)


class TestDatetimeUtils:
    """Tests for datetime conversion utilities."""

    def test_utcnow_is_aware(self):
        """utcnow returns a timezone-aware UTC datetime."""
        now = utcnow()
        assert now.tzinfo is not None
        assert now.utcoffset() == timedelta(0)

    def test_datetime_to_iso_with_aware_datetime(self):
        """Aware datetime converts to ISO string."""
        dt = datetime(2024, 1, 1, 12, 0, 0, tzinfo=UTC)
        result = datetime_to_iso(dt)
        assert result == "2024-01-01T12:00:00+00:00"

    def test_datetime_to_iso_with_naive_datetime(self):
        """Naive datetime gets UTC timezone assumed."""
        dt = datetime(2024, 1, 1, 12, 0, 0)
        result = datetime_to_iso(dt)
        assert result == "2024-01-01T12:00:00+00:00"

    def test_datetime_to_iso_with_other_timezone(self):
        """Non-UTC timezone converts to UTC."""
        dt = datetime(2024, 1, 1, 21, 0, 0, tzinfo=timezone(timedelta(hours=9)))
        result = datetime_to_iso(dt)
        # 21:00 UTC+9 = 12:00 UTC
        assert result == "2024-01-01T12:00:00+00:00"

    def test_datetime_to_iso_with_none(self):
        """None input returns None."""
        assert datetime_to_iso(None) is None

    def test_datetime_from_iso_with_valid_string(self):
        """ISO string converts to datetime."""
        result = datetime_from_iso("2024-01-01T12:00:00+00:00")
        assert result is not None
        assert result.year == 2024
        assert result.month == 1
        assert result.day == 1
        assert result.hour == 12

    def test_datetime_from_iso_accepts_zulu_suffix(self):
        """A trailing Z is read as UTC."""
        result = datetime_from_iso("2024-01-01T12:00:00Z")
        assert result == datetime(2024, 1, 1, 12, 0, 0, tzinfo=UTC)

    def test_datetime_from_iso_naive_is_utc(self):
        """A timestamp without offset is taken as UTC."""
        result = datetime_from_iso("2024-01-01T12:00:00")
        assert result.tzinfo is not None
        assert result == datetime(2024, 1, 1, 12, 0, 0, tzinfo=UTC)

    def test_datetime_from_iso_with_none(self):
        """None input returns None."""
        assert datetime_from_iso(None) is None

    def test_datetime_from_iso_with_empty_string(self):
        """Empty string returns None."""
        assert datetime_from_iso("") is None

    def test_datetime_from_iso_with_garbage_raises(self):
        """Malformed input raises ValueError for the caller to map to a 400."""
        with pytest.raises(ValueError):
            datetime_from_iso("not-a-date")


class TestDateHelpers:
    """Tests for date-only helpers."""

    def test_utc_date_str_converts_to_utc_first(self):
        """The date is the UTC calendar date, not the local one."""
        dt = datetime(2024, 3, 2, 1, 30, tzinfo=timezone(timedelta(hours=9)))
        assert utc_date_str(dt) == "2024-03-01"

    def test_utc_date_str_naive(self):
        assert utc_date_str(datetime(2024, 3, 2, 23, 59)) == "2024-03-02"

    def test_parse_date_only_valid(self):
        assert parse_date_only("2026-10-17") == date(2026, 10, 17)

    def test_parse_date_only_strips_whitespace(self):
        assert parse_date_only(" 2026-10-17 ") == date(2026, 10, 17)

    @pytest.mark.parametrize("raw", ["", "2026-13-01", "2026-02-30", "yesterday"])
    def test_parse_date_only_invalid(self, raw):
        assert parse_date_only(raw) is None
