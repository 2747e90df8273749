"""Tests for timestamp utilities."""

from datetime import datetime, timedelta, timezone

from updatecore.utils.timestamps import format_timestamp_for_log, utc_now


class TestUtcNow:
    def test_is_timezone_aware_utc(self):
        now = utc_now()

        assert now.tzinfo is not None
        assert now.utcoffset() == timedelta(0)


class TestFormatTimestampForLog:
    def test_formats_utc_datetime(self):
        dt = datetime(2025, 11, 4, 12, 30, 5, tzinfo=timezone.utc)

        assert format_timestamp_for_log(dt) == "2025-11-04T12:30:05Z"

    def test_converts_other_timezones_to_utc(self):
        dt = datetime(2025, 11, 4, 14, 30, tzinfo=timezone(timedelta(hours=2)))

        assert format_timestamp_for_log(dt) == "2025-11-04T12:30:00Z"

    def test_naive_datetime_treated_as_utc(self):
        assert format_timestamp_for_log(datetime(2025, 1, 1)) == "2025-01-01T00:00:00Z"

    def test_none(self):
        assert format_timestamp_for_log(None) == "N/A"
