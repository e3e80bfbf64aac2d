"""Tests for relative time ranges and formatting helpers."""

from datetime import datetime, timedelta, timezone

import pytest

from hi_gcloud.core.models import LogEntry
from hi_gcloud.utils.formatters import (
    create_detailed_error_report,
    create_error_report,
    format_file_size,
    format_log_entries,
    format_timestamp,
)
from hi_gcloud.utils.time_range import format_timestamp_for_filter, parse_time_range


NOW = datetime(2024, 5, 1, 12, 0, 0, tzinfo=timezone.utc)


class TestParseTimeRange:

    @pytest.mark.parametrize("text,delta", [
        ("30m", timedelta(minutes=30)),
        ("6h", timedelta(hours=6)),
        ("7d", timedelta(days=7)),
        ("0h", timedelta(0)),
    ])
    def test_valid_ranges(self, text, delta):
        assert parse_time_range(text, NOW) == NOW - delta

    @pytest.mark.parametrize("text", ["banana", "", None, "6 h", "1w", "-1h", "h"])
    def test_invalid_range_means_one_hour(self, text):
        assert parse_time_range(text, NOW) == NOW - timedelta(hours=1)

    def test_absurd_value_means_one_hour(self):
        assert parse_time_range("999999999999d", NOW) == NOW - timedelta(hours=1)

    def test_filter_timestamp_format(self):
        moment = datetime(2024, 5, 1, 6, 0, 0, 123456, tzinfo=timezone.utc)

        assert format_timestamp_for_filter(moment) == "2024-05-01T06:00:00.123Z"

    def test_filter_timestamp_is_utc(self):
        kst = timezone(timedelta(hours=9))
        moment = datetime(2024, 5, 1, 15, 0, 0, tzinfo=kst)

        assert format_timestamp_for_filter(moment) == "2024-05-01T06:00:00.000Z"


class TestFormatters:

    def test_format_timestamp(self):
        assert format_timestamp("2024-05-01T06:00:00.123456Z") == "2024-05-01 06:00:00"
        assert format_timestamp("yesterday") == "yesterday"

    @pytest.mark.parametrize("size,expected", [
        (0, "0 B"),
        (512, "512.00 B"),
        (1024, "1.00 KB"),
        (5 * 1024 * 1024, "5.00 MB"),
    ])
    def test_format_file_size(self, size, expected):
        assert format_file_size(size) == expected

    def test_log_lines_truncate_messages(self):
        entry = LogEntry(timestamp="2024-05-01T06:00:00Z", severity="ERROR", message="x" * 500)

        line = format_log_entries([entry])

        assert line.startswith("🔴 [2024-05-01 06:00:00] ERROR")
        assert line.endswith("x" * 200)
        assert "x" * 201 not in line

    def test_no_logs(self):
        assert format_log_entries([]) == "No logs found."

    def test_error_report(self):
        entries = [
            LogEntry(severity="INFO", message="ok"),
            LogEntry(severity="ERROR", message="boom"),
            LogEntry(severity="CRITICAL", message="worse"),
        ]

        report = create_error_report(entries)

        assert report.has_errors is True
        assert report.summary == "🔴 Found 2 error(s)."
        assert [e.message for e in report.errors] == ["boom", "worse"]

    def test_clean_report(self):
        report = create_error_report([LogEntry(severity="WARNING", message="hmm")])

        assert report.has_errors is False
        assert report.summary == "✅ No errors found."

    def test_detailed_report_shows_five_most_recent(self):
        entries = [LogEntry(severity="ERROR", message=f"err {i}") for i in range(7)]

        text = create_detailed_error_report(entries)

        assert "ERROR: 7" in text
        assert "5. [" in text
        assert "6. [" not in text
        assert "... and 2 more" in text
