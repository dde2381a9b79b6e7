"""Tests for utility functions in lib/utils.py."""

from __future__ import annotations

import pytest

from modem_exporter.lib.utils import (
    extract_float,
    parse_uptime_to_seconds,
)


class TestExtractFloat:
    """Test the extract_float function."""

    def test_unit_suffix(self):
        """Test extracting a float with a unit suffix."""
        assert extract_float("-1.2 dBmV") == -1.2

    def test_hilink_signal_format(self):
        """Test HiLink signal values like '-95dBm' and '>=-51dBm'."""
        assert extract_float("-95dBm") == -95.0
        assert extract_float(">=-51dBm") == -51.0

    def test_frequency_in_hz(self):
        """Test a frequency string."""
        assert extract_float("795000000 Hz") == 795000000.0

    def test_string_with_no_digits(self):
        """Test a string with no digits."""
        assert extract_float("N/A") is None

    def test_garbage_with_multiple_dots(self):
        """Test a string that only looks numeric."""
        assert extract_float("1.2.3") is None


class TestParseUptime:
    """Test the parse_uptime_to_seconds function."""

    # fmt: off
    @pytest.mark.parametrize(
        ("text", "expected"),
        [
            ("7 days 00h:37m:20s.00",  7 * 86400 + 37 * 60 + 20),
            ("0 days 08h:37m:20s",     8 * 3600 + 37 * 60 + 20),
            ("2 days 5 hours",         2 * 86400 + 5 * 3600),
            ("47d 12h 34m 56s",        47 * 86400 + 12 * 3600 + 34 * 60 + 56),
            ("1308:19:22",             1308 * 3600 + 19 * 60 + 22),
            ("0 days 00h:00m:00s",     0),
        ],
    )
    # fmt: on
    def test_formats(self, text, expected):
        """Test the uptime formats modems display."""
        assert parse_uptime_to_seconds(text) == expected

    def test_unknown(self):
        """Test values that carry no uptime."""
        assert parse_uptime_to_seconds(None) is None
        assert parse_uptime_to_seconds("") is None
        assert parse_uptime_to_seconds("Unknown") is None
        assert parse_uptime_to_seconds("not available") is None
