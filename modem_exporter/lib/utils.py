"""Utility functions for turning modem display strings into numbers."""

from __future__ import annotations

import re


def extract_float(text: str) -> float | None:
    """Extract float from text (e.g., "-1.2 dBmV", ">=-51dBm", "40.4 dB")."""
    try:
        cleaned = "".join(c for c in text if c.isdigit() or c in ".-")
        return float(cleaned) if cleaned else None
    except ValueError:
        return None


def parse_uptime_to_seconds(uptime_str: str | None) -> int | None:
    """Parse uptime string to total seconds.

    Args:
        uptime_str: Uptime string in various formats:
                   - "2 days 5 hours" or "0 days 08h:37m:20s"
                   - "7 days 00h:37m:20s.00" (SURFboard format)
                   - "47d 12h 34m 56s"
                   - "1308:19:22" (hours:minutes:seconds)
                   - None for unknown/missing uptime

    Returns:
        Total seconds or None if parsing fails
    """
    if not uptime_str or uptime_str == "Unknown":
        return None

    text = uptime_str.strip()

    # HH:MM:SS or HHHH:MM:SS without unit suffixes
    hms_match = re.match(r"^(\d+):(\d{1,2}):(\d{1,2})$", text)
    if hms_match:
        hours, minutes, seconds = (int(g) for g in hms_match.groups())
        return hours * 3600 + minutes * 60 + seconds

    total_seconds = 0
    matched = False
    for pattern, factor in (
        (r"(\d+)\s*(?:days?|d)\b", 86400),
        (r"(\d+)\s*(?:hours?|h)", 3600),
        (r"(\d+)\s*(?:minutes?|mins?|m)(?![a-z])", 60),
        (r"(\d+)\s*(?:seconds?|secs?|s)", 1),
    ):
        match = re.search(pattern, text, re.IGNORECASE)
        if match:
            total_seconds += int(match.group(1)) * factor
            matched = True

    return total_seconds if matched else None
