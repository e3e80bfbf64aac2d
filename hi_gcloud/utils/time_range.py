"""Relative time ranges such as ``30m``, ``6h`` or ``7d``."""

import re
from datetime import datetime, timedelta, timezone
from typing import Optional


TIME_RANGE_PATTERN = re.compile(r"^(\d+)([mhd])$")
UNITS = {"m": "minutes", "h": "hours", "d": "days"}
DEFAULT_LOOKBACK = timedelta(hours=1)


def parse_time_range(text: Optional[str], now: Optional[datetime] = None) -> datetime:
    """Return the instant ``text`` before ``now``.

    Anything that does not match ``<digits><m|h|d>`` means one hour.
    """
    now = now or datetime.now(timezone.utc)
    match = TIME_RANGE_PATTERN.match(text or "")
    if not match:
        return now - DEFAULT_LOOKBACK

    value, unit = int(match.group(1)), match.group(2)
    try:
        return now - timedelta(**{UNITS[unit]: value})
    except OverflowError:
        return now - DEFAULT_LOOKBACK


def format_timestamp_for_filter(moment: datetime) -> str:
    """Render ``moment`` as ``YYYY-MM-DDTHH:MM:SS.mmmZ`` in UTC."""
    utc = moment.astimezone(timezone.utc)
    return utc.strftime("%Y-%m-%dT%H:%M:%S") + f".{utc.microsecond // 1000:03d}Z"
