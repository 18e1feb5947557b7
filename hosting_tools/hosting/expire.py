"""Channel expiration durations."""

from __future__ import annotations

import re

from hosting_tools.core.errors import HostingError

MINUTE_MS = 60 * 1000
HOUR_MS = 60 * MINUTE_MS
DAY_MS = 24 * HOUR_MS

DEFAULT_DURATION = 7 * DAY_MS
MAX_DURATION = 30 * DAY_MS

DURATION_RE = re.compile(r"^(\d+)([hdm])$")

_UNITS = {
    "m": MINUTE_MS,
    "h": HOUR_MS,
    "d": DAY_MS,
}


def calculate_channel_expire_ttl(flag: str | None) -> int:
    """Convert a duration flag such as ``"12h"`` or ``"7d"`` to milliseconds.

    Args:
        flag: Duration string, a number followed by m, h or d

    Returns:
        Duration in milliseconds

    Raises:
        HostingError: If the string is malformed or exceeds 30 days
    """
    match = DURATION_RE.match(flag or "")
    if not match:
        raise HostingError(
            '"expires" flag must be a duration string (e.g. 24h or 7d) at most 30d'
        )

    duration = int(match.group(1)) * _UNITS[match.group(2)]
    if duration > MAX_DURATION:
        raise HostingError('"expires" flag may not be longer than 30d')
    return duration
