"""
Expiry evaluation for service instances.
"""

from __future__ import annotations

import re
from datetime import datetime, timedelta, timezone
from typing import Callable

from instance_reaper.core.exceptions import InvalidTimestampError

RFC3339_PATTERN = re.compile(
    r"(?P<date>\d{4}-\d{2}-\d{2})T(?P<time>\d{2}:\d{2}:\d{2})"
    r"(?:\.(?P<fraction>\d+))?(?P<offset>Z|[+-]\d{2}:\d{2})"
)

# datetime resolves microseconds; finer digits are dropped.
MAX_FRACTION_DIGITS = 6


def utc_now() -> datetime:
    """Current time in UTC; the default clock of the reaper."""
    return datetime.now(timezone.utc)


def parse_timestamp(value: str) -> datetime:
    """
    Parse an RFC 3339 timestamp such as ``2015-01-01T10:00:00Z``.

    Fields must be zero-padded and a time zone designator (``Z`` or
    ``+HH:MM``) is required. Fractional seconds may have any number of
    digits.

    Raises:
        InvalidTimestampError: If ``value`` is not a valid timestamp
    """
    match = RFC3339_PATTERN.fullmatch(value) if isinstance(value, str) else None
    if match is not None:
        fraction = (match.group("fraction") or "0")[:MAX_FRACTION_DIGITS]
        normalized = (
            f"{match.group('date')}T{match.group('time')}"
            f".{fraction}{match.group('offset')}"
        )
        try:
            return datetime.strptime(normalized, "%Y-%m-%dT%H:%M:%S.%f%z")
        except ValueError:
            pass
    raise InvalidTimestampError(
        f"invalid service instance creation time: {value!r} is not an RFC 3339 timestamp"
    )


def is_expired(
    created_at: str,
    interval: timedelta,
    now: Callable[[], datetime] = utc_now,
) -> bool:
    """
    Decide whether something created at ``created_at`` has outlived ``interval``.

    Args:
        created_at: Creation time, RFC 3339
        interval: Age after which it expires
        now: Clock returning an aware datetime

    Returns:
        True if ``now()`` is strictly after ``created_at + interval``

    Raises:
        InvalidTimestampError: If ``created_at`` cannot be parsed
    """
    expiry_time = parse_timestamp(created_at) + interval
    return now() > expiry_time
