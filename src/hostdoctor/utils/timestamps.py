"""Date handling for sample values and drift baselines."""

from datetime import date, datetime, timezone
from typing import Any

from dateutil import parser as dateutil_parser

SECONDS_PER_DAY = 86400.0

# Epoch values above this are milliseconds (anything after 2001)
_MILLISECOND_THRESHOLD = 1e12


def normalize_timestamp(value: Any, assume_utc: bool = True) -> datetime:
    """Coerce ``value`` to an aware UTC datetime.

    Accepts epoch seconds or milliseconds, a ``date`` (taken as midnight),
    a ``datetime``, or any string dateutil can parse. Driver dates show up
    as "2023-05-17" and as "5/17/2023", both are fine.

    Naive values are taken as UTC, or as local time when ``assume_utc`` is
    False.

    Raises:
        ValueError: If value is not a recognisable timestamp

    Example:
        >>> normalize_timestamp("2024-01-12T20:00:00Z")
        datetime.datetime(2024, 1, 12, 20, 0, tzinfo=datetime.timezone.utc)
    """
    if isinstance(value, bool):
        raise ValueError(f"Cannot parse timestamp: {value!r} (type: bool)")

    if isinstance(value, (int, float)):
        seconds = value / 1000 if value > _MILLISECOND_THRESHOLD else value
        return datetime.fromtimestamp(seconds, tz=timezone.utc)

    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime(value.year, value.month, value.day)
    elif isinstance(value, str):
        try:
            parsed = dateutil_parser.parse(value)
        except (dateutil_parser.ParserError, OverflowError) as e:
            raise ValueError(f"Cannot parse timestamp: {value!r}") from e
    else:
        raise ValueError(f"Cannot parse timestamp: {value!r} (type: {type(value).__name__})")

    if parsed.tzinfo is None and assume_utc:
        return parsed.replace(tzinfo=timezone.utc)
    # astimezone() treats a naive value as local time
    return parsed.astimezone(timezone.utc)


def days_between(earlier: Any, later: Any) -> float:
    """Return ``later - earlier`` in fractional days, for any mix of inputs."""
    delta = normalize_timestamp(later) - normalize_timestamp(earlier)
    return delta.total_seconds() / SECONDS_PER_DAY
