"""Time utilities for UTC timestamp parsing and formatting."""

from datetime import datetime, timezone
from typing import Any, Optional

# Tried in order after datetime.fromisoformat gives up
_FALLBACK_FORMATS = [
    "%Y%m%dT%H%M%SZ",  # GDELT seendate
    "%Y%m%d%H%M%S",
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%dT%H:%M",
    "%m/%d/%Y",
]


def utc_now() -> datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


def utc_now_z() -> str:
    """
    Get current UTC time as ISO 8601 string with Z suffix.

    Returns:
        ISO 8601 UTC timestamp ending with 'Z' (e.g., '2025-12-23T00:27:07.804867Z')
    """
    return to_utc_z(utc_now())


def to_utc_z(dt: datetime) -> str:
    """
    Convert datetime to ISO 8601 UTC string with Z suffix.

    Args:
        dt: Datetime object (must be timezone-aware)

    Returns:
        ISO 8601 UTC timestamp ending with 'Z'

    Raises:
        ValueError: If datetime is naive (not timezone-aware)
    """
    if dt.tzinfo is None:
        raise ValueError(
            f"Naive datetime not allowed. Got {dt}. "
            "Use datetime.now(timezone.utc) or dt.replace(tzinfo=timezone.utc)"
        )

    dt_utc = dt.astimezone(timezone.utc)
    return dt_utc.isoformat().replace("+00:00", "Z")


def ensure_utc(dt: datetime) -> datetime:
    """Attach UTC to naive datetimes and convert aware ones to UTC."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def parse_timestamp(value: Any, fallback: Optional[datetime] = None) -> datetime:
    """
    Parse a source timestamp into an aware UTC datetime.

    Never raises: anything that is not a parseable string (or a datetime),
    or that falls outside the datetime range once shifted to UTC,
    yields ``fallback``, or the current UTC time when no fallback is given.

    Args:
        value: Raw timestamp from a source payload
        fallback: Value to use when parsing fails

    Returns:
        Timezone-aware UTC datetime
    """
    if isinstance(value, datetime):
        try:
            return ensure_utc(value)
        except OverflowError:
            return ensure_utc(fallback) if fallback is not None else utc_now()

    if isinstance(value, str) and value.strip():
        text = value.strip()
        try:
            return ensure_utc(datetime.fromisoformat(text.replace("Z", "+00:00")))
        except (ValueError, OverflowError):
            pass
        for fmt in _FALLBACK_FORMATS:
            try:
                return ensure_utc(datetime.strptime(text, fmt))
            except ValueError:
                continue

    return ensure_utc(fallback) if fallback is not None else utc_now()
