"""
UTC timestamp utilities (stdlib-only).

Auto-managed timestamp fields (``DateTimeInsert``, ``DateTimeUpdate``) and the
ISO-8601 string transforms share these helpers so every timestamp the engine
produces is timezone-aware UTC at a single, configured precision.

Features:
    - **utc_now():** Timezone-aware UTC datetime
    - **truncate():** Drop sub-precision digits (seconds/milliseconds)
    - **to_iso8601() / from_iso8601():** Round-trip safe serialization

Tags:
    timestamps, utc, datetime, iso8601, spine-variants, stdlib-only

STDLIB ONLY - NO PYDANTIC.
"""

from datetime import UTC, date, datetime

_TIMESPEC = {
    "auto": "auto",
    "seconds": "seconds",
    "milliseconds": "milliseconds",
    "microseconds": "microseconds",
}


def utc_now() -> datetime:
    """Get current UTC datetime."""
    return datetime.now(UTC)


def truncate(dt: datetime, precision: str = "milliseconds") -> datetime:
    """Drop digits below ``precision``."""
    if precision == "seconds":
        return dt.replace(microsecond=0)
    if precision == "milliseconds":
        return dt.replace(microsecond=dt.microsecond - dt.microsecond % 1000)
    if precision == "microseconds":
        return dt
    raise ValueError(f"Unknown timestamp precision: {precision}")


def ensure_utc(dt: datetime) -> datetime:
    """Attach UTC to naive datetimes and convert aware ones."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC)


def to_iso8601(dt: datetime | None, precision: str = "auto") -> str | None:
    """Convert datetime to ISO 8601 string (``Z`` suffix for UTC)."""
    if dt is None:
        return None
    text = ensure_utc(dt).isoformat(timespec=_TIMESPEC[precision])
    return text.replace("+00:00", "Z")


def from_iso8601(s: str | None) -> datetime | None:
    """Parse ISO 8601 string to an aware UTC datetime.

    Accepts a trailing ``Z`` and date-only strings (midnight UTC).
    """
    if s is None:
        return None
    text = s.strip()
    if len(text) == 10:
        parsed = date.fromisoformat(text)
        return datetime(parsed.year, parsed.month, parsed.day, tzinfo=UTC)
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    return ensure_utc(datetime.fromisoformat(text))
