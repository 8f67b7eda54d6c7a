"""Instant helpers shared by every temporal record.

All instants in the domain are timezone-aware UTC datetimes. On the wire
they are ISO 8601 strings with millisecond precision and a "Z" suffix,
e.g. "2026-10-19T08:30:00.000Z".
"""

from __future__ import annotations

from datetime import datetime, timezone


def ensure_utc(instant: datetime) -> datetime:
    """Return the instant as an aware UTC datetime.

    Naive datetimes are interpreted as UTC.
    """
    if instant.tzinfo is None:
        return instant.replace(tzinfo=timezone.utc)
    return instant.astimezone(timezone.utc)


def format_instant(instant: datetime) -> str:
    """Render an instant in the wire format."""
    text = ensure_utc(instant).isoformat(timespec="milliseconds")
    return text.replace("+00:00", "Z")


def parse_instant(text: str) -> datetime:
    """Parse a wire-format (or any ISO 8601) instant into aware UTC.

    Raises:
        ValueError: If the text is not an ISO 8601 instant.
    """
    if not isinstance(text, str):
        raise ValueError(f"instant must be a string, got {type(text).__name__}")
    return ensure_utc(datetime.fromisoformat(text.replace("Z", "+00:00")))
