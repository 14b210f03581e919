"""Timestamp helpers for Athena result cells.

Athena renders timestamps as ``YYYY-MM-DD HH:MM:SS`` without a zone; those
values are read as UTC.
"""

from __future__ import annotations

from datetime import UTC, datetime

TIMESTAMP_LAYOUT = "%Y-%m-%d %H:%M:%S"


def parse_timestamp_ms(value: str) -> int | None:
    """Epoch millis for a cell in TIMESTAMP_LAYOUT, or None if it doesn't match."""
    try:
        parsed = datetime.strptime(value, TIMESTAMP_LAYOUT)
    except (TypeError, ValueError):
        return None
    return int(parsed.replace(tzinfo=UTC).timestamp()) * 1000


def to_epoch_ms(value: datetime) -> int:
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return int(value.timestamp() * 1000)
