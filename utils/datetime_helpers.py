"""Timezone-aware date/time helpers for the reservation application."""

from datetime import date, datetime, timezone
from zoneinfo import ZoneInfo

from flask import current_app


def get_timezone() -> ZoneInfo:
    """Get the configured timezone."""
    tz_name = current_app.config.get('TIMEZONE', 'Asia/Jakarta')
    return ZoneInfo(tz_name)


def get_today() -> date:
    """Get today's date in the configured timezone."""
    return datetime.now(get_timezone()).date()


def utc_timestamp() -> str:
    """Current UTC time as a naive 'YYYY-MM-DD HH:MM:SS.ffffff' column value."""
    return datetime.now(timezone.utc).strftime('%Y-%m-%d %H:%M:%S.%f')


def parse_timestamp(value) -> datetime:
    """
    Convert a TIMESTAMP column value into a datetime.

    Args:
        value: datetime (already converted by sqlite3) or ISO string

    Returns:
        datetime

    Raises:
        ValueError: If the value is empty or not a timestamp
    """
    if isinstance(value, datetime):
        return value
    if not value:
        raise ValueError('Timestamp value is required')
    return datetime.fromisoformat(str(value))
