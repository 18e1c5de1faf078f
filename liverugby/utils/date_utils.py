"""
Date utility functions for consistent date handling.

All instants are timezone-aware; the API calendar day is computed in the
API timezone (Europe/Paris by default) so `matches/{date}` keys agree
between the backend writer and the listener.
"""
from datetime import date, datetime, timezone
from typing import Optional
from zoneinfo import ZoneInfo

from ..core.constants import DATE_FORMAT_DISPLAY, DEFAULT_TIMEZONE


def utc_now() -> datetime:
    """Current instant as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def today_display(tz: str = DEFAULT_TIMEZONE, now: Optional[datetime] = None) -> str:
    """
    Calendar day in ``tz`` formatted as YYYY-MM-DD.
    Examples:
        >>> today_display(now=datetime(2025, 3, 1, 23, 30, tzinfo=timezone.utc))
        '2025-03-02'
    """
    now = now or utc_now()
    return now.astimezone(ZoneInfo(tz)).strftime(DATE_FORMAT_DISPLAY)


def current_season(now: Optional[datetime] = None) -> int:
    """Season defaults to the current calendar year."""
    return (now or utc_now()).year


def epoch_millis(now: Optional[datetime] = None) -> int:
    return int((now or utc_now()).timestamp() * 1000)


def epoch_seconds(now: Optional[datetime] = None) -> int:
    return int((now or utc_now()).timestamp())


def parse_iso_datetime(value: Optional[str]) -> Optional[datetime]:
    """
    Parse an ISO-8601 string (``Z`` suffix accepted) into an aware datetime.
    Naive values are taken as UTC. Unparseable input returns None.
    """
    if not value or not isinstance(value, str):
        return None
    text = value.strip()
    if text.endswith('Z'):
        text = text[:-1] + '+00:00'
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def parse_display_date(value: str) -> date:
    """Parse YYYY-MM-DD."""
    return datetime.strptime(value, DATE_FORMAT_DISPLAY).date()
