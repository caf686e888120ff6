"""Date helpers. Events are stored at calendar-date granularity."""
from datetime import date, datetime
from typing import Optional, Union

from dateutil import parser as date_parser


def normalize_event_date(value: Union[str, date, datetime, None]) -> Optional[date]:
    """
    Reduce an incoming event date to a calendar date.

    Accepts ``date``/``datetime`` objects and ISO 8601 strings with or without
    a time component; the time of day is discarded, never converted across
    time zones. Returns None for empty input and raises ValueError for text
    that is not a date.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value

    text = str(value).strip()
    if not text:
        return None
    # "2025-10-16T21:00:00Z" -> "2025-10-16"
    if "T" in text:
        text = text.split("T", 1)[0]
    return date_parser.isoparse(text).date()
