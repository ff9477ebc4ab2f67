from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Any, Callable

from .errors import InvalidInput

Clock = Callable[[], datetime]


def utcnow() -> datetime:
    # naive UTC, the same convention parse_timestamp normalizes to
    return datetime.now(timezone.utc).replace(tzinfo=None)


def parse_timestamp(value: Any, field: str) -> datetime:
    """ISO-8601 text or datetime -> naive datetime.

    Aware values are converted to UTC and stripped so that comparisons never
    mix naive and aware datetimes.
    """
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, str) and value.strip():
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            dt = datetime.fromisoformat(text)
        except ValueError:
            raise InvalidInput(f"{field} is not a valid timestamp: {value!r}", field=field) from None
    else:
        raise InvalidInput(f"{field} is required", field=field)

    if dt.tzinfo is not None:
        dt = dt.astimezone(timezone.utc).replace(tzinfo=None)
    return dt


def parse_date(value: Any, field: str = "date") -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value))
    except ValueError:
        raise InvalidInput(f"{field} must be YYYY-MM-DD, got {value!r}", field=field) from None
