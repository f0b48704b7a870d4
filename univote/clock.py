# univote/clock.py

from datetime import datetime, timezone

from flask import current_app


def utcnow() -> datetime:
    """Current time as a naive UTC datetime, the form stored in the database."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_naive_utc(value: datetime) -> datetime:
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def isoformat(value):
    if value is None:
        return None
    return value.isoformat() + "Z"


class SystemClock:
    def now(self) -> datetime:
        return utcnow()


def current_clock():
    return current_app.extensions["univote_clock"]
