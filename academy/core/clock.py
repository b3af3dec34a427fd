"""Time helpers. All timestamps are stored in UTC; calendar days follow the academy timezone."""

from datetime import date, datetime, timezone
from typing import Optional
from zoneinfo import ZoneInfo

from academy.core.config import settings

WEEKDAY_NAMES = ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def to_local(moment: datetime) -> datetime:
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(ZoneInfo(settings.timezone))


def local_today(now: Optional[datetime] = None) -> date:
    return to_local(now or utcnow()).date()


def weekday_name(day: date) -> str:
    """Lowercase English weekday name, as used for batch schedule keys."""
    return WEEKDAY_NAMES[day.weekday()]
