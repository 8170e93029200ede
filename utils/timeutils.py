from datetime import date, datetime, time, timedelta, timezone
from zoneinfo import ZoneInfo

from flask import current_app


def business_tz() -> ZoneInfo:
    return ZoneInfo(current_app.config.get("BUSINESS_TIMEZONE", "America/Sao_Paulo"))


def local_to_utc(value: datetime) -> datetime:
    """Naive business-local datetime -> naive UTC (the storage convention)."""
    aware = value.replace(tzinfo=business_tz())
    return aware.astimezone(timezone.utc).replace(tzinfo=None)


def utc_to_local(value: datetime) -> datetime:
    aware = value.replace(tzinfo=timezone.utc)
    return aware.astimezone(business_tz()).replace(tzinfo=None)


def day_bounds_utc(day: date) -> tuple[datetime, datetime]:
    """
    Returns (start, end) in naive UTC for the business-local calendar day.
    start is inclusive, end is exclusive.
    """
    start = local_to_utc(datetime.combine(day, time.min))
    end = local_to_utc(datetime.combine(day + timedelta(days=1), time.min))
    return start, end


def parse_day(value: str) -> date:
    # Expect "YYYY-MM-DD"
    return date.fromisoformat(value)
