"""
Timezone helpers. Timestamps are stored as naive UTC; display uses the
configured campus timezone.
"""
from datetime import datetime
import pytz

from ..core.config import settings


def get_local_tz():
    return pytz.timezone(settings.default_timezone)


def get_local_now() -> datetime:
    return datetime.now(get_local_tz())


def to_naive_utc(dt: datetime) -> datetime:
    """Aware datetimes are converted to UTC; naive ones are assumed to be UTC already"""
    if dt.tzinfo is None:
        return dt
    return dt.astimezone(pytz.UTC).replace(tzinfo=None)


def format_local_time(dt: datetime, format_str: str = None) -> str:
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=pytz.UTC)
    return dt.astimezone(get_local_tz()).strftime(format_str or settings.timezone_display_format)


def get_timezone_info() -> dict:
    now = get_local_now()
    return {
        "timezone": settings.default_timezone,
        "offset": now.strftime("%z"),
        "current_time": format_local_time(now),
    }
