from datetime import datetime, timedelta, timezone
from zoneinfo import ZoneInfo

from rewear import config


def current_time():
    return datetime.now(ZoneInfo(config.TZ))


def gen_date_str(date: datetime | None = None):
    """
    Registration date as shown to donors (YYYY-MM-DD, KST)
    """
    if not date:
        return "-"
    kst = timezone(timedelta(hours=9))
    if date.tzinfo is None:
        date = date.replace(tzinfo=timezone.utc)
    return date.astimezone(tz=kst).strftime("%Y-%m-%d")
