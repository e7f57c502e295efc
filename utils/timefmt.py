from datetime import datetime
from zoneinfo import ZoneInfo

DATE_FORMAT = "%Y-%m-%d"
CLOCK_FORMAT = "%I:%M %p"   # 08:00 AM


def local_now(tz_name=None):
    """Current time in the kiosk's timezone (machine local time when tz_name is None)."""
    if tz_name:
        return datetime.now(ZoneInfo(tz_name))
    return datetime.now().astimezone()


def date_str(dt):
    return dt.strftime(DATE_FORMAT)


def clock_str(dt):
    return dt.strftime(CLOCK_FORMAT)


def parse_date(value):
    """Validate a YYYY-MM-DD string. Raises ValueError when malformed."""
    return datetime.strptime(value, DATE_FORMAT).date()
