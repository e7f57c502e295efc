import os
from dotenv import load_dotenv


load_dotenv()


def _env_bool(name, default):
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


class Config:
    SECRET_KEY = os.getenv("SECRET_KEY", "dev-kiosk-secret")
    MONGO_URI = os.getenv("MONGO_URI", "mongodb://localhost:27017/AttendanceSystem")

    # Kiosk identity written to the audit log
    KIOSK_ID = os.getenv("KIOSK_ID", "kiosk-1")

    # Scanner / display timing (milliseconds)
    SCAN_QUIET_PERIOD_MS = int(os.getenv("SCAN_QUIET_PERIOD_MS", 200))
    DISPLAY_DWELL_MS = int(os.getenv("DISPLAY_DWELL_MS", 5000))
    RECENT_HISTORY_SIZE = int(os.getenv("RECENT_HISTORY_SIZE", 5))
    LATEST_RECORDS_LIMIT = int(os.getenv("LATEST_RECORDS_LIMIT", 7))

    # None -> local time of the machine running the kiosk
    TIMEZONE = os.getenv("TIMEZONE") or None

    AUDIT_LOG_ENABLED = _env_bool("AUDIT_LOG_ENABLED", True)
    CREATE_INDEXES = _env_bool("CREATE_INDEXES", True)
    WARM_CACHE_ON_START = _env_bool("WARM_CACHE_ON_START", True)
    # Follow student edits (soft delete, re-tagging) while the kiosk runs
    STUDENT_SYNC = _env_bool("STUDENT_SYNC", True)
    FEED_POLL_SECONDS = float(os.getenv("FEED_POLL_SECONDS", 2))
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
