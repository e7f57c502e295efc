# models/__init__.py

from .students import Student
from .attendance import AttendanceRecord, STATUS_IN, STATUS_OUT
from .log import Log

__all__ = [
    "Student",
    "AttendanceRecord",
    "STATUS_IN",
    "STATUS_OUT",
    "Log"
]
