"""Errors raised while turning a scan into an attendance record.

Every error is local to one scan: the kiosk reports it and keeps listening.
"""


class AttendanceError(Exception):
    """Base class for attendance engine errors."""

    retryable = False


class TagNotResolved(AttendanceError):
    def __init__(self, tag):
        super().__init__(f"No student found with RFID tag: {tag}")
        self.tag = tag


class RecordNotFound(AttendanceError):
    def __init__(self, record_id):
        super().__init__(f"Attendance record not found: {record_id}")
        self.record_id = record_id


class TransportError(AttendanceError):
    """The document store could not be reached or rejected the operation."""

    retryable = True

    def __init__(self, operation, cause=None):
        message = f"{operation} failed"
        if cause is not None:
            message = f"{message}: {cause}"
        super().__init__(message)
        self.operation = operation
        self.cause = cause
