"""
utils/kiosk_display.py
-----------------
State of the kiosk screen.

WAITING -> PROCESSING -> SHOWING -> (dwell) -> WAITING

A new scan always moves to PROCESSING and cancels a pending revert.
Valid results (checked in / out) and errors revert after the dwell time.
Invalid tags stay on screen until the next scan.
"""

import threading
from datetime import datetime, timezone

WAITING = "WAITING"
PROCESSING = "PROCESSING"
SHOWING = "SHOWING"

CHECKED_IN = "CHECKED_IN"
CHECKED_OUT = "CHECKED_OUT"
INVALID = "INVALID"
ERROR = "ERROR"

RESULT_FOR_STATUS = {"IN": CHECKED_IN, "OUT": CHECKED_OUT}


class DisplayEntry:

    def __init__(self, result, student=None, tag=None, message=None):
        self.result = result
        self.student = student
        self.tag = tag
        self.message = message
        self.shown_at = datetime.now(timezone.utc)

    @property
    def student_id(self):
        return self.student.student_id if self.student else None

    def to_json(self):
        student = None
        if self.student is not None:
            student = {
                "studentId": self.student.student_id,
                "fullName": self.student.full_name,
                "course": self.student.course,
                "profileImageURL": self.student.profile_image_url,
            }
        return {
            "result": self.result,
            "student": student,
            "tag": self.tag,
            "message": self.message,
            "shownAt": self.shown_at.isoformat(),
        }


class KioskDisplay:

    def __init__(self, scheduler, dwell_ms=5000, history_size=5):
        self.scheduler = scheduler
        self.dwell_ms = dwell_ms
        self.history_size = history_size

        self.state = WAITING
        self.current = None
        self.last = None
        self.recent = []

        self._revert_job = None
        self._revert_token = 0
        self._lock = threading.RLock()

    def begin_scan(self, tag):
        with self._lock:
            self._cancel_revert()
            self.state = PROCESSING

    def show_result(self, student, status):
        """Show a completed check-in/out (status is the stored IN/OUT)."""
        result = RESULT_FOR_STATUS.get(status)
        if result is None:
            raise ValueError(f"Unknown attendance status: {status}")

        with self._lock:
            previous = self.last
            if previous is not None and previous.student_id != student.student_id:
                self._push_recent(previous)
            self.recent = [e for e in self.recent if e.student_id != student.student_id]

            entry = DisplayEntry(result, student=student)
            self.current = entry
            self.last = entry
            self._enter_showing(revert=True)

    def show_invalid(self, tag):
        with self._lock:
            self.current = DisplayEntry(INVALID, tag=tag, message="Invalid Student")
            self._enter_showing(revert=False)

    def show_error(self, student, message):
        with self._lock:
            self.current = DisplayEntry(ERROR, student=student, message=message)
            self._enter_showing(revert=True)

    def revert(self):
        with self._lock:
            self._cancel_revert()
            self._to_waiting()

    def snapshot(self):
        with self._lock:
            featured = self.current or self.last
            return {
                "state": self.state,
                "result": self.current.result if self.current else None,
                "current": self.current.to_json() if self.current else None,
                "last": self.last.to_json() if self.last else None,
                "featured": featured.to_json() if featured else None,
                "recent": [e.to_json() for e in self.recent],
            }

    # ---------------------------
    # internals (lock held)
    # ---------------------------
    def _push_recent(self, entry):
        others = [e for e in self.recent if e.student_id != entry.student_id]
        self.recent = ([entry] + others)[:self.history_size]

    def _enter_showing(self, revert):
        self._cancel_revert()
        self.state = SHOWING
        if revert:
            token = self._revert_token
            self._revert_job = self.scheduler.after(self.dwell_ms, lambda: self._on_dwell_elapsed(token))

    def _cancel_revert(self):
        self._revert_token += 1
        if self._revert_job is not None:
            self.scheduler.after_cancel(self._revert_job)
            self._revert_job = None

    def _on_dwell_elapsed(self, token):
        with self._lock:
            if token != self._revert_token:
                return  # superseded by a newer scan
            self._revert_job = None
            self._to_waiting()

    def _to_waiting(self):
        self.state = WAITING
        self.current = None
