"""
utils/scan_buffer.py
-----------------
RFID readers act as keyboards: they type the tag quickly and usually finish
with Enter. ScanBuffer collects those key presses and hands each complete tag
to ``on_scan`` exactly once, either on Enter or when the quiet period after
the first character runs out.

The quiet-period timer starts with the first character of a scan and is not
extended by later characters.
"""

import logging
import threading

logger = logging.getLogger(__name__)

ENTER = "Enter"
FORM_FIELD_TARGETS = {"INPUT", "TEXTAREA", "SELECT"}


class ScanBuffer:

    def __init__(self, on_scan, scheduler, quiet_period_ms=200):
        self.on_scan = on_scan
        self.scheduler = scheduler
        self.quiet_period_ms = quiet_period_ms
        self._buffer = ""
        self._timer_job = None
        self._generation = 0
        self._lock = threading.Lock()

    @property
    def pending(self):
        with self._lock:
            return self._buffer

    def feed(self, key, target=None):
        """Handle one key press. Returns True when the key was consumed."""
        if target and str(target).upper() in FORM_FIELD_TARGETS:
            return False

        if key == ENTER:
            with self._lock:
                tag = self._take()
            if tag:
                self._hand_off(tag)
            return True

        if not isinstance(key, str) or len(key) != 1:
            return False

        with self._lock:
            if not self._buffer:
                generation = self._generation
                self._timer_job = self.scheduler.after(
                    self.quiet_period_ms, lambda: self._on_quiet_period(generation))
            self._buffer += key
        return True

    def reset(self):
        with self._lock:
            self._take()

    def _take(self):
        # caller holds the lock
        if self._timer_job is not None:
            self.scheduler.after_cancel(self._timer_job)
            self._timer_job = None
        self._generation += 1
        tag, self._buffer = self._buffer, ""
        return tag

    def _on_quiet_period(self, generation):
        with self._lock:
            if generation != self._generation:
                return  # buffer already flushed by Enter
            self._timer_job = None
            tag = self._take()
        if tag:
            self._hand_off(tag)

    def _hand_off(self, tag):
        logger.debug("[SCAN] %s", tag)
        self.on_scan(tag)
