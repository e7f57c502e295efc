"""
utils/kiosk.py
-----------------
Wires the pieces of the attendance kiosk together:

    key presses -> ScanBuffer -> AttendanceWriter.check_in -> KioskDisplay

Scans are processed one at a time per kiosk. A scan that completes while
another is still being written waits for it, so results always land on the
display in scan order.
"""

import logging
import threading

from models.students import Student
from utils.exceptions import AttendanceError, TagNotResolved, TransportError
from utils.kiosk_display import KioskDisplay
from utils.mark_attendance import AttendanceWriter, refresh_student_cache
from utils.scan_buffer import ScanBuffer
from utils.scheduler import TimerScheduler
from utils.student_cache import StudentCache

logger = logging.getLogger(__name__)


class Kiosk:

    def __init__(self, writer, display, scheduler, quiet_period_ms=200):
        self.writer = writer
        self.display = display
        self.scheduler = scheduler
        self.buffer = ScanBuffer(self.process_scan, scheduler, quiet_period_ms)
        self._scan_lock = threading.Lock()
        self._stop_student_sync = None

    @classmethod
    def from_config(cls, config, scheduler=None, cache=None):
        scheduler = scheduler or TimerScheduler()
        cache = cache if cache is not None else StudentCache()
        writer = AttendanceWriter(
            cache,
            tz_name=config.get("TIMEZONE"),
            kiosk_id=config.get("KIOSK_ID"),
            audit=config.get("AUDIT_LOG_ENABLED", True),
        )
        display = KioskDisplay(
            scheduler,
            dwell_ms=config.get("DISPLAY_DWELL_MS", 5000),
            history_size=config.get("RECENT_HISTORY_SIZE", 5),
        )
        return cls(writer, display, scheduler, quiet_period_ms=config.get("SCAN_QUIET_PERIOD_MS", 200))

    @property
    def cache(self):
        return self.writer.cache

    def feed_key(self, key, target=None):
        return self.buffer.feed(key, target)

    def process_scan(self, rfid_tag):
        """Turn one complete tag into a record and update the display."""
        if not rfid_tag:
            return None

        with self._scan_lock:
            self.display.begin_scan(rfid_tag)
            try:
                outcome = self.writer.check_in(rfid_tag)
            except TagNotResolved:
                self.display.show_invalid(rfid_tag)
                return None
            except TransportError as e:
                logger.error("[ERROR] Scan %s failed (retryable): %s", rfid_tag, e)
                self.display.show_error(self.cache.get_by_tag(rfid_tag), "Could not record attendance")
                return None
            except AttendanceError as e:
                logger.error("[ERROR] Scan %s failed: %s", rfid_tag, e)
                self.display.show_error(self.cache.get_by_tag(rfid_tag), str(e))
                return None
            except Exception:
                logger.exception("[ERROR] Scan %s failed unexpectedly", rfid_tag)
                self.display.show_error(None, "Could not record attendance")
                return None

            if outcome.reconciled:
                logger.info("[SYNC] %s | expected %s, stored %s",
                            outcome.student.full_name, outcome.predicted_status, outcome.status)
            self.display.show_result(outcome.student, outcome.status)
            return outcome

    def warm_cache(self):
        """Load all active students; the kiosk still works on a cold cache."""
        try:
            return refresh_student_cache(self.cache)
        except TransportError as e:
            logger.warning("[CACHE] Warm-up skipped: %s", e)
            return 0

    def start_student_sync(self, feed):
        """Keep the cache equal to the active students for as long as the kiosk runs."""
        if self._stop_student_sync is None:
            self._stop_student_sync = feed.subscribe(Student.find_active, self.cache.replace_all)
        return self._stop_student_sync

    def shutdown(self):
        self.buffer.reset()
        if self._stop_student_sync is not None:
            self._stop_student_sync()
            self._stop_student_sync = None
        cancel_all = getattr(self.scheduler, "cancel_all", None)
        if cancel_all is not None:
            cancel_all()


def init_kiosk(app, scheduler=None, cache=None):
    kiosk = Kiosk.from_config(app.config, scheduler=scheduler, cache=cache)
    app.extensions["kiosk"] = kiosk
    return kiosk
