import logging
from pymongo.errors import PyMongoError, DuplicateKeyError

from models.students import Student
from models.attendance import AttendanceRecord, STATUS_IN, STATUS_OUT
from models.log import Log
from utils.exceptions import TagNotResolved, TransportError, RecordNotFound
from utils.timefmt import local_now, date_str, clock_str

logger = logging.getLogger(__name__)

PERFORMED_BY = "RFID Kiosk"


# ============================
# RESOLUTION
# ============================
def resolve_student(rfid_tag, cache):
    """
    Map a scanned tag to an active student.
    Cache first; on a miss ask MongoDB and remember the hit.
    Misses are not cached.
    """
    student = cache.get_by_tag(rfid_tag)
    if student is not None:
        return student

    try:
        student = Student.find_by_rfid_tag(rfid_tag)
    except PyMongoError as e:
        raise TransportError("student lookup", e) from e

    if student is None:
        logger.warning("[UNKNOWN] No student found with RFID tag: %s", rfid_tag)
        return None

    cache.upsert(student)
    return student


def has_open_check_in(student_id, date):
    """Today's open (status IN) record for the student, if any."""
    try:
        return AttendanceRecord.find_open(student_id, date)
    except PyMongoError as e:
        raise TransportError("open check-in lookup", e) from e


def refresh_student_cache(cache):
    """Reload every active student into the cache. Returns the count."""
    try:
        students = Student.find_active()
    except PyMongoError as e:
        raise TransportError("student cache refresh", e) from e
    count = cache.replace_all(students)
    logger.info("[CACHE] %d active students loaded", count)
    return count


class ScanOutcome:
    """Result of one scan: the student, the stored record and what we expected."""

    def __init__(self, student, record, predicted_status):
        self.student = student
        self.record = record
        self.predicted_status = predicted_status

    @property
    def status(self):
        return self.record.status

    @property
    def reconciled(self):
        # the stored status wins when it differs from the guess
        return self.record.status != self.predicted_status


# ============================
# WRITES
# ============================
class AttendanceWriter:

    def __init__(self, cache, tz_name=None, kiosk_id=None, audit=True):
        self.cache = cache
        self.tz_name = tz_name
        self.kiosk_id = kiosk_id
        self.audit = audit

    def check_in(self, rfid_tag, now=None):
        """
        First scan of the day opens a record (IN); a scan while a record is
        open closes it (OUT). Raises TagNotResolved for unknown tags.
        """
        now = now or local_now(self.tz_name)
        today = date_str(now)
        current_time = clock_str(now)

        student = resolve_student(rfid_tag, self.cache)
        if student is None:
            raise TagNotResolved(rfid_tag)

        existing = has_open_check_in(student.student_id, today)
        if existing is not None:
            record = self.check_out(existing.id, now=now)
            return ScanOutcome(student, record, STATUS_OUT)

        record = AttendanceRecord(
            student_id=student.student_id,
            student_name=student.full_name,
            course=student.course,
            rfid_tag=student.rfid_tag,
            image_url=student.profile_image_url,
            date=today,
            time_in=current_time,
        )
        try:
            record.insert()
            stored = AttendanceRecord.find_by_id(record.id) or record
        except DuplicateKeyError:
            # another kiosk opened today's record between our read and insert
            stored = has_open_check_in(student.student_id, today)
            if stored is None:
                raise TransportError("check-in", "open record vanished after duplicate key")
            logger.info("[REPEAT] %s | Already checked in at %s", student.full_name, stored.time_in)
            return ScanOutcome(student, stored, STATUS_IN)
        except PyMongoError as e:
            raise TransportError("check-in", e) from e

        self._audit("INSERT", stored.id, {"status": STATUS_IN, "timeIn": current_time})
        logger.info("[IN] %s | Check-In %s", student.full_name, current_time)
        return ScanOutcome(student, stored, STATUS_IN)

    def check_out(self, record_id, now=None):
        """Close an open record in place. Already closed records come back unchanged."""
        now = now or local_now(self.tz_name)
        current_time = clock_str(now)

        try:
            record = AttendanceRecord.mark_out(record_id, current_time)
            if record is None:
                record = AttendanceRecord.find_by_id(record_id)
                if record is None:
                    raise RecordNotFound(record_id)
                logger.info("[REPEAT] %s | Already checked out at %s", record.student_name, record.time_out)
                return record
        except PyMongoError as e:
            raise TransportError("check-out", e) from e

        self._audit("UPDATE", record.id, {"status": STATUS_OUT, "timeOut": current_time})
        logger.info("[OUT] %s | Check-Out %s", record.student_name, current_time)
        return record

    def _audit(self, action, document_id, changes):
        if not self.audit:
            return
        entry = Log(
            action=action,
            collection_name="attendance",
            performed_by=PERFORMED_BY,
            document_id=document_id,
            kiosk_id=self.kiosk_id,
            changes=changes,
        )
        try:
            entry.save()
        except PyMongoError as e:
            # the attendance write already succeeded
            logger.warning("[AUDIT] Could not log %s on %s: %s", action, document_id, e)
