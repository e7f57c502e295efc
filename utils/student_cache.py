"""
utils/student_cache.py
-----------------
In-memory cache of active students keyed by RFID tag, so most scans resolve
without a round trip to MongoDB.
"""

import threading


class StudentCache:

    def __init__(self, students=None):
        self._by_tag = {}
        self._lock = threading.Lock()
        if students:
            self.replace_all(students)

    def __len__(self):
        with self._lock:
            return len(self._by_tag)

    def get_by_tag(self, rfid_tag):
        with self._lock:
            student = self._by_tag.get(rfid_tag)
        if student is None or not student.is_active:
            return None
        return student

    def upsert(self, student):
        """Store a student, replacing whatever entry held the same tag."""
        with self._lock:
            # a re-tagged student must not stay reachable through the old tag
            stale = [tag for tag, s in self._by_tag.items()
                     if s.student_id == student.student_id and tag != student.rfid_tag]
            for tag in stale:
                del self._by_tag[tag]
            self._by_tag[student.rfid_tag] = student

    def evict(self, rfid_tag):
        with self._lock:
            return self._by_tag.pop(rfid_tag, None)

    def replace_all(self, students):
        fresh = {s.rfid_tag: s for s in students if s.is_active}
        with self._lock:
            self._by_tag = fresh
        return len(fresh)
