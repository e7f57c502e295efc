from datetime import datetime

from models.students import Student
from utils.student_cache import StudentCache


def student(student_id="S001", tag="A1", deleted_at=None):
    return Student(student_id=student_id, first_name="Ana", last_name="Cruz",
                   rfid_tag=tag, deleted_at=deleted_at)


def test_upsert_replaces_entry_for_same_tag():
    cache = StudentCache()
    cache.upsert(student("S001", "A1"))
    cache.upsert(student("S002", "A1"))

    assert len(cache) == 1
    assert cache.get_by_tag("A1").student_id == "S002"


def test_retagged_student_drops_old_tag():
    cache = StudentCache([student("S001", "A1")])
    cache.upsert(student("S001", "B2"))

    assert cache.get_by_tag("A1") is None
    assert cache.get_by_tag("B2").student_id == "S001"


def test_soft_deleted_students_are_not_returned():
    cache = StudentCache()
    cache.upsert(student("S001", "A1", deleted_at=datetime(2024, 1, 1)))

    assert cache.get_by_tag("A1") is None


def test_replace_all_keeps_only_active():
    cache = StudentCache([student("S009", "Z9")])
    count = cache.replace_all([
        student("S001", "A1"),
        student("S002", "B2", deleted_at=datetime(2024, 1, 1)),
    ])

    assert count == 1
    assert cache.get_by_tag("Z9") is None
    assert cache.get_by_tag("A1") is not None


def test_evict():
    cache = StudentCache([student("S001", "A1")])
    assert cache.evict("A1").student_id == "S001"
    assert cache.evict("A1") is None
    assert len(cache) == 0
