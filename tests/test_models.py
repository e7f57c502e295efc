from datetime import datetime

import pytest

from models.attendance import AttendanceRecord
from models.students import Student
from utils.timefmt import clock_str, date_str, parse_date


def test_student_requires_id_and_tag():
    with pytest.raises(ValueError):
        Student(student_id="", first_name="A", last_name="B", rfid_tag="T1")
    with pytest.raises(ValueError):
        Student(student_id="S001", first_name="A", last_name="B", rfid_tag=None)


def test_student_round_trip_from_document():
    doc = {
        "_id": "abc", "studentId": "S001", "firstName": "Ana", "lastName": "Cruz",
        "course": "BSIT", "rfidTag": "T1", "department": "CCS", "class": "1A",
        "profileImageURL": None, "deletedAt": None,
    }
    student = Student.from_doc(doc)

    assert student.full_name == "Ana Cruz"
    assert student.is_active
    assert student.to_dict()["class"] == "1A"
    assert student.to_json()["id"] == "abc"


def test_attendance_record_validates_status_and_date():
    with pytest.raises(ValueError):
        AttendanceRecord(student_id="S001", student_name="x", course=None, rfid_tag="T1",
                         date="2024-06-03", time_in="08:00 AM", status="LATE")
    with pytest.raises(ValueError):
        AttendanceRecord(student_id="S001", student_name="x", course=None, rfid_tag="T1",
                         date="03/06/2024", time_in="08:00 AM")


def test_attendance_record_json_shape():
    record = AttendanceRecord(student_id="S001", student_name="Ana Cruz", course="BSIT",
                              rfid_tag="T1", date="2024-06-03", time_in="08:00 AM", id="r1")
    data = record.to_json()

    assert set(data) == {"id", "studentId", "studentName", "course", "rfidTag", "imageUrl", "date",
                         "timeIn", "timeOut", "status", "createdAt", "updatedAt"}
    assert data["timeOut"] is None
    assert data["status"] == "IN"
    assert record.is_open


@pytest.mark.parametrize("hour, minute, expected", [
    (0, 5, "12:05 AM"),
    (8, 0, "08:00 AM"),
    (12, 30, "12:30 PM"),
    (17, 0, "05:00 PM"),
])
def test_clock_str(hour, minute, expected):
    assert clock_str(datetime(2024, 6, 3, hour, minute)) == expected


def test_date_helpers():
    assert date_str(datetime(2024, 6, 3, 23, 59)) == "2024-06-03"
    with pytest.raises(ValueError):
        parse_date("2024-13-01")
