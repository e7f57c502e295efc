from utils.db import mongo
from utils.timefmt import parse_date
from models.students import to_object_id
from datetime import datetime, timezone
from bson import ObjectId
from pymongo import ASCENDING, DESCENDING, ReturnDocument

STATUS_IN = "IN"
STATUS_OUT = "OUT"


class AttendanceRecord:
    """
    One row per check-in. A second scan on the same day closes the open row
    (status OUT, timeOut set) instead of adding a new one.
    Student fields are copied at write time and never follow later edits.
    """

    @staticmethod
    def collection():
        return mongo.db.attendance

    def __init__(self, student_id, student_name, course, rfid_tag, date, time_in,
                 time_out=None, status=STATUS_IN, image_url="", created_at=None,
                 updated_at=None, id=None):
        if not student_id:
            raise ValueError("studentId is required")
        if status not in (STATUS_IN, STATUS_OUT):
            raise ValueError(f"Invalid status: {status}")
        parse_date(date)

        self.id = str(id) if id is not None else None
        self.student_id = student_id
        self.student_name = student_name
        self.course = course
        self.rfid_tag = rfid_tag
        self.image_url = image_url or ""
        self.date = date
        self.time_in = time_in
        self.time_out = time_out
        self.status = status
        self.created_at = created_at or datetime.now(timezone.utc)
        self.updated_at = updated_at or self.created_at

    @classmethod
    def from_doc(cls, doc):
        return cls(
            student_id=doc.get("studentId"),
            student_name=doc.get("studentName"),
            course=doc.get("course"),
            rfid_tag=doc.get("rfidTag"),
            date=doc.get("date"),
            time_in=doc.get("timeIn"),
            time_out=doc.get("timeOut"),
            status=doc.get("status", STATUS_IN),
            image_url=doc.get("imageUrl"),
            created_at=doc.get("createdAt"),
            updated_at=doc.get("updatedAt"),
            id=doc.get("_id"),
        )

    @property
    def is_open(self):
        return self.status == STATUS_IN and self.time_out is None

    def to_dict(self):
        return {
            "studentId": self.student_id,
            "studentName": self.student_name,
            "course": self.course,
            "rfidTag": self.rfid_tag,
            "imageUrl": self.image_url,
            "date": self.date,
            "timeIn": self.time_in,
            "timeOut": self.time_out,
            "status": self.status,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }

    def to_json(self):
        data = self.to_dict()
        data["id"] = self.id
        data["createdAt"] = self.created_at.isoformat() if self.created_at else None
        data["updatedAt"] = self.updated_at.isoformat() if self.updated_at else None
        return data

    def insert(self):
        """
        Insert as a new document. createdAt and updatedAt are stamped by the
        server, the same clock mark_out uses.
        """
        fields = self.to_dict()
        del fields["createdAt"], fields["updatedAt"]
        record_id = ObjectId()
        result = self.collection().update_one(
            {"_id": record_id},
            {
                "$setOnInsert": fields,
                "$currentDate": {"createdAt": True, "updatedAt": True},
            },
            upsert=True
        )
        self.id = str(record_id)
        return result

    @staticmethod
    def find_by_id(record_id):
        doc = AttendanceRecord.collection().find_one({"_id": to_object_id(record_id)})
        return AttendanceRecord.from_doc(doc) if doc else None

    # First open (IN) record for this student/date, oldest first
    @staticmethod
    def find_open(student_id, date):
        cursor = AttendanceRecord.collection().find({
            "date": date,
            "studentId": student_id,
            "status": STATUS_IN
        }).sort([("createdAt", ASCENDING), ("_id", ASCENDING)]).limit(1)
        for doc in cursor:
            return AttendanceRecord.from_doc(doc)
        return None

    @staticmethod
    def mark_out(record_id, time_out):
        """
        Close an open record in place. updatedAt is stamped by the server.
        Returns the updated record, or None when no open record matched.
        """
        doc = AttendanceRecord.collection().find_one_and_update(
            {"_id": to_object_id(record_id), "status": STATUS_IN},
            {
                "$set": {"timeOut": time_out, "status": STATUS_OUT},
                "$currentDate": {"updatedAt": True},
            },
            return_document=ReturnDocument.AFTER
        )
        return AttendanceRecord.from_doc(doc) if doc else None

    @staticmethod
    def by_date(date):
        cursor = AttendanceRecord.collection().find({"date": date}).sort("createdAt", DESCENDING)
        return [AttendanceRecord.from_doc(doc) for doc in cursor]

    @staticmethod
    def latest(count=5):
        cursor = AttendanceRecord.collection().find({}).sort("createdAt", DESCENDING).limit(count)
        return [AttendanceRecord.from_doc(doc) for doc in cursor]

    @staticmethod
    def for_student(student_id):
        cursor = AttendanceRecord.collection().find({"studentId": student_id}).sort("createdAt", DESCENDING)
        return [AttendanceRecord.from_doc(doc) for doc in cursor]

    @staticmethod
    def ensure_indexes():
        col = AttendanceRecord.collection()
        col.create_index([("date", ASCENDING), ("createdAt", DESCENDING)])
        col.create_index([("studentId", ASCENDING), ("createdAt", DESCENDING)])
        # At most one open record per student and day
        col.create_index(
            [("studentId", ASCENDING), ("date", ASCENDING)],
            unique=True,
            partialFilterExpression={"status": STATUS_IN},
            name="one_open_checkin_per_day"
        )
        mongo.db.students.create_index("rfidTag")


"""
Document shape (collection: attendance)
{
    "studentId": "S001", "studentName": "Ana Cruz", "course": "BSIT",
    "rfidTag": "A1B2C3", "imageUrl": "", "date": "2024-06-03",
    "timeIn": "08:00 AM", "timeOut": "05:00 PM", "status": "OUT",
    "createdAt": ISODate, "updatedAt": ISODate
}
"""
