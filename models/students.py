import logging
from utils.db import mongo
from datetime import datetime, timezone
from bson import ObjectId

logger = logging.getLogger(__name__)


class Student:
    """Read-only view of a student document, as the kiosk needs it."""

    @staticmethod
    def collection():
        return mongo.db.students

    def __init__(self, student_id, first_name, last_name, rfid_tag, course=None,
                 department=None, class_id=None, profile_image_url=None,
                 deleted_at=None, id=None):
        if not student_id or not isinstance(student_id, str):
            raise ValueError("studentId is required")
        if not rfid_tag or not isinstance(rfid_tag, str):
            raise ValueError("rfidTag is required")

        self.id = str(id) if id is not None else None
        self.student_id = student_id
        self.first_name = first_name or ""
        self.last_name = last_name or ""
        self.rfid_tag = rfid_tag
        self.course = course
        self.department = department
        self.class_id = class_id
        self.profile_image_url = profile_image_url
        self.deleted_at = deleted_at

    @classmethod
    def from_doc(cls, doc):
        return cls(
            student_id=doc.get("studentId"),
            first_name=doc.get("firstName"),
            last_name=doc.get("lastName"),
            rfid_tag=doc.get("rfidTag"),
            course=doc.get("course"),
            department=doc.get("department"),
            class_id=doc.get("class"),
            profile_image_url=doc.get("profileImageURL"),
            deleted_at=doc.get("deletedAt"),
            id=doc.get("_id"),
        )

    @property
    def full_name(self):
        return f"{self.first_name} {self.last_name}".strip()

    @property
    def is_active(self):
        return self.deleted_at is None

    # Convert to dictionary for MongoDB
    def to_dict(self):
        return {
            "studentId": self.student_id,
            "firstName": self.first_name,
            "lastName": self.last_name,
            "course": self.course,
            "rfidTag": self.rfid_tag,
            "department": self.department,
            "class": self.class_id,
            "profileImageURL": self.profile_image_url,
            "deletedAt": self.deleted_at,
        }

    def to_json(self):
        data = self.to_dict()
        data["id"] = self.id
        data["fullName"] = self.full_name
        if self.deleted_at is not None:
            data["deletedAt"] = self.deleted_at.isoformat()
        return data

    def save(self):
        result = self.collection().insert_one(self.to_dict())
        self.id = str(result.inserted_id)
        return result

    # Active student owning this tag, or None
    @staticmethod
    def find_by_rfid_tag(rfid_tag):
        doc = Student.collection().find_one({"rfidTag": rfid_tag, "deletedAt": None})
        return next(_valid_students([doc]), None) if doc else None

    @staticmethod
    def find_active():
        cursor = Student.collection().find({"deletedAt": None, "rfidTag": {"$nin": [None, ""]}})
        return list(_valid_students(cursor))

    @staticmethod
    def soft_delete(student_id):
        return Student.collection().update_one(
            {"studentId": student_id},
            {"$set": {"deletedAt": datetime.now(timezone.utc)}}
        )


# Documents that fail validation are logged and skipped
def _valid_students(docs):
    for doc in docs:
        try:
            yield Student.from_doc(doc)
        except ValueError as e:
            logger.warning("[STUDENT] Skipping student document %s: %s", doc.get("_id"), e)


def to_object_id(value):
    """Documents may carry ObjectId or plain string ids."""
    if isinstance(value, ObjectId):
        return value
    if isinstance(value, str) and ObjectId.is_valid(value):
        return ObjectId(value)
    return value
