from utils.db import mongo
from datetime import datetime, timezone


class Log:

    @staticmethod
    def collection():
        return mongo.db.logs

    def __init__(self, action, collection_name, performed_by, document_id,
                 kiosk_id=None, changes=None, timestamp=None):
        self.timestamp = timestamp or datetime.now(timezone.utc)
        self.action = action  # "INSERT", "UPDATE"
        self.collection_name = collection_name
        self.performed_by = performed_by
        self.document_id = document_id
        self.kiosk_id = kiosk_id
        self.changes = changes

    def to_dict(self):
        return {
            "timestamp": self.timestamp,
            "action": self.action,
            "collection": self.collection_name,
            "performed_by": self.performed_by,
            "document_id": self.document_id,
            "kiosk_id": self.kiosk_id,
            "changes": self.changes
        }

    def save(self):
        return self.collection().insert_one(self.to_dict())
