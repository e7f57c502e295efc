import itertools
import time
from datetime import datetime

import mongomock
import pytest
from pymongo.errors import OperationFailure

from app import create_app
from config import Config
from models.students import Student
from utils.db import mongo


class ManualScheduler:
    """after/after_cancel driven by advance() instead of wall-clock time."""

    def __init__(self):
        self.now = 0
        self._jobs = {}
        self._ids = itertools.count(1)

    def after(self, delay_ms, callback):
        job_id = next(self._ids)
        self._jobs[job_id] = (self.now + delay_ms, callback)
        return job_id

    def after_cancel(self, job_id):
        self._jobs.pop(job_id, None)

    def cancel_all(self):
        self._jobs.clear()

    @property
    def pending(self):
        return len(self._jobs)

    def advance(self, ms):
        target = self.now + ms
        while True:
            due = [(deadline, job_id) for job_id, (deadline, _) in self._jobs.items() if deadline <= target]
            if not due:
                break
            deadline, job_id = min(due)
            _, callback = self._jobs.pop(job_id)
            self.now = deadline
            callback()
        self.now = target


class KioskTestConfig(Config):
    TESTING = True
    MONGO_URI = "mongodb://localhost:27017/rfid_test"
    KIOSK_ID = "test-kiosk"
    TIMEZONE = None
    CREATE_INDEXES = False
    WARM_CACHE_ON_START = False
    STUDENT_SYNC = False
    AUDIT_LOG_ENABLED = True
    SCAN_QUIET_PERIOD_MS = 200
    DISPLAY_DWELL_MS = 5000
    RECENT_HISTORY_SIZE = 5


class StandaloneCollection:
    """A collection on a standalone mongod: no change streams."""

    def watch(self, **kwargs):
        raise OperationFailure("The $changeStream stage is only supported on replica sets", code=40573)


def wait_for(predicate, timeout=5.0):
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.01)
    return False


MORNING = datetime(2024, 6, 3, 8, 0)
EVENING = datetime(2024, 6, 3, 17, 0)


@pytest.fixture
def db(monkeypatch):
    database = mongomock.MongoClient()["rfid_test"]
    monkeypatch.setattr(mongo, "db", database, raising=False)
    return database


@pytest.fixture
def scheduler():
    return ManualScheduler()


@pytest.fixture
def app(db, scheduler, monkeypatch):
    app = create_app(KioskTestConfig, scheduler=scheduler)
    # init_app points mongo.db at a real server; tests use mongomock
    monkeypatch.setattr(mongo, "db", db, raising=False)
    return app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def kiosk(app):
    return app.extensions["kiosk"]


@pytest.fixture
def make_student(db):
    def _make(student_id="S001", rfid_tag="A1B2C3", first_name="Ana", last_name="Cruz",
              course="BSIT", **extra):
        student = Student(student_id=student_id, first_name=first_name, last_name=last_name,
                          rfid_tag=rfid_tag, course=course, **extra)
        student.save()
        return student
    return _make
