"""
utils/db.py
-----------------
This module initializes and manages the MongoDB connection
for the entire Flask application.
"""

import logging
from flask_pymongo import PyMongo

logger = logging.getLogger(__name__)

# Create a global MongoDB instance
mongo = PyMongo()


def init_db_connection(app):
    """
    Initialize MongoDB connection with Flask app.
    Settings (like MONGO_URI) must already be loaded into app.config.
    """
    mongo.init_app(app)
    logger.info("MongoDB connection initialized (%s)", app.config.get("MONGO_URI"))
    return mongo


# Collections (shortcuts)
students_col = lambda: mongo.db.students
attendance_col = lambda: mongo.db.attendance
logs_col = lambda: mongo.db.logs
