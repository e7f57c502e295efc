import logging

import click
from flask import Flask, jsonify
from pymongo.errors import PyMongoError

from config import Config
from utils.db import init_db_connection, attendance_col, students_col
from utils.exceptions import TransportError
from utils.kiosk import init_kiosk
from utils.collection_feed import CollectionFeed
from utils.timefmt import local_now, date_str
from models.attendance import AttendanceRecord

# Import controllers
from controllers.kiosk_controller import kiosk_bp
from controllers.attendance_controller import attendance_bp


def create_app(config_object=Config, scheduler=None):
    app = Flask(__name__)               # Initialize Flask app
    app.config.from_object(config_object)

    logging.basicConfig(
        level=app.config.get("LOG_LEVEL", "INFO"),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )

    init_db_connection(app)             # Initialize MongoDB connection
    kiosk = init_kiosk(app, scheduler=scheduler)

    if app.config.get("CREATE_INDEXES"):
        try:
            AttendanceRecord.ensure_indexes()
        except PyMongoError as e:
            app.logger.warning("[DB] Could not create indexes: %s", e)

    if app.config.get("WARM_CACHE_ON_START"):
        kiosk.warm_cache()

    if app.config.get("STUDENT_SYNC"):
        kiosk.start_student_sync(CollectionFeed(students_col, poll_seconds=app.config.get("FEED_POLL_SECONDS", 2)))

    # Register Blueprint
    app.register_blueprint(kiosk_bp)
    app.register_blueprint(attendance_bp)

    register_error_handlers(app)
    register_commands(app)
    return app


def register_error_handlers(app):

    @app.errorhandler(TransportError)
    def handle_transport_error(e):
        app.logger.error("[ERROR] %s", e)
        return jsonify({"error": str(e), "retryable": True}), 503

    @app.errorhandler(PyMongoError)
    def handle_db_error(e):
        app.logger.error("[ERROR] Database: %s", e)
        return jsonify({"error": "Database unavailable", "retryable": True}), 503


def register_commands(app):

    @app.cli.command("kiosk-listen")
    def kiosk_listen():
        """Read RFID key presses from stdin (newline = Enter)."""
        kiosk = app.extensions["kiosk"]
        kiosk.warm_cache()
        click.echo("[INFO] Listening for RFID scans (Ctrl+D to exit)")
        stdin = click.get_text_stream("stdin")
        try:
            for ch in iter(lambda: stdin.read(1), ""):
                kiosk.feed_key("Enter" if ch in "\r\n" else ch)
        except KeyboardInterrupt:
            pass
        finally:
            kiosk.shutdown()

    @app.cli.command("attendance-watch")
    def attendance_watch():
        """Print today's attendance every time it changes."""
        today = date_str(local_now(app.config.get("TIMEZONE")))
        feed = CollectionFeed(attendance_col, poll_seconds=app.config.get("FEED_POLL_SECONDS", 2))

        def show(records):
            click.echo(f"--- {today}: {len(records)} record(s)")
            for r in records:
                click.echo(f"{r.student_name:<30} {r.time_in:>9} {r.time_out or '-':>9} {r.status}")

        unsubscribe = feed.subscribe(lambda: AttendanceRecord.by_date(today), show)
        try:
            click.pause("Watching attendance, press any key to stop...")
        finally:
            unsubscribe()

    @app.cli.command("students-refresh")
    def students_refresh():
        """Reload the active student cache."""
        count = app.extensions["kiosk"].warm_cache()
        click.echo(f"{count} active students cached")

    @app.cli.command("init-indexes")
    def init_indexes():
        """Create attendance/student indexes."""
        AttendanceRecord.ensure_indexes()
        click.echo("Indexes created")


# Run the app
if __name__ == "__main__":
    create_app().run(debug=True, use_reloader=False)
