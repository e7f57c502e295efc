from flask import Blueprint, request, jsonify, current_app
from models.attendance import AttendanceRecord
from utils.timefmt import local_now, date_str, parse_date

attendance_bp = Blueprint("attendance", __name__, url_prefix="/attendance")

MAX_LATEST = 100


def _today():
    return date_str(local_now(current_app.config.get("TIMEZONE")))


def _records_json(records):
    return jsonify([r.to_json() for r in records])


@attendance_bp.route("/today")
def today():
    return _records_json(AttendanceRecord.by_date(_today()))


@attendance_bp.route("/date/<date_value>")
def by_date(date_value):
    try:
        parse_date(date_value)
    except ValueError:
        return jsonify({"error": "Invalid date format, use YYYY-MM-DD"}), 400
    return _records_json(AttendanceRecord.by_date(date_value))


@attendance_bp.route("/latest")
def latest():
    try:
        count = int(request.args.get("count", 5))
    except ValueError:
        return jsonify({"error": "count must be an integer"}), 400
    if count < 1 or count > MAX_LATEST:
        return jsonify({"error": f"count must be between 1 and {MAX_LATEST}"}), 400
    return _records_json(AttendanceRecord.latest(count))


@attendance_bp.route("/student/<student_id>")
def for_student(student_id):
    return _records_json(AttendanceRecord.for_student(student_id))


# Is the student checked in (open record) on the given day?
@attendance_bp.route("/student/<student_id>/open")
def open_record(student_id):
    date_value = request.args.get("date") or _today()
    try:
        parse_date(date_value)
    except ValueError:
        return jsonify({"error": "Invalid date format, use YYYY-MM-DD"}), 400

    record = AttendanceRecord.find_open(student_id, date_value)
    return jsonify({
        "studentId": student_id,
        "date": date_value,
        "checkedIn": record is not None,
        "record": record.to_json() if record else None
    })
