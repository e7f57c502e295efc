from flask import Blueprint, render_template, request, jsonify, current_app
from models.attendance import AttendanceRecord

kiosk_bp = Blueprint("kiosk", __name__, url_prefix="/kiosk")


def _kiosk():
    return current_app.extensions["kiosk"]


def _display_state(kiosk):
    limit = current_app.config.get("LATEST_RECORDS_LIMIT", 7)
    return {
        "display": kiosk.display.snapshot(),
        "latest": [r.to_json() for r in AttendanceRecord.latest(limit)],
    }


# ==========================================================
# KIOSK PAGE
# ==========================================================
@kiosk_bp.route("/")
def monitor():
    return render_template(
        "kiosk/monitor.html",
        kiosk_id=current_app.config.get("KIOSK_ID"),
        quiet_ms=current_app.config.get("SCAN_QUIET_PERIOD_MS", 200),
        poll_ms=1000
    )


# ==========================================================
# RAW KEY PRESSES (local key sources; the page posts whole tags)
# ==========================================================
@kiosk_bp.route("/keys", methods=["POST"])
def keys():
    data = request.get_json(silent=True) or {}
    key = data.get("key")
    if not key or not isinstance(key, str):
        return jsonify({"error": "key is required"}), 400

    kiosk = _kiosk()
    consumed = kiosk.feed_key(key, data.get("target"))
    return jsonify({"consumed": consumed, "display": kiosk.display.snapshot()})


# ==========================================================
# COMPLETE TAG (readers that frame scans themselves)
# ==========================================================
@kiosk_bp.route("/scan", methods=["POST"])
def scan():
    data = request.get_json(silent=True) or {}
    tag = data.get("tag")
    if not isinstance(tag, str) or not tag.strip():
        return jsonify({"error": "tag is required"}), 400

    kiosk = _kiosk()
    outcome = kiosk.process_scan(tag.strip())
    return jsonify({
        "record": outcome.record.to_json() if outcome else None,
        "display": kiosk.display.snapshot()
    })


@kiosk_bp.route("/state")
def state():
    return jsonify(_display_state(_kiosk()))
