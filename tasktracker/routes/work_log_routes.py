import re

from flask import Blueprint, Response, current_app, jsonify, request
from flask_jwt_extended import get_jwt_identity, jwt_required

from tasktracker.errors import ValidationError
from tasktracker.services.work_log_store import WorkLogStore
from tasktracker.utils.date_window import date_key, parse_date_key
from tasktracker.utils.sse import event_stream
from tasktracker.utils.time_interval import compute_hours, format_hours

work_logs_bp = Blueprint("work_logs", __name__)

CLOCK_RE = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")


def _store():
    return current_app.extensions["work_log_store"]


def _render(logs):
    # Recomputed on every delivery; totals are never stored.
    total = WorkLogStore.total_hours(logs)
    return {
        "items": [log.to_json() for log in logs],
        "total_hours": total,
        "total_formatted": format_hours(total),
    }


@work_logs_bp.get("/")
@jwt_required()
def list_work_logs():
    logs = _store().list(get_jwt_identity())
    return jsonify(**_render(logs)), 200


@work_logs_bp.post("/")
@jwt_required()
def create_work_log():
    user_id = get_jwt_identity()
    payload = request.get_json(silent=True) or {}
    fields = {name: payload.get(name) for name in ("date", "start_time", "end_time", "description")}
    for name, value in fields.items():
        if value is not None and not isinstance(value, str):
            raise ValidationError(f"{name} must be a string")
    start_time = fields["start_time"]
    end_time = fields["end_time"]
    description = (fields["description"] or "").strip()

    if not fields["date"] or not start_time or not end_time or not description:
        raise ValidationError("Please fill in all fields")
    date = date_key(parse_date_key(fields["date"]))
    if not CLOCK_RE.match(start_time) or not CLOCK_RE.match(end_time):
        raise ValidationError("Times must be HH:MM (24-hour)")
    # An earlier end time is an overnight shift; only a zero-length entry is rejected.
    if start_time == end_time:
        raise ValidationError("End time must differ from start time")

    log_id = _store().add(date, start_time, end_time, description, user_id)
    hours = compute_hours(start_time, end_time)
    return jsonify(id=log_id, hours=hours, hours_formatted=format_hours(hours)), 201


@work_logs_bp.delete("/<log_id>")
@jwt_required()
def delete_work_log(log_id):
    if not _store().delete(log_id, owner_id=get_jwt_identity()):
        return jsonify(error="Work log not found"), 404
    return jsonify(status="deleted", id=log_id), 200


@work_logs_bp.get("/stream")
@jwt_required()
def stream_work_logs():
    user_id = get_jwt_identity()
    store = _store()
    return Response(
        event_stream(lambda on_change: store.subscribe(user_id, on_change), _render),
        mimetype="text/event-stream",
        headers={"Cache-Control": "no-cache", "X-Accel-Buffering": "no"},
    )
