from datetime import date, datetime

from flask import Blueprint, Response, current_app, jsonify, request
from flask_jwt_extended import get_jwt_identity, jwt_required

from tasktracker.errors import ValidationError
from tasktracker.utils.date_window import month_bounds, parse_date_key, parse_month
from tasktracker.utils.sse import event_stream

tasks_bp = Blueprint("tasks", __name__)


def _store():
    return current_app.extensions["task_store"]


def _parse_due(payload):
    """Read ``due_date`` from a payload.

    Accepts either a full ISO timestamp in ``due_date`` or a date
    (YYYY-MM-DD) plus a separate ``due_time`` (HH:MM). Returns None when
    the reminder is cleared.
    """
    due_date = payload.get("due_date")
    due_time = payload.get("due_time")
    if not due_date:
        return None
    raw = f"{due_date}T{due_time}" if due_time else str(due_date)
    try:
        return datetime.fromisoformat(raw)
    except ValueError:
        raise ValidationError("Invalid due_date or due_time format") from None


def _day_from_args():
    raw = request.args.get("date")
    return parse_date_key(raw) if raw else date.today()


@tasks_bp.get("/")
@jwt_required()
def list_tasks():
    user_id = get_jwt_identity()
    if request.args.get("all") == "1":
        items = _store().list_all(user_id)
    else:
        items = _store().list_for_date(user_id, _day_from_args())
    return jsonify(items=[t.to_json() for t in items]), 200


@tasks_bp.post("/")
@jwt_required()
def create_task():
    user_id = get_jwt_identity()
    payload = request.get_json(silent=True) or {}
    raw_date = payload.get("task_date")
    task_date = parse_date_key(raw_date, "task_date") if raw_date else date.today()

    store = _store()
    task_id = store.add(payload.get("title"), user_id, task_date, _parse_due(payload))
    return jsonify(item=store.get(task_id, user_id).to_json()), 201


@tasks_bp.put("/<task_id>")
@jwt_required()
def update_task(task_id):
    user_id = get_jwt_identity()
    payload = request.get_json(silent=True) or {}
    changes = {}
    for field in ("title", "completed"):
        if field in payload:
            changes[field] = payload[field]
    if "due_date" in payload:
        changes["due_date"] = _parse_due(payload)
    if not changes:
        raise ValidationError("No valid fields to update")

    task = _store().update(task_id, changes, owner_id=user_id)
    return jsonify(item=task.to_json()), 200


@tasks_bp.delete("/<task_id>")
@jwt_required()
def delete_task(task_id):
    user_id = get_jwt_identity()
    if not _store().delete(task_id, owner_id=user_id):
        return jsonify(error="Task not found"), 404
    return jsonify(status="deleted", id=task_id), 200


@tasks_bp.get("/calendar")
@jwt_required()
def calendar_dates():
    """Date keys in the requested month that have at least one task."""
    user_id = get_jwt_identity()
    raw = request.args.get("month")
    month = parse_month(raw) if raw else date.today().replace(day=1)
    start, end = month_bounds(month)
    dates = _store().dates_with_tasks(user_id, start, end)
    return jsonify(month=f"{month.year:04d}-{month.month:02d}", dates=sorted(dates)), 200


@tasks_bp.get("/stream")
@jwt_required()
def stream_tasks():
    user_id = get_jwt_identity()
    day = _day_from_args()
    store = _store()
    stream = event_stream(
        lambda on_change: store.subscribe_for_date(user_id, day, on_change),
        lambda items: {"items": [t.to_json() for t in items]},
    )
    return Response(
        stream,
        mimetype="text/event-stream",
        headers={"Cache-Control": "no-cache", "X-Accel-Buffering": "no"},
    )
