"""Study planner routes: day tasks and timed study sessions."""

from __future__ import annotations

from flask import Blueprint, jsonify, request
from flask_login import login_required

from db_stores import StudySessionStoreDB, StudyTaskStoreDB
from helpers import current_user_id, error, json_body, parse_day
from models import TASK_PRIORITIES

bp = Blueprint("planner", __name__)

DEFAULT_ESTIMATED_MINUTES = 30
DEFAULT_SESSION_MINUTES = 60


def _minutes(value, default: int) -> int:
    try:
        minutes = int(value)
    except (TypeError, ValueError):
        return default
    return minutes if minutes > 0 else default


def _day_arg(value):
    try:
        return parse_day(value), None
    except ValueError:
        return None, error("Date must be YYYY-MM-DD", 400)


# ── Tasks ─────────────────────────────────────────────────


@bp.route("/api/planner/tasks")
@login_required
def list_tasks():
    day, err = _day_arg(request.args.get("date"))
    if err:
        return err
    tasks = StudyTaskStoreDB(current_user_id()).for_day(day)
    return jsonify({
        "date": day.isoformat(),
        "tasks": [t.to_dict() for t in tasks],
        "completed": sum(1 for t in tasks if t.completed),
        "total": len(tasks),
    })


@bp.route("/api/planner/tasks", methods=["POST"])
@login_required
def create_task():
    data = json_body()
    title = str(data.get("title") or "").strip()
    if not title:
        return error("Please enter a task title", 400)
    day, err = _day_arg(data.get("date"))
    if err:
        return err
    priority = data.get("priority") or "medium"
    if priority not in TASK_PRIORITIES:
        return error("Priority must be low, medium or high", 400)

    task = StudyTaskStoreDB(current_user_id()).add(
        title,
        day,
        description=str(data.get("description") or "").strip(),
        subject=str(data.get("subject") or "").strip() or "General",
        priority=priority,
        estimated_time=_minutes(data.get("estimatedTime"), DEFAULT_ESTIMATED_MINUTES),
    )
    return jsonify({"task": task.to_dict()}), 201


@bp.route("/api/planner/tasks/<int:task_id>", methods=["PATCH"])
@login_required
def update_task(task_id):
    store = StudyTaskStoreDB(current_user_id())
    if store.get(task_id) is None:
        return error("Task not found", 404)
    data = json_body()
    priority = data.get("priority")
    if priority is not None and priority not in TASK_PRIORITIES:
        return error("Priority must be low, medium or high", 400)
    title = data.get("title")
    if title is not None and not str(title).strip():
        return error("Please enter a task title", 400)
    task = store.update(
        task_id,
        title=str(title).strip() if title is not None else None,
        description=data.get("description"),
        subject=data.get("subject"),
        priority=priority,
        estimated_time=(
            _minutes(data["estimatedTime"], DEFAULT_ESTIMATED_MINUTES)
            if "estimatedTime" in data else None
        ),
        completed=bool(data["completed"]) if "completed" in data else None,
    )
    return jsonify({"task": task.to_dict()})


@bp.route("/api/planner/tasks/<int:task_id>", methods=["DELETE"])
@login_required
def delete_task(task_id):
    if not StudyTaskStoreDB(current_user_id()).delete(task_id):
        return error("Task not found", 404)
    return jsonify({"success": True})


# ── Sessions ──────────────────────────────────────────────


@bp.route("/api/planner/sessions")
@login_required
def list_sessions():
    day, err = _day_arg(request.args.get("date"))
    if err:
        return err
    store = StudySessionStoreDB(current_user_id())
    sessions = store.for_day(day)
    active = store.active()
    return jsonify({
        "date": day.isoformat(),
        "sessions": [s.to_dict() for s in sessions],
        "totalStudied": sum(s.actual_duration for s in sessions),
        "active": active.to_dict() if active else None,
    })


@bp.route("/api/planner/sessions", methods=["POST"])
@login_required
def start_session():
    data = json_body()
    subject = str(data.get("subject") or "").strip()
    if not subject:
        return error("Please select a subject", 400)
    day, err = _day_arg(data.get("date"))
    if err:
        return err
    store = StudySessionStoreDB(current_user_id())
    if store.active() is not None:
        return error("A study session is already in progress", 409)
    session = store.start(
        subject,
        day,
        description=str(data.get("description") or "").strip(),
        duration=_minutes(data.get("duration"), DEFAULT_SESSION_MINUTES),
    )
    return jsonify({"session": session.to_dict()}), 201


def _session_action(session_id, action: str):
    store = StudySessionStoreDB(current_user_id())
    session = store.get(session_id)
    if session is None:
        return error("Session not found", 404)
    if session.completed:
        return error("Session already ended", 409)
    updated = getattr(store, action)(session)
    return jsonify({"session": updated.to_dict()})


@bp.route("/api/planner/sessions/<int:session_id>/pause", methods=["POST"])
@login_required
def pause_session(session_id):
    return _session_action(session_id, "pause")


@bp.route("/api/planner/sessions/<int:session_id>/resume", methods=["POST"])
@login_required
def resume_session(session_id):
    return _session_action(session_id, "resume")


@bp.route("/api/planner/sessions/<int:session_id>/end", methods=["POST"])
@login_required
def end_session(session_id):
    return _session_action(session_id, "end")
