"""Notification routes."""

from __future__ import annotations

from flask import Blueprint, jsonify
from flask_login import login_required

from db_stores import NotificationStoreDB
from helpers import current_user_id, error, json_body, paginate_args, paginated_response

bp = Blueprint("notifications", __name__)


@bp.route("/api/notifications")
@login_required
def api_notifications():
    """Newest first, paginated, with the unread count."""
    store = NotificationStoreDB(current_user_id())
    page, limit = paginate_args(default_limit=20, max_limit=50)
    notifs = store.recent(limit, offset=(page - 1) * limit)
    result = paginated_response([n.to_dict() for n in notifs], store.total(), page, limit)
    result["notifications"] = result.pop("items")
    result["unreadCount"] = store.unread_count()
    return jsonify(result)


@bp.route("/api/notifications/unread-count")
@login_required
def api_unread_count():
    return jsonify({"unreadCount": NotificationStoreDB(current_user_id()).unread_count()})


@bp.route("/api/notifications/kudos")
@login_required
def api_unread_kudos():
    """Unread kudos, for the banner on the student home screen."""
    kudos = NotificationStoreDB(current_user_id()).unread_of_type("kudos")
    return jsonify({"notifications": [n.to_dict() for n in kudos]})


@bp.route("/api/notifications/read", methods=["POST"])
@login_required
def api_notifications_read():
    """Body ``{"id": <id>}`` or ``{"id": "all"}``."""
    notif_id = json_body().get("id")
    store = NotificationStoreDB(current_user_id())
    if notif_id == "all":
        return jsonify({"success": True, "updated": store.mark_all_read()})
    if notif_id in (None, ""):
        return error("Notification id is required", 400)
    if not store.mark_read(notif_id):
        return error("Notification not found", 404)
    return jsonify({"success": True, "updated": 1})


@bp.route("/api/notifications/<int:notif_id>", methods=["DELETE"])
@login_required
def api_notifications_delete(notif_id):
    if not NotificationStoreDB(current_user_id()).delete(notif_id):
        return error("Notification not found", 404)
    return jsonify({"success": True})
