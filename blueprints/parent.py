"""Parent portal routes: linked-child dashboard and kudos."""

from __future__ import annotations

from flask import Blueprint, jsonify

from helpers import current_profile, error, role_required
from parent_analytics import LinkError, dashboard, send_kudos

bp = Blueprint("parent", __name__)


@bp.errorhandler(LinkError)
def _link_error(exc: LinkError):
    return error(exc.message, exc.status)


@bp.route("/api/parent/dashboard")
@role_required("parent")
def api_parent_dashboard():
    return jsonify(dashboard(current_profile()))


@bp.route("/api/parent/kudos", methods=["POST"])
@role_required("parent")
def api_parent_kudos():
    child = send_kudos(current_profile())
    return jsonify({"message": "Kudos sent", "childId": child.id})
