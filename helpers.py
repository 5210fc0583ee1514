"""
Shared helpers used across blueprints.

Request-scoped user resolution, role guards, JSON error shaping and the
pagination envelope.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import date
from functools import wraps
from typing import Any, Optional

from flask import jsonify, request
from flask_login import current_user

from db_stores import UserStoreDB
from models import UserProfile


def current_user_id() -> Optional[int]:
    """The authenticated user's id, or None for anonymous requests."""
    if current_user.is_authenticated:
        return current_user.id
    return None


def current_profile() -> Optional[UserProfile]:
    uid = current_user_id()
    return UserStoreDB().get(uid) if uid is not None else None


def acting_user(ref: Any = None) -> Optional[UserProfile]:
    """Session user, else the user named in the request body (id or email).

    The open endpoints accept an explicit ``askedBy``/``answeredBy``/
    ``uploadedBy`` from trusted clients that do not keep a session.
    """
    profile = current_profile()
    if profile is not None:
        return profile
    return UserStoreDB().resolve(ref)


def error(message: str, status: int):
    return jsonify({"message": message}), status


def json_body() -> dict:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def role_required(*roles: str) -> Callable:
    """Require a logged-in user whose role is one of ``roles`` (403 otherwise)."""
    def decorator(f: Callable) -> Callable:
        @wraps(f)
        def decorated(*args: Any, **kwargs: Any) -> Any:
            if not current_user.is_authenticated:
                return error("Authentication required", 401)
            if getattr(current_user, "role", "student") not in roles:
                return error("You do not have access to this page", 403)
            return f(*args, **kwargs)
        return decorated
    return decorator


def parse_day(value: Optional[str]) -> date:
    """``?date=YYYY-MM-DD``; today when missing. Raises ValueError when malformed."""
    if not value:
        return date.today()
    return date.fromisoformat(value[:10])


# ── Pagination ──────────────────────────────────────────────

def paginate_args(default_limit: int = 20, max_limit: int = 100) -> tuple[int, int]:
    """Extract page/limit from request.args. Returns (page, limit)."""
    try:
        page = max(1, int(request.args.get("page", 1)))
    except (ValueError, TypeError):
        page = 1
    try:
        limit = min(max_limit, max(1, int(request.args.get("limit", default_limit))))
    except (ValueError, TypeError):
        limit = default_limit
    return page, limit


def paginated_response(items: list, total: int, page: int, limit: int) -> dict:
    """Standard pagination envelope."""
    return {
        "items": items,
        "pagination": {
            "page": page,
            "limit": limit,
            "total": total,
            "pages": max(1, (total + limit - 1) // limit),
        },
    }
