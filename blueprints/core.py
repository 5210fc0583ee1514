"""Core routes: health probes, classroom list, cron hooks."""

from __future__ import annotations

import logging
import os
import sqlite3
import time

from flask import Blueprint, current_app, jsonify, request
from flask_login import login_required

from database import get_db
from helpers import current_profile, error
from policy import visible_classrooms
from scheduler import promotion_sweep

logger = logging.getLogger(__name__)

bp = Blueprint("core", __name__)

_start_time = time.time()


@bp.route("/health")
def health():
    uptime = int(time.time() - _start_time)
    return jsonify({"status": "ok", "uptime_seconds": uptime})


@bp.route("/ready")
def ready():
    try:
        get_db().execute("SELECT 1").fetchone()
        return jsonify({"status": "ready"}), 200
    except sqlite3.Error as exc:
        logger.error("Readiness check failed: %s", exc, exc_info=True)
        return jsonify({"status": "not_ready"}), 503


@bp.route("/live")
def live():
    return jsonify({"status": "alive"}), 200


@bp.route("/api/classrooms")
@login_required
def classrooms():
    """Grade classrooms the current user may open."""
    profile = current_profile()
    if profile is None:
        return error("User not found", 404)
    return jsonify({"classrooms": visible_classrooms(profile)})


# ── Cron ──────────────────────────────────────────────────
# For deployments without the in-process scheduler. Authenticated via CRON_SECRET.

def _verify_cron_secret() -> bool:
    expected = current_app.config.get("CRON_SECRET") or os.environ.get("CRON_SECRET", "")
    if not expected:
        return False
    return request.headers.get("Authorization") == f"Bearer {expected}"


@bp.route("/api/cron/promotion-sweep", methods=["POST"])
def cron_promotion_sweep():
    if not _verify_cron_secret():
        return error("Unauthorized", 401)
    promoted = promotion_sweep(current_app._get_current_object())
    return jsonify({"status": "ok", "job": "promotion-sweep", "promoted": promoted})
