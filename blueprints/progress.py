"""Progress routes: points, level, badges and the grade leaderboard."""

from __future__ import annotations

from flask import Blueprint, jsonify, request
from flask_login import login_required

from gamification import leaderboard, user_stats
from helpers import current_profile, error
from models import GRADES
from policy import viewer_grade

bp = Blueprint("progress", __name__)


@bp.route("/api/progress")
@login_required
def api_progress():
    profile = current_profile()
    if profile is None:
        return error("User not found", 404)
    if not profile.is_learner:
        return error("Progress is tracked for students and tutors", 403)
    stats = user_stats(profile)
    grade = viewer_grade(profile)
    if grade:
        stats["rank"] = leaderboard(grade, profile.id)["rank"]
    else:
        stats["rank"] = 0
    return jsonify(stats)


@bp.route("/api/leaderboard")
@login_required
def api_leaderboard():
    """Top learners of a grade; defaults to the viewer's own grade."""
    profile = current_profile()
    if profile is None:
        return error("User not found", 404)
    grade = request.args.get("grade") or viewer_grade(profile)
    if grade not in GRADES:
        return error("Grade must be one of 6-11", 400)
    return jsonify(leaderboard(grade, profile.id))
