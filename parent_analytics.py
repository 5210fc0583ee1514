"""Parent Portal: linked-child dashboard.

A parent account stores its child's email (``student_email``). Everything the
parent sees is derived from that child: points, level, badges, weekly
activity, subject breakdown, and how the child compares with the class
average for their grade.
"""

from __future__ import annotations

import logging
import math
from datetime import datetime, timedelta

from flask import current_app

from audit import log_event
from cache_backend import get_cache
from db_stores import QuestionStoreDB, UserStoreDB
from gamification import PARENT_BADGES, badges_for, level_for
from models import UserProfile
from notifications import KUDOS_MESSAGE, KUDOS_TITLE, notify
from policy import viewer_grade

logger = logging.getLogger(__name__)

AVERAGE_FLOOR = 2
RECENT_QUESTIONS = 20
WEEKLY_POINTS_PER_QUESTION = 10
GOOD_PERFORMANCE_RATIO = 0.7
WEAK_ZONE_MIN_QUESTIONS = 3


class LinkError(Exception):
    """The parent has no usable link to a student account."""

    def __init__(self, message: str, status: int = 404):
        super().__init__(message)
        self.message = message
        self.status = status


def _half_up(value: float) -> int:
    return math.floor(value + 0.5)


def find_linked_child(parent: UserProfile) -> UserProfile:
    email = (parent.student_email or "").strip()
    if not email:
        raise LinkError("No linked student. Add a student email to your profile.")
    child = UserStoreDB().get_by_email(email)
    if child is None or child.role not in ("student", "tutor"):
        raise LinkError("Student not found")
    return child


def _floor_averages() -> dict:
    return {"questions": AVERAGE_FLOOR, "answers": AVERAGE_FLOOR, "points": AVERAGE_FLOOR}


def class_averages(grade) -> dict:
    """Per-student averages for a grade, each at least 2. Cached per grade."""
    if not grade:
        return _floor_averages()

    cache = get_cache()
    key = f"class-avg:{grade}"
    cached = cache.get(key)
    if cached is not None:
        return cached

    learners = UserStoreDB().learners_in_grade(grade)
    if not learners:
        averages = _floor_averages()
    else:
        counts = QuestionStoreDB().counts_for_users([u.id for u in learners])
        n = len(learners)
        total_questions = sum(c["questions"] for c in counts.values())
        total_answers = sum(c["answers"] for c in counts.values())
        total_points = sum(u.points or 0 for u in learners)
        averages = {
            "questions": max(AVERAGE_FLOOR, _half_up(total_questions / n)),
            "answers": max(AVERAGE_FLOOR, _half_up(total_answers / n)),
            "points": max(AVERAGE_FLOOR, _half_up(total_points / n)),
        }

    cache.set(key, averages, ttl=current_app.config.get("CLASS_AVERAGE_TTL", 300))
    return averages


def child_stats(child: UserProfile) -> dict:
    questions = QuestionStoreDB()
    counts = questions.user_counts(child.id)
    points = child.points or 0
    level = level_for(points)

    asked = questions.by_user(child.id)
    subject_activity: dict[str, int] = {}
    for q in asked:
        subject = q.subject or "Other"
        subject_activity[subject] = subject_activity.get(subject, 0) + 1

    week_ago = (datetime.now() - timedelta(days=7)).isoformat()
    weekly_questions = questions.questions_since(child.id, week_ago)

    stats = {
        "points": points,
        "level": level,
        "questionsAsked": counts["questions_asked"],
        "answersGiven": counts["answers_given"],
        "ratingsReceived": counts["ratings_received"],
        "weeklyActivity": {
            "questions": weekly_questions,
            "answers": counts["answers_given"],
            "points": weekly_questions * WEEKLY_POINTS_PER_QUESTION,
        },
        "subjectActivity": subject_activity,
        "recentQuestions": [q.to_dict() for q in asked[:RECENT_QUESTIONS]],
        "classAverage": class_averages(viewer_grade(child)),
    }
    stats["badges"] = badges_for(stats, PARENT_BADGES)
    return stats


def engagement_level(stats: dict) -> str:
    weekly = stats["weeklyActivity"]
    average = stats["classAverage"]
    if weekly["questions"] >= average["questions"] and weekly["answers"] >= average["answers"]:
        return "High Performance"
    if weekly["questions"] >= average["questions"] * GOOD_PERFORMANCE_RATIO:
        return "Good Performance"
    return "Needs Encouragement"


def weak_zones(stats: dict) -> list[str]:
    """Subjects the child asks about often but rarely helps others with."""
    answers = stats["answersGiven"]
    return [
        subject
        for subject, count in stats["subjectActivity"].items()
        if count > WEAK_ZONE_MIN_QUESTIONS and answers < count * 0.5
    ]


def dashboard(parent: UserProfile) -> dict:
    child = find_linked_child(parent)
    stats = child_stats(child)
    return {
        "child": child.to_dict(),
        "stats": stats,
        "engagement": engagement_level(stats),
        "weakZones": weak_zones(stats),
    }


def send_kudos(parent: UserProfile) -> UserProfile:
    child = find_linked_child(parent)
    if not notify(child.id, "kudos", KUDOS_TITLE, KUDOS_MESSAGE):
        raise LinkError("Could not send kudos", 500)
    log_event("kudos_sent", parent.id, f"child_id={child.id}")
    return child
