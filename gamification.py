"""
Points, levels, badges and the per-grade leaderboard.

Points are stored on the user row and only change through the answer and
rating workflows; everything here derives views from them.
"""

from __future__ import annotations

from typing import Optional

from db_stores import QuestionStoreDB, UserStoreDB

POINTS_PER_LEVEL = 200

POINTS_AWARDS = {
    "answer": 5,
}

# Checked in order; each entry is (name, predicate over the stats dict).
PROGRESS_BADGES = [
    ("First Question", lambda s: s["questionsAsked"] >= 1),
    ("Helpful Answer", lambda s: s["answersGiven"] >= 4),
    ("Top Contributor", lambda s: s["answersGiven"] >= 10),
    ("Curious Mind", lambda s: s["questionsAsked"] >= 5),
    ("Century Club", lambda s: s["points"] >= 100),
    ("Peer Club", lambda s: s["points"] >= 400),
    ("Peer Tutor", lambda s: s["points"] >= 200),
    ("Level Master", lambda s: s["level"] >= 5),
]

# The parent dashboard shows a gentler set.
PARENT_BADGES = [
    ("🔥 First Question", lambda s: s["questionsAsked"] >= 1),
    ("💡 Helpful Student", lambda s: s["answersGiven"] >= 1),
    ("🌟 Top Contributor", lambda s: s["answersGiven"] >= 10),
    ("💯 Century Club", lambda s: s["points"] >= 100),
    ("🎓 Peer Tutor", lambda s: s["points"] >= 200),
    ("👑 Level Master", lambda s: s["level"] >= 3),
]

PODIUM = {1: "🏆", 2: "🥈", 3: "🥉"}
LEADERBOARD_SIZE = 10


def level_for(points: int) -> int:
    return max(0, int(points or 0)) // POINTS_PER_LEVEL + 1


def level_progress(points: int) -> dict:
    points = max(0, int(points or 0))
    level = level_for(points)
    return {
        "level": level,
        "currentLevelProgress": points % POINTS_PER_LEVEL,
        "nextLevelPoints": level * POINTS_PER_LEVEL,
        "pointsPerLevel": POINTS_PER_LEVEL,
    }


def badges_for(stats: dict, rules=PROGRESS_BADGES) -> list[str]:
    """Names of every badge whose rule the stats satisfy.

    ``stats`` needs questionsAsked, answersGiven, points and level.
    """
    return [name for name, earned in rules if earned(stats)]


def activity_score(questions_asked: int, answers_given: int, upvotes_received: int) -> int:
    """Contribution score used on profile cards: 10 per question, 5 per answer, 2 per upvote."""
    return questions_asked * 10 + answers_given * 5 + upvotes_received * 2


def user_stats(user) -> dict:
    """Progress summary for one user (a ``UserProfile``)."""
    counts = QuestionStoreDB().user_counts(user.id)
    stats = {
        "points": user.points,
        "questionsAsked": counts["questions_asked"],
        "answersGiven": counts["answers_given"],
        "upvotesReceived": counts["upvotes_received"],
        "ratingsReceived": counts["ratings_received"],
        "activityScore": activity_score(
            counts["questions_asked"], counts["answers_given"], counts["upvotes_received"]
        ),
    }
    stats.update(level_progress(user.points))
    stats["badges"] = badges_for(stats)
    return stats


def rank_entries(users, viewer_id: Optional[int] = None) -> tuple[list[dict], int]:
    """Rank users by points (already sorted or not). Returns (ranked, viewer_rank)."""
    ordered = sorted(users, key=lambda u: (-(u.points or 0), u.id))
    ranked = []
    viewer_rank = 0
    for position, u in enumerate(ordered, start=1):
        is_viewer = viewer_id is not None and u.id == viewer_id
        if is_viewer:
            viewer_rank = position
        ranked.append({
            "userId": u.id,
            "name": u.display_name or "Anonymous",
            "points": u.points or 0,
            "profileImage": u.profile_image or None,
            "rank": position,
            "badge": PODIUM.get(position, ""),
            "isCurrentUser": is_viewer,
        })
    return ranked, viewer_rank


def leaderboard(grade: str, viewer_id: Optional[int] = None) -> dict:
    ranked, viewer_rank = rank_entries(UserStoreDB().learners_in_grade(grade), viewer_id)
    return {
        "grade": str(grade),
        "entries": ranked[:LEADERBOARD_SIZE],
        "rank": viewer_rank,
        "total": len(ranked),
    }
