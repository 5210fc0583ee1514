"""Visibility policy: who sees which questions, resources and classrooms.

Every route that lists grade-partitioned content goes through this module so
the role/grade/points rules live in exactly one place:

- teacher: every grade, but never their own questions in the answerable feed
- tutor (or a student who has reached the promotion threshold): own grade
  and every lower grade, i.e. grades 6..g
- student: own grade only
- parent: no feed at all; parents only read the linked child's dashboard

All functions are pure. ``viewer`` is anything with ``id``, ``role``,
``grade`` and ``points`` attributes (normally a ``models.UserProfile``).
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date
from typing import Any, Optional

from models import GRADES, ROLES

TUTOR_PROMOTION_POINTS = 200
DEFAULT_GRADE = "6"
DEFAULT_ROLE = "student"
LEARNER_ROLES = ("student", "tutor")
MIN_GRADE = int(GRADES[0])
MAX_GRADE = int(GRADES[-1])


def normalize_role(role: Any) -> str:
    """Missing or unknown roles default to student."""
    value = str(role or "").strip().lower()
    return value if value in ROLES else DEFAULT_ROLE


def normalize_grade(grade: Any) -> str:
    """Grades outside "6".."11" (or missing) default to "6"."""
    value = str(grade if grade is not None else "").strip()
    return value if value in GRADES else DEFAULT_GRADE


def _grade_number(grade: Any) -> Optional[int]:
    try:
        return int(str(grade).strip())
    except (TypeError, ValueError):
        return None


def current_grade(grade: Any, registration_year: Any, today: Optional[date] = None) -> str:
    """Advance a student's stored grade by one per year since registration.

    Capped at the highest grade. Unparsable inputs return the stored grade
    unchanged (or the default when there is none).
    """
    initial = _grade_number(grade)
    year = _grade_number(registration_year)
    if initial is None or year is None:
        return str(grade) if grade not in (None, "") else DEFAULT_GRADE
    today = today or date.today()
    advanced = initial + max(0, today.year - year)
    return str(min(advanced, MAX_GRADE))


def should_promote(role: Any, points: Any) -> bool:
    """True exactly when a student has reached the tutor threshold."""
    return normalize_role(role) == "student" and _points(points) >= TUTOR_PROMOTION_POINTS


def effective_role(role: Any, points: Any) -> str:
    """Role used for visibility; a student past the threshold acts as a tutor."""
    if should_promote(role, points):
        return "tutor"
    return normalize_role(role)


def _points(points: Any) -> int:
    try:
        return int(points or 0)
    except (TypeError, ValueError):
        return 0


def visible_grades(role: Any, grade: Any, points: Any = 0) -> frozenset[str]:
    """Set of grade strings whose content this user may see."""
    role = effective_role(role, points)
    if role == "teacher":
        return frozenset(GRADES)
    if role == "parent":
        return frozenset()

    number = _grade_number(grade)
    if number is None:
        return frozenset()
    if role == "tutor":
        return frozenset(str(g) for g in range(MIN_GRADE, number + 1))
    return frozenset({str(number)})


def viewer_grade(viewer) -> Optional[str]:
    """Grade a viewer's content is partitioned by.

    Students and tutors move up one grade per year since registration, so this
    is their current grade, not the one stored at sign-up.
    """
    grade = viewer.grade
    if normalize_role(viewer.role) in LEARNER_ROLES and grade not in (None, ""):
        return resolve_learner_grade(grade, getattr(viewer, "registration_year", None))
    return grade


def viewer_grades(viewer) -> frozenset[str]:
    return visible_grades(viewer.role, viewer_grade(viewer), viewer.points)


def can_view(viewer, item_grade: Any) -> bool:
    return str(item_grade) in viewer_grades(viewer)


def filter_visible(viewer, items: Iterable) -> list:
    """Keep items (questions or resources) whose grade the viewer may see."""
    allowed = viewer_grades(viewer)
    return [item for item in items if str(item.grade) in allowed]


def is_own_question(viewer, question) -> bool:
    return viewer is not None and question.asked_by is not None and question.asked_by == viewer.id


def filter_answerable(viewer, questions: Iterable) -> list:
    """Visible questions minus the viewer's own; nobody answers themselves."""
    return [q for q in filter_visible(viewer, questions) if not is_own_question(viewer, q)]


def visible_classrooms(viewer) -> list[dict]:
    allowed = viewer_grades(viewer)
    return [
        {"id": g, "grade": g, "title": f"Grade {g}"}
        for g in GRADES
        if g in allowed
    ]


def resolve_learner_grade(grade: Any, registration_year: Any = None) -> str:
    """Grade a student or tutor is shown content for."""
    if registration_year:
        grade = current_grade(grade, registration_year)
    return normalize_grade(grade)


class SelfAnswerError(PermissionError):
    """Raised when a user tries to answer their own question."""
    pass


def ensure_can_answer(viewer, question) -> None:
    if is_own_question(viewer, question):
        raise SelfAnswerError("You cannot answer your own question")
