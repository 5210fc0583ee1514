"""
Question & answer workflows: asking, answering, rating, upvoting, deleting.

Each workflow validates, performs its writes through the stores (counters and
role changes are single SQL statements), then fires best-effort notifications.
Failures the caller must see are raised as ``WorkflowError`` carrying an HTTP
status; blueprints turn them into ``{"message": ...}`` responses.

The answer, points and notification steps are not one transaction: once the
answer row is written, a later failure leaves it in place.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from audit import log_event
from db_stores import QuestionStoreDB, UserStoreDB
from gamification import POINTS_AWARDS
from models import GRADES, RATING_VALUES, Question, UserProfile
from notifications import answer_message, notify
from policy import SelfAnswerError, ensure_can_answer, viewer_grade

logger = logging.getLogger(__name__)

MAX_ANSWER_CHARS = 4000


class WorkflowError(Exception):
    """A rejected workflow step, with the HTTP status to report."""

    def __init__(self, message: str, status: int = 400):
        super().__init__(message)
        self.message = message
        self.status = status


def check_promotion(user_id: int) -> bool:
    """Promote a student who has reached the threshold; True if promoted now."""
    if not UserStoreDB().promote_if_eligible(user_id):
        return False
    log_event("tutor_promoted", user_id)
    notify(user_id, "achievement", "🎓 You're now a Peer Tutor!",
           "You reached 200 points. Lower grades can now see your help.")
    return True


def _require_user(user: Optional[UserProfile]) -> UserProfile:
    if user is None:
        raise WorkflowError("Authentication required", 401)
    return user


def _require_question(question_id) -> Question:
    question = QuestionStoreDB().get(question_id)
    if question is None:
        raise WorkflowError("Question not found", 404)
    return question


# ── Asking ───────────────────────────────────────────────────────────


def ask_question(asker: Optional[UserProfile], *, title: str = "", description: str = "",
                 subject: str = "", topic: str = "", grade: Any = None,
                 image_url: str = "", asked_by_name: str = "") -> Question:
    title = (title or "").strip()
    description = (description or "").strip()
    subject = (subject or "").strip()
    if not title and not description:
        raise WorkflowError("Please enter your question")
    if not subject:
        raise WorkflowError("Subject is required")

    if grade in (None, "") and asker is not None:
        grade = viewer_grade(asker)
    grade = str(grade or "").strip()
    if grade not in GRADES:
        raise WorkflowError("Classroom must be one of grades 6-11")

    return QuestionStoreDB().create(
        title=title,
        description=description,
        subject=subject,
        topic=(topic or "").strip(),
        grade=grade,
        asked_by=asker.id if asker else None,
        asked_by_name=asker.display_name if asker else (asked_by_name or "").strip(),
        image_url=image_url or "",
    )


# ── Answering ────────────────────────────────────────────────────────


def submit_answer(question_id, answerer: Optional[UserProfile], text: str,
                  image_url: str = "") -> dict:
    """Add an answer, award points, promote if due, notify the asker.

    Returns ``{"question", "points", "role", "promoted"}``.
    """
    text = (text or "").strip()
    if not text:
        raise WorkflowError("Please enter your answer")
    question = _require_question(question_id)
    answerer = _require_user(answerer)
    if len(text) > MAX_ANSWER_CHARS:
        raise WorkflowError(f"Answer must be at most {MAX_ANSWER_CHARS} characters")
    try:
        ensure_can_answer(answerer, question)
    except SelfAnswerError as e:
        raise WorkflowError(str(e), 403) from e

    questions = QuestionStoreDB()
    users = UserStoreDB()
    questions.add_answer(
        question.id,
        text=text,
        answered_by=answerer.id,
        answered_by_name=answerer.display_name,
        image_url=image_url or "",
    )
    points = users.add_points(answerer.id, POINTS_AWARDS["answer"])
    promoted = check_promotion(answerer.id)

    if question.asked_by and question.asked_by != answerer.id:
        notify(
            question.asked_by,
            "answer",
            "New answer to your question",
            answer_message(answerer.display_name, question.title or question.description),
            question_id=question.id,
        )

    logger.info("answer added question_id=%s user_id=%s points=%s", question.id, answerer.id, points)
    return {
        "question": questions.get(question.id),
        "points": points,
        "role": "tutor" if promoted else answerer.role,
        "promoted": promoted,
    }


# ── Rating ───────────────────────────────────────────────────────────


def _parse_rating(rating: Any) -> int:
    # 10.9 must not be truncated into a valid 10
    if isinstance(rating, bool) or (isinstance(rating, float) and not rating.is_integer()):
        raise WorkflowError("Rating must be one of 5, 10, 15, 20, 25")
    try:
        value = int(rating)
    except (TypeError, ValueError):
        value = None
    if value not in RATING_VALUES:
        raise WorkflowError("Rating must be one of 5, 10, 15, 20, 25")
    return value


def rate_answer(question_id, rater: Optional[UserProfile], rating: Any, *,
                answer_id: Any = None, answer_index: Any = None) -> dict:
    """Rate one answer once, crediting the rating to its author.

    The answer is addressed by id, or by its position in the stable answer
    order when only ``answer_index`` is given.
    """
    value = _parse_rating(rating)
    question = _require_question(question_id)
    rater = _require_user(rater)
    if question.asked_by != rater.id:
        raise WorkflowError("Only the person who asked can rate answers", 403)

    questions = QuestionStoreDB()
    answer = None
    if answer_id not in (None, ""):
        answer = questions.get_answer(question.id, answer_id)
    elif answer_index not in (None, ""):
        try:
            answer = questions.answer_at(question.id, int(answer_index))
        except (TypeError, ValueError):
            answer = None
    if answer is None:
        raise WorkflowError("Answer not found", 404)

    if answer.rating is not None or not questions.set_rating(answer.id, value, rater.id):
        raise WorkflowError("This answer has already been rated", 409)

    points = None
    promoted = False
    if answer.answered_by:
        points = UserStoreDB().add_points(answer.answered_by, value)
        promoted = check_promotion(answer.answered_by)
        notify(
            answer.answered_by,
            "achievement",
            "⭐ Your answer was rated!",
            f"{rater.display_name} rated your answer {value} points",
            question_id=question.id,
        )

    return {
        "question": questions.get(question.id),
        "answerId": answer.id,
        "rating": value,
        "answererPoints": points,
        "promoted": promoted,
    }


# ── Upvotes & deletion ───────────────────────────────────────────────


def upvote(question_id, answer_id: Any = None, voter: Optional[UserProfile] = None) -> Question:
    question = _require_question(question_id)
    questions = QuestionStoreDB()

    if answer_id not in (None, ""):
        answer = questions.get_answer(question.id, answer_id)
        if answer is None or not questions.upvote_answer(question.id, answer.id):
            raise WorkflowError("Answer not found", 404)
        owner, title = answer.answered_by, "👍 Your answer got an upvote"
    else:
        questions.upvote_question(question.id)
        owner, title = question.asked_by, "👍 Your question got an upvote"

    if voter is not None and owner and owner != voter.id:
        notify(owner, "upvote", title, f"{voter.display_name} found it helpful",
               question_id=question.id)
    return questions.get(question.id)


def delete_question(question_id, requester: Optional[UserProfile]) -> None:
    question = _require_question(question_id)
    requester = _require_user(requester)
    if question.asked_by != requester.id and requester.role != "teacher":
        raise WorkflowError("You can only delete your own questions", 403)
    QuestionStoreDB().delete(question.id)
    log_event("question_deleted", requester.id, f"question_id={question.id}")
