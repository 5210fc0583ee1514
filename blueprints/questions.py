"""Question routes: classroom lists, asking, answering, rating, upvotes, feed."""

from __future__ import annotations

from flask import Blueprint, jsonify, request
from flask_login import login_required

from db_stores import QuestionStoreDB
from helpers import acting_user, current_profile, error, json_body
from models import GRADES, QUESTION_STATUSES
from policy import filter_answerable, viewer_grades
from qa import WorkflowError, ask_question, delete_question, rate_answer, submit_answer, upvote

bp = Blueprint("questions", __name__)


@bp.errorhandler(WorkflowError)
def _workflow_error(exc: WorkflowError):
    return error(exc.message, exc.status)


@bp.route("/api/questions/<classroom>")
def list_questions(classroom):
    """Every question in one classroom, newest first."""
    questions = QuestionStoreDB().by_grade(classroom)
    return jsonify([q.to_dict() for q in questions])


@bp.route("/api/questions", methods=["POST"])
def create_question():
    data = json_body()
    asker = acting_user(data.get("askedBy"))
    question = ask_question(
        asker,
        title=data.get("title", ""),
        description=data.get("description", ""),
        subject=data.get("subject", ""),
        topic=data.get("topic", ""),
        grade=data.get("classroom") or data.get("grade"),
        image_url=data.get("imageUrl", ""),
        asked_by_name=data.get("askedByName", ""),
    )
    return jsonify(question.to_dict()), 201


@bp.route("/api/questions/<int:question_id>/answer", methods=["POST"])
def answer_question(question_id):
    data = json_body()
    result = submit_answer(
        question_id,
        acting_user(data.get("answeredBy")),
        data.get("text") or data.get("answer") or "",
        image_url=data.get("imageUrl", ""),
    )
    payload = result["question"].to_dict()
    payload["answererPoints"] = result["points"]
    payload["answererRole"] = result["role"]
    payload["promoted"] = result["promoted"]
    return jsonify(payload)


@bp.route("/api/questions/<int:question_id>/upvote", methods=["POST"])
def upvote_question(question_id):
    data = json_body()
    question = upvote(question_id, data.get("answerId"), voter=current_profile())
    return jsonify(question.to_dict())


@bp.route("/api/questions/<int:question_id>/rate", methods=["POST"])
@login_required
def rate(question_id):
    data = json_body()
    result = rate_answer(
        question_id,
        current_profile(),
        data.get("rating"),
        answer_id=data.get("answerId"),
        answer_index=data.get("answerIndex"),
    )
    return jsonify({
        "question": result["question"].to_dict(),
        "answerId": result["answerId"],
        "rating": result["rating"],
        "answererPoints": result["answererPoints"],
        "promoted": result["promoted"],
    })


@bp.route("/api/questions/<int:question_id>", methods=["DELETE"])
@login_required
def delete(question_id):
    delete_question(question_id, current_profile())
    return jsonify({"message": "Question deleted"})


@bp.route("/api/feed")
@login_required
def feed():
    """Unanswered questions the current user may answer.

    ``?grade=`` narrows to one visible grade, ``?subject=`` to one subject.
    """
    viewer = current_profile()
    if viewer is None:
        return error("User not found", 404)
    if viewer.role == "parent":
        return error("Parents do not have a question feed", 403)

    grades = viewer_grades(viewer)
    grade = request.args.get("grade")
    if grade:
        if grade not in GRADES:
            return error("Grade must be one of 6-11", 400)
        grades = grades & {grade}

    status = request.args.get("status", "unanswered")
    if status != "all" and status not in QUESTION_STATUSES:
        return error("Unknown status filter", 400)

    questions = QuestionStoreDB().by_grades(
        grades,
        status=None if status == "all" else status,
        subject=request.args.get("subject") or None,
    )
    visible = filter_answerable(viewer, questions)
    return jsonify({
        "questions": [q.to_dict() for q in visible],
        "grades": sorted(grades, key=int),
    })
