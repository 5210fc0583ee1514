"""Tests for the SQLite-backed stores."""

from __future__ import annotations

from datetime import date, datetime, timedelta

import pytest

from conftest import insert_user
from db_stores import (
    DownloadStoreDB,
    NotificationStoreDB,
    QuestionStoreDB,
    ResourceStoreDB,
    UserStoreDB,
)


@pytest.fixture
def questions(app_ctx):
    return QuestionStoreDB()


@pytest.fixture
def users(app_ctx):
    return UserStoreDB()


def new_question(store, asked_by, grade="7", **kw):
    fields = {"title": "Why?", "description": "", "subject": "Science"}
    fields.update(kw)
    return store.create(grade=grade, asked_by=asked_by, **fields)


class TestUserStore:
    def test_resolve_by_id_or_email(self, users, ids):
        assert users.resolve(ids.tutor).email == "tina@example.com"
        assert users.resolve(str(ids.tutor)).email == "tina@example.com"
        assert users.resolve(" TINA@example.com ").id == ids.tutor
        assert users.resolve("") is None

    def test_create_normalizes(self, users):
        user = users.create(" Nia ", "NIA@Example.com", "parent", student_email=" Sam@Example.com")
        assert user.display_name == "Nia"
        assert user.email == "nia@example.com"
        assert user.student_email == "sam@example.com"

    def test_add_points(self, users, ids):
        assert users.add_points(ids.classmate, 15) == 55
        assert users.add_points(999, 5) is None

    def test_promotion_is_one_way(self, users, ids):
        assert users.promote_if_eligible(ids.classmate) is False
        users.add_points(ids.classmate, 160)
        assert users.promote_if_eligible(ids.classmate) is True
        assert users.promote_if_eligible(ids.classmate) is False
        users.add_points(ids.classmate, -100)
        assert users.get(ids.classmate).role == "tutor"

    def test_teachers_are_never_promoted(self, users, ids):
        users.add_points(ids.teacher, 500)
        assert users.promote_if_eligible(ids.teacher) is False

    def test_learners_in_grade(self, users, ids):
        assert [u.id for u in users.learners_in_grade("7")] == [ids.classmate, ids.student]

    def test_learners_grouped_by_current_grade(self, users, db, ids):
        insert_user(db, 11, "Olive Older", "olive@example.com", "student", grade="7",
                    registration_year=date.today().year - 2)
        db.commit()
        assert 11 not in [u.id for u in users.learners_in_grade("7")]
        assert [u.id for u in users.learners_in_grade("9")] == [ids.tutor, 11]


class TestQuestionStore:
    def test_answer_marks_question_answered(self, questions, ids):
        q = new_question(questions, ids.student)
        questions.add_answer(q.id, text="Because.", answered_by=ids.classmate)
        stored = questions.get(q.id)
        assert stored.status == "answered"
        assert [a.text for a in stored.answers] == ["Because."]

    def test_answer_index_follows_creation_order(self, questions, ids):
        q = new_question(questions, ids.student)
        first = questions.add_answer(q.id, text="One", answered_by=ids.classmate)
        second = questions.add_answer(q.id, text="Two", answered_by=ids.tutor)
        assert questions.answer_at(q.id, 0).id == first
        assert questions.answer_at(q.id, 1).id == second
        assert questions.answer_at(q.id, 2) is None
        assert questions.answer_at(q.id, -1) is None

    def test_rating_applies_once(self, questions, ids):
        q = new_question(questions, ids.student)
        aid = questions.add_answer(q.id, text="One", answered_by=ids.classmate)
        assert questions.set_rating(aid, 10, ids.student) is True
        assert questions.set_rating(aid, 25, ids.student) is False
        assert questions.get_answer(q.id, aid).rating == 10

    def test_get_answer_checks_question(self, questions, ids):
        q1 = new_question(questions, ids.student)
        q2 = new_question(questions, ids.student)
        aid = questions.add_answer(q1.id, text="One", answered_by=ids.classmate)
        assert questions.get_answer(q2.id, aid) is None

    def test_delete_removes_answers(self, questions, ids):
        q = new_question(questions, ids.student)
        aid = questions.add_answer(q.id, text="One", answered_by=ids.classmate)
        assert questions.delete(q.id) is True
        assert questions.get_answer(q.id, aid) is None

    def test_by_grades_filters(self, questions, ids):
        a = new_question(questions, ids.student, grade="6", subject="Science")
        new_question(questions, ids.student, grade="6", subject="History")
        new_question(questions, ids.student, grade="8", subject="Science")
        found = questions.by_grades({"6", "7"}, status="unanswered", subject="Science")
        assert [q.id for q in found] == [a.id]
        assert questions.by_grades(set()) == []

    def test_user_counts(self, questions, ids):
        q = new_question(questions, ids.student)
        questions.upvote_question(q.id)
        other = new_question(questions, ids.tutor)
        aid = questions.add_answer(other.id, text="A", answered_by=ids.student)
        questions.upvote_answer(other.id, aid)
        questions.set_rating(aid, 15, ids.tutor)

        counts = questions.user_counts(ids.student)
        assert counts == {
            "questions_asked": 1,
            "answers_given": 1,
            "upvotes_received": 2,
            "ratings_received": 1,
            "rating_points": 15,
        }

    def test_counts_for_users(self, questions, ids):
        q = new_question(questions, ids.student)
        questions.add_answer(q.id, text="A", answered_by=ids.classmate)
        counts = questions.counts_for_users([ids.student, ids.classmate])
        assert counts[ids.student] == {"questions": 1, "answers": 0}
        assert counts[ids.classmate] == {"questions": 0, "answers": 1}

    def test_questions_since(self, questions, ids):
        new_question(questions, ids.student)
        week_ago = (datetime.now() - timedelta(days=7)).isoformat()
        tomorrow = (datetime.now() + timedelta(days=1)).isoformat()
        assert questions.questions_since(ids.student, week_ago) == 1
        assert questions.questions_since(ids.student, tomorrow) == 0


class TestNotificationStore:
    def test_scoped_to_recipient(self, app_ctx, ids):
        mine = NotificationStoreDB(ids.student)
        theirs = NotificationStoreDB(ids.classmate)
        nid = mine.add("answer", "Hello")
        assert theirs.mark_read(nid) is False
        assert theirs.delete(nid) is False
        assert mine.unread_count() == 1
        assert mine.mark_read(nid) is True
        assert mine.unread_count() == 0

    def test_mark_all_read_counts_changes(self, app_ctx, ids):
        store = NotificationStoreDB(ids.student)
        store.add("kudos", "One")
        store.add("kudos", "Two")
        assert store.mark_all_read() == 2
        assert store.mark_all_read() == 0


class TestDownloadStore:
    def test_record_and_recent(self, app_ctx, ids):
        resource = ResourceStoreDB().create(title="Atlas", subject="Geography", grade="7",
                                            file_name="atlas.pdf")
        store = DownloadStoreDB(ids.student)
        record = store.record(resource)
        assert record.file_name == "atlas.pdf"
        assert [d.resource_id for d in store.recent()] == [resource.id]
        assert DownloadStoreDB(ids.classmate).recent() == []
