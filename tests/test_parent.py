"""Tests for the parent dashboard, class averages and kudos."""

from __future__ import annotations

from conftest import insert_question, insert_user, login


def add_answers(db, answered_by, count, subject="Mathematics"):
    qid = insert_question(db, None, "7", subject=subject)
    for _ in range(count):
        db.execute(
            "INSERT INTO answers (question_id, text, answered_by, created_at) "
            "VALUES (?, 'Answer', ?, datetime('now'))",
            (qid, answered_by),
        )


class TestClassAverages:
    def test_floor_of_two(self, app_ctx):
        from parent_analytics import class_averages

        # Sam has 0 points and Cara 40; no questions or answers yet.
        assert class_averages("7") == {"questions": 2, "answers": 2, "points": 20}

    def test_half_rounds_up(self, app_ctx, db, ids):
        from parent_analytics import class_averages

        db.execute("UPDATE users SET points = 41 WHERE id = ?", (ids.classmate,))
        for _ in range(5):
            insert_question(db, ids.student, "7")
        db.commit()
        averages = class_averages("7")
        assert averages["points"] == 21
        assert averages["questions"] == 3

    def test_empty_grade(self, app_ctx):
        from parent_analytics import class_averages

        assert class_averages("11") == {"questions": 2, "answers": 2, "points": 2}

    def test_cached_per_grade(self, app_ctx, db, ids):
        from parent_analytics import class_averages

        first = class_averages("7")
        db.execute("UPDATE users SET points = 1000 WHERE id = ?", (ids.classmate,))
        db.commit()
        assert class_averages("7") == first


class TestDashboard:
    def test_linked_child_overview(self, parent_client, db, ids):
        insert_question(db, ids.student, "7", subject="Science")
        insert_question(db, ids.student, "7", subject="")
        db.commit()

        resp = parent_client.get("/api/parent/dashboard")
        assert resp.status_code == 200
        data = resp.get_json()
        assert data["child"]["email"] == "sam@example.com"
        stats = data["stats"]
        assert stats["questionsAsked"] == 2
        assert stats["answersGiven"] == 0
        assert stats["level"] == 1
        assert stats["subjectActivity"] == {"Science": 1, "Other": 1}
        assert stats["weeklyActivity"] == {"questions": 2, "answers": 0, "points": 20}
        assert len(stats["recentQuestions"]) == 2
        assert "🔥 First Question" in stats["badges"]

    def test_needs_encouragement_when_idle(self, parent_client):
        data = parent_client.get("/api/parent/dashboard").get_json()
        assert data["engagement"] == "Needs Encouragement"
        assert data["weakZones"] == []

    def test_good_performance(self, parent_client, db, ids):
        insert_question(db, ids.student, "7")
        insert_question(db, ids.student, "7")
        db.commit()
        assert parent_client.get("/api/parent/dashboard").get_json()["engagement"] == "Good Performance"

    def test_high_performance(self, parent_client, db, ids):
        insert_question(db, ids.student, "7")
        insert_question(db, ids.student, "7")
        add_answers(db, ids.student, 2)
        db.commit()
        assert parent_client.get("/api/parent/dashboard").get_json()["engagement"] == "High Performance"

    def test_weak_zone_needs_more_than_three_questions(self, parent_client, db, ids):
        for _ in range(3):
            insert_question(db, ids.student, "7", subject="Mathematics")
        db.commit()
        assert parent_client.get("/api/parent/dashboard").get_json()["weakZones"] == []

        insert_question(db, ids.student, "7", subject="Mathematics")
        db.commit()
        assert parent_client.get("/api/parent/dashboard").get_json()["weakZones"] == ["Mathematics"]

    def test_answers_clear_weak_zone(self, parent_client, db, ids):
        for _ in range(4):
            insert_question(db, ids.student, "7", subject="Mathematics")
        add_answers(db, ids.student, 2, subject="History")
        db.commit()
        assert parent_client.get("/api/parent/dashboard").get_json()["weakZones"] == []

    def test_unlinked_parent(self, app, db):
        insert_user(db, 20, "Lone Parent", "lone@example.com", "parent")
        db.commit()
        resp = login(app, "lone@example.com").get("/api/parent/dashboard")
        assert resp.status_code == 404
        assert resp.get_json()["message"] == "No linked student. Add a student email to your profile."

    def test_linked_email_without_student(self, app, db):
        insert_user(db, 21, "Hopeful Parent", "hope@example.com", "parent",
                    student_email="nobody@example.com")
        db.commit()
        resp = login(app, "hope@example.com").get("/api/parent/dashboard")
        assert resp.status_code == 404
        assert resp.get_json()["message"] == "Student not found"

    def test_students_are_turned_away(self, student_client):
        assert student_client.get("/api/parent/dashboard").status_code == 403

    def test_requires_login(self, client):
        assert client.get("/api/parent/dashboard").status_code == 401


class TestKudos:
    def test_kudos_reach_child(self, parent_client, student_client, ids):
        resp = parent_client.post("/api/parent/kudos")
        assert resp.status_code == 200
        assert resp.get_json()["childId"] == ids.student

        kudos = student_client.get("/api/notifications/kudos").get_json()["notifications"]
        assert len(kudos) == 1
        assert kudos[0]["title"] == "🎉 Kudos from Parent!"
        assert kudos[0]["read"] is False

    def test_kudos_without_link(self, app, db):
        insert_user(db, 22, "Lone Parent", "lone2@example.com", "parent")
        db.commit()
        resp = login(app, "lone2@example.com").post("/api/parent/kudos")
        assert resp.status_code == 404
