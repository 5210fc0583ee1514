"""Tests for planner tasks and timed study sessions."""

from __future__ import annotations

from datetime import date, datetime, timedelta

from db_stores import StudySessionStoreDB, StudyTaskStoreDB


class TestTasksApi:
    def test_create_and_list_for_day(self, student_client):
        resp = student_client.post("/api/planner/tasks", json={
            "title": "Revise fractions", "date": "2026-03-01", "priority": "high",
            "subject": "Mathematics", "estimatedTime": 45,
        })
        assert resp.status_code == 201
        task = resp.get_json()["task"]
        assert task["dueDate"] == "2026-03-01T23:59:59.999000"
        assert task["completed"] is False
        assert task["estimatedTime"] == 45

        listed = student_client.get("/api/planner/tasks?date=2026-03-01").get_json()
        assert [t["title"] for t in listed["tasks"]] == ["Revise fractions"]
        assert listed["total"] == 1
        assert student_client.get("/api/planner/tasks?date=2026-03-02").get_json()["tasks"] == []

    def test_defaults(self, student_client):
        task = student_client.post("/api/planner/tasks", json={"title": "Read"}).get_json()["task"]
        assert task["subject"] == "General"
        assert task["priority"] == "medium"
        assert task["estimatedTime"] == 30
        assert task["dueDate"].startswith(date.today().isoformat())

    def test_title_required(self, student_client):
        assert student_client.post("/api/planner/tasks", json={"title": " "}).status_code == 400

    def test_bad_priority(self, student_client):
        resp = student_client.post("/api/planner/tasks", json={"title": "X", "priority": "urgent"})
        assert resp.status_code == 400

    def test_bad_date(self, student_client):
        assert student_client.get("/api/planner/tasks?date=next-week").status_code == 400

    def test_complete_task(self, student_client):
        task = student_client.post("/api/planner/tasks", json={"title": "Essay", "date": "2026-03-01"}).get_json()["task"]
        resp = student_client.patch(f"/api/planner/tasks/{task['id']}", json={"completed": True})
        assert resp.status_code == 200
        assert resp.get_json()["task"]["completed"] is True
        assert student_client.get("/api/planner/tasks?date=2026-03-01").get_json()["completed"] == 1

    def test_tasks_are_private(self, student_client, classmate_client):
        task = student_client.post("/api/planner/tasks", json={"title": "Mine"}).get_json()["task"]
        assert classmate_client.patch(f"/api/planner/tasks/{task['id']}", json={"completed": True}).status_code == 404
        assert classmate_client.delete(f"/api/planner/tasks/{task['id']}").status_code == 404
        assert student_client.delete(f"/api/planner/tasks/{task['id']}").status_code == 200

    def test_requires_login(self, client):
        assert client.get("/api/planner/tasks").status_code == 401


class TestSessionsApi:
    def test_session_lifecycle(self, student_client):
        resp = student_client.post("/api/planner/sessions", json={"subject": "Science", "duration": 25})
        assert resp.status_code == 201
        session = resp.get_json()["session"]
        assert session["duration"] == 25
        assert session["completed"] is False
        sid = session["id"]

        paused = student_client.post(f"/api/planner/sessions/{sid}/pause").get_json()["session"]
        assert paused["isPaused"] is True
        resumed = student_client.post(f"/api/planner/sessions/{sid}/resume").get_json()["session"]
        assert resumed["isPaused"] is False
        ended = student_client.post(f"/api/planner/sessions/{sid}/end").get_json()["session"]
        assert ended["completed"] is True
        assert ended["endTime"]

        day = student_client.get("/api/planner/sessions").get_json()
        assert day["active"] is None
        assert [s["id"] for s in day["sessions"]] == [sid]

    def test_one_active_session(self, student_client):
        student_client.post("/api/planner/sessions", json={"subject": "Science"})
        resp = student_client.post("/api/planner/sessions", json={"subject": "History"})
        assert resp.status_code == 409

    def test_subject_required(self, student_client):
        assert student_client.post("/api/planner/sessions", json={}).status_code == 400

    def test_ended_session_is_final(self, student_client):
        sid = student_client.post("/api/planner/sessions", json={"subject": "Art"}).get_json()["session"]["id"]
        student_client.post(f"/api/planner/sessions/{sid}/end")
        assert student_client.post(f"/api/planner/sessions/{sid}/pause").status_code == 409
        assert student_client.post(f"/api/planner/sessions/{sid}/end").status_code == 409

    def test_unknown_session(self, student_client):
        assert student_client.post("/api/planner/sessions/999/end").status_code == 404


class TestSessionTiming:
    T0 = datetime(2026, 3, 1, 16, 0)

    def test_paused_time_is_subtracted(self, app_ctx, ids):
        store = StudySessionStoreDB(ids.student)
        session = store.start("Mathematics", self.T0.date(), now=self.T0)
        session = store.pause(session, now=self.T0 + timedelta(minutes=10))
        session = store.resume(session, now=self.T0 + timedelta(minutes=15))
        assert session.paused_time == 5
        session = store.end(session, now=self.T0 + timedelta(minutes=40))
        assert session.actual_duration == 35
        assert session.completed

    def test_ending_while_paused_counts_the_open_pause(self, app_ctx, ids):
        store = StudySessionStoreDB(ids.student)
        session = store.start("Mathematics", self.T0.date(), now=self.T0)
        session = store.pause(session, now=self.T0 + timedelta(minutes=10))
        session = store.end(session, now=self.T0 + timedelta(minutes=30))
        assert session.paused_time == 20
        assert session.actual_duration == 10
        assert not session.is_paused

    def test_pause_twice_is_noop(self, app_ctx, ids):
        store = StudySessionStoreDB(ids.student)
        session = store.start("Mathematics", self.T0.date(), now=self.T0)
        first = store.pause(session, now=self.T0 + timedelta(minutes=5))
        second = store.pause(first, now=self.T0 + timedelta(minutes=9))
        assert second.pause_started_at == first.pause_started_at

    def test_sessions_listed_for_their_day(self, app_ctx, ids):
        store = StudySessionStoreDB(ids.student)
        store.start("Mathematics", date(2026, 3, 1), now=self.T0)
        assert len(store.for_day(date(2026, 3, 1))) == 1
        assert store.for_day(date(2026, 3, 2)) == []


class TestTaskStore:
    def test_update_ignores_unknown_fields(self, app_ctx, ids):
        store = StudyTaskStoreDB(ids.student)
        task = store.add("Plan", date(2026, 3, 1))
        updated = store.update(task.id, owner=99, title="Plan week")
        assert updated.title == "Plan week"
        assert updated.user_id == ids.student

    def test_day_order_newest_first(self, app_ctx, ids):
        store = StudyTaskStoreDB(ids.student)
        first = store.add("First", date(2026, 3, 1))
        second = store.add("Second", date(2026, 3, 1))
        assert [t.id for t in store.for_day(date(2026, 3, 1))] == [second.id, first.id]
