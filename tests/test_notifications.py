"""Tests for notification listing, read state and delivery."""

from __future__ import annotations

from notifications import answer_message, deliver, preview


def seed(db, user_id, count, notif_type="answer"):
    for i in range(count):
        db.execute(
            "INSERT INTO notifications (user_id, type, title, message, read, created_at) "
            "VALUES (?, ?, ?, '', 0, ?)",
            (user_id, notif_type, f"Note {i}", f"2026-03-01T10:00:{i:02d}"),
        )
    db.commit()


class TestNotificationsApi:
    def test_newest_first_with_unread_count(self, student_client, db, ids):
        seed(db, ids.student, 3)
        data = student_client.get("/api/notifications").get_json()
        assert [n["title"] for n in data["notifications"]] == ["Note 2", "Note 1", "Note 0"]
        assert data["unreadCount"] == 3
        assert data["pagination"]["total"] == 3

    def test_pagination(self, student_client, db, ids):
        seed(db, ids.student, 5)
        data = student_client.get("/api/notifications?page=2&limit=2").get_json()
        assert [n["title"] for n in data["notifications"]] == ["Note 2", "Note 1"]
        assert data["pagination"]["pages"] == 3

    def test_mark_one_read(self, student_client, db, ids):
        seed(db, ids.student, 2)
        notif_id = student_client.get("/api/notifications").get_json()["notifications"][0]["id"]
        resp = student_client.post("/api/notifications/read", json={"id": notif_id})
        assert resp.status_code == 200
        assert student_client.get("/api/notifications/unread-count").get_json()["unreadCount"] == 1

    def test_mark_all_read(self, student_client, db, ids):
        seed(db, ids.student, 4)
        resp = student_client.post("/api/notifications/read", json={"id": "all"})
        assert resp.get_json()["updated"] == 4
        assert student_client.get("/api/notifications/unread-count").get_json()["unreadCount"] == 0

    def test_read_requires_id(self, student_client):
        assert student_client.post("/api/notifications/read", json={}).status_code == 400

    def test_cannot_touch_others_notifications(self, student_client, classmate_client, db, ids):
        seed(db, ids.student, 1)
        notif_id = student_client.get("/api/notifications").get_json()["notifications"][0]["id"]
        assert classmate_client.post("/api/notifications/read", json={"id": notif_id}).status_code == 404
        assert classmate_client.delete(f"/api/notifications/{notif_id}").status_code == 404
        assert student_client.delete(f"/api/notifications/{notif_id}").status_code == 200

    def test_kudos_only_lists_unread_kudos(self, student_client, db, ids):
        seed(db, ids.student, 2, notif_type="kudos")
        seed(db, ids.student, 1, notif_type="upvote")
        kudos = student_client.get("/api/notifications/kudos").get_json()["notifications"]
        assert len(kudos) == 2
        student_client.post("/api/notifications/read", json={"id": kudos[0]["id"]})
        assert len(student_client.get("/api/notifications/kudos").get_json()["notifications"]) == 1

    def test_requires_login(self, client):
        assert client.get("/api/notifications").status_code == 401


class TestDelivery:
    def test_deliver_writes_row(self, app, db, ids):
        notif_id = deliver(app.config["DATABASE"], ids.student, "achievement", "Well done", "Keep going")
        row = db.execute("SELECT * FROM notifications WHERE id = ?", (notif_id,)).fetchone()
        assert row["user_id"] == ids.student
        assert row["read"] == 0

    def test_notify_failure_is_reported_not_raised(self, app_ctx, monkeypatch, ids):
        import notifications

        def boom(*args, **kwargs):
            raise RuntimeError("queue down")

        monkeypatch.setattr(notifications, "enqueue", boom)
        assert notifications.notify(ids.student, "kudos", "Hi") is False

    def test_notify_without_recipient(self, app_ctx):
        from notifications import notify

        assert notify(None, "answer", "Nobody") is False

    def test_notify_unknown_type(self, app_ctx, monkeypatch, ids):
        import notifications

        calls = []
        monkeypatch.setattr(notifications, "enqueue", lambda *a, **kw: calls.append(a))
        assert notifications.notify(ids.student, "broadcast", "Hi") is False
        assert calls == []


class TestMessages:
    def test_preview_short_text_unchanged(self):
        assert preview("Short") == "Short"

    def test_preview_exactly_fifty(self):
        assert preview("a" * 50) == "a" * 50

    def test_preview_truncates(self):
        assert preview("b" * 51) == "b" * 50 + "..."

    def test_answer_message(self):
        assert answer_message("Tina", "What is x?") == 'Tina answered: "What is x?"'
