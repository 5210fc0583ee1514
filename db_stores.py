"""
DB-backed store classes for EduLink.

One class per table family. Per-user stores take the owning ``user_id`` in the
constructor and scope every query to it; shared stores (users, questions,
resources) take no owner. Counters are always updated in SQL
(``col = col + ?``) rather than read-modify-write in Python.
"""

from __future__ import annotations

from datetime import date, datetime, time
from typing import Optional

from database import get_db
from models import (
    Answer,
    Download,
    Notification,
    Question,
    Resource,
    StudySession,
    StudyTask,
    UserProfile,
)
from policy import TUTOR_PROMOTION_POINTS, viewer_grade


def _now() -> str:
    return datetime.now().isoformat()


def _minutes_between(start: str, end: datetime) -> int:
    try:
        started = datetime.fromisoformat(start)
    except (TypeError, ValueError):
        return 0
    return round((end - started).total_seconds() / 60)


# ── Users ────────────────────────────────────────────────────────────


class UserStoreDB:
    """Accounts for every role. Email is the natural key (trimmed, lower-cased)."""

    @staticmethod
    def _row_to_user(r) -> UserProfile:
        return UserProfile(
            id=r["id"], display_name=r["display_name"], email=r["email"],
            role=r["role"], grade=r["grade"], subject=r["subject"],
            student_email=r["student_email"], points=r["points"] or 0,
            registration_year=r["registration_year"],
            profile_image=r["profile_image"], created_at=r["created_at"],
        )

    @staticmethod
    def normalize_email(email) -> str:
        return str(email or "").strip().lower()

    def get(self, user_id) -> Optional[UserProfile]:
        row = get_db().execute("SELECT * FROM users WHERE id = ?", (user_id,)).fetchone()
        return self._row_to_user(row) if row else None

    def get_by_email(self, email) -> Optional[UserProfile]:
        row = get_db().execute(
            "SELECT * FROM users WHERE email = ?", (self.normalize_email(email),)
        ).fetchone()
        return self._row_to_user(row) if row else None

    def resolve(self, ref) -> Optional[UserProfile]:
        """Look a user up by numeric id or by email."""
        if ref is None or ref == "":
            return None
        if isinstance(ref, int) or str(ref).isdigit():
            return self.get(int(ref))
        return self.get_by_email(ref)

    def password_hash(self, user_id: int) -> str:
        row = get_db().execute("SELECT password_hash FROM users WHERE id = ?", (user_id,)).fetchone()
        return row["password_hash"] if row else ""

    def create(self, display_name: str, email: str, role: str = "student", *,
               grade: Optional[str] = None, subject: Optional[str] = None,
               student_email: Optional[str] = None, password_hash: str = "",
               profile_image: str = "", points: int = 0) -> UserProfile:
        db = get_db()
        cur = db.execute(
            "INSERT INTO users (display_name, email, password_hash, role, grade, subject, "
            "student_email, points, registration_year, profile_image, created_at) "
            "VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)",
            (display_name.strip(), self.normalize_email(email), password_hash, role,
             grade, subject.strip() if subject else None,
             self.normalize_email(student_email) if student_email else None,
             points, date.today().year, profile_image, _now()),
        )
        db.commit()
        return self.get(cur.lastrowid)

    def add_points(self, user_id: int, delta: int) -> Optional[int]:
        """Atomically add ``delta`` points; returns the new total."""
        db = get_db()
        cur = db.execute("UPDATE users SET points = points + ? WHERE id = ?", (delta, user_id))
        db.commit()
        if cur.rowcount == 0:
            return None
        return db.execute("SELECT points FROM users WHERE id = ?", (user_id,)).fetchone()["points"]

    def promote_if_eligible(self, user_id: int) -> bool:
        """Flip student -> tutor once points reach the threshold. One-way."""
        db = get_db()
        cur = db.execute(
            "UPDATE users SET role = 'tutor' WHERE id = ? AND role = 'student' AND points >= ?",
            (user_id, TUTOR_PROMOTION_POINTS),
        )
        db.commit()
        return cur.rowcount > 0

    def promote_all_eligible(self) -> list[int]:
        db = get_db()
        rows = db.execute(
            "SELECT id FROM users WHERE role = 'student' AND points >= ?",
            (TUTOR_PROMOTION_POINTS,),
        ).fetchall()
        promoted = [r["id"] for r in rows if self.promote_if_eligible(r["id"])]
        return promoted

    def learners_in_grade(self, grade: str) -> list[UserProfile]:
        """Students and tutors whose current grade (not sign-up grade) is ``grade``."""
        rows = get_db().execute(
            "SELECT * FROM users WHERE role IN ('student', 'tutor') "
            "ORDER BY points DESC, id"
        ).fetchall()
        learners = [self._row_to_user(r) for r in rows]
        return [u for u in learners if viewer_grade(u) == str(grade)]


# ── Questions & Answers ──────────────────────────────────────────────


class QuestionStoreDB:
    """Questions with their answers as separate rows.

    Answers are ordered by (created_at, id); the position in that order is the
    "answer index" older clients send when rating.
    """

    @staticmethod
    def _row_to_question(r) -> Question:
        return Question(
            id=r["id"], title=r["title"], description=r["description"],
            subject=r["subject"], topic=r["topic"], grade=r["grade"],
            asked_by=r["asked_by"], asked_by_name=r["asked_by_name"],
            image_url=r["image_url"], upvotes=r["upvotes"], status=r["status"],
            created_at=r["created_at"],
        )

    @staticmethod
    def _row_to_answer(r) -> Answer:
        return Answer(
            id=r["id"], question_id=r["question_id"], text=r["text"],
            answered_by=r["answered_by"], answered_by_name=r["answered_by_name"],
            image_url=r["image_url"], upvotes=r["upvotes"],
            is_accepted=bool(r["is_accepted"]), rating=r["rating"],
            rated_by=r["rated_by"], created_at=r["created_at"],
        )

    def _attach_answers(self, questions: list[Question]) -> list[Question]:
        if not questions:
            return questions
        by_id = {q.id: q for q in questions}
        placeholders = ",".join("?" * len(by_id))
        rows = get_db().execute(
            f"SELECT * FROM answers WHERE question_id IN ({placeholders}) ORDER BY created_at, id",
            tuple(by_id),
        ).fetchall()
        for r in rows:
            by_id[r["question_id"]].answers.append(self._row_to_answer(r))
        return questions

    def create(self, *, title: str, description: str, subject: str, grade: str,
               asked_by: Optional[int], asked_by_name: str = "", topic: str = "",
               image_url: str = "") -> Question:
        db = get_db()
        cur = db.execute(
            "INSERT INTO questions (title, description, subject, topic, grade, asked_by, "
            "asked_by_name, image_url, upvotes, status, created_at) "
            "VALUES (?, ?, ?, ?, ?, ?, ?, ?, 0, 'unanswered', ?)",
            (title, description, subject, topic, str(grade), asked_by, asked_by_name,
             image_url, _now()),
        )
        db.commit()
        return self.get(cur.lastrowid)

    def get(self, question_id) -> Optional[Question]:
        row = get_db().execute("SELECT * FROM questions WHERE id = ?", (question_id,)).fetchone()
        if not row:
            return None
        return self._attach_answers([self._row_to_question(row)])[0]

    def by_grade(self, grade: str) -> list[Question]:
        rows = get_db().execute(
            "SELECT * FROM questions WHERE grade = ? ORDER BY created_at DESC, id DESC",
            (str(grade),),
        ).fetchall()
        return self._attach_answers([self._row_to_question(r) for r in rows])

    def by_grades(self, grades, status: Optional[str] = None,
                  subject: Optional[str] = None, limit: int = 100) -> list[Question]:
        grades = sorted(grades)
        if not grades:
            return []
        sql = f"SELECT * FROM questions WHERE grade IN ({','.join('?' * len(grades))})"
        params: list = list(grades)
        if status:
            sql += " AND status = ?"
            params.append(status)
        if subject:
            sql += " AND subject = ?"
            params.append(subject)
        sql += " ORDER BY created_at DESC, id DESC LIMIT ?"
        params.append(limit)
        rows = get_db().execute(sql, params).fetchall()
        return self._attach_answers([self._row_to_question(r) for r in rows])

    def by_user(self, user_id: int, limit: Optional[int] = None) -> list[Question]:
        sql = "SELECT * FROM questions WHERE asked_by = ? ORDER BY created_at DESC, id DESC"
        params: tuple = (user_id,)
        if limit:
            sql += " LIMIT ?"
            params = (user_id, limit)
        rows = get_db().execute(sql, params).fetchall()
        return [self._row_to_question(r) for r in rows]

    def delete(self, question_id: int) -> bool:
        db = get_db()
        cur = db.execute("DELETE FROM questions WHERE id = ?", (question_id,))
        db.commit()
        return cur.rowcount > 0

    # Answers

    def add_answer(self, question_id: int, *, text: str, answered_by: Optional[int],
                   answered_by_name: str = "", image_url: str = "") -> int:
        """Insert an answer and mark the question answered in one transaction."""
        db = get_db()
        with db:
            cur = db.execute(
                "INSERT INTO answers (question_id, text, image_url, answered_by, "
                "answered_by_name, upvotes, is_accepted, created_at) "
                "VALUES (?, ?, ?, ?, ?, 0, 0, ?)",
                (question_id, text, image_url, answered_by, answered_by_name, _now()),
            )
            db.execute("UPDATE questions SET status = 'answered' WHERE id = ?", (question_id,))
        return cur.lastrowid

    def get_answer(self, question_id: int, answer_id) -> Optional[Answer]:
        row = get_db().execute(
            "SELECT * FROM answers WHERE id = ? AND question_id = ?", (answer_id, question_id)
        ).fetchone()
        return self._row_to_answer(row) if row else None

    def answer_at(self, question_id: int, index: int) -> Optional[Answer]:
        if index < 0:
            return None
        row = get_db().execute(
            "SELECT * FROM answers WHERE question_id = ? ORDER BY created_at, id LIMIT 1 OFFSET ?",
            (question_id, index),
        ).fetchone()
        return self._row_to_answer(row) if row else None

    def set_rating(self, answer_id: int, rating: int, rated_by: int) -> bool:
        """Rate an answer once; False when it was already rated."""
        db = get_db()
        cur = db.execute(
            "UPDATE answers SET rating = ?, rated_by = ? WHERE id = ? AND rating IS NULL",
            (rating, rated_by, answer_id),
        )
        db.commit()
        return cur.rowcount > 0

    def upvote_question(self, question_id: int) -> bool:
        db = get_db()
        cur = db.execute("UPDATE questions SET upvotes = upvotes + 1 WHERE id = ?", (question_id,))
        db.commit()
        return cur.rowcount > 0

    def upvote_answer(self, question_id: int, answer_id) -> bool:
        db = get_db()
        cur = db.execute(
            "UPDATE answers SET upvotes = upvotes + 1 WHERE id = ? AND question_id = ?",
            (answer_id, question_id),
        )
        db.commit()
        return cur.rowcount > 0

    # Aggregates

    def user_counts(self, user_id: int) -> dict:
        """Question/answer/upvote/rating totals for one user."""
        db = get_db()
        q = db.execute(
            "SELECT COUNT(*) AS cnt, COALESCE(SUM(upvotes), 0) AS ups "
            "FROM questions WHERE asked_by = ?",
            (user_id,),
        ).fetchone()
        a = db.execute(
            "SELECT COUNT(*) AS cnt, COALESCE(SUM(upvotes), 0) AS ups, "
            "COUNT(rating) AS rated, COALESCE(SUM(rating), 0) AS rating_total "
            "FROM answers WHERE answered_by = ?",
            (user_id,),
        ).fetchone()
        return {
            "questions_asked": q["cnt"],
            "answers_given": a["cnt"],
            "upvotes_received": q["ups"] + a["ups"],
            "ratings_received": a["rated"],
            "rating_points": a["rating_total"],
        }

    def counts_for_users(self, user_ids: list[int]) -> dict[int, dict]:
        """Question and answer counts per user, in two grouped queries."""
        if not user_ids:
            return {}
        placeholders = ",".join("?" * len(user_ids))
        db = get_db()
        result = {uid: {"questions": 0, "answers": 0} for uid in user_ids}
        for r in db.execute(
            f"SELECT asked_by AS uid, COUNT(*) AS cnt FROM questions "
            f"WHERE asked_by IN ({placeholders}) GROUP BY asked_by",
            tuple(user_ids),
        ).fetchall():
            result[r["uid"]]["questions"] = r["cnt"]
        for r in db.execute(
            f"SELECT answered_by AS uid, COUNT(*) AS cnt FROM answers "
            f"WHERE answered_by IN ({placeholders}) GROUP BY answered_by",
            tuple(user_ids),
        ).fetchall():
            result[r["uid"]]["answers"] = r["cnt"]
        return result

    def questions_since(self, user_id: int, since: str) -> int:
        row = get_db().execute(
            "SELECT COUNT(*) AS cnt FROM questions WHERE asked_by = ? AND created_at >= ?",
            (user_id, since),
        ).fetchone()
        return row["cnt"]


# ── Resources ────────────────────────────────────────────────────────


class ResourceStoreDB:
    """Shared learning resources. Immutable after creation."""

    @staticmethod
    def _row_to_resource(r) -> Resource:
        return Resource(
            id=r["id"], title=r["title"], description=r["description"],
            file_url=r["file_url"], file_name=r["file_name"], file_type=r["file_type"],
            subject=r["subject"], topic=r["topic"], grade=r["grade"],
            uploaded_by=r["uploaded_by"], uploaded_by_name=r["uploaded_by_name"],
            created_at=r["created_at"],
        )

    def create(self, *, title: str, subject: str, grade: str, description: str = "",
               file_url: str = "", file_name: str = "", file_type: str = "other",
               topic: str = "", uploaded_by: Optional[int] = None,
               uploaded_by_name: str = "") -> Resource:
        db = get_db()
        cur = db.execute(
            "INSERT INTO resources (title, description, file_url, file_name, file_type, subject, "
            "topic, grade, uploaded_by, uploaded_by_name, created_at) "
            "VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)",
            (title, description, file_url, file_name, file_type, subject, topic, str(grade),
             uploaded_by, uploaded_by_name, _now()),
        )
        db.commit()
        return self.get(cur.lastrowid)

    def get(self, resource_id) -> Optional[Resource]:
        row = get_db().execute("SELECT * FROM resources WHERE id = ?", (resource_id,)).fetchone()
        return self._row_to_resource(row) if row else None

    def by_grade(self, grade: str) -> list[Resource]:
        rows = get_db().execute(
            "SELECT * FROM resources WHERE grade = ? ORDER BY created_at DESC, id DESC",
            (str(grade),),
        ).fetchall()
        return [self._row_to_resource(r) for r in rows]

    def by_grades(self, grades, subject: Optional[str] = None) -> list[Resource]:
        grades = sorted(grades)
        if not grades:
            return []
        sql = f"SELECT * FROM resources WHERE grade IN ({','.join('?' * len(grades))})"
        params: list = list(grades)
        if subject:
            sql += " AND subject = ?"
            params.append(subject)
        sql += " ORDER BY created_at DESC, id DESC"
        rows = get_db().execute(sql, params).fetchall()
        return [self._row_to_resource(r) for r in rows]


# ── Notifications ────────────────────────────────────────────────────


class NotificationStoreDB:
    """Per-recipient notifications.

    ``db`` may be passed explicitly for delivery outside a request context.
    """

    def __init__(self, user_id: int, db=None):
        self.user_id = user_id
        self._db = db

    def _conn(self):
        return self._db if self._db is not None else get_db()

    def add(self, notif_type: str, title: str, message: str = "",
            question_id: Optional[int] = None) -> int:
        db = self._conn()
        cur = db.execute(
            "INSERT INTO notifications (user_id, type, title, message, question_id, read, created_at) "
            "VALUES (?, ?, ?, ?, ?, 0, ?)",
            (self.user_id, notif_type, title, message, question_id, _now()),
        )
        db.commit()
        return cur.lastrowid

    def total(self) -> int:
        row = self._conn().execute(
            "SELECT COUNT(*) AS cnt FROM notifications WHERE user_id = ?", (self.user_id,)
        ).fetchone()
        return row["cnt"]

    def unread_count(self) -> int:
        row = self._conn().execute(
            "SELECT COUNT(*) AS cnt FROM notifications WHERE user_id = ? AND read = 0",
            (self.user_id,),
        ).fetchone()
        return row["cnt"] if row else 0

    def recent(self, limit: int = 20, offset: int = 0) -> list[Notification]:
        rows = self._conn().execute(
            "SELECT * FROM notifications WHERE user_id = ? "
            "ORDER BY created_at DESC, id DESC LIMIT ? OFFSET ?",
            (self.user_id, limit, offset),
        ).fetchall()
        return [self._row_to_notif(r) for r in rows]

    def unread_of_type(self, notif_type: str) -> list[Notification]:
        rows = self._conn().execute(
            "SELECT * FROM notifications WHERE user_id = ? AND type = ? AND read = 0 "
            "ORDER BY created_at DESC, id DESC",
            (self.user_id, notif_type),
        ).fetchall()
        return [self._row_to_notif(r) for r in rows]

    def mark_read(self, notif_id: int) -> bool:
        db = self._conn()
        cur = db.execute(
            "UPDATE notifications SET read = 1 WHERE id = ? AND user_id = ?", (notif_id, self.user_id)
        )
        db.commit()
        return cur.rowcount > 0

    def mark_all_read(self) -> int:
        db = self._conn()
        cur = db.execute(
            "UPDATE notifications SET read = 1 WHERE user_id = ? AND read = 0", (self.user_id,)
        )
        db.commit()
        return cur.rowcount

    def delete(self, notif_id: int) -> bool:
        db = self._conn()
        cur = db.execute(
            "DELETE FROM notifications WHERE id = ? AND user_id = ?", (notif_id, self.user_id)
        )
        db.commit()
        return cur.rowcount > 0

    @staticmethod
    def _row_to_notif(r) -> Notification:
        return Notification(
            id=r["id"], user_id=r["user_id"], type=r["type"], title=r["title"],
            message=r["message"], question_id=r["question_id"], read=bool(r["read"]),
            created_at=r["created_at"],
        )


# ── Study planner ────────────────────────────────────────────────────


def end_of_day(day: date) -> str:
    return datetime.combine(day, time(23, 59, 59, 999000)).isoformat()


def _day_bounds(day: date) -> tuple[str, str]:
    return datetime.combine(day, time.min).isoformat(), end_of_day(day)


class StudyTaskStoreDB:
    """Per-user planner tasks, due at the end of the chosen day."""

    UPDATABLE = ("title", "description", "subject", "priority", "estimated_time", "completed")

    def __init__(self, user_id: int):
        self.user_id = user_id

    def add(self, title: str, day: date, *, description: str = "", subject: str = "General",
            priority: str = "medium", estimated_time: int = 30) -> StudyTask:
        db = get_db()
        cur = db.execute(
            "INSERT INTO study_tasks (user_id, title, description, subject, priority, due_date, "
            "estimated_time, completed, created_at) VALUES (?, ?, ?, ?, ?, ?, ?, 0, ?)",
            (self.user_id, title, description, subject, priority, end_of_day(day),
             estimated_time, _now()),
        )
        db.commit()
        return self.get(cur.lastrowid)

    def get(self, task_id) -> Optional[StudyTask]:
        row = get_db().execute(
            "SELECT * FROM study_tasks WHERE id = ? AND user_id = ?", (task_id, self.user_id)
        ).fetchone()
        return self._row_to_task(row) if row else None

    def for_day(self, day: date) -> list[StudyTask]:
        start, end = _day_bounds(day)
        rows = get_db().execute(
            "SELECT * FROM study_tasks WHERE user_id = ? AND due_date BETWEEN ? AND ? "
            "ORDER BY due_date ASC, created_at DESC, id DESC",
            (self.user_id, start, end),
        ).fetchall()
        return [self._row_to_task(r) for r in rows]

    def update(self, task_id, **fields) -> Optional[StudyTask]:
        updates = {k: v for k, v in fields.items() if k in self.UPDATABLE and v is not None}
        if "completed" in updates:
            updates["completed"] = 1 if updates["completed"] else 0
        if updates:
            db = get_db()
            assignments = ", ".join(f"{k} = ?" for k in updates)
            db.execute(
                f"UPDATE study_tasks SET {assignments} WHERE id = ? AND user_id = ?",
                (*updates.values(), task_id, self.user_id),
            )
            db.commit()
        return self.get(task_id)

    def delete(self, task_id) -> bool:
        db = get_db()
        cur = db.execute(
            "DELETE FROM study_tasks WHERE id = ? AND user_id = ?", (task_id, self.user_id)
        )
        db.commit()
        return cur.rowcount > 0

    @staticmethod
    def _row_to_task(r) -> StudyTask:
        return StudyTask(
            id=r["id"], user_id=r["user_id"], title=r["title"], description=r["description"],
            subject=r["subject"], priority=r["priority"], due_date=r["due_date"],
            estimated_time=r["estimated_time"], completed=bool(r["completed"]),
            created_at=r["created_at"],
        )


class StudySessionStoreDB:
    """Timed study sessions. At most one open (not completed) session per user."""

    def __init__(self, user_id: int):
        self.user_id = user_id

    def active(self) -> Optional[StudySession]:
        row = get_db().execute(
            "SELECT * FROM study_sessions WHERE user_id = ? AND completed = 0 "
            "ORDER BY id DESC LIMIT 1",
            (self.user_id,),
        ).fetchone()
        return self._row_to_session(row) if row else None

    def get(self, session_id) -> Optional[StudySession]:
        row = get_db().execute(
            "SELECT * FROM study_sessions WHERE id = ? AND user_id = ?", (session_id, self.user_id)
        ).fetchone()
        return self._row_to_session(row) if row else None

    def start(self, subject: str, day: date, *, description: str = "", duration: int = 60,
              now: Optional[datetime] = None) -> StudySession:
        now = now or datetime.now()
        db = get_db()
        cur = db.execute(
            "INSERT INTO study_sessions (user_id, subject, description, duration, date, start_time, "
            "completed, created_at) VALUES (?, ?, ?, ?, ?, ?, 0, ?)",
            (self.user_id, subject, description, duration, day.isoformat(),
             now.isoformat(), _now()),
        )
        db.commit()
        return self.get(cur.lastrowid)

    def pause(self, session: StudySession, now: Optional[datetime] = None) -> StudySession:
        if session.completed or session.is_paused:
            return session
        now = now or datetime.now()
        db = get_db()
        db.execute(
            "UPDATE study_sessions SET pause_started_at = ? WHERE id = ? AND user_id = ?",
            (now.isoformat(), session.id, self.user_id),
        )
        db.commit()
        return self.get(session.id)

    def resume(self, session: StudySession, now: Optional[datetime] = None) -> StudySession:
        if session.completed or not session.is_paused:
            return session
        now = now or datetime.now()
        delta = _minutes_between(session.pause_started_at, now)
        db = get_db()
        db.execute(
            "UPDATE study_sessions SET paused_time = paused_time + ?, pause_started_at = '' "
            "WHERE id = ? AND user_id = ?",
            (delta, session.id, self.user_id),
        )
        db.commit()
        return self.get(session.id)

    def end(self, session: StudySession, now: Optional[datetime] = None) -> StudySession:
        """Close the session; actual duration is elapsed minus paused, floored at 0."""
        if session.completed:
            return session
        now = now or datetime.now()
        paused = session.paused_time
        if session.is_paused:
            paused += _minutes_between(session.pause_started_at, now)
        actual = max(0, _minutes_between(session.start_time, now) - paused)
        db = get_db()
        db.execute(
            "UPDATE study_sessions SET end_time = ?, actual_duration = ?, paused_time = ?, "
            "pause_started_at = '', completed = 1 WHERE id = ? AND user_id = ?",
            (now.isoformat(), actual, paused, session.id, self.user_id),
        )
        db.commit()
        return self.get(session.id)

    def for_day(self, day: date) -> list[StudySession]:
        rows = get_db().execute(
            "SELECT * FROM study_sessions WHERE user_id = ? AND date = ? "
            "ORDER BY created_at DESC, id DESC",
            (self.user_id, day.isoformat()),
        ).fetchall()
        return [self._row_to_session(r) for r in rows]

    @staticmethod
    def _row_to_session(r) -> StudySession:
        return StudySession(
            id=r["id"], user_id=r["user_id"], subject=r["subject"],
            description=r["description"], duration=r["duration"], date=r["date"],
            start_time=r["start_time"], end_time=r["end_time"],
            actual_duration=r["actual_duration"], paused_time=r["paused_time"],
            pause_started_at=r["pause_started_at"], completed=bool(r["completed"]),
            created_at=r["created_at"],
        )


# ── Downloads ────────────────────────────────────────────────────────


class DownloadStoreDB:
    """Per-user provenance log of downloaded resources."""

    def __init__(self, user_id: int):
        self.user_id = user_id

    def record(self, resource: Resource) -> Download:
        db = get_db()
        downloaded_at = _now()
        cur = db.execute(
            "INSERT INTO downloads (user_id, resource_id, resource_title, file_name, downloaded_at) "
            "VALUES (?, ?, ?, ?, ?)",
            (self.user_id, resource.id, resource.title,
             resource.file_name or resource.title, downloaded_at),
        )
        db.commit()
        return Download(
            id=cur.lastrowid, user_id=self.user_id, resource_id=resource.id,
            resource_title=resource.title, file_name=resource.file_name or resource.title,
            downloaded_at=downloaded_at,
        )

    def recent(self, limit: int = 50) -> list[Download]:
        rows = get_db().execute(
            "SELECT * FROM downloads WHERE user_id = ? ORDER BY downloaded_at DESC, id DESC LIMIT ?",
            (self.user_id, limit),
        ).fetchall()
        return [
            Download(
                id=r["id"], user_id=r["user_id"], resource_id=r["resource_id"],
                resource_title=r["resource_title"], file_name=r["file_name"],
                downloaded_at=r["downloaded_at"],
            )
            for r in rows
        ]
