"""
Test fixtures for EduLink.

Provides app, client, db and role-specific logged-in clients over a small
seeded population backed by file-based SQLite.
"""

from __future__ import annotations

import sys
from datetime import date, datetime
from pathlib import Path
from types import SimpleNamespace

import pytest
from werkzeug.security import generate_password_hash

sys.path.insert(0, str(Path(__file__).parent.parent))

PASSWORD = "Passw0rd1"
# Hashing is slow; do it once per session.
PASSWORD_HASH = generate_password_hash(PASSWORD)

IDS = SimpleNamespace(student=1, tutor=2, teacher=3, parent=4, classmate=5)

SEED_USERS = [
    # id, display_name, email, role, grade, subject, student_email, points
    (IDS.student, "Sam Student", "sam@example.com", "student", "7", None, None, 0),
    (IDS.tutor, "Tina Tutor", "tina@example.com", "tutor", "9", None, None, 250),
    (IDS.teacher, "Terry Teacher", "terry@example.com", "teacher", None, "Mathematics", None, 0),
    (IDS.parent, "Pat Parent", "pat@example.com", "parent", None, None, "sam@example.com", 0),
    (IDS.classmate, "Cara Classmate", "cara@example.com", "student", "7", None, None, 40),
]


def insert_user(db, user_id, name, email, role, grade=None, subject=None,
                student_email=None, points=0, registration_year=None):
    db.execute(
        "INSERT INTO users (id, display_name, email, password_hash, role, grade, subject, "
        "student_email, points, registration_year, created_at) "
        "VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)",
        (user_id, name, email, PASSWORD_HASH, role, grade, subject, student_email,
         points, registration_year or date.today().year, datetime.now().isoformat()),
    )


def insert_question(db, asked_by, grade, title="How do fractions work?", subject="Mathematics",
                    status="unanswered", created_at=None):
    cur = db.execute(
        "INSERT INTO questions (title, description, subject, grade, asked_by, asked_by_name, "
        "status, created_at) VALUES (?, '', ?, ?, ?, '', ?, ?)",
        (title, subject, grade, asked_by, status, created_at or datetime.now().isoformat()),
    )
    return cur.lastrowid


@pytest.fixture
def ids():
    return IDS


@pytest.fixture
def app(tmp_path):
    """Create app with file-based SQLite and the seeded population."""
    from app import create_app

    app = create_app({
        "TESTING": True,
        "DATABASE": str(tmp_path / "test.db"),
        "SECRET_KEY": "test-secret-key",
        "CRON_SECRET": "cron-test-secret",
    })

    with app.app_context():
        from database import get_db, init_db, run_migrations

        init_db()
        run_migrations()

        db = get_db()
        for row in SEED_USERS:
            insert_user(db, *row)
        db.commit()

    # Requests must not share an app context (Flask-Login caches the user on g).
    yield app


@pytest.fixture
def client(app):
    """Unauthenticated test client."""
    return app.test_client()


@pytest.fixture
def db(app):
    """Separate connection for seeding and asserting around requests."""
    from database import connect

    conn = connect(app.config["DATABASE"])
    yield conn
    conn.close()


@pytest.fixture
def app_ctx(app):
    """Application context for calling stores and workflows directly."""
    with app.app_context():
        yield app


def login(app, email, password=PASSWORD):
    client = app.test_client()
    resp = client.post("/api/login", json={"email": email, "password": password})
    assert resp.status_code == 200, resp.get_json()
    return client


@pytest.fixture
def student_client(app):
    """Logged in as Sam (student, grade 7)."""
    return login(app, "sam@example.com")


@pytest.fixture
def tutor_client(app):
    """Logged in as Tina (tutor, grade 9, 250 points)."""
    return login(app, "tina@example.com")


@pytest.fixture
def teacher_client(app):
    return login(app, "terry@example.com")


@pytest.fixture
def parent_client(app):
    """Logged in as Pat, linked to Sam."""
    return login(app, "pat@example.com")


@pytest.fixture
def classmate_client(app):
    return login(app, "cara@example.com")
