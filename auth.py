"""
User accounts: registration, session login and the current-user profile.

JSON endpoints on a Flask-Login session. Passwords are optional at
registration (accounts created by a trusted client without one cannot log
in) and hashed with werkzeug.security when given.
"""

from __future__ import annotations

from flask import Blueprint, jsonify, request
from flask_login import LoginManager, UserMixin, current_user, login_required, login_user, logout_user
from werkzeug.security import check_password_hash, generate_password_hash

from audit import log_event
from db_stores import UserStoreDB
from extensions import limiter
from helpers import error, json_body
from models import GRADES, ROLES
from policy import effective_role, viewer_grade, viewer_grades
from qa import check_promotion

auth_bp = Blueprint("auth", __name__)
login_manager = LoginManager()

ROLE_FIELD_ERRORS = {
    "student": ("grade", "Grade is required for students"),
    "teacher": ("subject", "Subject is required for teachers"),
    "parent": ("studentEmail", "Student email is required for parents"),
}
MIN_PASSWORD_LENGTH = 8


class User(UserMixin):
    """Session identity for Flask-Login; full profiles come from UserStoreDB."""

    def __init__(self, id: int, display_name: str, email: str, role: str = "student"):
        self.id = id
        self.display_name = display_name
        self.email = email
        self.role = role

    @staticmethod
    def get(user_id: int):
        profile = UserStoreDB().get(user_id)
        if profile is None:
            return None
        return User(profile.id, profile.display_name, profile.email, profile.role)


@login_manager.user_loader
def load_user(user_id):
    return User.get(int(user_id))


@login_manager.unauthorized_handler
def unauthorized():
    return error("Authentication required", 401)


def _validate_password(password: str) -> str | None:
    """Return an error message if password is too weak, else None."""
    if len(password) < MIN_PASSWORD_LENGTH:
        return f"Password must be at least {MIN_PASSWORD_LENGTH} characters"
    if not any(c.isalpha() for c in password) or not any(c.isdigit() for c in password):
        return "Password must contain letters and digits"
    return None


def profile_payload(profile) -> dict:
    """Profile plus the derived fields clients use to pick screens."""
    data = profile.to_dict()
    grade = viewer_grade(profile)
    if profile.is_learner and grade:
        data["currentGrade"] = grade
    data["effectiveRole"] = effective_role(profile.role, profile.points)
    data["visibleGrades"] = sorted(viewer_grades(profile), key=int)
    return data


# ── Registration ────────────────────────────────────────────


@auth_bp.route("/api/user", methods=["POST"])
@limiter.limit("10 per hour")
def register():
    data = json_body()
    display_name = str(data.get("displayName") or "").strip()
    email = UserStoreDB.normalize_email(data.get("email"))
    if not display_name or not email:
        return error("Display name and email are required", 400)

    role = data.get("role")
    role = role if role in ROLES else "student"

    field, message = ROLE_FIELD_ERRORS.get(role, (None, None))
    if field and not str(data.get(field) or "").strip():
        return error(message, 400)

    grade = str(data.get("grade") or "").strip() or None
    if role in ("student", "tutor") and grade is not None and grade not in GRADES:
        return error("Grade must be one of 6-11", 400)

    users = UserStoreDB()
    existing = users.get_by_email(email)
    if existing:
        return jsonify({"message": "User info updated", "user": existing.to_dict()}), 200

    password = data.get("password") or ""
    if password:
        pw_error = _validate_password(password)
        if pw_error:
            return error(pw_error, 400)

    user = users.create(
        display_name,
        email,
        role,
        grade=grade if role in ("student", "tutor") else None,
        subject=data.get("subject") if role == "teacher" else None,
        student_email=data.get("studentEmail") if role == "parent" else None,
        password_hash=generate_password_hash(password) if password else "",
        profile_image=str(data.get("profileImage") or ""),
    )
    log_event("register", user.id, f"email={email} role={role}")
    if password:
        login_user(User(user.id, user.display_name, user.email, user.role), remember=True)
    return jsonify({"message": "Registered successfully", "user": user.to_dict()}), 201


# ── Session ─────────────────────────────────────────────────


@auth_bp.route("/api/login", methods=["POST"])
@limiter.limit("5 per 15 minutes")
def login():
    data = json_body()
    email = UserStoreDB.normalize_email(data.get("email"))
    password = data.get("password") or ""
    if not email or not password:
        return error("Email and password are required", 400)

    users = UserStoreDB()
    profile = users.get_by_email(email)
    pw_hash = users.password_hash(profile.id) if profile else ""
    if not pw_hash or not check_password_hash(pw_hash, password):
        log_event("login_failed", profile.id if profile else None, f"email={email}")
        return error("Invalid email or password", 401)

    # Login is one of the two places a pending promotion is applied.
    if check_promotion(profile.id):
        profile = users.get(profile.id)

    login_user(User(profile.id, profile.display_name, profile.email, profile.role), remember=True)
    log_event("login_success", profile.id)
    return jsonify({"message": "Logged in", "user": profile_payload(profile)})


@auth_bp.route("/api/logout", methods=["POST"])
def logout():
    uid = current_user.id if current_user.is_authenticated else None
    log_event("logout", uid)
    logout_user()
    return jsonify({"message": "Logged out"})


@auth_bp.route("/api/me")
@login_required
def me():
    users = UserStoreDB()
    if check_promotion(current_user.id):
        current_user.role = "tutor"
    profile = users.get(current_user.id)
    if profile is None:
        logout_user()
        return error("User not found", 404)
    return jsonify({"user": profile_payload(profile)})
