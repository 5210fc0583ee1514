"""Best-effort notification delivery.

Workflows call ``notify`` after their own writes have committed. Delivery goes
through ``tasks.enqueue`` so it can run on an RQ worker; the task function
therefore takes the database path and opens its own connection. A failed
delivery is logged and reported as False, never raised.
"""

from __future__ import annotations

import logging
from typing import Optional

from flask import current_app

from database import connect
from db_stores import NotificationStoreDB
from models import NOTIFICATION_TYPES
from tasks import enqueue

logger = logging.getLogger(__name__)

PREVIEW_CHARS = 50

KUDOS_TITLE = "🎉 Kudos from Parent!"
KUDOS_MESSAGE = "Your parent is proud of your learning progress! Keep up the great work! 🌟"


def deliver(db_path: str, user_id: int, notif_type: str, title: str,
            message: str = "", question_id: Optional[int] = None) -> int:
    """Write one notification row. Runs inline or on a worker."""
    conn = connect(db_path)
    try:
        return NotificationStoreDB(user_id, db=conn).add(notif_type, title, message, question_id)
    finally:
        conn.close()


def notify(user_id: Optional[int], notif_type: str, title: str, message: str = "",
           question_id: Optional[int] = None) -> bool:
    if not user_id:
        return False
    if notif_type not in NOTIFICATION_TYPES:
        logger.warning("unknown notification type %r (user_id=%s)", notif_type, user_id)
        return False
    try:
        enqueue(deliver, current_app.config["DATABASE"], user_id, notif_type,
                title, message, question_id)
        return True
    except Exception:
        logger.warning("notification delivery failed (type=%s user_id=%s)",
                       notif_type, user_id, exc_info=True)
        return False


def preview(text: str, limit: int = PREVIEW_CHARS) -> str:
    text = text or ""
    return text[:limit] + ("..." if len(text) > limit else "")


def answer_message(answerer_name: str, question_text: str) -> str:
    return f'{answerer_name} answered: "{preview(question_text)}"'
