"""
Periodic background jobs.

Jobs:
  - Tutor promotion sweep (hourly): catches students whose points crossed
    the threshold outside the answer/rating paths
  - Cache cleanup (hourly)
"""

from __future__ import annotations

import sqlite3

from apscheduler.schedulers.background import BackgroundScheduler

from audit import log_event
from cache_backend import get_cache
from db_stores import UserStoreDB


def promotion_sweep(app) -> list[int]:
    """Promote every eligible student. Returns the promoted ids."""
    with app.app_context():
        try:
            promoted = UserStoreDB().promote_all_eligible()
        except sqlite3.Error as e:
            app.logger.error("Promotion sweep failed: %s", e)
            return []
        for user_id in promoted:
            log_event("tutor_promoted", user_id, "scheduled sweep")
        if promoted:
            app.logger.info("Promotion sweep promoted %d students", len(promoted))
        return promoted


def cleanup_cache(app) -> int:
    removed = get_cache().cleanup()
    if removed:
        app.logger.debug("Cache cleanup removed %d entries", removed)
    return removed


def init_scheduler(app):
    """Start the background scheduler. Returns the scheduler instance."""
    scheduler = BackgroundScheduler(daemon=True)

    scheduler.add_job(
        func=promotion_sweep,
        args=[app],
        trigger="interval",
        hours=1,
        id="tutor_promotion_sweep",
        replace_existing=True,
    )

    scheduler.add_job(
        func=cleanup_cache,
        args=[app],
        trigger="interval",
        hours=1,
        id="cache_cleanup",
        replace_existing=True,
    )

    scheduler.start()
    app.logger.info("Scheduler started (promotion sweep, cache cleanup)")
    return scheduler
