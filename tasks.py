"""Background work for EduLink via RQ, run inline when no Redis is configured.

Only side effects that must never fail the request go through here
(notification delivery today). Callers pass plain, picklable arguments;
task functions open their own database connection.

Usage:
    from tasks import enqueue
    enqueue(deliver_notification, db_path, user_id, "answer", title, message)
"""

from __future__ import annotations

import logging

import redis
from rq import Queue

logger = logging.getLogger(__name__)

DEFAULT_QUEUE = "edulink"

_queue: Queue | None = None


def init_tasks(app) -> None:
    """Connect the RQ queue when REDIS_URL is set. Called from create_app()."""
    global _queue
    _queue = None

    redis_url = app.config.get("REDIS_URL", "")
    if not redis_url or app.config.get("TESTING"):
        app.logger.info("Task backend: inline (no REDIS_URL)")
        return

    try:
        conn = redis.Redis.from_url(redis_url)
        conn.ping()
        _queue = Queue(app.config.get("TASK_QUEUE", DEFAULT_QUEUE), connection=conn)
        app.logger.info("Task backend: RQ queue %r (%s)", _queue.name, redis_url)
    except redis.RedisError as e:
        app.logger.warning("Task backend: inline (Redis error: %s)", e)


def enqueue(func, *args, **kwargs):
    """Hand ``func`` to the worker queue, or call it inline.

    Returns the RQ Job, or the function's return value when run inline.
    """
    if _queue is not None:
        try:
            job = _queue.enqueue(func, *args, **kwargs)
            logger.debug("Enqueued %s (job=%s)", func.__name__, job.id)
            return job
        except redis.RedisError as e:
            logger.warning("RQ enqueue failed for %s, running inline: %s", func.__name__, e)

    logger.debug("Running %s inline", func.__name__)
    return func(*args, **kwargs)


def is_async_available() -> bool:
    return _queue is not None
