"""Tests for tasks.py: inline fallback and enqueue wrapper."""

from __future__ import annotations

from unittest.mock import MagicMock

import redis


def _sample_task(x, y):
    """A simple function for testing enqueue."""
    return x + y


def _sample_task_with_kwargs(x, multiplier=1):
    return x * multiplier


class TestInlineFallback:
    def test_enqueue_runs_inline_without_redis(self, app):
        from tasks import enqueue
        assert enqueue(_sample_task, 3, 4) == 7

    def test_enqueue_with_kwargs(self, app):
        from tasks import enqueue
        assert enqueue(_sample_task_with_kwargs, 3, multiplier=5) == 15

    def test_queue_error_falls_back_inline(self, monkeypatch):
        import tasks
        queue = MagicMock()
        queue.enqueue.side_effect = redis.ConnectionError("down")
        monkeypatch.setattr(tasks, "_queue", queue)
        assert tasks.enqueue(_sample_task, 1, 2) == 3

    def test_queue_receives_job(self, monkeypatch):
        import tasks
        queue = MagicMock()
        monkeypatch.setattr(tasks, "_queue", queue)
        job = tasks.enqueue(_sample_task, 1, 2)
        queue.enqueue.assert_called_once_with(_sample_task, 1, 2)
        assert job is queue.enqueue.return_value


class TestInitTasks:
    def test_init_without_redis_url(self, app):
        from tasks import init_tasks, is_async_available
        init_tasks(app)
        assert is_async_available() is False

    def test_testing_stays_inline(self, app):
        from tasks import init_tasks, is_async_available
        app.config["REDIS_URL"] = "redis://invalid-host:9999"
        init_tasks(app)
        assert is_async_available() is False

    def test_unreachable_redis_falls_back(self, app):
        from tasks import init_tasks, is_async_available
        app.config.update(TESTING=False, REDIS_URL="redis://127.0.0.1:1/0")
        init_tasks(app)
        assert is_async_available() is False
