"""
EduLink: Flask JSON API

Peer Q&A by grade, shared resources, notifications, a study planner and a
parent dashboard for the EduLink mobile client.
"""

from __future__ import annotations

import hashlib
import logging
import os
from typing import Any

from flask import Flask, Response, jsonify, request as flask_request
from flask_compress import Compress
from werkzeug.exceptions import HTTPException

import database
from auth import auth_bp, login_manager
from blueprints import register_blueprints
from cache_backend import init_cache
from config import TestingConfig, config_by_name
from extensions import limiter
from logging_config import init_logging
from tasks import init_tasks

logger = logging.getLogger(__name__)


def create_app(test_config: dict[str, Any] | None = None) -> Flask:
    app = Flask(__name__)

    # Load config
    if test_config is not None:
        app.config.from_object(TestingConfig)
        app.config.update(test_config)
    else:
        env = os.environ.get("FLASK_ENV", "development")
        cfg = config_by_name.get(env, config_by_name["development"])
        app.config.from_object(cfg)
        if hasattr(cfg, "validate"):
            cfg.validate()

    app.secret_key = app.config["SECRET_KEY"]

    Compress(app)

    # Cache backend (Redis or in-memory)
    init_cache(app)

    # Background tasks (RQ or inline)
    init_tasks(app)

    # Structured logging
    init_logging(app)

    # Database teardown and first-request schema setup
    database.init_app(app)

    # Rate limiter (disabled in testing)
    limiter.init_app(app)
    limiter.enabled = not app.config.get("TESTING")

    app.register_blueprint(auth_bp)
    login_manager.init_app(app)

    register_blueprints(app)

    # Uncaught errors under /api/ become a generic 500 JSON body
    @app.errorhandler(Exception)
    def handle_unexpected(exc: Exception):
        if isinstance(exc, HTTPException):
            if flask_request.path.startswith("/api/"):
                return jsonify({"message": exc.description}), exc.code
            return exc
        logger.exception("Unhandled error on %s %s", flask_request.method, flask_request.path)
        return jsonify({"message": "Server error"}), 500

    # CORS for the mobile client
    @app.after_request
    def set_cors_headers(response: Response) -> Response:
        origin = app.config.get("CORS_ORIGIN", "*")
        response.headers["Access-Control-Allow-Origin"] = origin
        response.headers["Access-Control-Allow-Headers"] = "Content-Type, Authorization, X-Request-ID"
        response.headers["Access-Control-Allow-Methods"] = "GET, POST, PATCH, DELETE, OPTIONS"
        if origin != "*":
            response.headers["Access-Control-Allow-Credentials"] = "true"
            response.headers["Vary"] = "Origin"
        return response

    # Security headers
    @app.after_request
    def set_security_headers(response: Response) -> Response:
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        response.headers["Content-Security-Policy"] = "default-src 'none'; frame-ancestors 'none'"
        if not app.debug and not app.testing:
            response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"
        return response

    # ETag support for JSON API responses
    @app.after_request
    def set_etag(response: Response) -> Response:
        if (
            flask_request.method == "GET"
            and response.status_code == 200
            and response.content_type
            and "application/json" in response.content_type
            and response.content_length
            and response.content_length < 1_048_576  # < 1 MB
        ):
            etag = '"' + hashlib.md5(response.get_data()).hexdigest() + '"'
            response.headers["ETag"] = etag
            if flask_request.headers.get("If-None-Match") == etag:
                response.status_code = 304
                response.set_data(b"")
        return response

    # Periodic jobs (promotion sweep, cache cleanup)
    if not app.config.get("TESTING"):
        from scheduler import init_scheduler
        init_scheduler(app)

    return app


if __name__ == "__main__":
    application = create_app()
    application.run(debug=application.debug, port=application.config.get("PORT", 5000))
