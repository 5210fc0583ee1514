"""
Shared Flask extensions, created unbound and attached in create_app().

Kept out of app.py so blueprints can decorate routes with ``limiter.limit``
without importing the application module.
"""

from __future__ import annotations

from flask_limiter import Limiter
from flask_limiter.util import get_remote_address

limiter = Limiter(key_func=get_remote_address, default_limits=["300 per hour"])
