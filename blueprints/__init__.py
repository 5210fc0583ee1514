"""
Blueprint registration for EduLink.

All blueprints carry full /api/... paths, so none is registered with a prefix.
"""

from __future__ import annotations


def register_blueprints(app):
    from blueprints.core import bp as core_bp
    from blueprints.questions import bp as questions_bp
    from blueprints.resources import bp as resources_bp
    from blueprints.notifications import bp as notifications_bp
    from blueprints.planner import bp as planner_bp
    from blueprints.parent import bp as parent_bp
    from blueprints.progress import bp as progress_bp

    app.register_blueprint(core_bp)
    app.register_blueprint(questions_bp)
    app.register_blueprint(resources_bp)
    app.register_blueprint(notifications_bp)
    app.register_blueprint(planner_bp)
    app.register_blueprint(parent_bp)
    app.register_blueprint(progress_bp)
