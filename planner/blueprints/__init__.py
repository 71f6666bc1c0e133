"""
Roadmap Planner
Blueprint registry.
"""

from flask import Flask


def register_blueprints(app: Flask) -> None:
    """Attach every API blueprint to ``app``."""
    from planner.blueprints.command_bp import command_bp
    from planner.blueprints.health_bp import health_bp

    app.register_blueprint(command_bp)
    app.register_blueprint(health_bp)
