"""
Roadmap Planner
Flask Application Factory.

Usage:
    from planner import create_app
    app = create_app()           # defaults to "development"
    app = create_app("testing")  # explicit config
"""

import logging
import os

from flask import Flask, abort, request
from flask_cors import CORS
from flask_migrate import Migrate

from planner.config import config
from planner.models import db
from planner.middleware.logging_config import configure_logging
from planner.middleware.timing import init_request_timing
from planner.middleware.diagnostics import run_startup_diagnostics

logger = logging.getLogger(__name__)

# ── SQLite FK enforcement (global engine event) ─────────────────────────
from sqlalchemy import event as _sa_event, engine as _sa_engine
from sqlalchemy.engine import make_url


@_sa_event.listens_for(_sa_engine.Engine, "connect")
def _enable_sqlite_fk(dbapi_conn, connection_record):
    """Enable foreign key enforcement for SQLite connections."""
    if "sqlite" in type(dbapi_conn).__module__:
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


migrate = Migrate()


def create_app(config_name=None):
    """
    Create and configure the Flask application.

    Args:
        config_name: Configuration environment name.
                     One of: "development", "testing", "production".
                     Defaults to APP_ENV env var, or "development" if unset.

    Returns:
        Configured Flask application instance.
    """
    if config_name is None:
        config_name = os.getenv("APP_ENV", "development")

    app = Flask(__name__, instance_relative_config=True)
    config_cls = config[config_name]
    # ProductionConfig validates its environment on instantiation
    app.config.from_object(config_cls() if config_name == "production" else config_cls)

    # ── Structured logging (must be first) ───────────────────────────────
    configure_logging(app)

    # ── Extensions ───────────────────────────────────────────────────────
    db.init_app(app)
    migrate.init_app(app, db)
    cors_origins = app.config.get("CORS_ORIGINS", "*")
    if cors_origins and cors_origins != "*":
        CORS(app, origins=[o.strip() for o in cors_origins.split(",") if o.strip()])
    else:
        CORS(app)

    # ── Request timing middleware ────────────────────────────────────────
    init_request_timing(app)

    # ── Request guards (Content-Type) ────────────────────────────────────
    @app.before_request
    def _guard_request():
        if request.method == "POST" and request.path.startswith("/api/"):
            ct = request.content_type or ""
            if request.data and "json" not in ct:
                abort(415, description="Content-Type must be application/json")

    # ── Import all models so create_all / Alembic see them ───────────────
    from planner.models import portfolio as _portfolio_models     # noqa: F401
    from planner.models import planning as _planning_models       # noqa: F401
    from planner.models import resourcing as _resourcing_models   # noqa: F401
    from planner.models import governance as _governance_models   # noqa: F401
    from planner.models import links as _links_models             # noqa: F401
    from planner.models import setting as _setting_models         # noqa: F401

    from planner.services.record_store import init_record_store

    # ── Tables, named connection, baseline seed ──────────────────────────
    db_url = make_url(app.config["SQLALCHEMY_DATABASE_URI"])
    if db_url.get_backend_name() == "sqlite" and db_url.database not in (None, "", ":memory:"):
        os.makedirs(os.path.dirname(os.path.abspath(db_url.database)), exist_ok=True)

    with app.app_context():
        db.create_all()
        store = init_record_store(app, db.engine)
        store.ensure_baseline()

    # ── Blueprints ───────────────────────────────────────────────────────
    from planner.blueprints import register_blueprints
    register_blueprints(app)

    # ── CLI commands ─────────────────────────────────────────────────────
    @app.cli.command("seed-baseline")
    def seed_baseline_cmd():
        """Insert the baseline scenario if it is missing."""
        from planner.services.record_store import get_record_store
        created = get_record_store().ensure_baseline()
        logger.info("Baseline scenario %s.", "created" if created else "already present")

    # ── Health check (short form — detailed version at /health/live) ────
    @app.route("/api/v1/health")
    def health():
        return {"status": "ok", "app": "Roadmap Planner"}

    # ── Error handlers ───────────────────────────────────────────────────
    @app.errorhandler(404)
    def not_found(e):
        return {"error": "Not found", "path": request.path}, 404

    @app.errorhandler(405)
    def method_not_allowed(e):
        return {"error": "Method not allowed"}, 405

    @app.errorhandler(415)
    def unsupported_media_type(e):
        return {"error": e.description}, 415

    @app.errorhandler(500)
    def server_error(e):
        logger.error("500 error: %s", e, exc_info=True)
        return {"error": "Internal server error"}, 500

    # ── Startup diagnostics ──────────────────────────────────────────────
    run_startup_diagnostics(app)

    return app
