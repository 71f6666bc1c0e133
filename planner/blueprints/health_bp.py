"""
Health check blueprint.

Endpoints:
    GET /api/v1/health/ready  — simple 200 for the desktop shell's start-up probe
    GET /api/v1/health/live   — named connection status and baseline presence
"""

import logging
import time

from flask import Blueprint, current_app, jsonify
from sqlalchemy import text

from planner.core.exceptions import NotFoundError
from planner.models.planning import BASELINE_SCENARIO_ID
from planner.services.record_store import get_record_store

logger = logging.getLogger(__name__)

health_bp = Blueprint("health_bp", __name__, url_prefix="/api/v1/health")


@health_bp.route("/ready", methods=["GET"])
def ready():
    """Simple readiness probe — always 200 if app is running."""
    return jsonify({"status": "ok"}), 200


@health_bp.route("/live", methods=["GET"])
def live():
    """Detailed liveness check with dependency status."""
    checks = {}
    overall = True
    store = get_record_store()

    # ── Database (via the named connection) ──────────────────────────
    try:
        t0 = time.perf_counter()
        with store.engine().connect() as conn:
            conn.execute(text("SELECT 1"))
        db_ms = (time.perf_counter() - t0) * 1000
        checks["database"] = {
            "status": "ok",
            "connection": store.connection_name,
            "latency_ms": round(db_ms, 1),
        }
    except Exception as exc:
        checks["database"] = {"status": "error", "detail": str(exc)}
        overall = False
        logger.error("Health check — database failed: %s", exc)

    # ── Baseline scenario ────────────────────────────────────────────
    if overall:
        try:
            store.scenarios.get(BASELINE_SCENARIO_ID)
            checks["baseline"] = {"status": "ok"}
        except NotFoundError:
            checks["baseline"] = {"status": "missing"}
            overall = False
            logger.error("Health check — baseline scenario missing")

    # ── App info ─────────────────────────────────────────────────────
    checks["app"] = {
        "name": "Roadmap Planner",
        "debug": current_app.debug,
        "testing": current_app.testing,
    }

    status_code = 200 if overall else 503
    return jsonify({
        "status": "healthy" if overall else "degraded",
        "checks": checks,
    }), status_code
