"""
Startup diagnostics — runs once when the Flask app starts.

Checks the named connection and the seeded baseline, and logs a summary banner.
"""

import logging
import sys

from flask import Flask
from sqlalchemy import inspect as sa_inspect
from sqlalchemy import text

from planner.core.exceptions import NotFoundError
from planner.models.planning import BASELINE_SCENARIO_ID
from planner.services.record_store import get_record_store

logger = logging.getLogger(__name__)


def run_startup_diagnostics(app: Flask):
    """Run diagnostic checks during app startup."""
    if app.config.get("TESTING"):
        return  # skip during tests for speed

    issues: list[str] = []
    py = f"{sys.version_info.major}.{sys.version_info.minor}.{sys.version_info.micro}"

    with app.app_context():
        store = get_record_store()
        engine = store.engine()

        # ── Database connectivity ────────────────────────────────────
        db_status = "ok"
        try:
            with engine.connect() as conn:
                conn.execute(text("SELECT 1"))
        except Exception as exc:
            db_status = f"FAILED ({exc})"
            issues.append(f"Database unreachable: {exc}")

        # ── Table count ──────────────────────────────────────────────
        try:
            table_count = len(sa_inspect(engine).get_table_names())
            if table_count == 0:
                issues.append("No tables found — run 'flask db upgrade'")
        except Exception:
            table_count = "?"

        # ── Baseline scenario ────────────────────────────────────────
        baseline_status = "present"
        if db_status != "ok" or not table_count or table_count == "?":
            baseline_status = "unknown"
        else:
            try:
                store.scenarios.get(BASELINE_SCENARIO_ID)
            except NotFoundError:
                baseline_status = "MISSING"
                issues.append("Baseline scenario missing — run 'flask seed-baseline'")

    lines = [
        "Roadmap Planner startup diagnostics",
        f"  Python        : {py}",
        f"  Connection    : {store.connection_name} ({engine.url.get_backend_name()})",
        f"  Database      : {db_status}",
        f"  Tables        : {table_count}",
        f"  Baseline      : {baseline_status}",
    ]
    logger.info("\n".join(lines))
    for issue in issues:
        logger.warning("Startup issue: %s", issue)
