"""
Shared pytest fixtures for the Roadmap Planner test suite.

Provides:
    - app: Flask application (session-scoped, in-memory SQLite)
    - _setup_db: Database table creation/teardown (session-scoped)
    - session: Per-test app context; tables recreated + baseline re-seeded after each test (autouse)
    - client: Flask test client (function-scoped)
    - store: the app's RecordStore
    - Record builders: capability_record, system_record, ... (plain dicts)
"""

import pytest

from planner import create_app
from planner.models import db as _db
from planner.services.record_store import get_record_store


# ── App & DB fixtures ────────────────────────────────────────────────────


@pytest.fixture(scope="session")
def app():
    """Create the Flask application once per test session."""
    return create_app("testing")


@pytest.fixture(scope="session")
def _setup_db(app):
    """Create all tables at session start, drop at end."""
    with app.app_context():
        _db.create_all()
    yield
    with app.app_context():
        _db.drop_all()


@pytest.fixture(autouse=True)
def session(app, _setup_db):
    """Per-test: open app context, recreate tables and baseline afterwards."""
    with app.app_context():
        yield
        _db.session.remove()
        _db.drop_all()
        _db.create_all()
        get_record_store().ensure_baseline()


@pytest.fixture()
def client(app):
    """Flask test client."""
    return app.test_client()


@pytest.fixture()
def store(app):
    """The RecordStore bound to the app's named connection."""
    return app.extensions["record_store"]


# ── Record builders ──────────────────────────────────────────────────────


def capability_record(**kw):
    rec = {
        "id": "cap-payments",
        "name": "Payments",
        "description": "Accept and settle payments",
        "type": "Business",
        "parent_id": None,
        "colour": "#336699",
        "sort_order": 1,
    }
    rec.update(kw)
    return rec


def system_record(**kw):
    rec = {
        "id": "sys-ledger",
        "name": "General Ledger",
        "description": "Core accounting system",
        "owner": "Finance IT",
        "vendor": "Acme",
        "technology_stack": ["Java", "Postgres"],
        "lifecycle_stage": "Production",
        "criticality": "High",
        "support_end_date": "2027-06-30",
        "extended_support_end_date": "2029-06-30",
        "capability_id": None,
    }
    rec.update(kw)
    return rec


def initiative_record(**kw):
    rec = {
        "id": "init-ledger-upgrade",
        "name": "Ledger upgrade",
        "description": "Move to the supported release",
        "type": "Upgrade",
        "status": "Planned",
        "start_date": "2026-01-01",
        "end_date": "2026-06-30",
        "effort_estimate": 120.5,
        "effort_uncertainty": "Medium",
        "cost_estimate": 250000.0,
        "cost_uncertainty": "High",
        "priority": "Must",
        "scenario_id": "baseline",
    }
    rec.update(kw)
    return rec


def scenario_record(**kw):
    rec = {
        "id": "scn-accelerated",
        "name": "Accelerated",
        "description": "Pull the migration forward a quarter",
        "type": "Timing",
        "is_baseline": False,
        "parent_scenario_id": "baseline",
    }
    rec.update(kw)
    return rec


def resource_pool_record(**kw):
    rec = {
        "id": "pool-platform",
        "name": "Platform team",
        "description": "Shared platform engineers",
        "capacity_per_period": 40.0,
        "capacity_unit": "PersonDays",
        "period_type": "Month",
        "colour": "#aa5500",
    }
    rec.update(kw)
    return rec


def resource_record(**kw):
    rec = {
        "id": "res-ada",
        "name": "Ada",
        "role": "Engineer",
        "skills": ["Rust", "SQL", "Kubernetes"],
        "availability": 0.8,
        "resource_pool_id": None,
        "start_date": "2025-01-01",
        "end_date": None,
    }
    rec.update(kw)
    return rec


def constraint_record(**kw):
    rec = {
        "id": "con-sox",
        "name": "SOX audit window",
        "description": "No ledger changes during audit",
        "type": "Compliance",
        "hardness": "Hard",
        "effective_date": "2026-10-01",
        "expiry_date": "2026-12-31",
    }
    rec.update(kw)
    return rec


def financial_period_record(**kw):
    rec = {
        "id": "fy26",
        "name": "FY26",
        "type": "Year",
        "start_date": "2026-01-01",
        "end_date": "2026-12-31",
        "budget_available": 1500000.0,
    }
    rec.update(kw)
    return rec


# repository attribute on RecordStore → builder
RECORD_BUILDERS = {
    "capabilities": capability_record,
    "systems": system_record,
    "initiatives": initiative_record,
    "scenarios": scenario_record,
    "resource_pools": resource_pool_record,
    "resources": resource_record,
    "constraints": constraint_record,
    "financial_periods": financial_period_record,
}
