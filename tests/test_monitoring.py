"""Tests for monitoring: health checks, request timing, log formatting, diagnostics."""

import json
import logging

from planner.config import TestingConfig
from planner.middleware.diagnostics import run_startup_diagnostics
from planner.middleware.logging_config import JSONFormatter, ReadableFormatter
from planner.models.planning import BASELINE_SCENARIO_ID, Scenario


# ── Health Endpoints ────────────────────────────────────────────────────


class TestHealthEndpoints:
    """Health check endpoint tests."""

    def test_health_basic(self, client):
        """GET /api/v1/health returns 200."""
        res = client.get("/api/v1/health")
        assert res.status_code == 200
        assert res.get_json()["status"] == "ok"

    def test_health_ready(self, client):
        """GET /api/v1/health/ready returns 200."""
        res = client.get("/api/v1/health/ready")
        assert res.status_code == 200
        assert res.get_json()["status"] == "ok"

    def test_health_live(self, client):
        """GET /api/v1/health/live reports the named connection and baseline."""
        res = client.get("/api/v1/health/live")
        assert res.status_code == 200
        data = res.get_json()
        assert data["status"] == "healthy"
        db_check = data["checks"]["database"]
        assert db_check["status"] == "ok"
        assert db_check["connection"] == TestingConfig.ROADMAP_CONNECTION_NAME
        assert "latency_ms" in db_check
        assert data["checks"]["baseline"]["status"] == "ok"
        assert data["checks"]["app"]["testing"] is True

    def test_health_live_degraded_without_baseline(self, client, store):
        with store.connections.begin(store.connection_name) as session:
            session.delete(session.get(Scenario, BASELINE_SCENARIO_ID))
        res = client.get("/api/v1/health/live")
        assert res.status_code == 503
        data = res.get_json()
        assert data["status"] == "degraded"
        assert data["checks"]["baseline"]["status"] == "missing"


# ── Request Timing ──────────────────────────────────────────────────────


class TestRequestTiming:
    """Request timing middleware tests."""

    def test_duration_header_present(self, client):
        """Every response should have X-Request-Duration-Ms header."""
        res = client.get("/api/v1/health")
        assert "X-Request-Duration-Ms" in res.headers
        assert float(res.headers["X-Request-Duration-Ms"]) >= 0

    def test_request_id_generated(self, client):
        res = client.get("/api/v1/health")
        assert len(res.headers["X-Request-ID"]) == 12

    def test_request_id_propagated(self, client):
        res = client.get("/api/v1/health", headers={"X-Request-ID": "shell-42"})
        assert res.headers["X-Request-ID"] == "shell-42"

    def test_command_logged(self, client, caplog):
        caplog.set_level(logging.DEBUG, logger="planner.middleware.timing")
        client.post("/api/v1/commands/get_capabilities", json={})
        records = [r for r in caplog.records if r.name == "planner.middleware.timing"]
        assert records
        assert records[-1].command == "get_capabilities"
        assert records[-1].status == 200


# ── Log formatting ──────────────────────────────────────────────────────


def _record(**extra):
    record = logging.LogRecord("planner.test", logging.INFO, __file__, 10, "hello %s", ("world",), None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestFormatters:
    def test_json_formatter(self):
        entry = json.loads(JSONFormatter().format(_record(command="get_systems", duration_ms=3.2)))
        assert entry["message"] == "hello world"
        assert entry["level"] == "INFO"
        assert entry["command"] == "get_systems"
        assert entry["duration_ms"] == 3.2
        assert "path" not in entry

    def test_readable_formatter(self):
        line = ReadableFormatter().format(_record(command="get_systems", duration_ms=3.2))
        assert "hello world" in line
        assert "<get_systems>" in line
        assert "[3ms]" in line


# ── Startup diagnostics ─────────────────────────────────────────────────


class TestStartupDiagnostics:
    def test_skipped_when_testing(self, app, caplog):
        caplog.set_level(logging.INFO, logger="planner.middleware.diagnostics")
        run_startup_diagnostics(app)
        assert not [r for r in caplog.records if r.name == "planner.middleware.diagnostics"]

    def test_banner_reports_baseline(self, app, caplog, monkeypatch):
        monkeypatch.setitem(app.config, "TESTING", False)
        caplog.set_level(logging.INFO, logger="planner.middleware.diagnostics")
        run_startup_diagnostics(app)
        banner = "\n".join(r.getMessage() for r in caplog.records
                           if r.name == "planner.middleware.diagnostics")
        assert "Baseline      : present" in banner
        assert "Database      : ok" in banner
