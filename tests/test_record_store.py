"""
Tests: RecordStore entity repositories.

Covers create/get/update/delete for all eight entity tables, list ordering,
parent filters, list-valued fields, storage rejections and the baseline
scenario rules.
"""

from datetime import datetime

import pytest

from planner.core.exceptions import (
    BaselineProtectedError,
    ConstraintViolationError,
    NotFoundError,
    ValidationError,
)
from planner.models.planning import BASELINE_SCENARIO_ID, Scenario

from conftest import (
    RECORD_BUILDERS,
    capability_record,
    financial_period_record,
    initiative_record,
    resource_pool_record,
    resource_record,
    scenario_record,
    system_record,
)

ENTITY_TABLES = sorted(RECORD_BUILDERS)


def _stored_fields(record):
    return {k: v for k, v in record.items() if k not in ("created_at", "updated_at")}


def _ts(value):
    return datetime.fromisoformat(value)


# ═════════════════════════════════════════════════════════════════════════════
# Create / get
# ═════════════════════════════════════════════════════════════════════════════


@pytest.mark.parametrize("table", ENTITY_TABLES)
class TestCreateAndGet:
    def test_create_returns_stored_record(self, store, table):
        record = RECORD_BUILDERS[table]()
        created = getattr(store, table).create(record)
        assert _stored_fields(created) == record

    def test_get_returns_same_record(self, store, table):
        repo = getattr(store, table)
        created = repo.create(RECORD_BUILDERS[table]())
        assert repo.get(created["id"]) == created

    def test_timestamps_set_and_equal(self, store, table):
        created = getattr(store, table).create(RECORD_BUILDERS[table]())
        assert created["created_at"]
        assert created["created_at"] == created["updated_at"]

    def test_client_timestamps_ignored(self, store, table):
        record = RECORD_BUILDERS[table](created_at="2000-01-01T00:00:00", updated_at="2000-01-01T00:00:00")
        created = getattr(store, table).create(record)
        assert not created["created_at"].startswith("2000-01-01")
        assert not created["updated_at"].startswith("2000-01-01")

    def test_get_missing_raises(self, store, table):
        with pytest.raises(NotFoundError):
            getattr(store, table).get("no-such-id")

    def test_duplicate_id_rejected(self, store, table):
        repo = getattr(store, table)
        repo.create(RECORD_BUILDERS[table]())
        with pytest.raises(ConstraintViolationError, match="UNIQUE constraint failed"):
            repo.create(RECORD_BUILDERS[table](name="Second"))


class TestCreateDefaults:
    def test_absent_optional_fields_are_null(self, store):
        created = store.systems.create({
            "id": "sys-min", "name": "Minimal", "lifecycle_stage": "Discovery", "criticality": "Low",
        })
        assert created["vendor"] is None
        assert created["technology_stack"] is None
        assert created["support_end_date"] is None
        assert created["capability_id"] is None

    def test_column_defaults_apply(self, store):
        cap = store.capabilities.create({"id": "cap-min", "name": "Minimal", "type": "Technical"})
        res = store.resources.create({"id": "res-min", "name": "Bob"})
        scn = store.scenarios.create({"id": "scn-min", "name": "Minimal"})
        assert cap["sort_order"] == 0
        assert res["availability"] == 1.0
        assert scn["is_baseline"] is False

    def test_missing_id_is_validation_error(self, store):
        with pytest.raises(ValidationError, match="id is required"):
            store.capabilities.create({"name": "No id", "type": "Business"})

    def test_non_mapping_record_rejected(self, store):
        with pytest.raises(ValidationError):
            store.capabilities.create(["not", "a", "record"])


# ═════════════════════════════════════════════════════════════════════════════
# Update
# ═════════════════════════════════════════════════════════════════════════════


@pytest.mark.parametrize("table", ENTITY_TABLES)
class TestUpdate:
    def test_update_replaces_fields(self, store, table):
        repo = getattr(store, table)
        repo.create(RECORD_BUILDERS[table]())
        changed = RECORD_BUILDERS[table](name="Renamed")
        updated = repo.update(changed)
        assert _stored_fields(updated) == changed
        assert repo.get(changed["id"]) == updated

    def test_update_keeps_created_at_and_advances_updated_at(self, store, table):
        repo = getattr(store, table)
        created = repo.create(RECORD_BUILDERS[table]())
        updated = repo.update(RECORD_BUILDERS[table](name="Renamed"))
        assert updated["created_at"] == created["created_at"]
        assert _ts(updated["updated_at"]) >= _ts(created["updated_at"])

    def test_update_missing_raises(self, store, table):
        with pytest.raises(NotFoundError):
            getattr(store, table).update(RECORD_BUILDERS[table](id="ghost"))


class TestUpdateSemantics:
    def test_absent_fields_cleared(self, store):
        store.systems.create(system_record())
        updated = store.systems.update({
            "id": "sys-ledger", "name": "General Ledger", "lifecycle_stage": "Sunset", "criticality": "High",
        })
        assert updated["lifecycle_stage"] == "Sunset"
        assert updated["support_end_date"] is None
        assert updated["vendor"] is None
        assert updated["technology_stack"] is None

    def test_client_created_at_ignored(self, store):
        created = store.capabilities.create(capability_record())
        updated = store.capabilities.update(capability_record(created_at="2000-01-01T00:00:00"))
        assert updated["created_at"] == created["created_at"]


# ═════════════════════════════════════════════════════════════════════════════
# Delete
# ═════════════════════════════════════════════════════════════════════════════


@pytest.mark.parametrize("table", ENTITY_TABLES)
class TestDelete:
    def test_delete_then_get_not_found(self, store, table):
        repo = getattr(store, table)
        created = repo.create(RECORD_BUILDERS[table]())
        repo.delete(created["id"])
        with pytest.raises(NotFoundError):
            repo.get(created["id"])

    def test_delete_missing_is_not_an_error(self, store, table):
        getattr(store, table).delete("never-existed")


class TestReferentialActions:
    def test_deleting_capability_nulls_system_reference(self, store):
        store.capabilities.create(capability_record())
        store.systems.create(system_record(capability_id="cap-payments"))
        store.capabilities.delete("cap-payments")
        assert store.systems.get("sys-ledger")["capability_id"] is None

    def test_deleting_parent_capability_nulls_child(self, store):
        store.capabilities.create(capability_record())
        store.capabilities.create(capability_record(id="cap-cards", name="Cards", parent_id="cap-payments"))
        store.capabilities.delete("cap-payments")
        assert store.capabilities.get("cap-cards")["parent_id"] is None

    def test_deleting_scenario_removes_its_initiatives(self, store):
        store.scenarios.create(scenario_record())
        store.initiatives.create(initiative_record(scenario_id="scn-accelerated"))
        store.scenarios.delete("scn-accelerated")
        assert store.initiatives.list() == []

    def test_deleting_pool_nulls_resource_pool(self, store):
        store.resource_pools.create(resource_pool_record())
        store.resources.create(resource_record(resource_pool_id="pool-platform"))
        store.resource_pools.delete("pool-platform")
        assert store.resources.get("res-ada")["resource_pool_id"] is None


# ═════════════════════════════════════════════════════════════════════════════
# Ordering & filters
# ═════════════════════════════════════════════════════════════════════════════


class TestOrdering:
    def test_capabilities_by_sort_order_then_name(self, store):
        store.capabilities.create(capability_record(id="c1", name="Zulu", sort_order=1))
        store.capabilities.create(capability_record(id="c2", name="Alpha", sort_order=2))
        store.capabilities.create(capability_record(id="c3", name="Bravo", sort_order=1))
        assert [c["id"] for c in store.capabilities.list()] == ["c3", "c1", "c2"]

    def test_systems_by_name(self, store):
        for sid, name in (("s1", "Warehouse"), ("s2", "Billing"), ("s3", "CRM")):
            store.systems.create(system_record(id=sid, name=name))
        assert [s["name"] for s in store.systems.list()] == ["Billing", "CRM", "Warehouse"]

    def test_initiatives_by_start_date_then_name(self, store):
        store.initiatives.create(initiative_record(id="i1", name="Beta", start_date="2026-03-01"))
        store.initiatives.create(initiative_record(id="i2", name="Alpha", start_date="2026-03-01"))
        store.initiatives.create(initiative_record(id="i3", name="Zeta", start_date="2025-11-01"))
        assert [i["id"] for i in store.initiatives.list()] == ["i3", "i2", "i1"]

    def test_scenarios_baseline_first_then_name(self, store):
        store.scenarios.create(scenario_record(id="z", name="Zeta"))
        store.scenarios.create(scenario_record(id="a", name="Alpha"))
        store.scenarios.create(scenario_record(id="o", name="Omega", is_baseline=True))
        assert [s["name"] for s in store.scenarios.list()] == ["Baseline", "Omega", "Alpha", "Zeta"]

    def test_financial_periods_by_start_date(self, store):
        store.financial_periods.create(financial_period_record(id="q2", name="Q2", type="Quarter",
                                                               start_date="2026-04-01", end_date="2026-06-30"))
        store.financial_periods.create(financial_period_record(id="q1", name="Q1", type="Quarter",
                                                               start_date="2026-01-01", end_date="2026-03-31"))
        assert [p["id"] for p in store.financial_periods.list()] == ["q1", "q2"]

    def test_list_empty_table(self, store):
        assert store.constraints.list() == []


class TestParentFilters:
    def test_systems_by_capability(self, store):
        store.capabilities.create(capability_record())
        store.systems.create(system_record(id="s1", name="Ledger", capability_id="cap-payments"))
        store.systems.create(system_record(id="s2", name="Intranet"))
        assert [s["id"] for s in store.systems.list("cap-payments")] == ["s1"]
        assert [s["id"] for s in store.systems.list()] == ["s2", "s1"]

    def test_initiatives_by_scenario(self, store):
        store.scenarios.create(scenario_record())
        store.initiatives.create(initiative_record(id="i1"))
        store.initiatives.create(initiative_record(id="i2", scenario_id="scn-accelerated"))
        assert [i["id"] for i in store.initiatives.list(BASELINE_SCENARIO_ID)] == ["i1"]
        assert [i["id"] for i in store.initiatives.list("scn-accelerated")] == ["i2"]

    def test_resources_by_pool(self, store):
        store.resource_pools.create(resource_pool_record())
        store.resources.create(resource_record(id="r1", resource_pool_id="pool-platform"))
        store.resources.create(resource_record(id="r2", name="Grace"))
        assert [r["id"] for r in store.resources.list("pool-platform")] == ["r1"]
        assert len(store.resources.list()) == 2

    def test_filter_unknown_parent_returns_empty(self, store):
        store.systems.create(system_record())
        assert store.systems.list("cap-missing") == []

    def test_filter_on_unfilterable_table_rejected(self, store):
        with pytest.raises(ValidationError):
            store.constraints.list("anything")


# ═════════════════════════════════════════════════════════════════════════════
# List-valued fields
# ═════════════════════════════════════════════════════════════════════════════


class TestListFields:
    def test_technology_stack_keeps_order(self, store):
        stack = ["Python", "Postgres", "Redis", "Postgres"]
        store.systems.create(system_record(technology_stack=stack))
        assert store.systems.get("sys-ledger")["technology_stack"] == stack

    def test_skills_empty_list(self, store):
        store.resources.create(resource_record(skills=[]))
        assert store.resources.get("res-ada")["skills"] == []

    def test_non_list_value_rejected(self, store):
        with pytest.raises(ConstraintViolationError, match="technology_stack"):
            store.systems.create(system_record(technology_stack="Python, Postgres"))


# ═════════════════════════════════════════════════════════════════════════════
# Storage rejections
# ═════════════════════════════════════════════════════════════════════════════


class TestConstraintViolations:
    def test_invalid_enum_value(self, store):
        with pytest.raises(ConstraintViolationError, match="CHECK constraint failed"):
            store.capabilities.create(capability_record(type="Strategic"))

    def test_unknown_foreign_key(self, store):
        with pytest.raises(ConstraintViolationError, match="FOREIGN KEY constraint failed"):
            store.initiatives.create(initiative_record(scenario_id="no-such-scenario"))

    def test_missing_required_column(self, store):
        record = capability_record()
        del record["name"]
        with pytest.raises(ConstraintViolationError, match="NOT NULL constraint failed"):
            store.capabilities.create(record)

    def test_invalid_date(self, store):
        with pytest.raises(ConstraintViolationError, match="start_date"):
            store.initiatives.create(initiative_record(start_date="31/12/2026"))

    def test_rejected_write_leaves_no_row(self, store):
        with pytest.raises(ConstraintViolationError):
            store.systems.create(system_record(criticality="Extreme"))
        assert store.systems.list() == []

    def test_rejected_update_keeps_previous_values(self, store):
        store.systems.create(system_record())
        with pytest.raises(ConstraintViolationError):
            store.systems.update(system_record(name="Broken", lifecycle_stage="Zombie"))
        assert store.systems.get("sys-ledger")["name"] == "General Ledger"


# ═════════════════════════════════════════════════════════════════════════════
# Baseline scenario
# ═════════════════════════════════════════════════════════════════════════════


class TestBaselineScenario:
    def test_baseline_seeded(self, store):
        baseline = store.scenarios.get(BASELINE_SCENARIO_ID)
        assert baseline["name"] == "Baseline"
        assert baseline["is_baseline"] is True
        assert baseline["type"] is None

    def test_ensure_baseline_idempotent(self, store):
        assert store.ensure_baseline() is False
        assert len(store.scenarios.list()) == 1

    def test_ensure_baseline_recreates_missing_row(self, store):
        store.scenarios.create(scenario_record(id="other", is_baseline=False))
        # remove the seeded row behind the guard
        with store.connections.begin(store.connection_name) as session:
            session.delete(session.get(Scenario, BASELINE_SCENARIO_ID))
        assert store.ensure_baseline() is True
        assert store.scenarios.get(BASELINE_SCENARIO_ID)["is_baseline"] is True

    def test_delete_baseline_by_id_refused(self, store):
        with pytest.raises(BaselineProtectedError, match="Cannot delete the baseline scenario"):
            store.scenarios.delete(BASELINE_SCENARIO_ID)
        assert store.scenarios.get(BASELINE_SCENARIO_ID)

    def test_delete_baseline_flagged_scenario_refused(self, store):
        store.scenarios.create(scenario_record(id="alt-base", is_baseline=True))
        with pytest.raises(BaselineProtectedError):
            store.scenarios.delete("alt-base")
        assert store.scenarios.get("alt-base")["is_baseline"] is True

    def test_delete_ordinary_scenario(self, store):
        store.scenarios.create(scenario_record())
        store.scenarios.delete("scn-accelerated")
        assert [s["id"] for s in store.scenarios.list()] == [BASELINE_SCENARIO_ID]

    def test_baseline_initiatives_survive_refused_delete(self, store):
        store.initiatives.create(initiative_record())
        with pytest.raises(BaselineProtectedError):
            store.scenarios.delete(BASELINE_SCENARIO_ID)
        assert len(store.initiatives.list(BASELINE_SCENARIO_ID)) == 1

    def test_update_baseline_keeps_flag(self, store):
        updated = store.scenarios.update({"id": BASELINE_SCENARIO_ID, "name": "Baseline renamed"})
        assert updated["name"] == "Baseline renamed"
        assert updated["is_baseline"] is True
        with pytest.raises(BaselineProtectedError):
            store.scenarios.delete(BASELINE_SCENARIO_ID)

    def test_update_cannot_promote_to_baseline(self, store):
        store.scenarios.create(scenario_record(id="alt", name="Alt"))
        updated = store.scenarios.update(scenario_record(id="alt", name="Alt", is_baseline=True))
        assert updated["is_baseline"] is False
        assert [s["id"] for s in store.scenarios.list()] == [BASELINE_SCENARIO_ID, "alt"]
        store.scenarios.delete("alt")
        assert [s["id"] for s in store.scenarios.list()] == [BASELINE_SCENARIO_ID]
