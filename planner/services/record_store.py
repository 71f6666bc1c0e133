"""Record Store Service.

``RecordStore`` bundles one repository per roadmap table, all bound to the
same named connection. The Flask app builds a single instance at start-up
(``init_record_store``) and the command blueprint reaches it through
``get_record_store()``; tests and scripts may construct their own with any
``ConnectionRegistry``.

Usage:
    registry = ConnectionRegistry()
    registry.register("sqlite:roadmap.db", engine)
    store = RecordStore(registry, "sqlite:roadmap.db")

    store.capabilities.create({"id": "cap-1", "name": "Payments", "type": "Business"})
    store.initiatives.list(parent_id="baseline")
    store.scenarios.delete("baseline")      # BaselineProtectedError
"""

from __future__ import annotations

import logging

from flask import Flask, current_app

from planner.config import DEFAULT_CONNECTION_NAME
from planner.core.connections import ConnectionRegistry
from planner.models.governance import Constraint, FinancialPeriod
from planner.models.links import (
    InitiativeConstraint,
    InitiativeDependency,
    InitiativeResourceRequirement,
    SystemDependency,
    SystemInitiative,
)
from planner.models.planning import Initiative, Scenario
from planner.models.portfolio import Capability, System
from planner.models.resourcing import Resource, ResourcePool
from planner.services.repository import (
    EntityRepository,
    EntitySchema,
    LinkRepository,
    LinkSchema,
    ScenarioRepository,
    SettingsRepository,
)

logger = logging.getLogger(__name__)

EXTENSION_KEY = "record_store"


# ── Entity schemas ───────────────────────────────────────────────────────────

CAPABILITIES = EntitySchema(Capability, order_by=("sort_order", "name"))
SYSTEMS = EntitySchema(System, order_by=("name",), parent_column="capability_id")
INITIATIVES = EntitySchema(Initiative, order_by=("start_date", "name"), parent_column="scenario_id")
SCENARIOS = EntitySchema(Scenario, order_by=("-is_baseline", "name"), update_exclude=("is_baseline",))
RESOURCE_POOLS = EntitySchema(ResourcePool, order_by=("name",), label="Resource pool")
RESOURCES = EntitySchema(Resource, order_by=("name",), parent_column="resource_pool_id")
CONSTRAINTS = EntitySchema(Constraint, order_by=("name",))
FINANCIAL_PERIODS = EntitySchema(FinancialPeriod, order_by=("start_date",), label="Financial period")

# ── Link schemas ─────────────────────────────────────────────────────────────

SYSTEM_DEPENDENCIES = LinkSchema(
    SystemDependency,
    filters={"system_id": ("source_system_id", "target_system_id")},
    label="System dependency",
)
SYSTEM_INITIATIVES = LinkSchema(
    SystemInitiative,
    filters={"system_id": ("system_id",), "initiative_id": ("initiative_id",)},
    label="System initiative",
)
INITIATIVE_DEPENDENCIES = LinkSchema(
    InitiativeDependency,
    filters={"initiative_id": ("predecessor_id", "successor_id")},
    label="Initiative dependency",
)
INITIATIVE_RESOURCE_REQUIREMENTS = LinkSchema(
    InitiativeResourceRequirement,
    filters={"initiative_id": ("initiative_id",), "resource_pool_id": ("resource_pool_id",)},
    label="Initiative resource requirement",
)
INITIATIVE_CONSTRAINTS = LinkSchema(
    InitiativeConstraint,
    filters={"initiative_id": ("initiative_id",), "constraint_id": ("constraint_id",)},
    label="Initiative constraint",
)


class RecordStore:
    """Per-entity repositories over one named connection."""

    def __init__(self, connections: ConnectionRegistry, connection_name: str = DEFAULT_CONNECTION_NAME) -> None:
        self.connections = connections
        self.connection_name = connection_name

        def entity(schema):
            return EntityRepository(schema, connections, connection_name)

        def link(schema):
            return LinkRepository(schema, connections, connection_name)

        self.capabilities = entity(CAPABILITIES)
        self.systems = entity(SYSTEMS)
        self.initiatives = entity(INITIATIVES)
        self.scenarios = ScenarioRepository(SCENARIOS, connections, connection_name)
        self.resource_pools = entity(RESOURCE_POOLS)
        self.resources = entity(RESOURCES)
        self.constraints = entity(CONSTRAINTS)
        self.financial_periods = entity(FINANCIAL_PERIODS)

        self.system_dependencies = link(SYSTEM_DEPENDENCIES)
        self.system_initiatives = link(SYSTEM_INITIATIVES)
        self.initiative_dependencies = link(INITIATIVE_DEPENDENCIES)
        self.initiative_resource_requirements = link(INITIATIVE_RESOURCE_REQUIREMENTS)
        self.initiative_constraints = link(INITIATIVE_CONSTRAINTS)

        self.settings = SettingsRepository(connections, connection_name)

    def engine(self):
        """Engine behind this store's connection name (raises ConnectionNotFoundError)."""
        return self.connections.engine(self.connection_name)

    def ensure_baseline(self) -> bool:
        return self.scenarios.ensure_baseline()


def init_record_store(app: Flask, engine) -> RecordStore:
    """Register ``engine`` under the configured connection name and attach a store to ``app``."""
    name = app.config.get("ROADMAP_CONNECTION_NAME", DEFAULT_CONNECTION_NAME)
    registry = ConnectionRegistry()
    registry.register(name, engine)
    store = RecordStore(registry, name)
    app.extensions[EXTENSION_KEY] = store
    logger.debug("Record store initialised connection=%s", name)
    return store


def get_record_store() -> RecordStore:
    return current_app.extensions[EXTENSION_KEY]
