"""
Roadmap Planner
Relationship models linking the core entities.

Models:
    - SystemDependency: system → system (data, API, auth, infra)
    - SystemInitiative: which systems an initiative targets, affects, replaces or creates
    - InitiativeDependency: predecessor → successor with lag
    - InitiativeResourceRequirement: effort an initiative needs from a pool
    - InitiativeConstraint: constraints that apply to an initiative

All link rows are deleted with either endpoint (ON DELETE CASCADE).
"""

from planner.models import db
from planner.models.base import LinkModel, enum_check
from planner.models.portfolio import CRITICALITIES


# ── Constants ────────────────────────────────────────────────────────────────

SYSTEM_DEPENDENCY_TYPES = {"Data", "API", "Authentication", "Infrastructure", "Other"}
SYSTEM_RELATIONSHIP_TYPES = {"Target", "Affected", "Replaced", "Created"}
INITIATIVE_DEPENDENCY_TYPES = {"FinishToStart", "StartToStart", "FinishToFinish", "StartToFinish"}


def _fk(target: str, **kw):
    return db.Column(
        db.String(64), db.ForeignKey(target, ondelete="CASCADE"),
        nullable=False, index=True, **kw,
    )


class SystemDependency(LinkModel):
    __tablename__ = "system_dependencies"
    __table_args__ = (
        db.UniqueConstraint("source_system_id", "target_system_id", name="uq_system_dependencies_pair"),
        enum_check("dependency_type", SYSTEM_DEPENDENCY_TYPES, "ck_system_dependencies_type"),
        enum_check("criticality", CRITICALITIES, "ck_system_dependencies_criticality"),
    )

    source_system_id = _fk("systems.id")
    target_system_id = _fk("systems.id")
    dependency_type = db.Column(
        db.String(20), nullable=False,
        comment="Data | API | Authentication | Infrastructure | Other",
    )
    criticality = db.Column(db.String(20), nullable=False, comment="Critical | High | Medium | Low")
    description = db.Column(db.Text)


class SystemInitiative(LinkModel):
    __tablename__ = "system_initiatives"
    __table_args__ = (
        db.UniqueConstraint("system_id", "initiative_id", name="uq_system_initiatives_pair"),
        enum_check("relationship_type", SYSTEM_RELATIONSHIP_TYPES, "ck_system_initiatives_type"),
    )

    system_id = _fk("systems.id")
    initiative_id = _fk("initiatives.id")
    relationship_type = db.Column(
        db.String(20), nullable=False, comment="Target | Affected | Replaced | Created",
    )


class InitiativeDependency(LinkModel):
    __tablename__ = "initiative_dependencies"
    __table_args__ = (
        db.UniqueConstraint("predecessor_id", "successor_id", name="uq_initiative_dependencies_pair"),
        enum_check("dependency_type", INITIATIVE_DEPENDENCY_TYPES, "ck_initiative_dependencies_type"),
    )

    predecessor_id = _fk("initiatives.id")
    successor_id = _fk("initiatives.id")
    dependency_type = db.Column(
        db.String(20), nullable=False,
        comment="FinishToStart | StartToStart | FinishToFinish | StartToFinish",
    )
    lag_days = db.Column(db.Integer, default=0)


class InitiativeResourceRequirement(LinkModel):
    __tablename__ = "initiative_resource_requirements"

    initiative_id = _fk("initiatives.id")
    resource_pool_id = _fk("resource_pools.id")
    effort_required = db.Column(db.Float, nullable=False)
    period_start = db.Column(db.Date)
    period_end = db.Column(db.Date)


class InitiativeConstraint(LinkModel):
    __tablename__ = "initiative_constraints"
    __table_args__ = (
        db.UniqueConstraint("initiative_id", "constraint_id", name="uq_initiative_constraints_pair"),
    )

    initiative_id = _fk("initiatives.id")
    constraint_id = _fk("constraints.id")
