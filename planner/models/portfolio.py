"""
Roadmap Planner
Portfolio domain models — the capability map and the systems that serve it.

Models:
    - Capability: business or technical capability (self-referential tree)
    - System: IT system with lifecycle, criticality and support dates
"""

from planner.models import db
from planner.models.base import SERIALIZED_LIST, RecordModel, enum_check


# ── Constants ────────────────────────────────────────────────────────────────

CAPABILITY_TYPES = {"Business", "Technical"}
LIFECYCLE_STAGES = {"Discovery", "Development", "Production", "Sunset", "Retired"}
CRITICALITIES = {"Critical", "High", "Medium", "Low"}


class Capability(RecordModel):
    """
    Node in the capability map.

    Top-level capabilities have no parent; deleting a parent orphans its
    children (parent_id set to NULL) rather than removing them.
    """

    __tablename__ = "capabilities"
    __table_args__ = (
        enum_check("type", CAPABILITY_TYPES, "ck_capabilities_type"),
        db.Index("idx_capabilities_type", "type"),
    )

    description = db.Column(db.Text)
    type = db.Column(db.String(20), nullable=False, comment="Business | Technical")
    parent_id = db.Column(
        db.String(64), db.ForeignKey("capabilities.id", ondelete="SET NULL"), index=True,
    )
    colour = db.Column(db.String(20))
    sort_order = db.Column(db.Integer, default=0)


class System(RecordModel):
    """
    IT system tracked on the roadmap.

    technology_stack is an ordered list stored as JSON text.
    """

    __tablename__ = "systems"
    __table_args__ = (
        enum_check("lifecycle_stage", LIFECYCLE_STAGES, "ck_systems_lifecycle_stage"),
        enum_check("criticality", CRITICALITIES, "ck_systems_criticality"),
        db.Index("idx_systems_lifecycle", "lifecycle_stage"),
        db.Index("idx_systems_criticality", "criticality"),
    )

    description = db.Column(db.Text)
    owner = db.Column(db.String(200))
    vendor = db.Column(db.String(200))
    technology_stack = db.Column(db.Text, info=SERIALIZED_LIST, comment="JSON array")
    lifecycle_stage = db.Column(
        db.String(20), nullable=False,
        comment="Discovery | Development | Production | Sunset | Retired",
    )
    criticality = db.Column(db.String(20), nullable=False, comment="Critical | High | Medium | Low")
    support_end_date = db.Column(db.Date)
    extended_support_end_date = db.Column(db.Date)
    capability_id = db.Column(
        db.String(64), db.ForeignKey("capabilities.id", ondelete="SET NULL"), index=True,
    )
