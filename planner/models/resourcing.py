"""
Roadmap Planner
Resourcing domain models — capacity pools and the people in them.

Models:
    - ResourcePool: team or skill pool with capacity per period
    - Resource: individual member of a pool
"""

from planner.models import db
from planner.models.base import SERIALIZED_LIST, RecordModel, enum_check


# ── Constants ────────────────────────────────────────────────────────────────

CAPACITY_UNITS = {"FTE", "PersonDays", "PersonMonths"}
POOL_PERIOD_TYPES = {"Month", "Quarter", "Year"}


class ResourcePool(RecordModel):
    """Group of resources sharing a capacity budget."""

    __tablename__ = "resource_pools"
    __table_args__ = (
        enum_check("capacity_unit", CAPACITY_UNITS, "ck_resource_pools_capacity_unit"),
        enum_check("period_type", POOL_PERIOD_TYPES, "ck_resource_pools_period_type"),
    )

    description = db.Column(db.Text)
    capacity_per_period = db.Column(db.Float)
    capacity_unit = db.Column(db.String(20), nullable=False, comment="FTE | PersonDays | PersonMonths")
    period_type = db.Column(db.String(20), nullable=False, comment="Month | Quarter | Year")
    colour = db.Column(db.String(20))


class Resource(RecordModel):
    """
    Individual resource.

    skills is an ordered list stored as JSON text; availability is the
    fraction of a full allocation (1.0 = full time).
    """

    __tablename__ = "resources"

    role = db.Column(db.String(200))
    skills = db.Column(db.Text, info=SERIALIZED_LIST, comment="JSON array")
    availability = db.Column(db.Float, default=1.0)
    resource_pool_id = db.Column(
        db.String(64), db.ForeignKey("resource_pools.id", ondelete="SET NULL"), index=True,
    )
    start_date = db.Column(db.Date)
    end_date = db.Column(db.Date)
