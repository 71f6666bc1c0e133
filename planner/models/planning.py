"""
Roadmap Planner
Planning domain models — scenarios and the initiatives planned within them.

Models:
    - Scenario: baseline or what-if variant of the plan
    - Initiative: unit of work with dates, estimates and priority

Chain: Scenario → Initiative (deleting a scenario deletes its initiatives)
"""

from planner.models import db
from planner.models.base import RecordModel, enum_check


# ── Constants ────────────────────────────────────────────────────────────────

BASELINE_SCENARIO_ID = "baseline"
BASELINE_SCENARIO_NAME = "Baseline"
BASELINE_SCENARIO_DESCRIPTION = "The current known state and committed plans"

SCENARIO_TYPES = {"Timing", "Budget", "Resource", "Scope", "Risk"}
INITIATIVE_TYPES = {"Upgrade", "Replacement", "New", "Decommission", "Migration"}
INITIATIVE_STATUSES = {"Proposed", "Planned", "InProgress", "Complete", "Cancelled"}
UNCERTAINTIES = {"Low", "Medium", "High"}
PRIORITIES = {"Must", "Should", "Could", "Wont"}


class Scenario(RecordModel):
    """
    A version of the plan.

    Exactly one row is the baseline (id "baseline", is_baseline true); it is
    seeded at start-up and can never be deleted.
    """

    __tablename__ = "scenarios"
    __table_args__ = (
        enum_check("type", SCENARIO_TYPES, "ck_scenarios_type"),
        db.Index("idx_scenarios_baseline", "is_baseline"),
    )

    description = db.Column(db.Text)
    type = db.Column(db.String(20), comment="Timing | Budget | Resource | Scope | Risk (NULL for baseline)")
    is_baseline = db.Column(db.Boolean, nullable=False, default=False)
    parent_scenario_id = db.Column(
        db.String(64), db.ForeignKey("scenarios.id", ondelete="SET NULL"), index=True,
    )


class Initiative(RecordModel):
    """Work item scheduled inside a scenario."""

    __tablename__ = "initiatives"
    __table_args__ = (
        enum_check("type", INITIATIVE_TYPES, "ck_initiatives_type"),
        enum_check("status", INITIATIVE_STATUSES, "ck_initiatives_status"),
        enum_check("effort_uncertainty", UNCERTAINTIES, "ck_initiatives_effort_uncertainty"),
        enum_check("cost_uncertainty", UNCERTAINTIES, "ck_initiatives_cost_uncertainty"),
        enum_check("priority", PRIORITIES, "ck_initiatives_priority"),
        db.Index("idx_initiatives_status", "status"),
        db.Index("idx_initiatives_dates", "start_date", "end_date"),
    )

    description = db.Column(db.Text)
    type = db.Column(
        db.String(20), nullable=False,
        comment="Upgrade | Replacement | New | Decommission | Migration",
    )
    status = db.Column(
        db.String(20), nullable=False,
        comment="Proposed | Planned | InProgress | Complete | Cancelled",
    )
    start_date = db.Column(db.Date)
    end_date = db.Column(db.Date)

    # Estimates
    effort_estimate = db.Column(db.Float)
    effort_uncertainty = db.Column(db.String(10), comment="Low | Medium | High")
    cost_estimate = db.Column(db.Float)
    cost_uncertainty = db.Column(db.String(10), comment="Low | Medium | High")

    priority = db.Column(db.String(10), nullable=False, comment="Must | Should | Could | Wont")
    scenario_id = db.Column(
        db.String(64), db.ForeignKey("scenarios.id", ondelete="CASCADE"),
        nullable=False, index=True,
    )
