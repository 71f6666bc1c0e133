"""
Roadmap Planner
Governance domain models — planning constraints and budget periods.

Models:
    - Constraint: deadline, budget, resource, dependency or compliance limit
    - FinancialPeriod: budgeting window with available budget
"""

from planner.models import db
from planner.models.base import RecordModel, enum_check


# ── Constants ────────────────────────────────────────────────────────────────

CONSTRAINT_TYPES = {"Deadline", "Budget", "Resource", "Dependency", "Compliance", "Other"}
HARDNESS = {"Hard", "Soft"}
FINANCIAL_PERIOD_TYPES = {"Year", "Half", "Quarter", "Month"}


class Constraint(RecordModel):
    """Planning constraint, optionally bounded by effective/expiry dates."""

    __tablename__ = "constraints"
    __table_args__ = (
        enum_check("type", CONSTRAINT_TYPES, "ck_constraints_type"),
        enum_check("hardness", HARDNESS, "ck_constraints_hardness"),
        db.Index("idx_constraints_type", "type"),
    )

    description = db.Column(db.Text)
    type = db.Column(
        db.String(20), nullable=False,
        comment="Deadline | Budget | Resource | Dependency | Compliance | Other",
    )
    hardness = db.Column(db.String(10), nullable=False, comment="Hard | Soft")
    effective_date = db.Column(db.Date)
    expiry_date = db.Column(db.Date)


class FinancialPeriod(RecordModel):
    """Budgeting period."""

    __tablename__ = "financial_periods"
    __table_args__ = (
        enum_check("type", FINANCIAL_PERIOD_TYPES, "ck_financial_periods_type"),
        db.Index("idx_financial_periods_dates", "start_date", "end_date"),
    )

    type = db.Column(db.String(10), nullable=False, comment="Year | Half | Quarter | Month")
    start_date = db.Column(db.Date, nullable=False)
    end_date = db.Column(db.Date, nullable=False)
    budget_available = db.Column(db.Float)
