"""
Roadmap Planner
Key/value application settings.
"""

from planner.models import db
from planner.models.base import SerializerMixin
from planner.utils.helpers import utcnow


class Setting(SerializerMixin, db.Model):
    __tablename__ = "settings"

    key = db.Column(db.String(100), primary_key=True)
    value = db.Column(db.Text)
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)

    def __repr__(self):
        return f"<Setting {self.key}>"
