"""
Abstract bases shared by every roadmap table.

  - RecordModel: caller-keyed entity rows (id, name, created_at, updated_at)
  - LinkModel:   server-keyed relationship rows (id, created_at)
  - SerializerMixin.to_dict(): column-driven serialization; list-valued
    columns (``info=SERIALIZED_LIST``) are decoded from their JSON text
"""

from datetime import date

from planner.models import db
from planner.utils.helpers import decode_list, utcnow

# Column.info marker for list-valued fields stored as JSON text
SERIALIZED_LIST = {"serialized": "json_list"}


def is_serialized_list(column) -> bool:
    return column.info.get("serialized") == SERIALIZED_LIST["serialized"]


def enum_check(column_name: str, values, name: str) -> db.CheckConstraint:
    """Build a ``CHECK (<col> IN (...))`` constraint from a set of allowed values."""
    allowed = ", ".join(f"'{v}'" for v in sorted(values))
    return db.CheckConstraint(f"{column_name} IN ({allowed})", name=name)


class SerializerMixin:
    """Serialize every mapped column to a JSON-safe value."""

    def to_dict(self):
        result = {}
        for column in self.__table__.columns:
            value = getattr(self, column.key)
            if value is None:
                result[column.key] = None
            elif is_serialized_list(column):
                result[column.key] = decode_list(value)
            elif isinstance(value, date):
                result[column.key] = value.isoformat()
            else:
                result[column.key] = value
        return result


class RecordModel(SerializerMixin, db.Model):
    """Abstract base for entity tables with caller-supplied string ids."""
    __abstract__ = True

    id = db.Column(db.String(64), primary_key=True)
    name = db.Column(db.String(200), nullable=False)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)

    def __repr__(self):
        return f"<{type(self).__name__} {self.id}: {self.name}>"


class LinkModel(SerializerMixin, db.Model):
    """Abstract base for relationship tables; ids are generated server-side."""
    __abstract__ = True

    id = db.Column(db.String(64), primary_key=True)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)

    def __repr__(self):
        return f"<{type(self).__name__} {self.id}>"
