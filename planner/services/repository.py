"""Generic repositories over the roadmap tables.

One ``EntityRepository`` class serves all eight entity tables; what differs per
entity (model, sort key, optional parent-filter column) lives in an
``EntitySchema``. Scenario deletion rules are an override of the delete hooks
in ``ScenarioRepository``. Relationship tables use ``LinkRepository`` and the
settings table ``SettingsRepository``.

Rules:
  - Every operation resolves its engine by connection name first; a missing
    connection raises ConnectionNotFoundError before any SQL runs.
  - ``id`` is caller-supplied for entities and never changes.
  - ``created_at`` / ``updated_at`` are set here and never taken from input.
  - create/update write and read back inside one transaction, so the returned
    record is exactly what the store holds.
  - Storage rejections surface as ConstraintViolationError with the driver's
    message passed through.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any

from sqlalchemy import Date, delete, or_, select
from sqlalchemy.exc import DBAPIError, IntegrityError, StatementError

from planner.core.connections import ConnectionRegistry
from planner.core.exceptions import (
    BaselineProtectedError,
    ConstraintViolationError,
    NotFoundError,
    ValidationError,
)
from planner.models.base import is_serialized_list
from planner.models.planning import (
    BASELINE_SCENARIO_DESCRIPTION,
    BASELINE_SCENARIO_ID,
    BASELINE_SCENARIO_NAME,
)
from planner.models.setting import Setting
from planner.utils.helpers import encode_list, new_id, parse_date_input, utcnow

logger = logging.getLogger(__name__)

# Columns owned by the service; never read from caller input
_SERVER_FIELDS = frozenset({"id", "created_at", "updated_at"})


# ── Schemas ──────────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class EntitySchema:
    """Per-entity parameters for :class:`EntityRepository`.

    Attributes:
        model:          Mapped class (a ``RecordModel`` subclass).
        order_by:       Column names for list ordering; a leading ``-`` sorts descending.
        parent_column:  Column a list may be restricted by, if any.
        update_exclude: Columns set on create only; update never writes them.
        label:          Display name used in errors and logs.
    """

    model: type
    order_by: tuple[str, ...] = ("name",)
    parent_column: str | None = None
    update_exclude: tuple[str, ...] = ()
    label: str | None = None

    @property
    def resource(self) -> str:
        return self.label or self.model.__name__

    def ordering(self) -> list:
        clauses = []
        for key in self.order_by:
            column = getattr(self.model, key.lstrip("-"))
            clauses.append(column.desc() if key.startswith("-") else column.asc())
        return clauses


@dataclass(frozen=True)
class LinkSchema:
    """Per-link parameters for :class:`LinkRepository`.

    ``filters`` maps a filter argument to the columns it matches; several
    columns are OR-ed (e.g. ``system_id`` matches either end of a dependency).
    """

    model: type
    filters: Mapping[str, tuple[str, ...]] = field(default_factory=dict)
    label: str | None = None

    @property
    def resource(self) -> str:
        return self.label or self.model.__name__


# ── Helpers ──────────────────────────────────────────────────────────────────


@contextmanager
def storage_errors(resource: str):
    """Translate driver rejections into ConstraintViolationError."""
    try:
        yield
    except IntegrityError as exc:
        logger.info("%s write rejected by storage: %s", resource, exc.orig)
        raise ConstraintViolationError(str(exc.orig), resource=resource) from exc
    except StatementError as exc:
        # Engine/driver failures (locks, I/O) are not caller errors
        if isinstance(exc, DBAPIError):
            raise
        # Bind-time type mismatch (value cannot be stored in its column type)
        raise ConstraintViolationError(str(exc.orig or exc), resource=resource) from exc


def writable_columns(model) -> list:
    return [c for c in model.__table__.columns if c.key not in _SERVER_FIELDS]


def _column_default(column):
    if column.default is not None and column.default.is_scalar:
        return column.default.arg
    return None


def coerce_value(column, value):
    """Convert a wire value to its storage form.

    Raises:
        ValueError: If the value cannot be represented in the column.
    """
    if value is None:
        return None
    if is_serialized_list(column):
        return encode_list(value)
    if isinstance(column.type, Date):
        return parse_date_input(value)
    return value


def _require_mapping(record, resource: str) -> Mapping:
    if not isinstance(record, Mapping):
        raise ValidationError(f"{resource} record must be an object")
    return record


def _record_id(record, resource: str) -> str:
    record_id = _require_mapping(record, resource).get("id")
    if not isinstance(record_id, str) or not record_id:
        raise ValidationError(f"{resource} id is required", details={"id": "required"})
    return record_id


# ── Base ─────────────────────────────────────────────────────────────────────


class _Repository:
    """Connection plumbing shared by all repositories."""

    def __init__(self, connections: ConnectionRegistry, connection_name: str) -> None:
        self._connections = connections
        self._connection_name = connection_name

    def _session(self):
        return self._connections.session(self._connection_name)

    def _transaction(self):
        return self._connections.begin(self._connection_name)


class _TableRepository(_Repository):
    """Adds schema-driven value preparation."""

    model: type
    resource: str

    def _values(self, record: Mapping) -> dict[str, Any]:
        """Full set of writable column values; absent keys take the column default."""
        values = {}
        for column in writable_columns(self.model):
            if column.key in record:
                try:
                    values[column.key] = coerce_value(column, record[column.key])
                except ValueError as exc:
                    raise ConstraintViolationError(
                        f"{self.resource}.{column.key}: {exc}", resource=self.resource,
                    ) from exc
            else:
                values[column.key] = _column_default(column)
        return values


# ── Entities ─────────────────────────────────────────────────────────────────


class EntityRepository(_TableRepository):
    """list / get / create / update / delete for one entity table."""

    def __init__(self, schema: EntitySchema, connections: ConnectionRegistry, connection_name: str) -> None:
        super().__init__(connections, connection_name)
        self.schema = schema
        self.model = schema.model
        self.resource = schema.resource

    def list(self, parent_id: str | None = None) -> list[dict]:
        """All rows in the schema's sort order, optionally restricted to one parent."""
        stmt = select(self.model).order_by(*self.schema.ordering())
        if parent_id is not None:
            if self.schema.parent_column is None:
                raise ValidationError(f"{self.resource} records cannot be filtered by parent")
            stmt = stmt.where(getattr(self.model, self.schema.parent_column) == parent_id)
        with self._session() as session:
            return [row.to_dict() for row in session.execute(stmt).scalars()]

    def get(self, record_id: str) -> dict:
        """Return one row.

        Raises:
            NotFoundError: If no row has ``record_id``.
        """
        with self._session() as session:
            return self._require(session, record_id).to_dict()

    def create(self, record: Mapping) -> dict:
        """Insert a caller-keyed row and return it as stored."""
        record_id = _record_id(record, self.resource)
        values = self._values(record)
        now = utcnow()
        with storage_errors(self.resource), self._transaction() as session:
            row = self.model(id=record_id, created_at=now, updated_at=now, **values)
            session.add(row)
            session.flush()
            session.refresh(row)
            result = row.to_dict()
        logger.info("%s created id=%s", self.resource, record_id)
        return result

    def update(self, record: Mapping) -> dict:
        """Replace every mutable field of an existing row and return it as stored.

        Columns in ``schema.update_exclude`` keep their stored value.

        Raises:
            NotFoundError: If no row has ``record["id"]``.
        """
        record_id = _record_id(record, self.resource)
        values = self._values(record)
        for key in self.schema.update_exclude:
            values.pop(key, None)
        with storage_errors(self.resource), self._transaction() as session:
            row = self._require(session, record_id)
            for key, value in values.items():
                setattr(row, key, value)
            row.updated_at = utcnow()
            session.flush()
            session.refresh(row)
            result = row.to_dict()
        logger.info("%s updated id=%s", self.resource, record_id)
        return result

    def delete(self, record_id: str) -> None:
        """Delete by id; a missing id is not an error."""
        self._check_deletable(record_id)
        with storage_errors(self.resource), self._transaction() as session:
            self._guard_delete(session, record_id)
            result = session.execute(delete(self.model).where(self.model.id == record_id))
        logger.info("%s deleted id=%s rows=%s", self.resource, record_id, result.rowcount)

    # ── hooks ────────────────────────────────────────────────────────────

    def _check_deletable(self, record_id: str) -> None:
        """Reject a delete from the id alone, before any connection is used."""

    def _guard_delete(self, session, record_id: str) -> None:
        """Reject a delete after inspecting the stored row."""

    def _require(self, session, record_id: str):
        row = session.get(self.model, record_id)
        if row is None:
            raise NotFoundError(resource=self.resource, resource_id=record_id)
        return row


class ScenarioRepository(EntityRepository):
    """Scenario table: the baseline scenario can never be deleted."""

    def _check_deletable(self, record_id: str) -> None:
        if record_id == BASELINE_SCENARIO_ID:
            logger.warning("Refused delete of baseline scenario id=%s", record_id)
            raise BaselineProtectedError(record_id)

    def _guard_delete(self, session, record_id: str) -> None:
        row = session.get(self.model, record_id)
        if row is not None and row.is_baseline:
            logger.warning("Refused delete of baseline-flagged scenario id=%s", record_id)
            raise BaselineProtectedError(record_id)

    def ensure_baseline(self) -> bool:
        """Insert the baseline scenario if it is missing.

        Returns:
            True if the row was created, False if it already existed.
        """
        with storage_errors(self.resource), self._transaction() as session:
            if session.get(self.model, BASELINE_SCENARIO_ID) is not None:
                return False
            now = utcnow()
            session.add(self.model(
                id=BASELINE_SCENARIO_ID,
                name=BASELINE_SCENARIO_NAME,
                description=BASELINE_SCENARIO_DESCRIPTION,
                type=None,
                is_baseline=True,
                created_at=now,
                updated_at=now,
            ))
        logger.info("Baseline scenario seeded id=%s", BASELINE_SCENARIO_ID)
        return True


# ── Links ────────────────────────────────────────────────────────────────────


class LinkRepository(_TableRepository):
    """list / create / delete for one relationship table (no update)."""

    def __init__(self, schema: LinkSchema, connections: ConnectionRegistry, connection_name: str) -> None:
        super().__init__(connections, connection_name)
        self.schema = schema
        self.model = schema.model
        self.resource = schema.resource

    def list(self, **filters: str | None) -> list[dict]:
        """Rows matching every given filter, oldest first; ``None`` filters are ignored."""
        stmt = select(self.model).order_by(self.model.created_at.asc(), self.model.id.asc())
        for name, value in filters.items():
            if value is None:
                continue
            columns = self.schema.filters.get(name)
            if not columns:
                raise ValidationError(f"{self.resource} records cannot be filtered by {name}")
            stmt = stmt.where(or_(*(getattr(self.model, c) == value for c in columns)))
        with self._session() as session:
            return [row.to_dict() for row in session.execute(stmt).scalars()]

    def create(self, record: Mapping) -> dict:
        """Insert a link with a generated id and return it as stored."""
        values = self._values(_require_mapping(record, self.resource))
        record_id = new_id()
        with storage_errors(self.resource), self._transaction() as session:
            row = self.model(id=record_id, created_at=utcnow(), **values)
            session.add(row)
            session.flush()
            session.refresh(row)
            result = row.to_dict()
        logger.info("%s created id=%s", self.resource, record_id)
        return result

    def delete(self, record_id: str) -> None:
        with storage_errors(self.resource), self._transaction() as session:
            result = session.execute(delete(self.model).where(self.model.id == record_id))
        logger.info("%s deleted id=%s rows=%s", self.resource, record_id, result.rowcount)


# ── Settings ─────────────────────────────────────────────────────────────────


class SettingsRepository(_Repository):
    """Key/value settings with upsert semantics."""

    resource = "Setting"

    def list(self) -> list[dict]:
        with self._session() as session:
            rows = session.execute(select(Setting).order_by(Setting.key.asc())).scalars()
            return [row.to_dict() for row in rows]

    def get(self, key: str) -> dict | None:
        with self._session() as session:
            row = session.get(Setting, key)
            return row.to_dict() if row else None

    def set(self, key: str, value: str | None) -> dict:
        with storage_errors(self.resource), self._transaction() as session:
            row = session.get(Setting, key)
            if row is None:
                row = Setting(key=key)
                session.add(row)
            row.value = value
            row.updated_at = utcnow()
            session.flush()
            session.refresh(row)
            result = row.to_dict()
        logger.info("Setting saved key=%s", key)
        return result

    def delete(self, key: str) -> None:
        with storage_errors(self.resource), self._transaction() as session:
            session.execute(delete(Setting).where(Setting.key == key))
        logger.info("Setting deleted key=%s", key)
