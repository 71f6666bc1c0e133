"""Named commands invoked by the desktop shell.

Each command takes the ``RecordStore`` and a dict of named arguments and
returns a JSON-serialisable result (record, list of records, or ``None``).

Naming follows the shell's conventions:
    get_<entities>            list (some accept an optional parent filter)
    get_<entity>(id)          one record
    create_<entity>(<entity>) insert, returns the stored record
    update_<entity>(<entity>) full replace, returns the stored record
    delete_<entity>(id)       delete, returns None

Usage:
    @register_command("get_systems_by_capability")
    def get_systems_by_capability(store, args):
        ...

    dispatch(store, "get_capabilities", {})
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from planner.core.exceptions import NotFoundError, ValidationError
from planner.services.record_store import RecordStore

logger = logging.getLogger(__name__)

CommandHandler = Callable[[RecordStore, dict], Any]

_command_registry: dict[str, CommandHandler] = {}


def register_command(name: str):
    """Decorator to register a command handler under ``name``."""
    def decorator(fn: CommandHandler) -> CommandHandler:
        _command_registry[name] = fn
        return fn
    return decorator


def get_registered_commands() -> dict[str, CommandHandler]:
    """Return all registered command handlers."""
    return dict(_command_registry)


def dispatch(store: RecordStore, name: str, args: dict) -> Any:
    """Run command ``name`` with ``args``.

    Raises:
        NotFoundError: If no command is registered under ``name``.
    """
    handler = _command_registry.get(name)
    if handler is None:
        raise NotFoundError(resource="Command", resource_id=name)
    logger.debug("Dispatching command %s args=%s", name, sorted(args))
    return handler(store, args)


# ── Argument helpers ─────────────────────────────────────────────────────────


def _require_arg(args: dict, key: str) -> Any:
    value = args.get(key)
    if value is None or value == "":
        raise ValidationError(f"Missing required argument '{key}'", details={key: "required"})
    return value


def _require_id(args: dict, key: str = "id") -> str:
    value = _require_arg(args, key)
    if not isinstance(value, str):
        raise ValidationError(f"Argument '{key}' must be a string", details={key: "must be a string"})
    return value


def _require_record(args: dict, key: str) -> dict:
    value = _require_arg(args, key)
    if not isinstance(value, dict):
        raise ValidationError(f"Argument '{key}' must be an object", details={key: "must be an object"})
    return value


# ── Entity commands ──────────────────────────────────────────────────────────


def _register_entity_commands(singular: str, plural: str, list_filter: str | None = None) -> None:
    """Register the five CRUD commands for the repository ``store.<plural>``."""

    def repository(store: RecordStore):
        return getattr(store, plural)

    def list_records(store, args):
        parent_id = args.get(list_filter) if list_filter else None
        return repository(store).list(parent_id or None)

    def get_record(store, args):
        return repository(store).get(_require_id(args))

    def create_record(store, args):
        return repository(store).create(_require_record(args, singular))

    def update_record(store, args):
        return repository(store).update(_require_record(args, singular))

    def delete_record(store, args):
        repository(store).delete(_require_id(args))
        return None

    register_command(f"get_{plural}")(list_records)
    register_command(f"get_{singular}")(get_record)
    register_command(f"create_{singular}")(create_record)
    register_command(f"update_{singular}")(update_record)
    register_command(f"delete_{singular}")(delete_record)


_register_entity_commands("capability", "capabilities")
_register_entity_commands("system", "systems")
_register_entity_commands("initiative", "initiatives", list_filter="scenario_id")
_register_entity_commands("scenario", "scenarios")
_register_entity_commands("resource_pool", "resource_pools")
_register_entity_commands("resource", "resources", list_filter="pool_id")
_register_entity_commands("constraint", "constraints")
_register_entity_commands("financial_period", "financial_periods")


@register_command("get_systems_by_capability")
def get_systems_by_capability(store: RecordStore, args: dict) -> list[dict]:
    return store.systems.list(_require_id(args, "capability_id"))


# ── Link commands ────────────────────────────────────────────────────────────


def _register_link_commands(singular: str, plural: str, filters: tuple[str, ...]) -> None:
    """Register list/create/delete for the link repository ``store.<plural>``."""

    def repository(store: RecordStore):
        return getattr(store, plural)

    def list_links(store, args):
        return repository(store).list(**{f: args.get(f) or None for f in filters})

    def create_link(store, args):
        return repository(store).create(_require_record(args, singular))

    def delete_link(store, args):
        repository(store).delete(_require_id(args))
        return None

    register_command(f"get_{plural}")(list_links)
    register_command(f"create_{singular}")(create_link)
    register_command(f"delete_{singular}")(delete_link)


_register_link_commands("system_dependency", "system_dependencies", ("system_id",))
_register_link_commands("system_initiative", "system_initiatives", ("system_id", "initiative_id"))
_register_link_commands("initiative_dependency", "initiative_dependencies", ("initiative_id",))
_register_link_commands(
    "initiative_resource_requirement", "initiative_resource_requirements",
    ("initiative_id", "resource_pool_id"),
)
_register_link_commands("initiative_constraint", "initiative_constraints", ("initiative_id", "constraint_id"))


# ── Settings commands ────────────────────────────────────────────────────────


@register_command("get_settings")
def get_settings(store: RecordStore, args: dict) -> list[dict]:
    return store.settings.list()


@register_command("get_setting")
def get_setting(store: RecordStore, args: dict) -> dict | None:
    return store.settings.get(_require_id(args, "key"))


@register_command("set_setting")
def set_setting(store: RecordStore, args: dict) -> dict:
    value = args.get("value")
    if value is not None and not isinstance(value, str):
        raise ValidationError("Argument 'value' must be a string", details={"value": "must be a string"})
    return store.settings.set(_require_id(args, "key"), value)


@register_command("delete_setting")
def delete_setting(store: RecordStore, args: dict) -> None:
    store.settings.delete(_require_id(args, "key"))
    return None
