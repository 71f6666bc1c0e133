"""
Roadmap Planner
Command Blueprint — request/response surface for the desktop shell.

Endpoints:
    GET    /api/v1/commands            — Names of all registered commands
    POST   /api/v1/commands/<name>     — Run one command; body is a JSON object of arguments

Success returns 200 with the command result (record, list, or null).
Errors return ``{"error": <message>, "code": <ERR_*>}`` with the status
from ``planner.utils.errors``. Service layer owns all reads and writes.
"""

from __future__ import annotations

import logging

from flask import Blueprint, g, jsonify, request
from sqlalchemy.exc import SQLAlchemyError
from werkzeug.exceptions import HTTPException

from planner.core.exceptions import (
    BaselineProtectedError,
    ConnectionNotFoundError,
    ConstraintViolationError,
    NotFoundError,
    ValidationError,
)
from planner.services import commands
from planner.services.record_store import get_record_store
from planner.utils.errors import E, api_error

logger = logging.getLogger(__name__)

command_bp = Blueprint("commands", __name__, url_prefix="/api/v1/commands")


# ── Error handlers ────────────────────────────────────────────────────────────


@command_bp.errorhandler(NotFoundError)
def _handle_not_found(error: NotFoundError):
    return api_error(E.NOT_FOUND, str(error))


@command_bp.errorhandler(ValidationError)
def _handle_validation(error: ValidationError):
    return api_error(E.VALIDATION_INVALID, str(error), details=error.details)


@command_bp.errorhandler(ConstraintViolationError)
def _handle_constraint(error: ConstraintViolationError):
    return api_error(E.VALIDATION_CONSTRAINT, str(error))


@command_bp.errorhandler(BaselineProtectedError)
def _handle_baseline(error: BaselineProtectedError):
    return api_error(E.BASELINE_PROTECTED, str(error))


@command_bp.errorhandler(ConnectionNotFoundError)
def _handle_connection(error: ConnectionNotFoundError):
    logger.error("Command %s failed: %s", getattr(g, "command", None), error)
    return api_error(E.CONNECTION_NOT_FOUND, str(error))


@command_bp.errorhandler(SQLAlchemyError)
def _handle_database(error: SQLAlchemyError):
    logger.exception("Database error in command %s", getattr(g, "command", None))
    return api_error(E.DATABASE, str(getattr(error, "orig", None) or error))


@command_bp.errorhandler(Exception)
def _handle_unexpected(error: Exception):
    if isinstance(error, HTTPException):
        return error
    logger.exception("Unexpected error in command %s", getattr(g, "command", None))
    return api_error(E.INTERNAL, "Internal server error")


# ═════════════════════════════════════════════════════════════════════════
# Commands
# ═════════════════════════════════════════════════════════════════════════


@command_bp.route("", methods=["GET"])
def list_commands():
    """Return the sorted names of every registered command."""
    return jsonify({"commands": sorted(commands.get_registered_commands())}), 200


@command_bp.route("/<string:name>", methods=["POST"])
def invoke(name):
    """Run a command.

    Body: JSON object of named arguments (may be empty or omitted).
    Returns: the command result (200).
    """
    g.command = name
    args = request.get_json(silent=True)
    if args is None:
        args = {}
    if not isinstance(args, dict):
        return api_error(E.VALIDATION_INVALID, "Command arguments must be a JSON object")

    result = commands.dispatch(get_record_store(), name, args)
    return jsonify(result), 200
