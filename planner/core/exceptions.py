"""
Record-store exception hierarchy.

Services raise these types; the command blueprint registers one handler per
type and maps each to a stable error code and HTTP status. Every exception
carries a human-readable message via ``str(exc)``.

Usage:
    from planner.core.exceptions import NotFoundError, BaselineProtectedError

    raise NotFoundError(resource="Scenario", resource_id="q3-push")
    raise BaselineProtectedError("baseline")
"""


class NotFoundError(Exception):
    """Raised when no row exists for the requested id.

    Args:
        resource: Human-readable entity name (e.g. "Capability", "Command").
        resource_id: The id that was looked up.
    """

    def __init__(self, resource: str, resource_id: str | None = None) -> None:
        self.resource = resource
        self.resource_id = resource_id
        msg = f"{resource}"
        if resource_id is not None:
            msg += f" id={resource_id}"
        msg += " not found"
        super().__init__(msg)


class ValidationError(Exception):
    """Raised when command input is malformed before it reaches storage.

    Args:
        message: Human-readable explanation of what failed.
        details: Optional field-level breakdown; keys are argument names.
    """

    def __init__(self, message: str, details: dict | None = None) -> None:
        self.details = details or {}
        super().__init__(message)


class ConstraintViolationError(Exception):
    """Raised when the storage schema rejects a write.

    Covers foreign keys, CHECK enumerations, NOT NULL, duplicate primary
    keys and values that cannot be bound to their column type. The driver's
    message is passed through verbatim.
    """

    def __init__(self, message: str, resource: str | None = None) -> None:
        self.resource = resource
        super().__init__(message)


class BaselineProtectedError(Exception):
    """Raised on any attempt to delete the baseline scenario."""

    def __init__(self, scenario_id: str) -> None:
        self.scenario_id = scenario_id
        super().__init__("Cannot delete the baseline scenario")


class ConnectionNotFoundError(Exception):
    """Raised when the named database connection is not registered.

    This is a static configuration fault; retrying will not help.
    """

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Database not found: {name}")
