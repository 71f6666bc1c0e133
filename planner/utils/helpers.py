"""Shared value helpers for the record store.

utcnow:             service-side write timestamp
new_id:             server-generated ids for link rows
parse_date_input:   wire date → ``date`` (raises ValueError on bad input)
encode_list / decode_list:  list-valued fields ↔ JSON text storage
"""
import json
import logging
import uuid
from datetime import date, datetime, timezone

logger = logging.getLogger(__name__)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_id() -> str:
    return str(uuid.uuid4())


def parse_date_input(value):
    """Parse an ISO ``YYYY-MM-DD`` string, raising ValueError on bad input.

    ``None`` and empty strings map to ``None``; ``date`` objects pass through.
    A full ISO datetime is accepted and truncated to its date part.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        raise ValueError(f"Invalid date {value!r}. Use YYYY-MM-DD.")
    try:
        return date.fromisoformat(value)
    except ValueError:
        try:
            return datetime.fromisoformat(value).date()
        except ValueError as exc:
            raise ValueError(f"Invalid date {value!r}. Use YYYY-MM-DD.") from exc


def encode_list(value):
    """Serialize an ordered list of strings to its JSON text form.

    Raises:
        ValueError: If ``value`` is not a list/tuple.
    """
    if value is None:
        return None
    if not isinstance(value, (list, tuple)):
        raise ValueError(f"Expected a list, got {type(value).__name__}")
    return json.dumps(list(value), ensure_ascii=False)


def decode_list(text):
    """Inverse of :func:`encode_list`.

    Rows written outside this service may hold text that is not a JSON
    array; such values are returned unchanged.
    """
    if text is None:
        return None
    try:
        value = json.loads(text)
    except ValueError:
        logger.warning("Stored list field is not valid JSON: %.60r", text)
        return text
    return value if isinstance(value, list) else text
