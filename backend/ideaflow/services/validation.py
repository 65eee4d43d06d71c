"""Presence checks shared by the services."""

from typing import Any, Dict

from ideaflow.exceptions import MissingFieldsError


def is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def require_fields(fields: Dict[str, Any]) -> None:
    """
    Raise MissingFieldsError naming every blank entry.

    `fields` maps the wire (camelCase) name to the received value, so the
    error message uses the names the client actually sent.
    """
    missing = [name for name, value in fields.items() if is_blank(value)]
    if missing:
        raise MissingFieldsError(missing)
