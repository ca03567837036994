"""Argument checks performed before any request is sent."""

from urllib.parse import quote


def ensure_not_empty(value: str | None, name: str) -> str:
    """Return the value or raise when it is missing or blank."""
    if value is None or not value.strip():
        msg = f"{name} must not be empty"
        raise ValueError(msg)
    return value


def ensure_positive(value: int, name: str) -> int:
    """Return the value or raise when it is not a positive integer."""
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        msg = f"{name} must be a positive integer, got {value!r}"
        raise ValueError(msg)
    return value


def encode_project_id(project_id: int | str) -> str:
    """Render a numeric id or a `namespace/path` as a single path segment."""
    if isinstance(project_id, int) and not isinstance(project_id, bool):
        return str(ensure_positive(project_id, "project_id"))
    if isinstance(project_id, str):
        return quote(ensure_not_empty(project_id, "project_id"), safe="")
    msg = f"project_id must be an int or str, got {type(project_id).__name__}"
    raise ValueError(msg)
