"""Helpers for working with decoded JSON values."""

from __future__ import annotations

import json
from typing import Any


def _reject_constant(name: str) -> Any:
    raise ValueError(f"{name} is not a valid JSON value")


def parse_json(text: str | bytes) -> Any:
    """Decode JSON text.

    ``NaN`` and ``Infinity`` literals are rejected even though the standard
    library accepts them.

    Raises:
        ValueError: If *text* is not valid JSON.
    """
    return json.loads(text, parse_constant=_reject_constant)


def json_type_name(value: Any) -> str:
    """Return the JSON type name of a decoded value."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, int):
        return "integer"
    if isinstance(value, float):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, (list, tuple)):
        return "array"
    if isinstance(value, dict):
        return "object"
    return type(value).__name__


def is_number(value: Any) -> bool:
    """Return ``True`` for JSON numbers. Booleans are not numbers."""
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def json_equal(left: Any, right: Any) -> bool:
    """Deep JSON equality.

    ``1`` equals ``1.0`` but ``true`` never equals ``1``.
    """
    if isinstance(left, bool) or isinstance(right, bool):
        return isinstance(left, bool) and isinstance(right, bool) and left == right
    if is_number(left) and is_number(right):
        return bool(left == right)
    if isinstance(left, dict) and isinstance(right, dict):
        return left.keys() == right.keys() and all(json_equal(left[k], right[k]) for k in left)
    if isinstance(left, (list, tuple)) and isinstance(right, (list, tuple)):
        return len(left) == len(right) and all(json_equal(a, b) for a, b in zip(left, right))
    return type(left) is type(right) and bool(left == right)


def canonical_key(value: Any) -> Any:
    """Return a hashable key such that equal JSON values share a key."""
    if value is None:
        return ("null",)
    if isinstance(value, bool):
        return ("bool", value)
    if is_number(value):
        return ("num", value)
    if isinstance(value, str):
        return ("str", value)
    if isinstance(value, (list, tuple)):
        return ("arr", tuple(canonical_key(v) for v in value))
    if isinstance(value, dict):
        return ("obj", tuple(sorted((k, canonical_key(v)) for k, v in value.items())))
    return ("other", repr(value))


def first_duplicate(items: list[Any]) -> tuple[int, int] | None:
    """Find the first repeated element.

    Returns:
        ``(first_index, duplicate_index)`` or ``None`` when all items differ.
    """
    seen: dict[Any, int] = {}
    for index, item in enumerate(items):
        key = canonical_key(item)
        if key in seen:
            return seen[key], index
        seen[key] = index
    return None


def render(value: Any) -> str:
    """Render a value as compact JSON for messages."""
    try:
        return json.dumps(value, sort_keys=True)
    except (TypeError, ValueError):
        return repr(value)
