"""Path template helpers.

Two templates are equivalent when they differ only in parameter names:
``/users/{userId}`` and ``/users/{id}`` both normalize to ``/users/{}``.
"""

from __future__ import annotations

import re

_PARAM_SEGMENT_RE = re.compile(r"^\{([^/{}]+)\}$")


def strip_query(path: str) -> str:
    """Drop any ``?query`` and ``#fragment`` suffix."""
    return path.split("?", 1)[0].split("#", 1)[0]


def _segments(path: str) -> list[str]:
    path = strip_query(path).strip()
    if not path.startswith("/"):
        path = "/" + path
    trimmed = path.rstrip("/")
    return trimmed.split("/")[1:] if trimmed else []


def normalize_path_template(template: str) -> str:
    """Replace every ``{param}`` segment with ``{}`` and drop trailing slashes.

    Example:
        >>> normalize_path_template("/users/{userId}/orders/")
        '/users/{}/orders'
    """
    parts = ["{}" if _PARAM_SEGMENT_RE.match(segment) else segment for segment in _segments(template)]
    return "/" + "/".join(parts)


def templates_equivalent(left: str, right: str) -> bool:
    """Return ``True`` if two templates match the same concrete paths."""
    return normalize_path_template(left) == normalize_path_template(right)


def parameter_names(template: str) -> list[str]:
    """Return the parameter names of *template* in order."""
    names: list[str] = []
    for segment in _segments(template):
        match = _PARAM_SEGMENT_RE.match(segment)
        if match:
            names.append(match.group(1))
    return names


def compile_path_template(template: str) -> re.Pattern[str]:
    """Compile *template* into a case-insensitive regex.

    Each parameter segment captures one non-empty path segment, in
    order. A trailing slash on the matched path is tolerated.
    """
    pieces = []
    for segment in _segments(template):
        pieces.append("([^/]+)" if _PARAM_SEGMENT_RE.match(segment) else re.escape(segment))
    body = "/" + "/".join(pieces) if pieces else ""
    return re.compile(f"^{body}/?$", re.IGNORECASE)
