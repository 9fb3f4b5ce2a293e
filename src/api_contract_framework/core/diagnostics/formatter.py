"""Human-readable rendering of violations."""

from __future__ import annotations

from collections.abc import Callable, Sequence

from api_contract_framework.core.validation.violation import ROOT_PATH, Violation, ViolationType

HEADER_PREFIX = "header:"
QUERY_PREFIX = "query:"

_ICONS: dict[ViolationType, str] = {
    ViolationType.MISSING_REQUIRED: "✗",
    ViolationType.UNEXPECTED_STATUS_CODE: "✗",
    ViolationType.MISSING_HEADER: "✗",
    ViolationType.UNEXPECTED_NULL: "✗",
    ViolationType.MISSING_QUERY_PARAMETER: "✗",
    ViolationType.UNEXPECTED_FIELD: "?",
    ViolationType.TIMEOUT: "⏱",
}

_SUGGESTIONS: dict[ViolationType, Callable[[Violation], str]] = {
    ViolationType.MISSING_REQUIRED: lambda v: (
        "Add the missing field to the payload or mark it as optional in the contract."
    ),
    ViolationType.INVALID_TYPE: lambda v: f"Ensure the value is serialized as {v.expected} instead of {v.actual}.",
    ViolationType.INVALID_FORMAT: lambda v: (
        f"The value should match the format '{v.expected}'. Check your serialization settings."
    ),
    ViolationType.OUT_OF_RANGE: lambda v: "The value is outside the allowed range. Keep it within the defined limits.",
    ViolationType.INVALID_ENUM_VALUE: lambda v: f"Use one of the allowed values: {v.expected}.",
    ViolationType.PATTERN_MISMATCH: lambda v: f"The value must match the pattern {v.expected}.",
    ViolationType.UNEXPECTED_STATUS_CODE: lambda v: (
        f"The API returned {v.actual} but the contract expects {v.expected}."
    ),
    ViolationType.MISSING_HEADER: lambda v: "Add the header in your middleware or handler.",
    ViolationType.INVALID_HEADER_VALUE: lambda v: f"The header value should be {v.expected}.",
    ViolationType.UNEXPECTED_NULL: lambda v: "Return a non-null value, or update the contract to allow null.",
    ViolationType.UNEXPECTED_FIELD: lambda v: (
        "Remove this field from the payload, or set ignore_extra_fields in the validation config."
    ),
    ViolationType.INVALID_CONTENT_TYPE: lambda v: f"Set Content-Type to '{v.expected}'.",
    ViolationType.MISSING_QUERY_PARAMETER: lambda v: (
        "Include the query parameter or mark it as optional in the contract."
    ),
    ViolationType.INVALID_QUERY_PARAMETER_VALUE: lambda v: (
        f"Ensure the query parameter value is a valid {v.expected}."
    ),
    ViolationType.TIMEOUT: lambda v: "The exchange did not complete in time. Check the service latency.",
    ViolationType.DISCRIMINATOR_MISMATCH: lambda v: f"Set the discriminator to one of: {v.expected}.",
}


def format_path(path: str) -> str:
    """Render a violation path for display.

    Example:
        >>> format_path("$.user.name")
        '`user.name`'
        >>> format_path("header:X-Request-Id")
        "header 'X-Request-Id'"
    """
    if not path or path == ROOT_PATH:
        return "(root)"
    if path.startswith(HEADER_PREFIX):
        return f"header '{path[len(HEADER_PREFIX):]}'"
    if path.startswith(QUERY_PREFIX):
        return f"query parameter '{path[len(QUERY_PREFIX):]}'"
    if path.startswith(ROOT_PATH + "."):
        path = path[len(ROOT_PATH) + 1 :]
    return f"`{path}`"


def field_name(path: str) -> str:
    """Return the last segment of a violation path, or ``"root"``."""
    if not path or path == ROOT_PATH:
        return "root"
    for prefix in (HEADER_PREFIX, QUERY_PREFIX):
        if path.startswith(prefix):
            return path[len(prefix) :]
    return path.rsplit(".", 1)[-1]


def generate_suggestion(violation: Violation) -> str | None:
    """Return a fix hint for *violation*, if one is known."""
    template = _SUGGESTIONS.get(violation.type)
    return template(violation) if template is not None else None


def format_violation(violation: Violation, include_suggestion: bool = True) -> str:
    """Render one violation as an indented block."""
    icon = _ICONS.get(violation.type, "⚠")
    lines = [
        f"{icon} {violation.type.value}",
        f"   Path: {format_path(violation.path)}",
        f"   Issue: {violation.message}",
    ]
    if violation.expected is not None:
        lines.append(f"   Expected: {violation.expected}")
    if violation.actual is not None:
        lines.append(f"   Actual:   {violation.actual}")
    if include_suggestion:
        suggestion = generate_suggestion(violation)
        if suggestion:
            lines.extend(["", f"   Fix: {suggestion}"])
    return "\n".join(lines)


def format_violations(endpoint: str, violations: Sequence[Violation]) -> str:
    """Render a numbered list of violations for one endpoint."""
    lines = [
        f"Contract verification failed for {endpoint}",
        "",
        f"Found {len(violations)} violation(s):",
        "─" * 60,
    ]
    for number, violation in enumerate(violations, start=1):
        if number > 1:
            lines.append("")
        lines.append(f"{number}. {format_violation(violation)}")
    return "\n".join(lines)


def format_summary_line(endpoint: str, violations: Sequence[Violation]) -> str:
    """Render a single pass/fail line."""
    if not violations:
        return f"✓ {endpoint} - PASSED"
    first = violations[0]
    extra = f" (+{len(violations) - 1} more)" if len(violations) > 1 else ""
    return f"✗ {endpoint} - {first.type.value} at {first.path}{extra}"
