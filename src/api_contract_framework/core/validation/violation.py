"""Violation model shared by every body validator."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from api_contract_framework.core.exceptions import ContractViolationError

ROOT_PATH = "$"


class ViolationType(str, Enum):
    """Stable kinds of contract violations.

    The values are wire-independent identifiers and never change between
    releases, so they are safe to persist or compare across runs.
    """

    MISSING_REQUIRED = "MissingRequired"
    INVALID_TYPE = "InvalidType"
    INVALID_FORMAT = "InvalidFormat"
    OUT_OF_RANGE = "OutOfRange"
    INVALID_ENUM_VALUE = "InvalidEnumValue"
    PATTERN_MISMATCH = "PatternMismatch"
    UNEXPECTED_STATUS_CODE = "UnexpectedStatusCode"
    MISSING_HEADER = "MissingHeader"
    INVALID_HEADER_VALUE = "InvalidHeaderValue"
    UNEXPECTED_NULL = "UnexpectedNull"
    UNEXPECTED_FIELD = "UnexpectedField"
    INVALID_CONTENT_TYPE = "InvalidContentType"
    MISSING_QUERY_PARAMETER = "MissingQueryParameter"
    INVALID_QUERY_PARAMETER_VALUE = "InvalidQueryParameterValue"
    TIMEOUT = "Timeout"
    DISCRIMINATOR_MISMATCH = "DiscriminatorMismatch"


@dataclass(frozen=True)
class Violation:
    """A single mismatch between a payload and its contract.

    Args:
        location: Label of the endpoint or exchange being checked
            (e.g. ``"GET /users/{id}"``).
        path: JSON path of the offending value. ``$`` is the root,
            ``$.name`` a property and ``$[0]`` an array item. Header and
            query checks use ``header:Name`` and ``query:name``.
        message: Human-readable description.
        type: The violation kind.
        expected: Optional rendering of what the contract expects.
        actual: Optional rendering of what was received.
    """

    location: str
    path: str
    message: str
    type: ViolationType
    expected: str | None = None
    actual: str | None = None

    def __str__(self) -> str:
        text = f"  - {self.message} at path '{self.path}'"
        if self.expected is not None or self.actual is not None:
            text += f" (expected: {self.expected}, got: {self.actual})"
        return text

    def to_dict(self) -> dict[str, Any]:
        """Convert to a dictionary for JSON serialization."""
        return {
            "location": self.location,
            "path": self.path,
            "message": self.message,
            "type": self.type.value,
            "expected": self.expected,
            "actual": self.actual,
        }


def child_path(path: str, name: str) -> str:
    """Return the JSON path of property *name* under *path*."""
    return f"{path}.{name}"


def item_path(path: str, index: int) -> str:
    """Return the JSON path of array item *index* under *path*."""
    return f"{path}[{index}]"


@dataclass
class ValidationResult:
    """Outcome of validating one payload or exchange.

    Args:
        location: Label of the endpoint or exchange that was checked.
        violations: Every violation found, in detection order.
    """

    location: str
    violations: list[Violation] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        """Return ``True`` when no violations were found."""
        return not self.violations

    def errors_by_type(self) -> dict[ViolationType, int]:
        """Count violations per kind."""
        return dict(Counter(v.type for v in self.violations))

    def raise_if_invalid(self) -> None:
        """Raise when the result holds any violation.

        Raises:
            ContractViolationError: If ``is_valid`` is ``False``.
        """
        if self.violations:
            raise ContractViolationError(self.violations)
