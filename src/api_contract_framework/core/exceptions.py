"""Framework exceptions.

Data-shape problems (malformed JSON, schema mismatches, incompatible
contracts) are reported as result objects. These exceptions are raised only
when a caller explicitly asks for it or when an endpoint lookup cannot be
satisfied.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from api_contract_framework.core.contracts.diff import ContractChange, ContractDiff
    from api_contract_framework.core.validation.violation import Violation


class ContractFrameworkError(Exception):
    """Base exception for contract framework errors."""

    pass


class ContractViolationError(ContractFrameworkError):
    """One or more payloads did not satisfy their contract."""

    def __init__(self, violations: Sequence[Violation]) -> None:
        self.violations = list(violations)
        super().__init__(_format_violations(self.violations))


class ContractBreakingChangeError(ContractFrameworkError):
    """A contract comparison found breaking changes."""

    def __init__(self, diff: ContractDiff) -> None:
        self.diff = diff
        super().__init__(_format_breaking(diff.breaking_changes))


class EndpointNotFoundError(ContractFrameworkError):
    """No endpoint in the contract matches a method and path."""

    def __init__(self, method: str, path: str) -> None:
        self.method = method
        self.path = path
        super().__init__(f"No contract definition found for endpoint {method.upper()} {path}")


def _format_violations(violations: list[Violation]) -> str:
    grouped: dict[str, list[Violation]] = {}
    for violation in violations:
        grouped.setdefault(violation.location, []).append(violation)

    lines: list[str] = []
    for location, items in grouped.items():
        lines.append(f"Contract violation at {location}:")
        for number, violation in enumerate(items, start=1):
            lines.append(f"  {number}. {violation.type.value} at `{violation.path}`")
            lines.append(f"     {violation.message}")
            if violation.expected is not None:
                lines.append(f"     Expected: {violation.expected}")
            if violation.actual is not None:
                lines.append(f"     Actual: {violation.actual}")
        lines.append("")
    lines.append(f"Total: {len(violations)} violation(s)")
    return "\n".join(lines)


def _format_breaking(changes: Sequence[ContractChange]) -> str:
    lines = [f"Contract has {len(changes)} breaking change(s):"]
    lines.extend(f"  - {change.description}" for change in changes)
    return "\n".join(lines)
