"""Detailed verification failure report."""

from __future__ import annotations

from dataclasses import dataclass

from api_contract_framework.core.diagnostics.formatter import field_name
from api_contract_framework.core.diagnostics.json_diff import JsonDiff, format_diffs
from api_contract_framework.core.validation.violation import Violation, ViolationType

_RULE = "-" * 70


def _suggestion_for(violation: Violation) -> str | None:
    name = field_name(violation.path)
    kind = violation.type
    if kind is ViolationType.MISSING_REQUIRED:
        return f"Ensure the field '{name}' is included in the payload."
    if kind is ViolationType.INVALID_TYPE:
        return f"Check that '{name}' has the correct type ({violation.expected})."
    if kind is ViolationType.UNEXPECTED_NULL:
        return f"The field '{name}' should not be null. Check your data."
    if kind is ViolationType.UNEXPECTED_FIELD:
        return (
            f"The field '{name}' is not in the contract. This is reported in strict mode "
            "or when additional properties are disallowed."
        )
    if kind is ViolationType.UNEXPECTED_STATUS_CODE:
        return f"The API returned status {violation.actual}. Expected: {violation.expected}. Check your API logic."
    if kind is ViolationType.MISSING_HEADER:
        return f"Ensure the header '{name}' is sent."
    if kind is ViolationType.INVALID_HEADER_VALUE:
        return f"The header '{name}' has an incorrect value. Expected: {violation.expected}."
    if kind is ViolationType.INVALID_FORMAT:
        return f"The value at '{name}' does not match the expected format ({violation.expected})."
    if kind is ViolationType.DISCRIMINATOR_MISMATCH:
        return f"The discriminator '{name}' must be one of: {violation.expected}."
    return None


@dataclass(frozen=True)
class DiagnosticReport:
    """Everything known about one failed exchange.

    Args:
        endpoint: Display label, e.g. ``"GET /users/{id}"``.
        violations: Violations found for the exchange.
        status_code: Status code that was received, if any.
        expected_status_codes: Status codes the contract declares.
        request_sent: Raw request body, if captured.
        response_received: Raw response body, if captured.
        body_diffs: Differences between an expected body and the response.
    """

    endpoint: str
    violations: tuple[Violation, ...] = ()
    status_code: int | None = None
    expected_status_codes: tuple[int, ...] = ()
    request_sent: str | None = None
    response_received: str | None = None
    body_diffs: tuple[JsonDiff, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "violations", tuple(self.violations))
        object.__setattr__(self, "expected_status_codes", tuple(self.expected_status_codes))
        object.__setattr__(self, "body_diffs", tuple(self.body_diffs))

    @property
    def is_valid(self) -> bool:
        return not self.violations

    def suggestions(self) -> list[str]:
        """Distinct fix hints, in violation order."""
        seen: list[str] = []
        for violation in self.violations:
            suggestion = _suggestion_for(violation)
            if suggestion is not None and suggestion not in seen:
                seen.append(suggestion)
        return seen

    def format_summary(self) -> str:
        lines = [f"Verification failed: [{self.endpoint}]", ""]
        lines.extend(f"  • {v.type.value} at {v.path}: {v.message}" for v in self.violations)
        return "\n".join(lines)

    def format_detailed(self) -> str:
        """Render the full report with status, violations, payloads, body diff and hints."""
        lines = ["CONTRACT VERIFICATION FAILED", "=" * 70, "", f"Endpoint: {self.endpoint}"]

        if self.status_code is not None:
            lines.extend(["", f"Response Status: {self.status_code}"])
            if self.expected_status_codes:
                lines.append(f"Expected Status: {', '.join(str(c) for c in self.expected_status_codes)}")

        lines.extend(["", f"Violations ({len(self.violations)}):", _RULE])
        for number, violation in enumerate(self.violations, start=1):
            lines.extend(["", f"{number}. {violation.type.value} at `{violation.path}`:", f"   {violation.message}"])
            if violation.expected is not None:
                lines.append(f"   Expected: {violation.expected}")
            if violation.actual is not None:
                lines.append(f"   Actual:   {violation.actual}")

        for title, body in (("Request Sent:", self.request_sent), ("Response Received:", self.response_received)):
            if body:
                lines.extend(["", title, _RULE, body])

        if self.body_diffs:
            lines.extend(["", "Body Diff:", _RULE, format_diffs(list(self.body_diffs)).rstrip("\n")])

        suggestions = self.suggestions()
        if suggestions:
            lines.extend(["", "Suggestions:"])
            lines.extend(f"  → {suggestion}" for suggestion in suggestions)
        return "\n".join(lines)

