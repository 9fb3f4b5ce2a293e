"""Tests for violation formatting."""

from __future__ import annotations

import pytest

from api_contract_framework.core.diagnostics.formatter import (
    field_name,
    format_path,
    format_summary_line,
    format_violation,
    format_violations,
    generate_suggestion,
)
from api_contract_framework.core.validation.violation import Violation, ViolationType

LOC = "GET /users/{id}"

MISSING = Violation(LOC, "$.email", "Missing required field 'email'", ViolationType.MISSING_REQUIRED, "string", "missing")
WRONG_TYPE = Violation(LOC, "$.id", "Expected integer but got string", ViolationType.INVALID_TYPE, "integer", "string")


class TestFormatPath:
    @pytest.mark.parametrize(
        ("path", "expected"),
        [
            ("$", "(root)"),
            ("", "(root)"),
            ("$.user.name", "`user.name`"),
            ("$[0].id", "`$[0].id`"),
            ("header:X-Request-Id", "header 'X-Request-Id'"),
            ("query:page", "query parameter 'page'"),
        ],
    )
    def test_format_path(self, path: str, expected: str) -> None:
        assert format_path(path) == expected


class TestFieldName:
    @pytest.mark.parametrize(
        ("path", "expected"),
        [("$", "root"), ("$.user.name", "name"), ("header:ETag", "ETag"), ("query:page", "page")],
    )
    def test_field_name(self, path: str, expected: str) -> None:
        assert field_name(path) == expected


class TestGenerateSuggestion:
    def test_every_type_has_a_suggestion(self) -> None:
        for violation_type in ViolationType:
            violation = Violation(LOC, "$", "msg", violation_type, "a", "b")
            assert generate_suggestion(violation)

    def test_uses_expected_and_actual(self) -> None:
        assert generate_suggestion(WRONG_TYPE) == "Ensure the value is serialized as integer instead of string."


class TestFormatViolation:
    def test_full_block(self) -> None:
        assert format_violation(WRONG_TYPE) == "\n".join(
            [
                "⚠ InvalidType",
                "   Path: `id`",
                "   Issue: Expected integer but got string",
                "   Expected: integer",
                "   Actual:   string",
                "",
                "   Fix: Ensure the value is serialized as integer instead of string.",
            ]
        )

    def test_icon_for_missing(self) -> None:
        assert format_violation(MISSING).startswith("✗ MissingRequired")

    def test_without_suggestion(self) -> None:
        assert "Fix:" not in format_violation(MISSING, include_suggestion=False)

    def test_optional_lines_omitted(self) -> None:
        violation = Violation(LOC, "$.x", "Unexpected field 'x'", ViolationType.UNEXPECTED_FIELD)
        block = format_violation(violation, include_suggestion=False)
        assert block.startswith("? UnexpectedField")
        assert "Expected:" not in block
        assert "Actual:" not in block


class TestFormatViolations:
    def test_numbered(self) -> None:
        text = format_violations(LOC, [MISSING, WRONG_TYPE])
        lines = text.splitlines()
        assert lines[0] == f"Contract verification failed for {LOC}"
        assert lines[2] == "Found 2 violation(s):"
        assert lines[3] == "─" * 60
        assert lines[4] == "1. ✗ MissingRequired"
        assert "2. ⚠ InvalidType" in lines


class TestFormatSummaryLine:
    def test_passed(self) -> None:
        assert format_summary_line(LOC, []) == f"✓ {LOC} - PASSED"

    def test_single_failure(self) -> None:
        assert format_summary_line(LOC, [MISSING]) == f"✗ {LOC} - MissingRequired at $.email"

    def test_counts_extra_failures(self) -> None:
        assert format_summary_line(LOC, [MISSING, WRONG_TYPE]).endswith("(+1 more)")
