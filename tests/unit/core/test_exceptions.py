"""Tests for framework exceptions."""

from __future__ import annotations

import pytest

from api_contract_framework.core.contracts.diff import ChangeSeverity, ContractChange, ContractChangeType, ContractDiff
from api_contract_framework.core.exceptions import (
    ContractBreakingChangeError,
    ContractFrameworkError,
    ContractViolationError,
    EndpointNotFoundError,
)
from api_contract_framework.core.validation.violation import Violation, ViolationType


class TestHierarchy:
    @pytest.mark.parametrize(
        "error",
        [
            ContractViolationError([]),
            ContractBreakingChangeError(ContractDiff("a", "b")),
            EndpointNotFoundError("get", "/x"),
        ],
    )
    def test_subclasses_framework_error(self, error: Exception) -> None:
        assert isinstance(error, ContractFrameworkError)


class TestContractViolationError:
    def test_message_groups_by_location(self) -> None:
        violations = [
            Violation("GET /a", "$.id", "Expected integer but got string", ViolationType.INVALID_TYPE, "integer", "string"),
            Violation("GET /a", "$.name", "Missing required field 'name'", ViolationType.MISSING_REQUIRED),
            Violation("GET /b", "$", "Request timed out", ViolationType.TIMEOUT),
        ]
        error = ContractViolationError(violations)
        assert error.violations == violations
        assert str(error) == "\n".join(
            [
                "Contract violation at GET /a:",
                "  1. InvalidType at `$.id`",
                "     Expected integer but got string",
                "     Expected: integer",
                "     Actual: string",
                "  2. MissingRequired at `$.name`",
                "     Missing required field 'name'",
                "",
                "Contract violation at GET /b:",
                "  1. Timeout at `$`",
                "     Request timed out",
                "",
                "Total: 3 violation(s)",
            ]
        )


class TestContractBreakingChangeError:
    def test_lists_only_breaking_changes(self) -> None:
        diff = ContractDiff(
            "v1",
            "v2",
            (
                ContractChange(ChangeSeverity.INFO, ContractChangeType.ENDPOINT_ADDED, "Endpoint added: GET /b"),
                ContractChange(ChangeSeverity.BREAKING, ContractChangeType.ENDPOINT_REMOVED, "Endpoint removed: GET /a"),
            ),
        )
        error = ContractBreakingChangeError(diff)
        assert error.diff is diff
        assert str(error) == "Contract has 1 breaking change(s):\n  - Endpoint removed: GET /a"


class TestEndpointNotFoundError:
    def test_message(self) -> None:
        error = EndpointNotFoundError("delete", "/users/1")
        assert (error.method, error.path) == ("delete", "/users/1")
        assert str(error) == "No contract definition found for endpoint DELETE /users/1"
