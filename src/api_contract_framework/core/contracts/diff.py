"""Result types of a contract comparison."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

from api_contract_framework.core.exceptions import ContractBreakingChangeError


class ChangeSeverity(str, Enum):
    """How a change affects existing consumers."""

    INFO = "info"
    """Does not affect compatibility."""

    WARNING = "warning"
    """Might cause issues but is not strictly breaking."""

    BREAKING = "breaking"
    """Existing consumers will fail."""


class ContractChangeType(str, Enum):
    """Kinds of change detected between two contract versions."""

    ENDPOINT_ADDED = "EndpointAdded"
    ENDPOINT_REMOVED = "EndpointRemoved"
    ENDPOINT_METHOD_CHANGED = "EndpointMethodChanged"

    RESPONSE_FIELD_ADDED = "ResponseFieldAdded"
    RESPONSE_FIELD_REMOVED = "ResponseFieldRemoved"
    RESPONSE_FIELD_TYPE_CHANGED = "ResponseFieldTypeChanged"
    RESPONSE_FIELD_MADE_NULLABLE = "ResponseFieldMadeNullable"
    RESPONSE_FIELD_MADE_NON_NULLABLE = "ResponseFieldMadeNonNullable"

    REQUEST_FIELD_ADDED = "RequestFieldAdded"
    REQUEST_FIELD_REMOVED = "RequestFieldRemoved"
    REQUEST_FIELD_TYPE_CHANGED = "RequestFieldTypeChanged"
    REQUEST_FIELD_MADE_REQUIRED = "RequestFieldMadeRequired"
    REQUEST_FIELD_MADE_OPTIONAL = "RequestFieldMadeOptional"

    RESPONSE_STATUS_CODE_ADDED = "ResponseStatusCodeAdded"
    RESPONSE_STATUS_CODE_REMOVED = "ResponseStatusCodeRemoved"
    RESPONSE_STATUS_CODE_CHANGED = "ResponseStatusCodeChanged"

    RESPONSE_HEADER_ADDED = "ResponseHeaderAdded"
    RESPONSE_HEADER_REMOVED = "ResponseHeaderRemoved"
    REQUEST_HEADER_ADDED = "RequestHeaderAdded"
    REQUEST_HEADER_REMOVED = "RequestHeaderRemoved"

    QUERY_PARAMETER_ADDED = "QueryParameterAdded"
    QUERY_PARAMETER_REMOVED = "QueryParameterRemoved"
    QUERY_PARAMETER_MADE_REQUIRED = "QueryParameterMadeRequired"
    QUERY_PARAMETER_MADE_OPTIONAL = "QueryParameterMadeOptional"
    QUERY_PARAMETER_TYPE_CHANGED = "QueryParameterTypeChanged"


class ChangeLocation(str, Enum):
    """Part of an endpoint a change applies to."""

    ENDPOINT = "endpoint"
    REQUEST_BODY = "request_body"
    RESPONSE_BODY = "response_body"
    REQUEST_HEADER = "request_header"
    RESPONSE_HEADER = "response_header"
    QUERY_PARAMETER = "query_parameter"
    STATUS_CODE = "status_code"


@dataclass(frozen=True)
class ContractChange:
    """A single difference between two contract versions.

    Args:
        severity: Compatibility impact.
        change_type: Kind of change.
        description: Human-readable sentence.
        location: Part of the endpoint affected.
        path: Path template of the affected endpoint.
        method: HTTP method of the affected endpoint.
        field_name: Affected field, header or parameter name.
        old_value: Previous value or type name.
        new_value: New value or type name.
    """

    severity: ChangeSeverity
    change_type: ContractChangeType
    description: str
    location: ChangeLocation = ChangeLocation.ENDPOINT
    path: str | None = None
    method: str | None = None
    field_name: str | None = None
    old_value: str | None = None
    new_value: str | None = None

    def __str__(self) -> str:
        return f"[{self.severity.value}] {self.description}"

    def to_dict(self) -> dict[str, Any]:
        return {
            "severity": self.severity.value,
            "change_type": self.change_type.value,
            "description": self.description,
            "location": self.location.value,
            "path": self.path,
            "method": self.method,
            "field_name": self.field_name,
            "old_value": self.old_value,
            "new_value": self.new_value,
        }


@dataclass(frozen=True)
class ContractDiff:
    """All changes found when comparing an old contract to a new one."""

    old_contract_name: str
    new_contract_name: str
    changes: tuple[ContractChange, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "changes", tuple(self.changes))

    def _with_severity(self, severity: ChangeSeverity) -> list[ContractChange]:
        return [change for change in self.changes if change.severity is severity]

    @property
    def breaking_changes(self) -> list[ContractChange]:
        return self._with_severity(ChangeSeverity.BREAKING)

    @property
    def warnings(self) -> list[ContractChange]:
        return self._with_severity(ChangeSeverity.WARNING)

    @property
    def info_changes(self) -> list[ContractChange]:
        return self._with_severity(ChangeSeverity.INFO)

    @property
    def has_breaking_changes(self) -> bool:
        return any(change.severity is ChangeSeverity.BREAKING for change in self.changes)

    @property
    def is_compatible(self) -> bool:
        """``True`` when no change is breaking."""
        return not self.has_breaking_changes

    def summary(self) -> str:
        """Render a multi-line report grouped by severity."""
        breaking, warnings, info = self.breaking_changes, self.warnings, self.info_changes
        lines = [
            f"Contract Comparison: '{self.old_contract_name}' -> '{self.new_contract_name}'",
            f"Total Changes: {len(self.changes)} "
            f"(Breaking: {len(breaking)}, Warnings: {len(warnings)}, Info: {len(info)})",
            "",
        ]
        for heading, group in (("BREAKING CHANGES:", breaking), ("WARNINGS:", warnings), ("INFO:", info)):
            if not group:
                continue
            lines.append(heading)
            lines.extend(f"  - {change.description}" for change in group)
            lines.append("")
        return "\n".join(lines).rstrip("\n")

    def to_dict(self) -> dict[str, Any]:
        return {
            "old_contract_name": self.old_contract_name,
            "new_contract_name": self.new_contract_name,
            "is_compatible": self.is_compatible,
            "counts": {
                "breaking": len(self.breaking_changes),
                "warning": len(self.warnings),
                "info": len(self.info_changes),
            },
            "changes": [change.to_dict() for change in self.changes],
        }

    def raise_if_breaking(self) -> None:
        """Raise if any change is breaking.

        Raises:
            ContractBreakingChangeError: Carrying this diff.
        """
        if self.has_breaking_changes:
            raise ContractBreakingChangeError(self)
