"""Readable rendering of verification failures."""

from api_contract_framework.core.diagnostics.formatter import (
    format_path,
    format_summary_line,
    format_violation,
    format_violations,
    generate_suggestion,
)
from api_contract_framework.core.diagnostics.json_diff import (
    DiffType,
    JsonDiff,
    compare_json,
    compare_values,
    format_diffs,
    format_side_by_side,
)
from api_contract_framework.core.diagnostics.report import DiagnosticReport

__all__ = [
    "DiagnosticReport",
    "DiffType",
    "JsonDiff",
    "compare_json",
    "compare_values",
    "format_diffs",
    "format_path",
    "format_side_by_side",
    "format_summary_line",
    "format_violation",
    "format_violations",
    "generate_suggestion",
]
