"""Structural diff between an expected and an actual JSON body.

Diffs are reported per JSON path. Object members missing from the actual
body are ``REMOVED``, extra members are ``ADDED``; arrays are compared by
index. Values of different JSON kinds produce a single ``TYPE_MISMATCH`` and
are not descended into.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from enum import Enum
from typing import Any

from api_contract_framework.core.validation.json_values import is_number, json_equal, parse_json
from api_contract_framework.core.validation.violation import ROOT_PATH, child_path, item_path

_COLUMN_WIDTH = 35


class DiffType(str, Enum):
    """Kind of difference at one JSON path."""

    ADDED = "added"
    REMOVED = "removed"
    CHANGED = "changed"
    TYPE_MISMATCH = "type_mismatch"

    @property
    def marker(self) -> str:
        return _MARKERS[self]


_MARKERS = {
    DiffType.ADDED: "+",
    DiffType.REMOVED: "-",
    DiffType.CHANGED: "~",
    DiffType.TYPE_MISMATCH: "!",
}


@dataclass(frozen=True)
class JsonDiff:
    """One difference between two JSON bodies.

    Args:
        path: JSON path of the difference, e.g. ``"$.user.name"``.
        type: Kind of difference.
        expected: Rendered expected value, or the expected type name for
            type mismatches.
        actual: Rendered actual value, or the actual type name.
        description: Optional note shown under the diff.
    """

    path: str
    type: DiffType
    expected: str | None = None
    actual: str | None = None
    description: str | None = None

    @classmethod
    def added(cls, path: str, actual: str) -> JsonDiff:
        return cls(
            path,
            DiffType.ADDED,
            actual=actual,
            description="Field present in response but not in contract schema",
        )

    @classmethod
    def removed(cls, path: str, expected: str) -> JsonDiff:
        return cls(path, DiffType.REMOVED, expected=expected, description="Required field missing from response")

    @classmethod
    def changed(cls, path: str, expected: str, actual: str) -> JsonDiff:
        return cls(path, DiffType.CHANGED, expected, actual, "Value differs from expected")

    @classmethod
    def type_mismatch(cls, path: str, expected_type: str, actual_type: str) -> JsonDiff:
        return cls(
            path,
            DiffType.TYPE_MISMATCH,
            expected_type,
            actual_type,
            f"Expected type '{expected_type}', got '{actual_type}'",
        )

    def __str__(self) -> str:
        if self.type is DiffType.ADDED:
            return f"+ {self.path}: {self.actual}"
        if self.type is DiffType.REMOVED:
            return f"- {self.path}: {self.expected}"
        if self.type is DiffType.CHANGED:
            return f"~ {self.path}: {self.expected} → {self.actual}"
        return f"! {self.path}: expected {self.expected}, got {self.actual}"


def compare_json(expected: str | None, actual: str | None) -> list[JsonDiff]:
    """Diff two raw JSON bodies.

    Blank bodies count as absent: an absent expected body makes the whole
    actual body ``ADDED`` and vice versa. When either side is not valid
    JSON the texts are compared verbatim.
    """
    expected_blank = expected is None or not expected.strip()
    actual_blank = actual is None or not actual.strip()
    if expected_blank and actual_blank:
        return []
    if expected_blank:
        return [JsonDiff.added(ROOT_PATH, actual or "null")]
    if actual_blank:
        return [JsonDiff.removed(ROOT_PATH, expected or "null")]
    try:
        expected_value = parse_json(expected)  # type: ignore[arg-type]
        actual_value = parse_json(actual)  # type: ignore[arg-type]
    except ValueError:
        if expected != actual:
            return [JsonDiff.changed(ROOT_PATH, expected, actual)]  # type: ignore[arg-type]
        return []
    return compare_values(expected_value, actual_value)


def compare_values(expected: Any, actual: Any, path: str = ROOT_PATH) -> list[JsonDiff]:
    """Diff two decoded JSON values rooted at *path*."""
    diffs: list[JsonDiff] = []
    _compare(expected, actual, path, diffs)
    return diffs


def _compare(expected: Any, actual: Any, path: str, diffs: list[JsonDiff]) -> None:
    expected_kind = _kind(expected)
    actual_kind = _kind(actual)
    if expected_kind != actual_kind:
        diffs.append(JsonDiff.type_mismatch(path, expected_kind, actual_kind))
    elif expected_kind == "object":
        for name, value in expected.items():
            if name in actual:
                _compare(value, actual[name], child_path(path, name), diffs)
            else:
                diffs.append(JsonDiff.removed(child_path(path, name), _render(value)))
        for name, value in actual.items():
            if name not in expected:
                diffs.append(JsonDiff.added(child_path(path, name), _render(value)))
    elif expected_kind == "array":
        for index in range(max(len(expected), len(actual))):
            if index >= len(expected):
                diffs.append(JsonDiff.added(item_path(path, index), _render(actual[index])))
            elif index >= len(actual):
                diffs.append(JsonDiff.removed(item_path(path, index), _render(expected[index])))
            else:
                _compare(expected[index], actual[index], item_path(path, index), diffs)
    elif not json_equal(expected, actual):
        diffs.append(JsonDiff.changed(path, _render(expected), _render(actual)))


def _kind(value: Any) -> str:
    # integers and floats share one JSON kind
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if is_number(value):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, list):
        return "array"
    if isinstance(value, dict):
        return "object"
    return type(value).__name__


def _render(value: Any) -> str:
    return json.dumps(value, ensure_ascii=False)


def format_diffs(diffs: list[JsonDiff]) -> str:
    """Render diffs as a unified-diff style block; empty when no diffs."""
    if not diffs:
        return ""
    lines = ["--- Expected", "+++ Actual", ""]
    for diff in diffs:
        lines.append(f"{diff.type.marker} {diff.path}:")
        if diff.expected is not None:
            lines.append(f"    Expected: {diff.expected}")
        if diff.actual is not None:
            lines.append(f"    Actual:   {diff.actual}")
        if diff.description is not None:
            lines.append(f"    Note: {diff.description}")
        lines.append("")
    return "\n".join(lines)


def format_side_by_side(expected: str | None, actual: str | None) -> str:
    """Render both bodies pretty-printed in two columns.

    Long lines in the left column are truncated with ``...``.
    """
    left_lines = _pretty(expected).split("\n")
    right_lines = _pretty(actual).split("\n")
    lines = [f"{'Expected:':<{_COLUMN_WIDTH}}   Actual:", "-" * 70]
    for index in range(max(len(left_lines), len(right_lines))):
        left = left_lines[index].rstrip() if index < len(left_lines) else ""
        right = right_lines[index].rstrip() if index < len(right_lines) else ""
        if len(left) > _COLUMN_WIDTH - 3:
            left = left[: _COLUMN_WIDTH - 3] + "..."
        lines.append(f"{left:<{_COLUMN_WIDTH}} | {right}".rstrip())
    return "\n".join(lines)


def _pretty(text: str | None) -> str:
    if text is None or not text.strip():
        return "(empty)"
    try:
        return json.dumps(parse_json(text), indent=2, ensure_ascii=False)
    except ValueError:
        return text
