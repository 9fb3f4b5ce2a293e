"""Best-effort synthesis of JSON values that satisfy a schema tree.

:func:`generate_sample` never raises for a well-formed schema. Declared
values win over synthesis in this order: ``const``, ``example``, the first
``enum`` value, ``default``. Patterns are not synthesized; a string node
with a pattern and no declared value gets the plain literal.
"""

from __future__ import annotations

import copy
import math
from collections.abc import Callable
from typing import Any

from api_contract_framework.core.schema.definition import UNSET, CompositionKind, SchemaKind, SchemaNode
from api_contract_framework.core.schema.discriminator import valid_discriminator_values
from api_contract_framework.core.validation.config import ValidationDirection, hidden_for_direction
from api_contract_framework.core.validation.formats import sample_for_format

_DECIMALS = 12


def generate_sample(schema: SchemaNode, direction: ValidationDirection = ValidationDirection.BOTH) -> Any:
    """Produce a value that validates against *schema*.

    Args:
        schema: Root schema node. ``None`` yields ``None``.
        direction: Exchange side. ``readOnly`` properties are left out of
            request samples and ``writeOnly`` properties out of response
            samples.

    Returns:
        A JSON-compatible value.
    """
    if schema is None:
        return None
    return _generate(schema, ValidationDirection(direction), 0)


def _generate(node: SchemaNode, direction: ValidationDirection, salt: int) -> Any:
    declared = _declared_value(node, salt)
    if declared is not UNSET:
        return copy.deepcopy(declared)
    return _SYNTHESIZERS[node.kind](node, direction, salt)


def _declared_value(node: SchemaNode, salt: int) -> Any:
    """Pick the declared value, or ``UNSET`` when synthesis is needed.

    Salted calls come from unique arrays; they skip the single-valued
    ``example`` and ``default`` and rotate through ``enum``.
    """
    if node.const is not UNSET:
        return node.const
    if salt == 0 and node.example is not UNSET:
        return node.example
    if node.enum:
        return node.enum[salt % len(node.enum)]
    if salt == 0 and node.default is not UNSET:
        return node.default
    return UNSET


def _object(node: SchemaNode, direction: ValidationDirection, salt: int) -> dict[str, Any]:
    sample: dict[str, Any] = {}
    for name, prop in node.properties.items():
        if hidden_for_direction(prop.read_only, prop.write_only, direction):
            continue
        sample[name] = _generate(prop, direction, salt)
    key = f"item{salt}"
    if salt and node.additional_properties and key not in node.properties:
        sample[key] = salt
    return sample


def _array(node: SchemaNode, direction: ValidationDirection, salt: int) -> list[Any]:
    """Emit the smallest admissible array: ``max(min_items, 1)`` items, capped by ``max_items``.

    This never exceeds 10 items unless ``min_items`` itself asks for more.
    """
    minimum = node.min_items or 0
    count = max(minimum, 1)
    if node.max_items is not None:
        count = min(count, node.max_items)
    if node.items is None:
        return []
    if node.unique_items:
        return [_generate(node.items, direction, salt * count + index) for index in range(count)]
    return [_generate(node.items, direction, salt) for _ in range(count)]


def _string(node: SchemaNode, direction: ValidationDirection, salt: int) -> str:
    text = sample_for_format(node.format, salt)
    if node.min_length is not None and len(text) < node.min_length:
        text += "x" * (node.min_length - len(text))
    if node.max_length is not None and len(text) > node.max_length:
        # keep the salted tail so truncated values stay distinct
        text = text[len(text) - node.max_length :] if salt else text[: node.max_length]
    return text


def _boolean(node: SchemaNode, direction: ValidationDirection, salt: int) -> bool:
    return salt % 2 == 0


def _null(node: SchemaNode, direction: ValidationDirection, salt: int) -> None:
    return None


def _number(node: SchemaNode, direction: ValidationDirection, salt: int) -> int | float:
    integer = node.kind is SchemaKind.INTEGER
    step = _effective_step(node.multiple_of, integer)
    lower, lower_exclusive = _tightest(node.minimum, node.exclusive_minimum, prefer_greater=True)
    upper, upper_exclusive = _tightest(node.maximum, node.exclusive_maximum, prefer_greater=False)

    if lower is not None:
        value = _at_or_above(lower, lower_exclusive, step, integer)
        if upper is not None and not integer and step is None and not _below(value, upper, upper_exclusive):
            value = (lower + upper) / 2
        if upper is None:
            value = _advance(value, step, salt)
        else:
            value = _spread(value, upper, upper_exclusive, step, integer, salt)
    elif upper is not None:
        value = _at_or_below(upper, upper_exclusive, step, integer)
        value = _advance(value, step, -salt)
    else:
        value = _advance(step if step is not None else 1, step, salt)

    if integer:
        return int(round(value))
    return value


def _tightest(inclusive: float | None, exclusive: float | None, *, prefer_greater: bool) -> tuple[float | None, bool]:
    """Pick the binding bound on one side and whether it is exclusive."""
    if exclusive is None:
        return inclusive, False
    if inclusive is None:
        return exclusive, True
    if prefer_greater:
        return (exclusive, True) if exclusive >= inclusive else (inclusive, False)
    return (exclusive, True) if exclusive <= inclusive else (inclusive, False)


def _effective_step(multiple_of: float | None, integer: bool) -> float | None:
    """Smallest usable step; integers need a step that lands on whole numbers."""
    if multiple_of is None:
        return None
    if not integer or float(multiple_of).is_integer():
        return int(multiple_of) if float(multiple_of).is_integer() else multiple_of
    for factor in range(1, 1001):
        candidate = round(multiple_of * factor, _DECIMALS)
        if float(candidate).is_integer():
            return int(candidate)
    return multiple_of


def _at_or_above(bound: float, exclusive: bool, step: float | None, integer: bool) -> float:
    if step is None:
        if integer:
            return math.floor(bound) + 1 if exclusive else math.ceil(bound)
        return bound + 1 if exclusive else bound
    value = _snap(math.ceil(bound / step - 1e-9) * step)
    while value < bound or (exclusive and value <= bound):
        value = _snap(value + step)
    return value


def _at_or_below(bound: float, exclusive: bool, step: float | None, integer: bool) -> float:
    if step is None:
        if integer:
            return math.ceil(bound) - 1 if exclusive else math.floor(bound)
        return bound - 1 if exclusive else bound
    value = _snap(math.floor(bound / step + 1e-9) * step)
    while value > bound or (exclusive and value >= bound):
        value = _snap(value - step)
    return value


def _below(value: float, upper: float, exclusive: bool) -> bool:
    return value < upper if exclusive else value <= upper


def _advance(value: float, step: float | None, salt: int) -> float:
    if not salt:
        return value
    return _snap(value + salt * (step if step is not None else 1))


def _spread(value: float, upper: float, exclusive: bool, step: float | None, integer: bool, salt: int) -> float:
    """Move a salted value toward *upper* without leaving the admissible range.

    Continuous ranges use fractions of the remaining span; stepped and
    integer ranges wrap around the admissible values.
    """
    if not salt:
        return value
    if step is None and not integer:
        candidate = value + (upper - value) * salt / (salt + 1)
        return candidate if _below(candidate, upper, exclusive) else value
    unit = step if step is not None else 1
    highest = _at_or_below(upper, exclusive, step, integer)
    if highest < value:
        return value
    count = int(round((highest - value) / unit)) + 1
    return _snap(value + (salt % count) * unit)


def _snap(value: float) -> float:
    if isinstance(value, int):
        return value
    rounded = round(value, _DECIMALS)
    return int(rounded) if float(rounded).is_integer() else rounded


def _union(node: SchemaNode, direction: ValidationDirection, salt: int) -> Any:
    if node.composition is CompositionKind.ALL_OF:
        return _merge_members(node, direction, salt)
    discriminator = node.discriminator
    if discriminator is not None:
        values = valid_discriminator_values(node)
        if values:
            selector = values[0]
            branch = discriminator.mapping.get(selector) or next(
                m for m in node.members if m.title == selector
            )
            sample = _generate(branch, direction, salt)
            if isinstance(sample, dict):
                sample[discriminator.property_name] = selector
            return sample
    return _generate(node.members[0], direction, salt)


def _merge_members(node: SchemaNode, direction: ValidationDirection, salt: int) -> Any:
    samples = [_generate(member, direction, salt) for member in node.members]
    if not all(isinstance(sample, dict) for sample in samples):
        return samples[0]
    merged: dict[str, Any] = {}
    for sample in samples:
        merged.update(sample)
    return merged


_SYNTHESIZERS: dict[SchemaKind, Callable[[SchemaNode, ValidationDirection, int], Any]] = {
    SchemaKind.OBJECT: _object,
    SchemaKind.ARRAY: _array,
    SchemaKind.STRING: _string,
    SchemaKind.INTEGER: _number,
    SchemaKind.NUMBER: _number,
    SchemaKind.BOOLEAN: _boolean,
    SchemaKind.NULL: _null,
    SchemaKind.UNION: _union,
}
