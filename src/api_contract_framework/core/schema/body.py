"""Body validators backed by schema trees."""

from __future__ import annotations

from typing import Any

from api_contract_framework.core.schema.definition import SchemaNode
from api_contract_framework.core.schema.generator import generate_sample
from api_contract_framework.core.schema.reflection import schema_for_type
from api_contract_framework.core.schema.validator import validate_json
from api_contract_framework.core.validation.config import PartialValidationConfig, ValidationDirection
from api_contract_framework.core.validation.violation import Violation


class SchemaValidator:
    """Validates bodies against a schema tree built from an API description.

    Args:
        schema: Root schema node.
        label: Optional display name. Defaults to the schema title, then
            its type name.
    """

    def __init__(self, schema: SchemaNode, *, label: str | None = None) -> None:
        if schema is None:
            raise ValueError("schema must not be None")
        self._schema = schema
        self._label = label

    @property
    def schema(self) -> SchemaNode:
        return self._schema

    @property
    def expected_type_label(self) -> str:
        return self._label or self._schema.title or self._schema.type_name

    @property
    def schema_type_name(self) -> str:
        return self._schema.type_name

    def validate(
        self,
        json_text: str,
        location: str,
        config: PartialValidationConfig | None = None,
    ) -> list[Violation]:
        return validate_json(json_text, self._schema, location, config)

    def generate_sample(self, direction: ValidationDirection = ValidationDirection.BOTH) -> Any:
        return generate_sample(self._schema, direction)

    def __repr__(self) -> str:
        return f"SchemaValidator({self.expected_type_label!r})"


class TypeSchemaValidator:
    """Validates bodies against the schema reflected from a Python type.

    Args:
        model_type: A dataclass, enum, or other supported annotation.

    Raises:
        TypeError: If *model_type* cannot be reflected.
    """

    def __init__(self, model_type: Any) -> None:
        self._model_type = model_type
        self._schema = schema_for_type(model_type)

    @property
    def model_type(self) -> Any:
        return self._model_type

    @property
    def schema(self) -> SchemaNode:
        return self._schema

    @property
    def expected_type_label(self) -> str:
        return getattr(self._model_type, "__name__", None) or self._schema.type_name

    @property
    def schema_type_name(self) -> str:
        return self._schema.type_name

    def validate(
        self,
        json_text: str,
        location: str,
        config: PartialValidationConfig | None = None,
    ) -> list[Violation]:
        return validate_json(json_text, self._schema, location, config)

    def generate_sample(self, direction: ValidationDirection = ValidationDirection.BOTH) -> Any:
        return generate_sample(self._schema, direction)

    def __repr__(self) -> str:
        return f"TypeSchemaValidator({self.expected_type_label!r})"
