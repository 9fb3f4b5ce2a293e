"""Schema trees, validation and sample generation for JSON bodies."""

from api_contract_framework.core.schema.body import SchemaValidator, TypeSchemaValidator
from api_contract_framework.core.schema.definition import (
    UNSET,
    CompositionKind,
    Discriminator,
    SchemaKind,
    SchemaNode,
    array_schema,
    boolean_schema,
    discriminated_union,
    integer_schema,
    null_schema,
    number_schema,
    object_schema,
    string_schema,
    union_schema,
)
from api_contract_framework.core.schema.discriminator import (
    DiscriminatorOutcome,
    DiscriminatorResolution,
    resolve_discriminator,
)
from api_contract_framework.core.schema.generator import generate_sample
from api_contract_framework.core.schema.reflection import schema_for_type
from api_contract_framework.core.schema.validator import validate_json, validate_value

__all__ = [
    "CompositionKind",
    "Discriminator",
    "DiscriminatorOutcome",
    "DiscriminatorResolution",
    "SchemaKind",
    "SchemaNode",
    "SchemaValidator",
    "TypeSchemaValidator",
    "UNSET",
    "array_schema",
    "boolean_schema",
    "discriminated_union",
    "generate_sample",
    "integer_schema",
    "null_schema",
    "number_schema",
    "object_schema",
    "resolve_discriminator",
    "schema_for_type",
    "string_schema",
    "union_schema",
    "validate_json",
    "validate_value",
]
