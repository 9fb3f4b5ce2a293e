"""Violations, partial validation policy and the body validator interface."""

from api_contract_framework.core.validation.config import (
    FieldDisposition,
    PartialValidationConfig,
    ValidationDirection,
    hidden_for_direction,
)
from api_contract_framework.core.validation.formats import FORMAT_CHECKERS, check_format, sample_for_format
from api_contract_framework.core.validation.protocols import BodyValidator
from api_contract_framework.core.validation.violation import (
    ROOT_PATH,
    ValidationResult,
    Violation,
    ViolationType,
)

__all__ = [
    "BodyValidator",
    "FORMAT_CHECKERS",
    "FieldDisposition",
    "PartialValidationConfig",
    "ROOT_PATH",
    "ValidationDirection",
    "ValidationResult",
    "Violation",
    "ViolationType",
    "check_format",
    "hidden_for_direction",
    "sample_for_format",
]
