"""Verification behavior configuration models."""

from dataclasses import dataclass, field

from api_contract_framework.core.config.hooks import LoggingConfig, MetricsConfig
from api_contract_framework.core.validation.config import PartialValidationConfig, ValidationDirection


@dataclass
class ValidationSettings:
    """Default body validation policy applied by the verifier."""

    strict_mode: bool = False
    """Report undeclared fields even when the schema allows them (default: False)"""

    ignore_extra_fields: bool = False
    """Never report undeclared fields; wins over strict_mode (default: False)"""

    direction: ValidationDirection = ValidationDirection.BOTH
    """Which side of the exchange read/write-only visibility follows (default: both)"""

    fields_to_validate: list[str] = field(default_factory=list)
    """Top-level fields to validate; empty means all (default: [])"""

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        if any(not name for name in self.fields_to_validate):
            raise ValueError("fields_to_validate must not contain empty names")

    def to_partial_config(self) -> PartialValidationConfig:
        """Build the immutable validation policy these settings describe."""
        return PartialValidationConfig(
            fields_to_validate=frozenset(self.fields_to_validate),
            ignore_extra_fields=self.ignore_extra_fields,
            strict_mode=self.strict_mode,
            direction=ValidationDirection(self.direction),
        )


@dataclass
class VerificationConfig:
    """Top-level configuration for verifying captured exchanges."""

    validate_request: bool = True
    """Validate request bodies (default: True)"""

    validate_headers: bool = True
    """Validate request and response headers (default: True)"""

    validate_query_parameters: bool = True
    """Validate query parameters (default: True)"""

    validate_content_type: bool = True
    """Validate the response Content-Type (default: True)"""

    fail_on_violation: bool = False
    """Raise ContractViolationError instead of returning a failed result (default: False)"""

    validation: ValidationSettings = field(default_factory=ValidationSettings)
    """Default body validation policy"""

    logging: LoggingConfig = field(default_factory=LoggingConfig)
    """Logging configuration"""

    metrics: MetricsConfig = field(default_factory=MetricsConfig)
    """Metrics configuration"""
