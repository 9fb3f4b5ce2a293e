"""Shared capability interface for body validators."""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

from api_contract_framework.core.validation.config import PartialValidationConfig, ValidationDirection
from api_contract_framework.core.validation.violation import Violation


@runtime_checkable
class BodyValidator(Protocol):
    """Protocol implemented by every body validator variant.

    A contract builder picks one implementation per request or response
    body: a schema tree validator, a validator reflected from a Python type,
    or a matcher-based validator. Callers only depend on this interface.
    """

    def validate(
        self,
        json_text: str,
        location: str,
        config: PartialValidationConfig | None = None,
    ) -> list[Violation]:
        """Validate a JSON document.

        Args:
            json_text: Raw JSON text. Malformed input yields a single
                ``InvalidType`` violation instead of raising.
            location: Label attached to every violation.
            config: Optional partial validation policy.

        Returns:
            Violations in detection order; empty when valid.
        """
        ...

    def generate_sample(self, direction: ValidationDirection = ValidationDirection.BOTH) -> Any:
        """Produce a value that this validator accepts."""
        ...

    @property
    def expected_type_label(self) -> str:
        """Human-readable name of the expected body (e.g. ``"User"``)."""
        ...

    @property
    def schema_type_name(self) -> str:
        """Root JSON type name, used to detect body type changes."""
        ...
