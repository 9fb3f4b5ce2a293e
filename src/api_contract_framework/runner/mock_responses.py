"""Contract-driven mock responses.

:class:`MockResponder` turns a contract into canned responses that a test
double or stub server can return. It does not host a server.
"""

from __future__ import annotations

import json
import logging
import uuid
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from api_contract_framework.core.contracts.models import Contract, EndpointContract, ResponseExpectation
from api_contract_framework.core.exceptions import EndpointNotFoundError
from api_contract_framework.core.validation.config import ValidationDirection

logger = logging.getLogger(__name__)

# A fixed value, or a zero-argument callable producing one.
FieldOverride = Any


@dataclass(frozen=True)
class MockResponse:
    """A canned HTTP response."""

    status_code: int
    content_type: str | None = None
    headers: dict[str, str] = field(default_factory=dict)
    body: Any = None

    @property
    def has_body(self) -> bool:
        return self.content_type is not None

    @property
    def body_text(self) -> str:
        """The body serialized as JSON, or ``""`` when there is none."""
        return json.dumps(self.body) if self.has_body else ""


def _resolve(override: FieldOverride) -> Any:
    return override() if callable(override) else override


def apply_overrides(value: Any, overrides: Mapping[str, FieldOverride]) -> Any:
    """Replace fields named in *overrides*, descending into objects and arrays.

    A field whose name is overridden is replaced as a whole; its nested
    content is not visited.
    """
    if isinstance(value, dict):
        return {
            name: _resolve(overrides[name]) if name in overrides else apply_overrides(item, overrides)
            for name, item in value.items()
        }
    if isinstance(value, list):
        return [apply_overrides(item, overrides) for item in value]
    return value


class MockResponder:
    """Builds mock responses for the endpoints of a contract.

    Args:
        contract: Contract describing the endpoints.
        overrides: Field or header name to a fixed value or a zero-argument
            callable producing one.
    """

    def __init__(self, contract: Contract, overrides: Mapping[str, FieldOverride] | None = None) -> None:
        if contract is None:
            raise ValueError("contract must not be None")
        self._contract = contract
        self._overrides = dict(overrides or {})

    def respond(self, method: str, path: str, status_code: int | None = None) -> MockResponse:
        """Build the response for a request.

        Args:
            method: HTTP method.
            path: Concrete request path.
            status_code: Force a declared status code instead of the
                default choice (first 2xx, else first declared).

        Raises:
            EndpointNotFoundError: If no endpoint matches.
        """
        endpoint = self._contract.find_endpoint(path, method)
        if endpoint is None:
            raise EndpointNotFoundError(method, path)
        expectation = self._select(endpoint, status_code)
        if expectation is None:
            logger.debug("%s declares no response for %s; returning empty", endpoint, status_code or "default")
            return MockResponse(status_code or 200)

        headers = {header.name: self._header_value(header.name, header.exact_value) for header in expectation.headers}
        if expectation.body_validator is None:
            return MockResponse(expectation.status_code, headers=headers)

        body = expectation.body_validator.generate_sample(ValidationDirection.RESPONSE)
        if self._overrides:
            body = apply_overrides(body, self._overrides)
        content_type = expectation.content_type or "application/json"
        return MockResponse(expectation.status_code, content_type, headers, body)

    @staticmethod
    def _select(endpoint: EndpointContract, status_code: int | None) -> ResponseExpectation | None:
        if status_code is not None:
            return endpoint.response_for(status_code)
        for response in endpoint.responses:
            if response.is_success:
                return response
        return endpoint.responses[0] if endpoint.responses else None

    def _header_value(self, name: str, exact_value: str | None) -> str:
        if exact_value is not None:
            return exact_value
        if name in self._overrides:
            return str(_resolve(self._overrides[name]))
        return str(uuid.uuid4())
