"""Contract model: endpoints with request and response expectations.

Contracts are assembled once by a builder layer and are immutable
afterwards. Each body expectation holds a :class:`BodyValidator` chosen when
the contract is built.
"""

from __future__ import annotations

import re
from collections.abc import Sequence
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from api_contract_framework.core.contracts.paths import (
    compile_path_template,
    normalize_path_template,
    parameter_names,
    strip_query,
)
from api_contract_framework.core.validation.config import PartialValidationConfig
from api_contract_framework.core.validation.protocols import BodyValidator

DEFAULT_CONTENT_TYPE = "application/json"


@dataclass(frozen=True)
class HeaderExpectation:
    """An expected HTTP header.

    Args:
        name: Header name; compared case-insensitively.
        required: Whether the header must be present.
        value_pattern: Optional regex the value must contain a match for.
        exact_value: Optional exact value, compared case-insensitively.
    """

    name: str
    required: bool = True
    value_pattern: str | None = None
    exact_value: str | None = None

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("header name must not be empty")
        if self.value_pattern is not None:
            try:
                re.compile(self.value_pattern)
            except re.error as exc:
                raise ValueError(f"Invalid value_pattern for header '{self.name}': {exc}") from exc

    @classmethod
    def required_header(cls, name: str) -> HeaderExpectation:
        return cls(name, required=True)

    @classmethod
    def optional_header(cls, name: str) -> HeaderExpectation:
        return cls(name, required=False)

    @classmethod
    def with_value(cls, name: str, value: str) -> HeaderExpectation:
        """A required header that must carry exactly *value*."""
        return cls(name, required=True, exact_value=value)

    @property
    def key(self) -> str:
        return self.name.lower()

    def accepts(self, value: str) -> bool:
        """Return ``True`` if *value* satisfies the exact value and pattern."""
        if self.exact_value is not None and value.casefold() != self.exact_value.casefold():
            return False
        return self.value_pattern is None or re.search(self.value_pattern, value) is not None

    def describe_value(self) -> str:
        if self.exact_value is not None:
            return self.exact_value
        if self.value_pattern is not None:
            return f"matching '{self.value_pattern}'"
        return "any value"


class QueryParameterType(str, Enum):
    """Declared type of a query parameter's raw string value."""

    STRING = "string"
    INTEGER = "integer"
    NUMBER = "number"
    BOOLEAN = "boolean"
    ARRAY = "array"


def _parses_as(raw: str, param_type: QueryParameterType) -> bool:
    if param_type is QueryParameterType.INTEGER:
        try:
            int(raw)
        except ValueError:
            return False
        return True
    if param_type is QueryParameterType.NUMBER:
        try:
            float(raw)
        except ValueError:
            return False
        return True
    if param_type is QueryParameterType.BOOLEAN:
        return raw.lower() in ("true", "false")
    return True


@dataclass(frozen=True)
class QueryParameterExpectation:
    """An expected query string parameter."""

    name: str
    required: bool = False
    type: QueryParameterType = QueryParameterType.STRING
    pattern: str | None = None

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("query parameter name must not be empty")
        object.__setattr__(self, "type", QueryParameterType(self.type))

    def accepts(self, raw: str) -> bool:
        """Return ``True`` if one raw value parses as the declared type.

        Array parameters accept comma-separated values; each element must
        satisfy the pattern when one is declared.
        """
        values = raw.split(",") if self.type is QueryParameterType.ARRAY else [raw]
        for value in values:
            if not _parses_as(value, self.type):
                return False
            if self.pattern is not None and re.search(self.pattern, value) is None:
                return False
        return True


@dataclass(frozen=True)
class RequestExpectation:
    """Expected request body.

    Args:
        content_type: Expected media type.
        body_validator: Validator for the body, or ``None`` for no body.
        required: Whether a body must be sent.
        partial_config: Optional validation policy for the body.
    """

    content_type: str = DEFAULT_CONTENT_TYPE
    body_validator: BodyValidator | None = None
    required: bool = False
    partial_config: PartialValidationConfig | None = None


@dataclass(frozen=True)
class ResponseExpectation:
    """Expected response for one status code."""

    status_code: int
    content_type: str | None = DEFAULT_CONTENT_TYPE
    body_validator: BodyValidator | None = None
    headers: tuple[HeaderExpectation, ...] = ()
    partial_config: PartialValidationConfig | None = None

    def __post_init__(self) -> None:
        if not 100 <= self.status_code <= 599:
            raise ValueError("status_code must be between 100 and 599")
        object.__setattr__(self, "headers", tuple(self.headers))

    @property
    def is_success(self) -> bool:
        return 200 <= self.status_code < 300


@dataclass(frozen=True)
class EndpointContract:
    """Expectations for one HTTP method on one path template.

    Args:
        path_template: Path with ``{param}`` segments, e.g. ``/users/{id}``.
        method: HTTP method; stored upper-case.
        request: Request body expectation, if any.
        responses: Expected responses, one per status code.
        headers: Expected request headers.
        query_parameters: Expected query parameters.
        description: Optional free text.
    """

    path_template: str
    method: str
    request: RequestExpectation | None = None
    responses: tuple[ResponseExpectation, ...] = ()
    headers: tuple[HeaderExpectation, ...] = ()
    query_parameters: tuple[QueryParameterExpectation, ...] = ()
    description: str | None = None
    _pattern: re.Pattern[str] = field(init=False, repr=False, compare=False, hash=False)

    def __post_init__(self) -> None:
        if not self.path_template.startswith("/"):
            raise ValueError("path_template must start with '/'")
        if not self.method:
            raise ValueError("method must not be empty")
        object.__setattr__(self, "method", self.method.upper())
        object.__setattr__(self, "responses", tuple(self.responses))
        object.__setattr__(self, "headers", tuple(self.headers))
        object.__setattr__(self, "query_parameters", tuple(self.query_parameters))
        codes = [r.status_code for r in self.responses]
        if len(codes) != len(set(codes)):
            raise ValueError(f"duplicate response status codes for {self.method} {self.path_template}")
        object.__setattr__(self, "_pattern", compile_path_template(self.path_template))

    def __str__(self) -> str:
        return f"{self.method} {self.path_template}"

    @property
    def key(self) -> str:
        """Identity used to pair endpoints across contract versions."""
        return f"{self.method} {normalize_path_template(self.path_template)}"

    @property
    def expected_status_codes(self) -> tuple[int, ...]:
        return tuple(r.status_code for r in self.responses)

    def matches(self, path: str, method: str) -> bool:
        """Return ``True`` if a concrete request targets this endpoint."""
        return method.upper() == self.method and self._pattern.match(strip_query(path)) is not None

    def extract_path_parameters(self, path: str) -> dict[str, str]:
        """Map parameter names to their values in a concrete *path*.

        Returns:
            An empty dict if *path* does not match the template.
        """
        match = self._pattern.match(strip_query(path))
        if match is None:
            return {}
        return dict(zip(parameter_names(self.path_template), match.groups()))

    def response_for(self, status_code: int) -> ResponseExpectation | None:
        for response in self.responses:
            if response.status_code == status_code:
                return response
        return None


@dataclass(frozen=True)
class Contract:
    """A named, ordered collection of endpoint contracts."""

    name: str
    endpoints: tuple[EndpointContract, ...] = ()
    version: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict, compare=False, hash=False)

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("contract name must not be empty")
        object.__setattr__(self, "endpoints", tuple(self.endpoints))

    def find_endpoint(self, path: str, method: str) -> EndpointContract | None:
        """Return the first endpoint matching *method* and *path*."""
        for endpoint in self.endpoints:
            if endpoint.matches(path, method):
                return endpoint
        return None

    def with_endpoints(self, endpoints: Sequence[EndpointContract]) -> Contract:
        """Return a copy holding *endpoints* appended to the existing ones."""
        return Contract(self.name, self.endpoints + tuple(endpoints), self.version, dict(self.metadata))
