"""Conversion between contracts and Pact (specification v3) documents.

Exporting produces one interaction per declared response. Bodies are
rendered from generated samples and, for matcher-driven bodies, each matcher
becomes a v3 ``matchingRules`` entry keyed by its JSON path. Importing
reverses the mapping: interactions that share a method and path template
collapse into one endpoint, and example bodies plus their matching rules
are rebuilt into matcher trees.

Some matchers have no Pact equivalent. Numeric bounds and
:class:`OptionalMatcher` are exported as their inner type rule, and
:class:`AnyMatcher` and multi-valued non-string :class:`OneOfMatcher` are
exported as their sample value only.

Provider states are kept in ``Contract.metadata["provider_states"]``,
keyed by endpoint key (e.g. ``"GET /users/{}"``).

Example:
    >>> document = to_pact(contract, consumer="web", provider="users-api")
    >>> restored = from_pact(document)
"""

from __future__ import annotations

import json
import logging
import re
from collections.abc import Mapping
from typing import Any
from urllib.parse import parse_qsl, urlencode

from api_contract_framework.core.contracts.models import (
    DEFAULT_CONTENT_TYPE,
    Contract,
    EndpointContract,
    HeaderExpectation,
    QueryParameterExpectation,
    QueryParameterType,
    RequestExpectation,
    ResponseExpectation,
)
from api_contract_framework.core.contracts.paths import parameter_names
from api_contract_framework.core.matching.matchers import (
    AnyMatcher,
    DateOnlyMatcher,
    DateTimeMatcher,
    DecimalMatcher,
    EachLikeMatcher,
    EmailMatcher,
    GuidMatcher,
    IntegerMatcher,
    Matcher,
    MatcherType,
    NonEmptyStringMatcher,
    NullMatcher,
    ObjectMatcher,
    OneOfMatcher,
    OptionalMatcher,
    RegexMatcher,
    TimeOnlyMatcher,
    TypeMatcher,
    UriMatcher,
    as_matcher,
)
from api_contract_framework.core.matching.validator import MatcherSchemaValidator
from api_contract_framework.core.validation.config import ValidationDirection
from api_contract_framework.core.validation.json_values import parse_json
from api_contract_framework.core.validation.protocols import BodyValidator

logger = logging.getLogger(__name__)

PACT_SPECIFICATION_VERSION = "3.0.0"
PROVIDER_STATES_KEY = "provider_states"

RuleSet = dict[str, dict[str, Any]]

_UUID_PATTERN = r"^[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}$"
_EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"
_URI_PATTERN = r"^[A-Za-z][A-Za-z0-9+.-]*://\S+$"
_NON_EMPTY_PATTERN = r"\S"
_ANY_VALUE_PATTERN = ".*"
_DATE_TIME_FORMAT = "yyyy-MM-dd'T'HH:mm:ssXXX"
_DATE_FORMAT = "yyyy-MM-dd"
_TIME_FORMAT = "HH:mm:ss"

# patterns this module writes for format matchers, mapped back on import
_PATTERN_MATCHERS: dict[str, type[Matcher]] = {
    _UUID_PATTERN: GuidMatcher,
    _EMAIL_PATTERN: EmailMatcher,
    _URI_PATTERN: UriMatcher,
    _NON_EMPTY_PATTERN: NonEmptyStringMatcher,
}

_IDENTIFIER_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")
_NUMERIC_SEGMENT_RE = re.compile(r"^\d+$")
_UUID_SEGMENT_RE = re.compile(_UUID_PATTERN)
_QUERY_EXAMPLES = {
    QueryParameterType.STRING: "value",
    QueryParameterType.INTEGER: "1",
    QueryParameterType.NUMBER: "1.5",
    QueryParameterType.BOOLEAN: "true",
    QueryParameterType.ARRAY: "a,b",
}


# ---------------------------------------------------------------------------
# Export
# ---------------------------------------------------------------------------


def to_pact(contract: Contract, consumer: str, provider: str) -> dict[str, Any]:
    """Render *contract* as a Pact v3 document.

    Args:
        contract: Contract to export.
        consumer: Name of the consuming application.
        provider: Name of the providing application.

    Returns:
        A JSON-serializable ``dict``.

    Raises:
        ValueError: If *consumer* or *provider* is blank.
    """
    if not consumer or not consumer.strip():
        raise ValueError("consumer name must not be empty")
    if not provider or not provider.strip():
        raise ValueError("provider name must not be empty")

    states = contract.metadata.get(PROVIDER_STATES_KEY, {})
    interactions: list[dict[str, Any]] = []
    for endpoint in contract.endpoints:
        interactions.extend(_interactions_for(endpoint, states.get(endpoint.key, [])))
    logger.debug("Exported %d interactions for contract %s", len(interactions), contract.name)
    return {
        "consumer": {"name": consumer},
        "provider": {"name": provider},
        "interactions": interactions,
        "metadata": {"pactSpecification": {"version": PACT_SPECIFICATION_VERSION}},
    }


def to_pact_json(contract: Contract, consumer: str, provider: str, *, indent: int | None = 2) -> str:
    """Render *contract* as Pact JSON text."""
    return json.dumps(to_pact(contract, consumer, provider), indent=indent, ensure_ascii=False)


def _interactions_for(endpoint: EndpointContract, states: list[Mapping[str, Any]]) -> list[dict[str, Any]]:
    request = _request_section(endpoint)
    responses = endpoint.responses or (ResponseExpectation(200, content_type=None),)
    interactions = []
    for response in responses:
        description = str(endpoint)
        if len(responses) > 1:
            description = f"{description} ({response.status_code})"
        interaction: dict[str, Any] = {"description": description}
        if states:
            interaction["providerStates"] = [_state_entry(state) for state in states]
        interaction["request"] = dict(request)
        interaction["response"] = _response_section(response)
        interactions.append(interaction)
    return interactions


def _state_entry(state: Mapping[str, Any]) -> dict[str, Any]:
    entry: dict[str, Any] = {"name": state["name"]}
    if state.get("params"):
        entry["params"] = dict(state["params"])
    return entry


def _example_path(template: str) -> str:
    path = template
    for name in parameter_names(template):
        path = path.replace(f"{{{name}}}", "1", 1)
    return path


def _request_section(endpoint: EndpointContract) -> dict[str, Any]:
    section: dict[str, Any] = {"method": endpoint.method, "path": _example_path(endpoint.path_template)}
    required_query = [q for q in endpoint.query_parameters if q.required]
    if required_query:
        section["query"] = urlencode([(q.name, _QUERY_EXAMPLES[q.type]) for q in required_query])

    headers, header_rules = _header_section(endpoint.headers)
    request = endpoint.request
    if request is not None and request.body_validator is not None:
        headers.setdefault("Content-Type", request.content_type)
    if headers:
        section["headers"] = headers

    rules: dict[str, Any] = {}
    if header_rules:
        rules["header"] = header_rules
    if request is not None and request.body_validator is not None:
        section["body"] = request.body_validator.generate_sample(ValidationDirection.REQUEST)
        body_rules = body_matching_rules(request.body_validator)
        if body_rules:
            rules["body"] = body_rules
    if rules:
        section["matchingRules"] = rules
    return section


def _response_section(response: ResponseExpectation) -> dict[str, Any]:
    section: dict[str, Any] = {"status": response.status_code}
    headers, header_rules = _header_section(response.headers)
    if response.content_type is not None:
        headers = {"Content-Type": response.content_type, **headers}
    if headers:
        section["headers"] = headers

    rules: dict[str, Any] = {}
    if header_rules:
        rules["header"] = header_rules
    if response.body_validator is not None:
        section["body"] = response.body_validator.generate_sample(ValidationDirection.RESPONSE)
        body_rules = body_matching_rules(response.body_validator)
        if body_rules:
            rules["body"] = body_rules
    if rules:
        section["matchingRules"] = rules
    return section


def _header_section(expectations: tuple[HeaderExpectation, ...]) -> tuple[dict[str, str], RuleSet]:
    headers: dict[str, str] = {}
    rules: RuleSet = {}
    for header in expectations:
        if not header.required:
            continue
        headers[header.name] = header.exact_value if header.exact_value is not None else "*"
        if header.exact_value is None:
            rules[header.name] = _rule({"match": "regex", "regex": header.value_pattern or _ANY_VALUE_PATTERN})
    return headers, rules


def body_matching_rules(validator: BodyValidator) -> RuleSet:
    """Return v3 body matching rules for *validator*.

    Matcher-driven validators yield one rule per matcher; other validators
    yield a single root type rule.
    """
    if isinstance(validator, MatcherSchemaValidator):
        rules: RuleSet = {}
        _collect_rules(validator.matcher, "$", rules)
        return rules
    return {"$": _rule({"match": "type"})}


def _rule(*matchers: dict[str, Any]) -> dict[str, Any]:
    return {"matchers": list(matchers), "combine": "AND"}


def _collect_rules(matcher: Matcher, path: str, rules: RuleSet) -> None:
    if isinstance(matcher, OptionalMatcher):
        _collect_rules(matcher.inner, path, rules)
        return
    if isinstance(matcher, ObjectMatcher):
        for name, nested in matcher.fields.items():
            _collect_rules(nested, _pact_child(path, name), rules)
        return
    if isinstance(matcher, EachLikeMatcher):
        rules[path] = _rule({"match": "type", "min": matcher.min_count})
        _collect_rules(matcher.item, f"{path}[*]", rules)
        return
    entry = _leaf_rule(matcher)
    if entry is None and _is_literal(matcher):
        return
    if entry is None:
        logger.debug("No Pact matching rule for %s at %s; exporting its sample value", matcher.description, path)
        return
    rules[path] = _rule(entry)


def _leaf_rule(matcher: Matcher) -> dict[str, Any] | None:
    kind = matcher.matcher_type
    if kind is MatcherType.GUID:
        return {"match": "regex", "regex": _UUID_PATTERN}
    if kind is MatcherType.EMAIL:
        return {"match": "regex", "regex": _EMAIL_PATTERN}
    if kind is MatcherType.URI:
        return {"match": "regex", "regex": _URI_PATTERN}
    if kind is MatcherType.NON_EMPTY_STRING:
        return {"match": "regex", "regex": _NON_EMPTY_PATTERN}
    if kind is MatcherType.REGEX:
        return {"match": "regex", "regex": matcher.pattern}  # type: ignore[attr-defined]
    if kind in (MatcherType.STRING, MatcherType.TYPE, MatcherType.BOOLEAN):
        return {"match": "type"}
    if kind is MatcherType.INTEGER:
        return {"match": "integer"}
    if kind is MatcherType.DECIMAL:
        return {"match": "decimal"}
    if kind is MatcherType.DATE_TIME:
        return {"match": "timestamp", "format": _DATE_TIME_FORMAT}
    if kind is MatcherType.DATE_ONLY:
        return {"match": "date", "format": _DATE_FORMAT}
    if kind is MatcherType.TIME_ONLY:
        return {"match": "time", "format": _TIME_FORMAT}
    if kind is MatcherType.NULL:
        return {"match": "null"}
    if kind is MatcherType.ONE_OF:
        values = matcher.values  # type: ignore[attr-defined]
        if len(values) > 1 and all(isinstance(v, str) for v in values):
            return {"match": "regex", "regex": "^(" + "|".join(re.escape(v) for v in values) + ")$"}
    return None


def _is_literal(matcher: Matcher) -> bool:
    return isinstance(matcher, OneOfMatcher) and len(matcher.values) == 1


def _pact_child(path: str, name: str) -> str:
    if _IDENTIFIER_RE.match(name):
        return f"{path}.{name}"
    return f"{path}['{name}']"


# ---------------------------------------------------------------------------
# Import
# ---------------------------------------------------------------------------


def from_pact(document: Mapping[str, Any] | str | bytes) -> Contract:
    """Build a contract from a Pact document.

    Accepts v1 to v3 documents: ``providerState`` strings, ``providerStates``
    lists, string or mapping query sections, and both flat (``$.body.x``)
    and nested v3 matching rules.

    Args:
        document: Decoded Pact document, or its JSON text.

    Raises:
        ValueError: If the JSON is malformed or required sections are missing.
    """
    if isinstance(document, (str, bytes)):
        try:
            document = parse_json(document)
        except ValueError as exc:
            raise ValueError(f"Invalid Pact JSON: {exc}") from exc
    if not isinstance(document, Mapping):
        raise ValueError("Pact document must be a JSON object")

    consumer = _participant(document, "consumer")
    provider = _participant(document, "provider")
    interactions = document.get("interactions")
    if not isinstance(interactions, list):
        raise ValueError("Pact document must contain an 'interactions' list")

    builders: dict[tuple[str, str], _EndpointBuilder] = {}
    for interaction in interactions:
        request = _section(interaction, "request")
        method = str(request.get("method", "GET")).upper()
        template = _path_template(str(request.get("path", "/")))
        builder = builders.get((method, template))
        if builder is None:
            builder = builders[(method, template)] = _EndpointBuilder(method, template)
        builder.add(interaction)

    endpoints = [builder.build() for builder in builders.values()]
    states = {endpoint.key: builder.states for endpoint, builder in zip(endpoints, builders.values()) if builder.states}
    metadata: dict[str, Any] = {"consumer": consumer, "provider": provider}
    version = _specification_version(document)
    if version is not None:
        metadata["pact_specification"] = version
    if states:
        metadata[PROVIDER_STATES_KEY] = states
    logger.debug("Imported %d interactions into %d endpoints", len(interactions), len(endpoints))
    return Contract(f"{consumer} -> {provider}", tuple(endpoints), metadata=metadata)


def _participant(document: Mapping[str, Any], role: str) -> str:
    entry = document.get(role)
    name = entry.get("name") if isinstance(entry, Mapping) else None
    if not isinstance(name, str) or not name.strip():
        raise ValueError(f"Pact document must name its {role}")
    return name


def _section(interaction: Any, name: str) -> Mapping[str, Any]:
    if not isinstance(interaction, Mapping):
        raise ValueError("Pact interactions must be JSON objects")
    section = interaction.get(name)
    if not isinstance(section, Mapping):
        raise ValueError(f"Pact interaction {interaction.get('description')!r} has no {name}")
    return section


def _specification_version(document: Mapping[str, Any]) -> str | None:
    metadata = document.get("metadata") or {}
    declared = metadata.get("pactSpecification") or metadata.get("pact-specification") or {}
    version = declared.get("version") if isinstance(declared, Mapping) else None
    return str(version) if version is not None else None


def _path_template(path: str) -> str:
    """Turn a concrete path into a template; numeric and UUID segments become parameters."""
    segments = path.split("?", 1)[0].split("/")
    count = 0
    for index, segment in enumerate(segments):
        if _NUMERIC_SEGMENT_RE.match(segment) or _UUID_SEGMENT_RE.match(segment):
            count += 1
            segments[index] = "{id}" if count == 1 else f"{{id{count}}}"
    template = "/".join(segments)
    return template if template.startswith("/") else "/" + template


class _EndpointBuilder:
    """Accumulates the interactions that target one endpoint."""

    def __init__(self, method: str, template: str) -> None:
        self.method = method
        self.template = template
        self.states: list[dict[str, Any]] = []
        self._headers: dict[str, HeaderExpectation] = {}
        self._query: dict[str, QueryParameterExpectation] = {}
        self._request: RequestExpectation | None = None
        self._responses: dict[int, ResponseExpectation] = {}
        self._description: str | None = None

    def add(self, interaction: Mapping[str, Any]) -> None:
        request = _section(interaction, "request")
        response = _section(interaction, "response")
        if self._description is None and interaction.get("description"):
            self._description = str(interaction["description"])
        for state in _provider_states(interaction):
            if state not in self.states:
                self.states.append(state)

        request_rules = _rules(request)
        headers = _headers(request.get("headers"))
        for name, value in headers.items():
            if name.lower() != "content-type":
                self._headers.setdefault(name.lower(), _header_expectation(name, value, request_rules))
        for name in _query_names(request.get("query")):
            self._query.setdefault(name, QueryParameterExpectation(name, required=True))
        if self._request is None and "body" in request:
            content_type = _content_type(headers) or DEFAULT_CONTENT_TYPE
            self._request = RequestExpectation(
                content_type, _body_validator(request["body"], request_rules), required=True
            )

        status = int(response.get("status", 200))
        if status in self._responses:
            logger.debug("Ignoring repeated %s response for %s %s", status, self.method, self.template)
            return
        self._responses[status] = _response_expectation(status, response)

    def build(self) -> EndpointContract:
        return EndpointContract(
            self.template,
            self.method,
            request=self._request,
            responses=tuple(self._responses.values()),
            headers=tuple(self._headers.values()),
            query_parameters=tuple(self._query.values()),
            description=self._description,
        )


def _provider_states(interaction: Mapping[str, Any]) -> list[dict[str, Any]]:
    entries = interaction.get("providerStates") or interaction.get("provider_states")
    if isinstance(entries, list):
        states = []
        for entry in entries:
            if isinstance(entry, Mapping) and entry.get("name"):
                state: dict[str, Any] = {"name": str(entry["name"])}
                if entry.get("params"):
                    state["params"] = dict(entry["params"])
                states.append(state)
        return states
    legacy = interaction.get("providerState") or interaction.get("provider_state")
    if isinstance(legacy, str) and legacy.strip():
        return [{"name": legacy}]
    return []


def _headers(raw: Any) -> dict[str, str]:
    if not isinstance(raw, Mapping):
        return {}
    # v3 allows a list of values per header
    return {str(k): ", ".join(v) if isinstance(v, list) else str(v) for k, v in raw.items()}


def _content_type(headers: Mapping[str, str]) -> str | None:
    for name, value in headers.items():
        if name.lower() == "content-type":
            return value
    return None


def _query_names(raw: Any) -> list[str]:
    if isinstance(raw, Mapping):
        return [str(name) for name in raw]
    if isinstance(raw, str) and raw.strip():
        return list(dict.fromkeys(name for name, _ in parse_qsl(raw.lstrip("?"), keep_blank_values=True)))
    return []


def _header_expectation(name: str, value: str, rules: Mapping[str, Any]) -> HeaderExpectation:
    entry = _first_matcher(rules.get("header", {}), name)
    if entry is not None and entry.get("match") == "regex":
        pattern = entry.get("regex")
        if not pattern or pattern == _ANY_VALUE_PATTERN:
            return HeaderExpectation.required_header(name)
        return HeaderExpectation(name, value_pattern=pattern)
    if value == "*":
        return HeaderExpectation.required_header(name)
    return HeaderExpectation.with_value(name, value)


def _response_expectation(status: int, response: Mapping[str, Any]) -> ResponseExpectation:
    rules = _rules(response)
    headers = _headers(response.get("headers"))
    has_body = "body" in response
    content_type = _content_type(headers) or (DEFAULT_CONTENT_TYPE if has_body else None)
    expected_headers = tuple(
        _header_expectation(name, value, rules) for name, value in headers.items() if name.lower() != "content-type"
    )
    validator = _body_validator(response["body"], rules) if has_body else None
    return ResponseExpectation(status, content_type, validator, expected_headers)


def _rules(section: Mapping[str, Any]) -> dict[str, Any]:
    """Return matching rules in nested v3 form.

    Flat v2 rules keyed ``$.body...`` and ``$.headers...`` are regrouped.
    """
    raw = section.get("matchingRules") or {}
    if not isinstance(raw, Mapping):
        return {}
    if any(key.startswith("$.") for key in raw):
        body: RuleSet = {}
        header: RuleSet = {}
        for key, rule in raw.items():
            entry = {"matchers": [rule]} if isinstance(rule, Mapping) and "matchers" not in rule else rule
            if key == "$.body" or key.startswith(("$.body.", "$.body[")):
                body["$" + key[len("$.body") :]] = entry
            elif key.startswith("$.headers."):
                header[key[len("$.headers.") :]] = entry
        return {"body": body, "header": header}
    return dict(raw)


def _first_matcher(rules: Mapping[str, Any], key: str) -> dict[str, Any] | None:
    rule = rules.get(key)
    if not isinstance(rule, Mapping):
        return None
    matchers = rule.get("matchers")
    if isinstance(matchers, list):
        return dict(matchers[0]) if matchers and isinstance(matchers[0], Mapping) else None
    return dict(rule)


def _body_validator(body: Any, rules: Mapping[str, Any]) -> MatcherSchemaValidator:
    if isinstance(body, str):
        try:
            body = parse_json(body)
        except ValueError:
            logger.debug("Pact body is not JSON; matching it as a literal string")
    return MatcherSchemaValidator(matcher_from_example(body, rules.get("body", {})))


def matcher_from_example(example: Any, rules: Mapping[str, Any], path: str = "$", *, by_type: bool = False) -> Matcher:
    """Rebuild a matcher tree from a Pact example and its body rules.

    Values without a rule must match exactly, unless an enclosing ``type``
    rule applies, in which case they match by JSON type.

    Args:
        example: Decoded example value.
        rules: Body matching rules keyed by JSON path.
        path: Path of *example* within the body.
        by_type: Whether an enclosing ``type`` rule applies.
    """
    entry = _first_matcher(rules, path)
    if entry is not None:
        matcher = _matcher_for_rule(entry, example, rules, path)
        if matcher is not None:
            return matcher
    if isinstance(example, dict):
        fields = {}
        for name, value in example.items():
            fields[name] = matcher_from_example(value, rules, _pact_child(path, name), by_type=by_type)
        return ObjectMatcher(fields)
    if isinstance(example, list) and by_type:
        return _each_like(example, rules, path, 0)
    if by_type and example is not None:
        return TypeMatcher(example)
    if isinstance(example, list):
        return OneOfMatcher((example,))
    return as_matcher(example)


def _each_like(example: list[Any], rules: Mapping[str, Any], path: str, min_count: int) -> EachLikeMatcher:
    if not example:
        return EachLikeMatcher(AnyMatcher(), min_count)
    return EachLikeMatcher(matcher_from_example(example[0], rules, f"{path}[*]", by_type=True), min_count)


def _matcher_for_rule(entry: Mapping[str, Any], example: Any, rules: Mapping[str, Any], path: str) -> Matcher | None:
    match = entry.get("match")
    if match is None and ("min" in entry or "max" in entry):
        match = "type"
    if match == "regex":
        pattern = str(entry.get("regex", ""))
        known = _PATTERN_MATCHERS.get(pattern)
        if known is not None:
            return known()
        sample = example if isinstance(example, str) and re.search(pattern, example) else None
        return RegexMatcher(pattern, sample)
    if match == "type":
        if isinstance(example, list):
            return _each_like(example, rules, path, int(entry.get("min", 0)))
        if isinstance(example, dict):
            return matcher_from_example(example, {k: v for k, v in rules.items() if k != path}, path, by_type=True)
        return TypeMatcher(example) if example is not None else NullMatcher()
    if match == "integer":
        return IntegerMatcher()
    if match in ("decimal", "number"):
        return DecimalMatcher()
    if match in ("timestamp", "datetime"):
        return DateTimeMatcher()
    if match == "date":
        return DateOnlyMatcher()
    if match == "time":
        return TimeOnlyMatcher()
    if match == "null":
        return NullMatcher()
    logger.debug("Unsupported Pact matcher %r at %s; matching the example exactly", match, path)
    return None
