"""Contract compatibility comparison.

Endpoints are paired by HTTP method and normalized path template, so
``GET /users/{userId}`` and ``GET /users/{id}`` are the same endpoint. Each
difference is classified from the point of view of existing consumers:

* removing an endpoint, a success status code or a required request element
  is **breaking**;
* removing a non-success status code, a response body or a response header
  is a **warning**;
* additions that consumers may ignore are **info**.

Changes are reported in a deterministic order: old-contract endpoints in
declaration order, then endpoints only present in the new contract.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any

from api_contract_framework.core.contracts.diff import (
    ChangeLocation,
    ChangeSeverity,
    ContractChange,
    ContractChangeType,
    ContractDiff,
)
from api_contract_framework.core.contracts.models import (
    Contract,
    EndpointContract,
    HeaderExpectation,
    QueryParameterExpectation,
    RequestExpectation,
    ResponseExpectation,
)
from api_contract_framework.core.schema.definition import SchemaKind, SchemaNode
from api_contract_framework.core.validation.protocols import BodyValidator

logger = logging.getLogger(__name__)


def compare_contracts(old: Contract, new: Contract) -> ContractDiff:
    """Compare two contract versions.

    Args:
        old: The baseline contract.
        new: The candidate contract.

    Returns:
        A diff listing every detected change.

    Raises:
        ValueError: If either contract is ``None``.
    """
    if old is None:
        raise ValueError("old contract must not be None")
    if new is None:
        raise ValueError("new contract must not be None")

    old_endpoints = _index_endpoints(old)
    new_endpoints = _index_endpoints(new)
    changes: list[ContractChange] = []

    for key, old_endpoint in old_endpoints.items():
        new_endpoint = new_endpoints.get(key)
        if new_endpoint is None:
            changes.append(
                _change(
                    ChangeSeverity.BREAKING,
                    ContractChangeType.ENDPOINT_REMOVED,
                    f"Endpoint removed: {old_endpoint}",
                    old_endpoint,
                )
            )
        else:
            _compare_endpoint(old_endpoint, new_endpoint, changes)

    for key, new_endpoint in new_endpoints.items():
        if key not in old_endpoints:
            changes.append(
                _change(
                    ChangeSeverity.INFO,
                    ContractChangeType.ENDPOINT_ADDED,
                    f"Endpoint added: {new_endpoint}",
                    new_endpoint,
                )
            )

    logger.debug(
        "Compared contract '%s' with '%s': %d change(s)",
        old.name,
        new.name,
        len(changes),
    )
    return ContractDiff(old.name, new.name, tuple(changes))


def _index_endpoints(contract: Contract) -> dict[str, EndpointContract]:
    indexed: dict[str, EndpointContract] = {}
    for endpoint in contract.endpoints:
        if endpoint.key in indexed:
            logger.debug(
                "Contract '%s' declares %s more than once; using the first declaration",
                contract.name,
                endpoint.key,
            )
            continue
        indexed[endpoint.key] = endpoint
    return indexed


def _change(
    severity: ChangeSeverity,
    change_type: ContractChangeType,
    description: str,
    endpoint: EndpointContract,
    location: ChangeLocation = ChangeLocation.ENDPOINT,
    **details: Any,
) -> ContractChange:
    return ContractChange(
        severity,
        change_type,
        description,
        location,
        path=endpoint.path_template,
        method=endpoint.method,
        **details,
    )


def _compare_endpoint(old: EndpointContract, new: EndpointContract, changes: list[ContractChange]) -> None:
    _compare_status_codes(old, new, changes)
    _compare_request(old, new, changes)
    for status_code in old.expected_status_codes:
        new_response = new.response_for(status_code)
        old_response = old.response_for(status_code)
        if new_response is not None and old_response is not None:
            _compare_response_body(old, old_response, new_response, changes)
            _compare_response_headers(old, old_response, new_response, changes)
    _compare_request_headers(old, new, changes)
    _compare_query_parameters(old, new, changes)


def _compare_status_codes(old: EndpointContract, new: EndpointContract, changes: list[ContractChange]) -> None:
    old_codes = old.expected_status_codes
    new_codes = new.expected_status_codes
    for code in old_codes:
        if code not in new_codes:
            severity = ChangeSeverity.BREAKING if 200 <= code < 300 else ChangeSeverity.WARNING
            changes.append(
                _change(
                    severity,
                    ContractChangeType.RESPONSE_STATUS_CODE_REMOVED,
                    f"Response status code {code} removed from {old}",
                    old,
                    ChangeLocation.STATUS_CODE,
                    old_value=str(code),
                )
            )
    for code in new_codes:
        if code not in old_codes:
            changes.append(
                _change(
                    ChangeSeverity.INFO,
                    ContractChangeType.RESPONSE_STATUS_CODE_ADDED,
                    f"Response status code {code} added to {new}",
                    new,
                    ChangeLocation.STATUS_CODE,
                    new_value=str(code),
                )
            )


def _body_type_change(old: BodyValidator, new: BodyValidator) -> tuple[str, str] | None:
    """Return ``(old, new)`` type names when the body type differs.

    Only validators reflected from Python types compare their labels; a
    schema title or matcher label is presentation and never a type change.
    """
    if _model_type_of(old) is not None and _model_type_of(new) is not None:
        if old.expected_type_label != new.expected_type_label:
            return old.expected_type_label, new.expected_type_label
    if old.schema_type_name != new.schema_type_name:
        return old.schema_type_name, new.schema_type_name
    return None


def _model_type_of(validator: BodyValidator) -> Any:
    return getattr(validator, "model_type", None)


def _schema_of(validator: BodyValidator) -> SchemaNode | None:
    schema = getattr(validator, "schema", None)
    return schema if isinstance(schema, SchemaNode) else None


def _compare_request(old: EndpointContract, new: EndpointContract, changes: list[ContractChange]) -> None:
    old_request, new_request = old.request, new.request
    if old_request is None:
        if new_request is None:
            return
        if new_request.required:
            severity, description = ChangeSeverity.BREAKING, f"Required request body added to {new}"
        else:
            severity, description = ChangeSeverity.INFO, f"Optional request body added to {new}"
        changes.append(
            _change(severity, ContractChangeType.REQUEST_FIELD_ADDED, description, new, ChangeLocation.REQUEST_BODY)
        )
        return
    if new_request is None:
        changes.append(
            _change(
                ChangeSeverity.INFO,
                ContractChangeType.REQUEST_FIELD_REMOVED,
                f"Request body removed from {old}",
                old,
                ChangeLocation.REQUEST_BODY,
            )
        )
        return

    _compare_request_bodies(old, old_request, new_request, changes)

    if not old_request.required and new_request.required:
        changes.append(
            _change(
                ChangeSeverity.BREAKING,
                ContractChangeType.REQUEST_FIELD_MADE_REQUIRED,
                f"Request body became required for {new}",
                new,
                ChangeLocation.REQUEST_BODY,
            )
        )
    elif old_request.required and not new_request.required:
        changes.append(
            _change(
                ChangeSeverity.INFO,
                ContractChangeType.REQUEST_FIELD_MADE_OPTIONAL,
                f"Request body became optional for {new}",
                new,
                ChangeLocation.REQUEST_BODY,
            )
        )


def _compare_request_bodies(
    endpoint: EndpointContract,
    old: RequestExpectation,
    new: RequestExpectation,
    changes: list[ContractChange],
) -> None:
    if old.body_validator is None or new.body_validator is None:
        return
    type_change = _body_type_change(old.body_validator, new.body_validator)
    if type_change is not None:
        old_type, new_type = type_change
        changes.append(
            _change(
                ChangeSeverity.BREAKING,
                ContractChangeType.REQUEST_FIELD_TYPE_CHANGED,
                f"Request body type changed from {old_type} to {new_type} for {endpoint}",
                endpoint,
                ChangeLocation.REQUEST_BODY,
                old_value=old_type,
                new_value=new_type,
            )
        )
        return
    old_schema, new_schema = _schema_of(old.body_validator), _schema_of(new.body_validator)
    if old_schema is not None and new_schema is not None:
        _compare_request_fields(endpoint, old_schema, new_schema, "", changes)


def _compare_response_body(
    endpoint: EndpointContract,
    old: ResponseExpectation,
    new: ResponseExpectation,
    changes: list[ContractChange],
) -> None:
    status = old.status_code
    if old.body_validator is None and new.body_validator is None:
        return
    if old.body_validator is None:
        changes.append(
            _change(
                ChangeSeverity.INFO,
                ContractChangeType.RESPONSE_FIELD_ADDED,
                f"Response body schema added to {endpoint} (status {status})",
                endpoint,
                ChangeLocation.RESPONSE_BODY,
            )
        )
        return
    if new.body_validator is None:
        changes.append(
            _change(
                ChangeSeverity.WARNING,
                ContractChangeType.RESPONSE_FIELD_REMOVED,
                f"Response body schema removed from {endpoint} (status {status})",
                endpoint,
                ChangeLocation.RESPONSE_BODY,
            )
        )
        return

    type_change = _body_type_change(old.body_validator, new.body_validator)
    if type_change is not None:
        old_type, new_type = type_change
        changes.append(
            _change(
                ChangeSeverity.BREAKING,
                ContractChangeType.RESPONSE_FIELD_TYPE_CHANGED,
                f"Response body type changed from {old_type} to {new_type} for {endpoint} (status {status})",
                endpoint,
                ChangeLocation.RESPONSE_BODY,
                old_value=old_type,
                new_value=new_type,
            )
        )
        return
    old_schema, new_schema = _schema_of(old.body_validator), _schema_of(new.body_validator)
    if old_schema is not None and new_schema is not None:
        _compare_response_fields(endpoint, status, old_schema, new_schema, "", changes)


def _field_name(prefix: str, name: str) -> str:
    return f"{prefix}.{name}" if prefix else name


def _nested_objects(old: SchemaNode, new: SchemaNode) -> bool:
    return old.kind is SchemaKind.OBJECT and new.kind is SchemaKind.OBJECT


def _compare_response_fields(
    endpoint: EndpointContract,
    status: int,
    old: SchemaNode,
    new: SchemaNode,
    prefix: str,
    changes: list[ContractChange],
) -> None:
    if not _nested_objects(old, new):
        return
    suffix = f"in {endpoint} (status {status})"
    for name, old_field in old.properties.items():
        field = _field_name(prefix, name)
        new_field = new.properties.get(name)
        if new_field is None:
            changes.append(
                _change(
                    ChangeSeverity.WARNING,
                    ContractChangeType.RESPONSE_FIELD_REMOVED,
                    f"Response field '{field}' removed {suffix}",
                    endpoint,
                    ChangeLocation.RESPONSE_BODY,
                    field_name=field,
                )
            )
        elif old_field.type_name != new_field.type_name:
            changes.append(
                _change(
                    ChangeSeverity.BREAKING,
                    ContractChangeType.RESPONSE_FIELD_TYPE_CHANGED,
                    f"Response field '{field}' type changed from {old_field.type_name} "
                    f"to {new_field.type_name} {suffix}",
                    endpoint,
                    ChangeLocation.RESPONSE_BODY,
                    field_name=field,
                    old_value=old_field.type_name,
                    new_value=new_field.type_name,
                )
            )
        else:
            if not old_field.accepts_null() and new_field.accepts_null():
                changes.append(
                    _change(
                        ChangeSeverity.BREAKING,
                        ContractChangeType.RESPONSE_FIELD_MADE_NULLABLE,
                        f"Response field '{field}' may now be null {suffix}",
                        endpoint,
                        ChangeLocation.RESPONSE_BODY,
                        field_name=field,
                    )
                )
            elif old_field.accepts_null() and not new_field.accepts_null():
                changes.append(
                    _change(
                        ChangeSeverity.INFO,
                        ContractChangeType.RESPONSE_FIELD_MADE_NON_NULLABLE,
                        f"Response field '{field}' is no longer nullable {suffix}",
                        endpoint,
                        ChangeLocation.RESPONSE_BODY,
                        field_name=field,
                    )
                )
            _compare_response_fields(endpoint, status, old_field, new_field, field, changes)
    for name in new.properties:
        if name not in old.properties:
            field = _field_name(prefix, name)
            changes.append(
                _change(
                    ChangeSeverity.INFO,
                    ContractChangeType.RESPONSE_FIELD_ADDED,
                    f"Response field '{field}' added {suffix}",
                    endpoint,
                    ChangeLocation.RESPONSE_BODY,
                    field_name=field,
                )
            )


def _compare_request_fields(
    endpoint: EndpointContract,
    old: SchemaNode,
    new: SchemaNode,
    prefix: str,
    changes: list[ContractChange],
) -> None:
    if not _nested_objects(old, new):
        return
    for name, old_field in old.properties.items():
        field = _field_name(prefix, name)
        new_field = new.properties.get(name)
        if new_field is None:
            changes.append(
                _change(
                    ChangeSeverity.INFO,
                    ContractChangeType.REQUEST_FIELD_REMOVED,
                    f"Request field '{field}' removed from {endpoint}",
                    endpoint,
                    ChangeLocation.REQUEST_BODY,
                    field_name=field,
                )
            )
            continue
        if old_field.type_name != new_field.type_name:
            changes.append(
                _change(
                    ChangeSeverity.BREAKING,
                    ContractChangeType.REQUEST_FIELD_TYPE_CHANGED,
                    f"Request field '{field}' type changed from {old_field.type_name} "
                    f"to {new_field.type_name} for {endpoint}",
                    endpoint,
                    ChangeLocation.REQUEST_BODY,
                    field_name=field,
                    old_value=old_field.type_name,
                    new_value=new_field.type_name,
                )
            )
            continue
        was_required, is_required = name in old.required, name in new.required
        if not was_required and is_required:
            changes.append(
                _change(
                    ChangeSeverity.BREAKING,
                    ContractChangeType.REQUEST_FIELD_MADE_REQUIRED,
                    f"Request field '{field}' became required for {endpoint}",
                    endpoint,
                    ChangeLocation.REQUEST_BODY,
                    field_name=field,
                )
            )
        elif was_required and not is_required:
            changes.append(
                _change(
                    ChangeSeverity.INFO,
                    ContractChangeType.REQUEST_FIELD_MADE_OPTIONAL,
                    f"Request field '{field}' became optional for {endpoint}",
                    endpoint,
                    ChangeLocation.REQUEST_BODY,
                    field_name=field,
                )
            )
        _compare_request_fields(endpoint, old_field, new_field, field, changes)
    for name in new.properties:
        if name in old.properties:
            continue
        field = _field_name(prefix, name)
        if name in new.required:
            severity, description = ChangeSeverity.BREAKING, f"Required request field '{field}' added to {endpoint}"
        else:
            severity, description = ChangeSeverity.INFO, f"Optional request field '{field}' added to {endpoint}"
        changes.append(
            _change(
                severity,
                ContractChangeType.REQUEST_FIELD_ADDED,
                description,
                endpoint,
                ChangeLocation.REQUEST_BODY,
                field_name=field,
            )
        )


def _headers_by_key(headers: Iterable[HeaderExpectation]) -> dict[str, HeaderExpectation]:
    indexed: dict[str, HeaderExpectation] = {}
    for header in headers:
        indexed.setdefault(header.key, header)
    return indexed


def _compare_response_headers(
    endpoint: EndpointContract,
    old: ResponseExpectation,
    new: ResponseExpectation,
    changes: list[ContractChange],
) -> None:
    old_headers, new_headers = _headers_by_key(old.headers), _headers_by_key(new.headers)
    for key, header in old_headers.items():
        if key not in new_headers:
            changes.append(
                _change(
                    ChangeSeverity.WARNING,
                    ContractChangeType.RESPONSE_HEADER_REMOVED,
                    f"Response header '{header.name}' removed from {endpoint} (status {old.status_code})",
                    endpoint,
                    ChangeLocation.RESPONSE_HEADER,
                    field_name=header.name,
                )
            )
    for key, header in new_headers.items():
        if key not in old_headers:
            changes.append(
                _change(
                    ChangeSeverity.INFO,
                    ContractChangeType.RESPONSE_HEADER_ADDED,
                    f"Response header '{header.name}' added to {endpoint} (status {new.status_code})",
                    endpoint,
                    ChangeLocation.RESPONSE_HEADER,
                    field_name=header.name,
                )
            )


def _compare_request_headers(old: EndpointContract, new: EndpointContract, changes: list[ContractChange]) -> None:
    old_headers, new_headers = _headers_by_key(old.headers), _headers_by_key(new.headers)
    for key, header in old_headers.items():
        if key not in new_headers:
            changes.append(
                _change(
                    ChangeSeverity.INFO,
                    ContractChangeType.REQUEST_HEADER_REMOVED,
                    f"Request header '{header.name}' no longer required for {old}",
                    old,
                    ChangeLocation.REQUEST_HEADER,
                    field_name=header.name,
                )
            )
    for key, header in new_headers.items():
        if key in old_headers:
            continue
        if header.required:
            severity, description = ChangeSeverity.BREAKING, f"Request header '{header.name}' required for {new}"
        else:
            severity, description = ChangeSeverity.INFO, f"Request header '{header.name}' added for {new}"
        changes.append(
            _change(
                severity,
                ContractChangeType.REQUEST_HEADER_ADDED,
                description,
                new,
                ChangeLocation.REQUEST_HEADER,
                field_name=header.name,
            )
        )


def _compare_query_parameters(old: EndpointContract, new: EndpointContract, changes: list[ContractChange]) -> None:
    old_params = {p.name: p for p in old.query_parameters}
    new_params: dict[str, QueryParameterExpectation] = {p.name: p for p in new.query_parameters}
    for name, old_param in old_params.items():
        new_param = new_params.get(name)
        if new_param is None:
            changes.append(
                _change(
                    ChangeSeverity.INFO,
                    ContractChangeType.QUERY_PARAMETER_REMOVED,
                    f"Query parameter '{name}' removed from {old}",
                    old,
                    ChangeLocation.QUERY_PARAMETER,
                    field_name=name,
                )
            )
            continue
        if old_param.type is not new_param.type:
            changes.append(
                _change(
                    ChangeSeverity.BREAKING,
                    ContractChangeType.QUERY_PARAMETER_TYPE_CHANGED,
                    f"Query parameter '{name}' type changed from {old_param.type.value} "
                    f"to {new_param.type.value} for {new}",
                    new,
                    ChangeLocation.QUERY_PARAMETER,
                    field_name=name,
                    old_value=old_param.type.value,
                    new_value=new_param.type.value,
                )
            )
        if not old_param.required and new_param.required:
            changes.append(
                _change(
                    ChangeSeverity.BREAKING,
                    ContractChangeType.QUERY_PARAMETER_MADE_REQUIRED,
                    f"Query parameter '{name}' became required for {new}",
                    new,
                    ChangeLocation.QUERY_PARAMETER,
                    field_name=name,
                )
            )
        elif old_param.required and not new_param.required:
            changes.append(
                _change(
                    ChangeSeverity.INFO,
                    ContractChangeType.QUERY_PARAMETER_MADE_OPTIONAL,
                    f"Query parameter '{name}' became optional for {new}",
                    new,
                    ChangeLocation.QUERY_PARAMETER,
                    field_name=name,
                )
            )
    for name, new_param in new_params.items():
        if name in old_params:
            continue
        if new_param.required:
            severity, description = ChangeSeverity.BREAKING, f"Required query parameter '{name}' added to {new}"
        else:
            severity, description = ChangeSeverity.INFO, f"Optional query parameter '{name}' added to {new}"
        changes.append(
            _change(
                severity,
                ContractChangeType.QUERY_PARAMETER_ADDED,
                description,
                new,
                ChangeLocation.QUERY_PARAMETER,
                field_name=name,
            )
        )
