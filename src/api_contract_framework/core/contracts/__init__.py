"""Contract model, compatibility comparison and Pact conversion."""

from api_contract_framework.core.contracts.comparer import compare_contracts
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
    QueryParameterType,
    RequestExpectation,
    ResponseExpectation,
)
from api_contract_framework.core.contracts.pact import (
    PACT_SPECIFICATION_VERSION,
    PROVIDER_STATES_KEY,
    body_matching_rules,
    from_pact,
    matcher_from_example,
    to_pact,
    to_pact_json,
)
from api_contract_framework.core.contracts.paths import normalize_path_template, templates_equivalent

__all__ = [
    "PACT_SPECIFICATION_VERSION",
    "PROVIDER_STATES_KEY",
    "ChangeLocation",
    "ChangeSeverity",
    "Contract",
    "ContractChange",
    "ContractChangeType",
    "ContractDiff",
    "EndpointContract",
    "HeaderExpectation",
    "QueryParameterExpectation",
    "QueryParameterType",
    "RequestExpectation",
    "ResponseExpectation",
    "body_matching_rules",
    "compare_contracts",
    "from_pact",
    "matcher_from_example",
    "normalize_path_template",
    "templates_equivalent",
    "to_pact",
    "to_pact_json",
]
