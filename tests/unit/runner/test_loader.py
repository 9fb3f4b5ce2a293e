"""Tests for contract reference loading."""

from __future__ import annotations

import pytest

from api_contract_framework.core.contracts.models import Contract
from api_contract_framework.core.exceptions import ContractFrameworkError
from api_contract_framework.runner.loader import ContractLoadError, load_contract
from tests import factories


class TestLoadContract:
    @pytest.mark.parametrize(
        "reference",
        ["tests.factories:users_contract_v1", "tests.factories.users_contract_v1"],
    )
    def test_callable_reference(self, reference: str) -> None:
        contract = load_contract(reference)
        assert isinstance(contract, Contract)
        assert contract.name == "users-v1"

    def test_instance_reference(self) -> None:
        assert load_contract("tests.factories:USERS_V1") is factories.USERS_V1

    def test_missing_module(self) -> None:
        with pytest.raises(ContractLoadError, match="Failed to load contract 'no_such_module:x'") as exc_info:
            load_contract("no_such_module:x")
        assert isinstance(exc_info.value.cause, ImportError)

    def test_missing_attribute(self) -> None:
        with pytest.raises(ContractLoadError) as exc_info:
            load_contract("tests.factories:missing")
        assert isinstance(exc_info.value.cause, AttributeError)
        assert exc_info.value.reference == "tests.factories:missing"

    def test_not_a_contract(self) -> None:
        with pytest.raises(ContractLoadError, match="'NOT_A_CONTRACT' is not a Contract"):
            load_contract("tests.factories:NOT_A_CONTRACT")

    @pytest.mark.parametrize("reference", ["users", "module:", ":attr"])
    def test_invalid_reference(self, reference: str) -> None:
        with pytest.raises(ContractLoadError, match="expected 'module:attribute'"):
            load_contract(reference)

    def test_is_framework_error(self) -> None:
        assert issubclass(ContractLoadError, ContractFrameworkError)
