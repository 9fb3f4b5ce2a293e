"""Load contracts referenced by dotted paths."""

from __future__ import annotations

import importlib
import logging

from api_contract_framework.core.contracts.models import Contract
from api_contract_framework.core.exceptions import ContractFrameworkError

logger = logging.getLogger(__name__)


class ContractLoadError(ContractFrameworkError):
    """A contract reference could not be resolved."""

    def __init__(self, reference: str, cause: Exception) -> None:
        self.reference = reference
        self.cause = cause
        super().__init__(f"Failed to load contract '{reference}': {cause}")


def load_contract(reference: str) -> Contract:
    """Resolve a ``module.attribute`` or ``module:attribute`` reference.

    The attribute may be a :class:`Contract` or a zero-argument callable
    returning one.

    Raises:
        ContractLoadError: If the module or attribute cannot be found, or the
            attribute does not produce a ``Contract``.
    """
    separator = ":" if ":" in reference else "."
    module_path, _, attribute = reference.rpartition(separator)
    if not module_path or not attribute:
        raise ContractLoadError(
            reference,
            ValueError(f"Invalid contract reference '{reference}' (expected 'module:attribute')"),
        )

    try:
        module = importlib.import_module(module_path)
    except ImportError as exc:
        raise ContractLoadError(reference, exc) from exc

    try:
        target = getattr(module, attribute)
    except AttributeError as exc:
        raise ContractLoadError(reference, exc) from exc

    contract = target() if callable(target) and not isinstance(target, Contract) else target
    if not isinstance(contract, Contract):
        raise ContractLoadError(reference, TypeError(f"'{attribute}' is not a Contract"))
    logger.debug("Loaded contract '%s' from %s", contract.name, reference)
    return contract
