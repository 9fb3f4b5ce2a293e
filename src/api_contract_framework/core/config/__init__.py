"""Configuration models for api-contract-framework.

This package provides dataconf-based configuration models for tuning
contract verification in HOCON format.
"""

from api_contract_framework.core.config.base import LogLevel, MetricsBackend
from api_contract_framework.core.config.hooks import LoggingConfig, MetricsConfig
from api_contract_framework.core.config.loader import load_from_env, load_from_file, load_from_string
from api_contract_framework.core.config.verification import ValidationSettings, VerificationConfig

__all__ = [
    "LogLevel",
    "LoggingConfig",
    "MetricsBackend",
    "MetricsConfig",
    "ValidationSettings",
    "VerificationConfig",
    "load_from_env",
    "load_from_file",
    "load_from_string",
]
