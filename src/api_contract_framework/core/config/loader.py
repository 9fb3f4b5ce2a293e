"""HOCON configuration loader using dataconf.

This module provides functions for loading configuration from HOCON files,
strings, and environment variables using dataconf. Every loader defaults to
:class:`VerificationConfig`.
"""

from typing import TypeVar, cast

import dataconf

from api_contract_framework.core.config.verification import VerificationConfig

T = TypeVar("T")

ENV_PREFIX = "ACF_"


def load_from_file(path: str, config_class: type[T] = VerificationConfig) -> T:  # type: ignore[assignment]
    """Load configuration from a HOCON file.

    Args:
        path: Path to the HOCON configuration file
        config_class: The configuration dataclass type to load into

    Returns:
        Instance of config_class populated with configuration from the file

    Example:
        >>> config = load_from_file("verification.conf")
    """
    return cast(T, dataconf.file(path, config_class))


def load_from_string(hocon_str: str, config_class: type[T] = VerificationConfig) -> T:  # type: ignore[assignment]
    """Load configuration from a HOCON string.

    Args:
        hocon_str: HOCON configuration as a string
        config_class: The configuration dataclass type to load into

    Example:
        >>> hocon = '''
        ... {
        ...   fail_on_violation: true
        ...   validation { strict_mode: true }
        ... }
        ... '''
        >>> config = load_from_string(hocon)
    """
    return cast(T, dataconf.string(hocon_str, config_class))


def load_from_env(prefix: str = ENV_PREFIX, config_class: type[T] = VerificationConfig) -> T:  # type: ignore[assignment]
    """Load configuration from environment variables.

    Args:
        prefix: Prefix for environment variables (default: "ACF_")
        config_class: The configuration dataclass type to load into

    Example:
        >>> # With ACF_FAIL_ON_VIOLATION=true
        >>> config = load_from_env()

    Note:
        Environment variables use the format PREFIX_FIELD_NAME=value. Nested
        fields use double underscores: ACF_VALIDATION__STRICT_MODE=true
    """
    return cast(T, dataconf.env(prefix, config_class))
