"""Logging and metrics configuration models."""

from dataclasses import dataclass

from api_contract_framework.core.config.base import LogLevel, MetricsBackend


@dataclass
class LoggingConfig:
    """Configuration for logging behavior."""

    level: LogLevel = LogLevel.INFO
    """Logging level (default: INFO)"""

    output: str = "stderr"
    """Log output destination - stdout, stderr, or file path (default: stderr)"""

    log_violations: bool = True
    """Log each violation of a failed exchange at WARNING (default: True)"""


@dataclass
class MetricsConfig:
    """Configuration for verification metrics."""

    enabled: bool = False
    """Enable metrics collection (default: False)"""

    backend: MetricsBackend = MetricsBackend.IN_MEMORY
    """Metrics backend to use (default: in_memory)"""

    prefix: str = "acf"
    """Prefix prepended to every metric name (default: acf)"""

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        if not self.prefix:
            raise ValueError("prefix must not be empty")
