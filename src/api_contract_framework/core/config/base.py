"""Base enums for configuration models."""

from enum import Enum


class LogLevel(str, Enum):
    """Logging levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class MetricsBackend(str, Enum):
    """Metrics collection backends."""

    IN_MEMORY = "in_memory"
    PROMETHEUS = "prometheus"
    OPENTELEMETRY = "opentelemetry"
