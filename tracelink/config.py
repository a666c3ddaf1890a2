"""
Tracelink Configuration

Centralized configuration for logging and tracing, read from the
environment (and a local .env file when present).
"""

import os
from typing import List

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "WARN", "ERROR", "CRITICAL")


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


class ObservabilityConfig:
    """Configuration for structured logging and distributed tracing."""

    # Service identity
    SERVICE_NAME: str = os.getenv("TRACELINK_SERVICE_NAME", "tracelink")
    SERVICE_VERSION: str = os.getenv("TRACELINK_SERVICE_VERSION", "0.1.0")

    # Logging
    LOG_LEVEL: str = os.getenv("TRACELINK_LOG_LEVEL", "INFO")
    LOG_STRUCTURED: bool = _env_flag("TRACELINK_LOG_STRUCTURED", "true")

    # Tracing
    OTLP_ENDPOINT: str = os.getenv("OTEL_EXPORTER_OTLP_ENDPOINT", "")
    CONSOLE_EXPORT: bool = _env_flag("TRACELINK_CONSOLE_EXPORT", "false")

    # Requests to this path are never traced
    HEALTH_CHECK_PATH: str = os.getenv("TRACELINK_HEALTH_CHECK_PATH", "/health")

    def validate(self) -> List[str]:
        """Validate configuration and return list of issues."""
        issues = []

        if not self.SERVICE_NAME:
            issues.append("ERROR: No service name configured (TRACELINK_SERVICE_NAME)")

        if self.LOG_LEVEL.upper() not in VALID_LOG_LEVELS:
            issues.append(f"ERROR: Unknown log level '{self.LOG_LEVEL}' (TRACELINK_LOG_LEVEL)")

        if not self.OTLP_ENDPOINT and not self.CONSOLE_EXPORT:
            issues.append("WARNING: No span exporter configured (OTEL_EXPORTER_OTLP_ENDPOINT)")

        if not self.HEALTH_CHECK_PATH.startswith("/"):
            issues.append(f"WARNING: Health check path '{self.HEALTH_CHECK_PATH}' is not absolute")

        return issues


# Global config instance
config = ObservabilityConfig()
