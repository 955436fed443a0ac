"""Logging utilities for reconciliation runs."""

from candlecheck.core.logging.config import LogConfig
from candlecheck.core.logging.logger import (
    StructuredLogger,
    configure_logging,
    log_context,
    logger,
)

__all__ = [
    "LogConfig",
    "StructuredLogger",
    "configure_logging",
    "log_context",
    "logger",
]
