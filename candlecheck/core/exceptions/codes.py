"""Standardised error codes."""

from enum import Enum


class ErrorCode(str, Enum):
    """Error codes surfaced in reports, logs and CLI payloads."""

    GENERAL_ERROR = "GENERAL_ERROR"
    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"
    INVALID_PERIOD = "INVALID_PERIOD"
    INCOMPLETE_INPUT = "INCOMPLETE_INPUT"
    COLLECTOR_FAILURE = "COLLECTOR_FAILURE"
    TIMEOUT = "TIMEOUT"
    CONSISTENCY_VIOLATION = "CONSISTENCY_VIOLATION"


__all__ = ["ErrorCode"]
