"""Exception handling module."""

from candlecheck.core.exceptions.base import (
    CandlecheckError,
    CollectorError,
    ConfigurationError,
    IncompleteInputError,
    PeriodFormatError,
    ReconciliationTimeoutError,
)
from candlecheck.core.exceptions.codes import ErrorCode

__all__ = [
    "CandlecheckError",
    "CollectorError",
    "ConfigurationError",
    "ErrorCode",
    "IncompleteInputError",
    "PeriodFormatError",
    "ReconciliationTimeoutError",
]
