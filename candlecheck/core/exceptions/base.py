"""candlecheck core exception classes."""

from typing import Any

from candlecheck.core.exceptions.codes import ErrorCode


class CandlecheckError(Exception):
    """Base exception for candlecheck."""

    def __init__(
        self,
        message: str,
        error_code: str = ErrorCode.GENERAL_ERROR.value,
        details: dict[str, Any] | None = None,
    ):
        """Initialise the exception.

        Args:
            message: Human readable error message
            error_code: Error code, one of :class:`ErrorCode`
            details: Extra structured detail
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = details or {}


class ConfigurationError(CandlecheckError):
    """Settings or API registry could not be loaded."""

    def __init__(
        self,
        message: str,
        source: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super_details = details or {}
        if source:
            super_details["source"] = source
        super().__init__(message, ErrorCode.CONFIGURATION_ERROR.value, super_details)


class PeriodFormatError(CandlecheckError):
    """Period token has no parseable unit suffix or numeric prefix."""

    def __init__(self, token: str | None, details: dict[str, Any] | None = None):
        super_details = details or {}
        super_details["period"] = token
        super().__init__(f"Invalid period token: {token!r}", ErrorCode.INVALID_PERIOD.value, super_details)
        self.token = token


class IncompleteInputError(CandlecheckError):
    """Required reconciliation input is missing or malformed."""

    def __init__(
        self,
        message: str,
        missing_fields: list[str] | None = None,
        details: dict[str, Any] | None = None,
    ):
        super_details = details or {}
        if missing_fields:
            super_details["missing_fields"] = missing_fields
        super().__init__(message, ErrorCode.INCOMPLETE_INPUT.value, super_details)
        self.missing_fields = missing_fields or []


class CollectorError(CandlecheckError):
    """A fetch collaborator failed or answered with a non-success status."""

    def __init__(
        self,
        message: str,
        api_name: str,
        status_code: int | None = None,
        details: dict[str, Any] | None = None,
    ):
        super_details = details or {}
        super_details["api"] = api_name
        if status_code is not None:
            super_details["status_code"] = status_code
        super().__init__(message, ErrorCode.COLLECTOR_FAILURE.value, super_details)
        self.api_name = api_name
        self.status_code = status_code


class ReconciliationTimeoutError(CandlecheckError):
    """Caller deadline expired while collecting inputs."""

    def __init__(self, timeout: float, details: dict[str, Any] | None = None):
        super_details = details or {}
        super_details["timeout_seconds"] = timeout
        super().__init__(
            f"Collection did not finish within {timeout} seconds",
            ErrorCode.TIMEOUT.value,
            super_details,
        )
        self.timeout = timeout
