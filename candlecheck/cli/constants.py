"""Exit codes shared by CLI commands."""

SUCCESS_EXIT_CODE = 0
VALIDATION_EXIT_CODE = 10
RESPONSE_CHECK_EXIT_CODE = 20
COLLECTOR_EXIT_CODE = 30
INCONSISTENT_EXIT_CODE = 40
TIMEOUT_EXIT_CODE = 50
SYSTEM_EXIT_CODE = 70

__all__ = [
    "COLLECTOR_EXIT_CODE",
    "INCONSISTENT_EXIT_CODE",
    "RESPONSE_CHECK_EXIT_CODE",
    "SUCCESS_EXIT_CODE",
    "SYSTEM_EXIT_CODE",
    "TIMEOUT_EXIT_CODE",
    "VALIDATION_EXIT_CODE",
]
