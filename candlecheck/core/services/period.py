"""Period token parsing."""

from __future__ import annotations

import re
from datetime import UTC, datetime, timedelta

from dateutil.relativedelta import relativedelta

from candlecheck.core.exceptions import PeriodFormatError

_TOKEN_PATTERN = re.compile(r"^(\d+)([A-Za-z])$")
_ONE_MS = timedelta(milliseconds=1)

CLOCK_UNITS_MS: dict[str, int] = {
    "s": 1_000,
    "m": 60_000,
    "h": 3_600_000,
}
CALENDAR_UNITS: dict[str, str] = {
    "D": "days",
    "W": "weeks",
    "M": "months",
    "Y": "years",
}


def parse_period(token: str, now: datetime | None = None) -> int:
    """Convert a period token into milliseconds.

    Lowercase units (``s``, ``m``, ``h``) are fixed clock durations. Uppercase
    units (``D``, ``W``, ``M``, ``Y``) are calendar periods measured from
    ``now``, so ``"1M"`` depends on the month it is anchored in. Pass ``now``
    to make the result reproducible.

    Raises:
        PeriodFormatError: if the token has no numeric prefix, has an unknown
            unit, or describes a calendar span past the supported date range.
    """
    if not isinstance(token, str):
        raise PeriodFormatError(token)
    match = _TOKEN_PATTERN.match(token.strip())
    if match is None:
        raise PeriodFormatError(token)
    amount = int(match.group(1))
    unit = match.group(2)

    if unit.isupper():
        if unit not in CALENDAR_UNITS:
            raise PeriodFormatError(token, details={"unit": unit})
        start = now or datetime.now(UTC)
        try:
            end = start + relativedelta(**{CALENDAR_UNITS[unit]: amount})
        except (ValueError, OverflowError) as exc:
            # calendar step lands outside the representable datetime range
            raise PeriodFormatError(token, details={"unit": unit, "reason": str(exc)}) from exc
        return (end - start) // _ONE_MS

    if unit not in CLOCK_UNITS_MS:
        raise PeriodFormatError(token, details={"unit": unit})
    return amount * CLOCK_UNITS_MS[unit]


def is_calendar_period(token: str) -> bool:
    return bool(token) and token[-1].isupper()
