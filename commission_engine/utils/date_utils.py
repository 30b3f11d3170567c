"""Date manipulation utilities"""

import calendar
import re
from datetime import date
from typing import Tuple

from commission_engine.domain.exceptions import InvalidMonthError

_MONTH_RE = re.compile(r"^(\d{4})-(\d{2})$")


def parse_month(month: str) -> Tuple[int, int]:
    """Parse 'YYYY-MM' into (year, month)"""
    match = _MONTH_RE.match(month or "")
    if not match:
        raise InvalidMonthError(f"Month must be YYYY-MM, got {month!r}")
    year, month_num = int(match.group(1)), int(match.group(2))
    if not 1 <= month_num <= 12:
        raise InvalidMonthError(f"Month out of range: {month!r}")
    return year, month_num


def month_bounds(month: str) -> Tuple[date, date]:
    """First and last day of a 'YYYY-MM' month (inclusive)"""
    year, month_num = parse_month(month)
    last_day = calendar.monthrange(year, month_num)[1]
    return date(year, month_num, 1), date(year, month_num, last_day)
