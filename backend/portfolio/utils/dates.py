"""Parsing helpers for the `MM-YYYY` month dates used by portfolio entries."""

import logging
import re
from datetime import date
from typing import Optional

MONTH_YEAR_PATTERN = re.compile(r"^(0[1-9]|1[0-2])-(\d{4})$")

_LOGGER = logging.getLogger("portfolio.dates")


def parse_month_year(value: Optional[str]) -> Optional[date]:
    """Return the first day of the month described by `value`.

    `None`, blank strings and anything not shaped like `MM-YYYY` yield
    `None`; malformed non-empty input is logged as a warning so bad seed
    data is visible without breaking list endpoints.
    """
    if not value:
        return None
    match = MONTH_YEAR_PATTERN.match(value.strip())
    if not match:
        _LOGGER.warning("Failed to parse date: %s", value)
        return None
    try:
        return date(int(match.group(2)), int(match.group(1)), 1)
    except ValueError:
        _LOGGER.warning("Failed to parse date: %s", value)
        return None
