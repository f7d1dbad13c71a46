"""
Statement date parsing for the three supported date layouts.
"""
import re
import logging
from datetime import date, datetime, time, timezone
from typing import Optional

from models.import_template import DateLayout

logger = logging.getLogger(__name__)

__all__ = [
    'parse_date',
    'to_iso_timestamp',
]

_NON_DATE_CHARS = re.compile(r'[^\d/.-]')
_SEPARATORS = re.compile(r'[-/.]')

# Two-digit years are ambiguous; they never echo back as the four-digit year of a real statement
MIN_YEAR = 100


def parse_date(raw: str, layout: DateLayout) -> Optional[date]:
    """
    Parse a date string laid out as YYYY-MM-DD, MM/DD/YYYY or DD/MM/YYYY.

    Any of '/', '-' and '.' is accepted as the separator whatever the layout.
    Calendar-invalid dates such as 31/02/2024 are rejected rather than rolled
    over into the next month.

    Args:
        raw: Date as it appears in the file
        layout: Component order to apply

    Returns:
        The parsed date, or None if the string is not a valid date in that layout
    """
    cleaned = _NON_DATE_CHARS.sub('', raw or '')
    parts = _SEPARATORS.split(cleaned)
    if len(parts) != 3 or not all(part.isdigit() for part in parts):
        return None

    first, second, third = (int(part) for part in parts)
    if layout == DateLayout.YMD:
        year, month, day = first, second, third
    elif layout == DateLayout.MDY:
        month, day, year = first, second, third
    elif layout == DateLayout.DMY:
        day, month, year = first, second, third
    else:
        return None

    if year < MIN_YEAR:
        return None
    try:
        return date(year, month, day)
    except ValueError:
        logger.debug(f"Rejected calendar-invalid date '{raw}' for layout {layout.value}")
        return None


def to_iso_timestamp(value: date) -> str:
    """Render a date as an ISO-8601 timestamp at midnight UTC."""
    return datetime.combine(value, time.min, tzinfo=timezone.utc).isoformat()
