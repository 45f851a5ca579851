"""
Conversion between "MM-YYYY" text and calendar month values.

A calendar month is represented as a ``date`` pinned to the first day of
the month, which is also how it is stored in the ``subscriptions`` table.
"""
from __future__ import annotations

import re
from datetime import date
from typing import Optional

from subs_app.core.exceptions import ValidationError

MONTH_FORMAT = "MM-YYYY"
_MONTH_RE = re.compile(r"([0-9]{2})-([0-9]{4})")


def parse_month(value: str) -> date:
    """Parse ``"MM-YYYY"`` into ``date(year, month, 1)``."""
    if not isinstance(value, str):
        raise ValidationError(f"month must be a string in {MONTH_FORMAT} format")
    match = _MONTH_RE.fullmatch(value)
    if not match:
        raise ValidationError(f"{value!r} is not in {MONTH_FORMAT} format")
    month, year = int(match.group(1)), int(match.group(2))
    if not 1 <= month <= 12 or year < 1:
        raise ValidationError(f"{value!r} is not a valid calendar month")
    return date(year, month, 1)


def parse_optional_month(value: Optional[str]) -> Optional[date]:
    if value is None:
        return None
    return parse_month(value)


def format_month(value: date) -> str:
    return f"{value.month:02d}-{value.year:04d}"
