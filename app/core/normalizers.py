# app/core/normalizers.py

"""
Value coercion for flat adapter records.

Every helper returns None for anything it can't make sense of instead of
raising, so a bad field degrades to a zero score rather than a failed run.
"""

from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Any, Iterable, Optional
import math
import re

from dateutil import parser as date_parser


def is_missing(value: Any) -> bool:
    """A field counts as missing when the key is absent or the value is null."""
    return value is None


def to_amount(value: Any) -> Optional[float]:
    """
    Coerce a value to a finite float.

    Handles:
    - Integers, floats and Decimals (too large for a float -> None)
    - Plain numeric strings, including exponent notation
    - Strings with currency symbols and thousands separators
    """
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, (int, float, Decimal)):
        try:
            amount = float(value)
        except OverflowError:
            return None
        return amount if math.isfinite(amount) else None

    if isinstance(value, str):
        try:
            amount = float(value.strip())
        except ValueError:
            # A comma after the last dot is a decimal comma; ambiguous
            if ',' in value and value.rfind(',') > value.rfind('.') > -1:
                return None

            # Remove currency symbols and commas
            cleaned = re.sub(r'[^\d.-]', '', value)
            try:
                amount = float(cleaned)
            except ValueError:
                return None
        return amount if math.isfinite(amount) else None

    return None


def to_datetime(value: Any) -> Optional[datetime]:
    """
    Coerce a value to a timezone-aware datetime.

    Handles:
    - datetime objects (naive ones are taken as UTC)
    - date objects (midnight UTC)
    - Unix timestamps
    - ISO strings, then anything dateutil can parse
    """
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, datetime):
        return _as_utc(value)

    if isinstance(value, date):
        return datetime(value.year, value.month, value.day, tzinfo=timezone.utc)

    if isinstance(value, (int, float)):
        try:
            if not math.isfinite(value):
                return None
            return datetime.fromtimestamp(value, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None

    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None

        # Try ISO format first
        try:
            parsed = datetime.fromisoformat(text.replace('Z', '+00:00'))
        except ValueError:
            try:
                parsed = date_parser.parse(text)
            except (ValueError, OverflowError):
                return None
        return _as_utc(parsed)

    return None


def to_text(value: Any) -> str:
    """Render a value as a string for fuzzy comparison."""
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    return str(value)


def strictly_equal(a: Any, b: Any) -> bool:
    """
    Equality without cross-type coercion.

    "12345" never equals 12345, and True never equals 1.
    """
    if isinstance(a, bool) != isinstance(b, bool):
        return False
    if isinstance(a, str) != isinstance(b, str):
        return False
    return a == b


def record_id(record: dict, keys: Iterable[str]) -> str:
    """Return the first non-empty identifier among `keys`."""
    for key in keys:
        value = record.get(key)
        if value not in (None, ""):
            return str(value)
    return "unknown"


def _as_utc(value: datetime) -> Optional[datetime]:
    """Normalize to UTC; None when the offset is invalid or out of range."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    try:
        return value.astimezone(timezone.utc)
    except (ValueError, OverflowError):
        return None
