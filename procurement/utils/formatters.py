"""
JSON-safe formatting helpers used by the API blueprints.

Money is rendered as a string with exactly two decimals so clients never
see binary floating point values.
"""
import enum
from decimal import Decimal, InvalidOperation
from datetime import date, datetime
from typing import Union, Optional


def money(value: Union[int, float, Decimal, str, None]) -> Optional[str]:
    """
    Format a monetary or quantity value with two decimals.

    Examples:
        money(Decimal('259.9')) -> "259.90"
        money(10) -> "10.00"
        money(None) -> None
    """
    if value is None or value == "":
        return None

    try:
        num = Decimal(str(value))
    except (InvalidOperation, ValueError, TypeError):
        return None

    return f"{num.quantize(Decimal('0.01')):f}"


def iso_date(value: Optional[date]) -> Optional[str]:
    """Format a date as YYYY-MM-DD."""
    if value is None:
        return None
    if isinstance(value, datetime):
        value = value.date()
    return value.isoformat()


def iso_datetime(value: Optional[datetime]) -> Optional[str]:
    """Format a timestamp as ISO 8601."""
    if value is None:
        return None
    return value.isoformat()


def enum_value(value) -> Optional[str]:
    """Return the stored value of an enum member (or the raw value)."""
    if value is None:
        return None
    if isinstance(value, enum.Enum):
        return value.value
    return value
