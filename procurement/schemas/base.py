"""Shared parsing helpers for request payloads and query strings."""
from datetime import date, datetime
from typing import Any, Iterable, Mapping, Optional

from procurement.exceptions import ValidationError

DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100
SORT_ORDERS = ('asc', 'desc')


def require_mapping(data, what: str = 'Request body') -> Mapping[str, Any]:
    """Reject anything that is not a JSON object."""
    if not isinstance(data, Mapping):
        raise ValidationError(f'{what} must be a JSON object')
    return data


def reject_unknown_fields(data: Mapping[str, Any], allowed: Iterable[str], what: str = 'Request body') -> None:
    unknown = sorted(set(data) - set(allowed))
    if unknown:
        raise ValidationError(
            f'{what} has unknown field(s): {", ".join(unknown)}',
            payload={'fields': unknown}
        )


def parse_string(data: Mapping[str, Any], key: str, required: bool = False,
                 max_length: Optional[int] = None) -> Optional[str]:
    """
    Read a string field.

    Blank strings count as missing: they raise for required fields and
    become None for optional ones.
    """
    value = data.get(key)
    if value is None:
        if required:
            raise ValidationError(f'{key} is required')
        return None

    if not isinstance(value, str):
        raise ValidationError(f'{key} must be a string')

    value = value.strip()
    if not value:
        if required:
            raise ValidationError(f'{key} is required')
        return None

    if max_length is not None and len(value) > max_length:
        raise ValidationError(f'{key} cannot exceed {max_length} characters')

    return value


def parse_enum(data: Mapping[str, Any], key: str, enum_cls, required: bool = False):
    """Map a raw value (e.g. 'Goods') to its enum member."""
    value = data.get(key)
    if value is None or value == '':
        if required:
            raise ValidationError(f'{key} is required')
        return None

    allowed = [member.value for member in enum_cls]
    if isinstance(value, str):
        for member in enum_cls:
            if value == member.value:
                return member

    raise ValidationError(
        f'{key} must be one of: {", ".join(allowed)}',
        payload={'allowed': allowed}
    )


def parse_date(data: Mapping[str, Any], key: str, required: bool = False) -> Optional[date]:
    """Parse YYYY-MM-DD (a full ISO timestamp is truncated to its date)."""
    value = data.get(key)
    if value is None or value == '':
        if required:
            raise ValidationError(f'{key} is required')
        return None

    if not isinstance(value, str):
        raise ValidationError(f'{key} must be a date string (YYYY-MM-DD)')

    try:
        return datetime.strptime(value.strip()[:10], '%Y-%m-%d').date()
    except ValueError:
        raise ValidationError(f'{key} must be a valid date (YYYY-MM-DD)')


def parse_bool(data: Mapping[str, Any], key: str) -> bool:
    value = data.get(key, False)
    if value is None:
        return False
    if not isinstance(value, bool):
        raise ValidationError(f'{key} must be a boolean')
    return value


def parse_positive_int(args: Mapping[str, Any], key: str, default: int,
                       maximum: Optional[int] = None) -> int:
    """Read a positive integer from a query string."""
    raw = args.get(key)
    if raw is None or raw == '':
        return default

    try:
        value = int(raw)
    except (TypeError, ValueError):
        raise ValidationError(f'{key} must be an integer')

    if value < 1:
        raise ValidationError(f'{key} must be at least 1')
    if maximum is not None and value > maximum:
        raise ValidationError(f'{key} cannot exceed {maximum}')
    return value


def parse_choice(args: Mapping[str, Any], key: str, choices: Iterable[str], default: str) -> str:
    raw = args.get(key)
    if raw is None or raw == '':
        return default

    choices = tuple(choices)
    if raw not in choices:
        raise ValidationError(f'{key} must be one of: {", ".join(choices)}')
    return raw
