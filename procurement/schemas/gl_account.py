"""Request structs for GL accounts."""
from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, Mapping, Optional

from procurement.schemas.base import (
    DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE, SORT_ORDERS,
    require_mapping, reject_unknown_fields, parse_string, parse_positive_int, parse_choice
)

ACCOUNT_CODE_MAX_LENGTH = 20
ACCOUNT_NAME_MAX_LENGTH = 255

GL_ACCOUNT_FIELDS = ('account_code', 'account_name', 'description')
GL_ACCOUNT_SORT_FIELDS = ('account_code', 'account_name', 'created_at')


@dataclass
class GLAccountCreate:
    account_code: str
    account_name: str
    description: Optional[str] = None

    @classmethod
    def from_json(cls, data) -> 'GLAccountCreate':
        data = require_mapping(data)
        reject_unknown_fields(data, GL_ACCOUNT_FIELDS)
        return cls(
            account_code=parse_string(data, 'account_code', required=True, max_length=ACCOUNT_CODE_MAX_LENGTH),
            account_name=parse_string(data, 'account_name', required=True, max_length=ACCOUNT_NAME_MAX_LENGTH),
            description=parse_string(data, 'description'),
        )


@dataclass
class GLAccountUpdate:
    """Partial update: only names in `fields_set` are applied."""

    account_code: Optional[str] = None
    account_name: Optional[str] = None
    description: Optional[str] = None
    fields_set: FrozenSet[str] = field(default_factory=frozenset)

    @classmethod
    def from_json(cls, data) -> 'GLAccountUpdate':
        data = require_mapping(data)
        reject_unknown_fields(data, GL_ACCOUNT_FIELDS)
        present = frozenset(data)
        return cls(
            account_code=parse_string(data, 'account_code', required='account_code' in present,
                                      max_length=ACCOUNT_CODE_MAX_LENGTH),
            account_name=parse_string(data, 'account_name', required='account_name' in present,
                                      max_length=ACCOUNT_NAME_MAX_LENGTH),
            description=parse_string(data, 'description'),
            fields_set=present,
        )

    def changes(self) -> Dict[str, Any]:
        return {name: getattr(self, name) for name in GL_ACCOUNT_FIELDS if name in self.fields_set}


@dataclass
class GLAccountQuery:
    search: Optional[str] = None
    page: int = 1
    limit: int = DEFAULT_PAGE_SIZE
    sort_by: str = 'account_code'
    sort_order: str = 'asc'

    @classmethod
    def from_args(cls, args: Mapping[str, Any], default_limit: int = DEFAULT_PAGE_SIZE,
                  max_limit: int = MAX_PAGE_SIZE) -> 'GLAccountQuery':
        search = (args.get('search') or '').strip() or None
        return cls(
            search=search,
            page=parse_positive_int(args, 'page', 1),
            limit=parse_positive_int(args, 'limit', default_limit, maximum=max_limit),
            sort_by=parse_choice(args, 'sort_by', GL_ACCOUNT_SORT_FIELDS, 'account_code'),
            sort_order=parse_choice(args, 'sort_order', SORT_ORDERS, 'asc'),
        )
