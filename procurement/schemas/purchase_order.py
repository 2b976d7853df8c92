"""Request structs for purchase orders and their line items."""
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Any, Dict, FrozenSet, List, Mapping, Optional

from procurement.exceptions import ValidationError
from procurement.models import PurchaseOrderStatus, TransactionType, TransactionOrigin, ShipVia
from procurement.schemas.base import (
    DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE, SORT_ORDERS,
    require_mapping, reject_unknown_fields, parse_string, parse_enum, parse_date,
    parse_bool, parse_positive_int, parse_choice
)
from procurement.utils.number_format import parse_positive_money

LINE_ITEM_FIELDS = ('item_name', 'quantity', 'unit_price', 'description', 'gl_account_id')
LINE_ITEM_UPDATE_FIELDS = ('id', '_delete') + LINE_ITEM_FIELDS

HEADER_FIELDS = (
    'vendor_name', 'one_time_vendor', 'po_date', 'po_number', 'customer_so',
    'customer_invoice', 'ap_account', 'transaction_type', 'transaction_origin',
    'ship_via', 'status',
)
# Header fields that may be cleared with null on update
NULLABLE_HEADER_FIELDS = frozenset({
    'one_time_vendor', 'customer_so', 'customer_invoice', 'transaction_origin', 'ship_via'
})

PURCHASE_ORDER_SORT_FIELDS = (
    'created_at', 'po_number', 'vendor_name', 'po_date', 'total_amount', 'status'
)


def _parse_header(data: Mapping[str, Any], partial: bool) -> Dict[str, Any]:
    """Parse header fields; on partial updates non-nullable fields must not be blank."""
    def required(key):
        return (key in data) if partial else True

    return {
        'vendor_name': parse_string(data, 'vendor_name', required=required('vendor_name'), max_length=255),
        'one_time_vendor': parse_string(data, 'one_time_vendor', max_length=255),
        'po_date': parse_date(data, 'po_date', required=partial and 'po_date' in data),
        'po_number': parse_string(data, 'po_number', required=required('po_number'), max_length=50),
        'customer_so': parse_string(data, 'customer_so', max_length=255),
        'customer_invoice': parse_string(data, 'customer_invoice', max_length=255),
        'ap_account': parse_string(data, 'ap_account', required=required('ap_account'), max_length=255),
        'transaction_type': parse_enum(data, 'transaction_type', TransactionType,
                                       required=required('transaction_type')),
        'transaction_origin': parse_enum(data, 'transaction_origin', TransactionOrigin),
        'ship_via': parse_enum(data, 'ship_via', ShipVia),
        'status': parse_enum(data, 'status', PurchaseOrderStatus, required=partial and 'status' in data),
    }


def _line_items_list(data: Mapping[str, Any]) -> List[Any]:
    raw = data.get('line_items')
    if not isinstance(raw, list):
        raise ValidationError('line_items must be an array')
    return raw


@dataclass
class LineItemCreate:
    item_name: str
    quantity: Decimal
    unit_price: Decimal
    gl_account_id: str
    description: Optional[str] = None

    @classmethod
    def from_json(cls, data, index: int = 0) -> 'LineItemCreate':
        what = f'line_items[{index}]'
        data = require_mapping(data, what)
        reject_unknown_fields(data, LINE_ITEM_FIELDS, what)
        return cls(
            item_name=parse_string(data, 'item_name', required=True, max_length=255),
            quantity=parse_positive_money(data.get('quantity'), 'quantity'),
            unit_price=parse_positive_money(data.get('unit_price'), 'unit_price'),
            gl_account_id=parse_string(data, 'gl_account_id', required=True, max_length=36),
            description=parse_string(data, 'description'),
        )


@dataclass
class LineItemUpdate:
    """
    One element of a line-item list submitted on update.

    With `id` and `delete` it removes that row, with `id` alone it updates
    the fields in `fields_set`, and without `id` it creates a new row.
    """

    id: Optional[str] = None
    delete: bool = False
    item_name: Optional[str] = None
    quantity: Optional[Decimal] = None
    unit_price: Optional[Decimal] = None
    description: Optional[str] = None
    gl_account_id: Optional[str] = None
    fields_set: FrozenSet[str] = field(default_factory=frozenset)

    @classmethod
    def from_json(cls, data, index: int = 0) -> 'LineItemUpdate':
        what = f'line_items[{index}]'
        data = require_mapping(data, what)
        reject_unknown_fields(data, LINE_ITEM_UPDATE_FIELDS, what)

        item_id = parse_string(data, 'id', max_length=36)
        delete = parse_bool(data, '_delete')
        present = frozenset(k for k in LINE_ITEM_FIELDS if k in data)

        if item_id is None and not delete:
            # New rows need the full set of required values
            created = LineItemCreate.from_json(
                {k: v for k, v in data.items() if k in LINE_ITEM_FIELDS}, index
            )
            return cls(
                item_name=created.item_name,
                quantity=created.quantity,
                unit_price=created.unit_price,
                description=created.description,
                gl_account_id=created.gl_account_id,
                fields_set=present,
            )

        quantity = None
        if 'quantity' in present and data.get('quantity') is not None:
            quantity = parse_positive_money(data.get('quantity'), 'quantity')
        unit_price = None
        if 'unit_price' in present and data.get('unit_price') is not None:
            unit_price = parse_positive_money(data.get('unit_price'), 'unit_price')

        # A null quantity/price on an existing row means "keep the stored value"
        if quantity is None:
            present = present - {'quantity'}
        if unit_price is None:
            present = present - {'unit_price'}

        return cls(
            id=item_id,
            delete=delete,
            item_name=parse_string(data, 'item_name', required='item_name' in present, max_length=255),
            quantity=quantity,
            unit_price=unit_price,
            description=parse_string(data, 'description'),
            gl_account_id=parse_string(data, 'gl_account_id', required='gl_account_id' in present,
                                       max_length=36),
            fields_set=present,
        )

    def changes(self) -> Dict[str, Any]:
        return {name: getattr(self, name) for name in LINE_ITEM_FIELDS if name in self.fields_set}


@dataclass
class PurchaseOrderCreate:
    vendor_name: str
    po_number: str
    ap_account: str
    transaction_type: TransactionType
    line_items: List[LineItemCreate]
    po_date: Optional[date] = None
    one_time_vendor: Optional[str] = None
    customer_so: Optional[str] = None
    customer_invoice: Optional[str] = None
    transaction_origin: Optional[TransactionOrigin] = None
    ship_via: Optional[ShipVia] = None
    status: Optional[PurchaseOrderStatus] = None

    @classmethod
    def from_json(cls, data) -> 'PurchaseOrderCreate':
        data = require_mapping(data)
        reject_unknown_fields(data, HEADER_FIELDS + ('line_items',))

        header = _parse_header(data, partial=False)

        if data.get('line_items') is None:
            raise ValidationError('At least one line item is required')
        raw_items = _line_items_list(data)
        if not raw_items:
            raise ValidationError('At least one line item is required')

        line_items = [LineItemCreate.from_json(item, i) for i, item in enumerate(raw_items)]
        return cls(line_items=line_items, **header)


@dataclass
class PurchaseOrderUpdate:
    """Partial update of header fields plus an optional line-item list."""

    vendor_name: Optional[str] = None
    one_time_vendor: Optional[str] = None
    po_date: Optional[date] = None
    po_number: Optional[str] = None
    customer_so: Optional[str] = None
    customer_invoice: Optional[str] = None
    ap_account: Optional[str] = None
    transaction_type: Optional[TransactionType] = None
    transaction_origin: Optional[TransactionOrigin] = None
    ship_via: Optional[ShipVia] = None
    status: Optional[PurchaseOrderStatus] = None
    line_items: Optional[List[LineItemUpdate]] = None
    fields_set: FrozenSet[str] = field(default_factory=frozenset)

    @classmethod
    def from_json(cls, data) -> 'PurchaseOrderUpdate':
        data = require_mapping(data)
        reject_unknown_fields(data, HEADER_FIELDS + ('line_items',))

        for key in HEADER_FIELDS:
            if key in data and data[key] is None and key not in NULLABLE_HEADER_FIELDS:
                raise ValidationError(f'{key} cannot be null')

        header = _parse_header(data, partial=True)

        line_items = None
        if data.get('line_items') is not None:
            line_items = [LineItemUpdate.from_json(item, i) for i, item in enumerate(_line_items_list(data))]

        present = frozenset(k for k in data if k in HEADER_FIELDS)
        if line_items is not None:
            present = present | {'line_items'}

        return cls(line_items=line_items, fields_set=present, **header)

    def header_changes(self) -> Dict[str, Any]:
        return {name: getattr(self, name) for name in HEADER_FIELDS if name in self.fields_set}


@dataclass
class PurchaseOrderQuery:
    search: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    status: Optional[PurchaseOrderStatus] = None
    page: int = 1
    limit: int = DEFAULT_PAGE_SIZE
    sort_by: str = 'created_at'
    sort_order: str = 'desc'

    @classmethod
    def from_args(cls, args: Mapping[str, Any], default_limit: int = DEFAULT_PAGE_SIZE,
                  max_limit: int = MAX_PAGE_SIZE) -> 'PurchaseOrderQuery':
        start_date = parse_date(args, 'start_date')
        end_date = parse_date(args, 'end_date')
        if start_date and end_date and start_date > end_date:
            raise ValidationError('start_date must be on or before end_date')

        return cls(
            search=(args.get('search') or '').strip() or None,
            start_date=start_date,
            end_date=end_date,
            status=parse_enum(args, 'status', PurchaseOrderStatus),
            page=parse_positive_int(args, 'page', 1),
            limit=parse_positive_int(args, 'limit', default_limit, maximum=max_limit),
            sort_by=parse_choice(args, 'sort_by', PURCHASE_ORDER_SORT_FIELDS, 'created_at'),
            sort_order=parse_choice(args, 'sort_order', SORT_ORDERS, 'desc'),
        )
