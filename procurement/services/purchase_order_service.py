"""Purchase order service with derived totals and line-item reconciliation."""
import logging
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Iterable, List, Set

from sqlalchemy import or_, func, case
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload

from procurement.exceptions import AppError, ConflictError, NotFoundError, ValidationError
from procurement.models import GLAccount, PurchaseOrder, PurchaseOrderLineItem, PurchaseOrderStatus
from procurement.schemas import PurchaseOrderCreate, PurchaseOrderUpdate, PurchaseOrderQuery, LineItemUpdate
from procurement.utils.number_format import TWO_PLACES, calculate_line_amount, calculate_total_amount
from procurement.utils.pagination import Page, paginate

logger = logging.getLogger(__name__)

SORT_COLUMNS = {
    'created_at': PurchaseOrder.created_at,
    'po_number': PurchaseOrder.po_number,
    'vendor_name': PurchaseOrder.vendor_name,
    'po_date': PurchaseOrder.po_date,
    'total_amount': PurchaseOrder.total_amount,
    'status': PurchaseOrder.status,
}


@dataclass
class ReconciliationResult:
    """Ids touched by one reconciliation pass."""

    deleted: List[str] = field(default_factory=list)
    updated: List[str] = field(default_factory=list)
    created: List[str] = field(default_factory=list)


def _duplicate_number_error(po_number: str) -> ConflictError:
    return ConflictError(
        f'Purchase Order with number {po_number} already exists',
        payload={'po_number': po_number}
    )


def _translate_integrity_error(error: IntegrityError, po_number: str) -> Exception:
    """Map a constraint violation to the error the pre-checks would have raised."""
    error_msg = str(error.orig).lower()

    if 'unique' in error_msg and 'po_number' in error_msg:
        logger.info(f"PO number {po_number} lost a concurrent insert race")
        return _duplicate_number_error(po_number)
    if 'foreign key' in error_msg:
        return NotFoundError('Referenced GL Account not found')
    return error


def _commit(session: Session, po_number: str) -> None:
    """
    Commit the unit of work, rolling back on any failure.

    Unique-constraint races on po_number surface as ConflictError and a
    missing GL account reference as NotFoundError.
    """
    try:
        session.commit()
    except IntegrityError as e:
        session.rollback()
        raise _translate_integrity_error(e, po_number)
    except Exception:
        session.rollback()
        raise


def _ensure_gl_accounts_exist(session: Session, account_ids: Iterable[str]) -> None:
    wanted: Set[str] = {account_id for account_id in account_ids if account_id}
    if not wanted:
        return

    found = {
        row.id for row in session.query(GLAccount.id).filter(GLAccount.id.in_(wanted)).all()
    }
    missing = sorted(wanted - found)
    if missing:
        raise NotFoundError(
            f'GL Account with ID {missing[0]} not found',
            payload={'gl_account_ids': missing}
        )


def _ensure_po_number_available(session: Session, po_number: str, exclude_id: str = None) -> None:
    q = session.query(PurchaseOrder.id).filter(PurchaseOrder.po_number == po_number)
    if exclude_id:
        q = q.filter(PurchaseOrder.id != exclude_id)
    if q.first():
        raise _duplicate_number_error(po_number)


def recalculate_total(session: Session, order: PurchaseOrder) -> Decimal:
    """
    Sum the amounts of the persisted line items of an order.

    Reads back from the database (after a flush) rather than from the
    request payload, so rounding done on the way in is reflected.
    """
    session.flush()
    amounts = session.query(PurchaseOrderLineItem.amount).filter(
        PurchaseOrderLineItem.purchase_order_id == order.id
    ).all()
    return calculate_total_amount(row.amount for row in amounts)


def create_purchase_order(session: Session, data: PurchaseOrderCreate) -> PurchaseOrder:
    """
    Create a purchase order with its line items as one unit of work.

    Steps:
    1. Reject a PO number that already exists
    2. Check every referenced GL account exists
    3. amount = quantity x unit price per line, total = sum of amounts
    4. Persist order + lines (status defaults to DRAFT)

    Raises:
        ConflictError: duplicate PO number.
        NotFoundError: unknown GL account id.
        ValidationError: no line items.
    """
    if not data.line_items:
        raise ValidationError('At least one line item is required')

    _ensure_po_number_available(session, data.po_number)
    _ensure_gl_accounts_exist(session, (item.gl_account_id for item in data.line_items))

    order = PurchaseOrder(
        vendor_name=data.vendor_name,
        one_time_vendor=data.one_time_vendor,
        po_date=data.po_date or date.today(),
        po_number=data.po_number,
        customer_so=data.customer_so,
        customer_invoice=data.customer_invoice,
        ap_account=data.ap_account,
        transaction_type=data.transaction_type,
        transaction_origin=data.transaction_origin,
        ship_via=data.ship_via,
        status=data.status or PurchaseOrderStatus.DRAFT,
    )

    for position, item in enumerate(data.line_items):
        order.line_items.append(PurchaseOrderLineItem(
            position=position,
            item_name=item.item_name,
            quantity=item.quantity,
            unit_price=item.unit_price,
            description=item.description,
            gl_account_id=item.gl_account_id,
            amount=calculate_line_amount(item.quantity, item.unit_price),
        ))

    order.total_amount = calculate_total_amount(line.amount for line in order.line_items)

    session.add(order)
    _commit(session, data.po_number)

    logger.info(
        f"Purchase order {order.po_number} created with "
        f"{len(data.line_items)} line item(s), total {order.total_amount}"
    )
    return order


def _filters(query: PurchaseOrderQuery) -> list:
    conditions = []

    if query.search:
        # autoescape keeps % and _ literal
        term = query.search.lower()
        conditions.append(or_(
            func.lower(PurchaseOrder.po_number).contains(term, autoescape=True),
            func.lower(PurchaseOrder.vendor_name).contains(term, autoescape=True),
            func.lower(PurchaseOrder.customer_so).contains(term, autoescape=True)
        ))

    if query.start_date:
        conditions.append(PurchaseOrder.po_date >= query.start_date)
    if query.end_date:
        conditions.append(PurchaseOrder.po_date <= query.end_date)

    if query.status:
        conditions.append(PurchaseOrder.status == query.status)

    return conditions


def get_purchase_order_stats(session: Session, query: PurchaseOrderQuery) -> dict:
    """Aggregates over every order matching the filters (not just one page)."""
    conditions = _filters(query)
    row = session.query(
        func.count(PurchaseOrder.id),
        func.sum(case((PurchaseOrder.status == PurchaseOrderStatus.DRAFT, 1), else_=0)),
        func.sum(case((PurchaseOrder.status == PurchaseOrderStatus.SUBMITTED, 1), else_=0)),
        func.sum(PurchaseOrder.total_amount)
    ).filter(*conditions).one()

    total_count, draft_count, submitted_count, total_value = row
    return {
        'total_count': int(total_count or 0),
        'draft_count': int(draft_count or 0),
        'submitted_count': int(submitted_count or 0),
        'total_value': Decimal(str(total_value or 0)).quantize(TWO_PLACES),
    }


def list_purchase_orders(session: Session, query: PurchaseOrderQuery) -> Page:
    """
    Filter, sort and paginate purchase orders (line items included).

    The page carries `stats` in `extra`, computed over the filtered set.
    """
    q = session.query(PurchaseOrder).options(selectinload(PurchaseOrder.line_items))

    conditions = _filters(query)
    if conditions:
        q = q.filter(*conditions)

    column = SORT_COLUMNS[query.sort_by]
    primary = column.desc() if query.sort_order == 'desc' else column.asc()
    q = q.order_by(primary, PurchaseOrder.id.asc())

    return paginate(q, query.page, query.limit, stats=get_purchase_order_stats(session, query))


def get_purchase_order(session: Session, order_id: str) -> PurchaseOrder:
    order = session.query(PurchaseOrder).options(
        selectinload(PurchaseOrder.line_items)
    ).filter(PurchaseOrder.id == order_id).first()

    if not order:
        raise NotFoundError(f'Purchase Order with ID {order_id} not found')
    return order


def reconcile_line_items(session: Session, order: PurchaseOrder,
                         items: List[LineItemUpdate]) -> ReconciliationResult:
    """
    Turn a submitted line-item list into the final persisted set.

    Differential apply: items with an id and the delete flag are removed,
    items with an id are updated in place (amount recomputed only when
    quantity or unit price changed, using the stored value for the side not
    supplied) and items without an id are inserted. Existing rows the list
    does not mention stay as they are.

    Raises:
        NotFoundError: an id does not belong to this order, or an unknown
            GL account is referenced.
        ValidationError: the same id is both updated and deleted.
    """
    existing = {line.id: line for line in order.line_items}

    to_delete = [item for item in items if item.delete and item.id]
    to_update = [item for item in items if not item.delete and item.id]
    to_create = [item for item in items if not item.delete and not item.id]

    unknown = sorted({item.id for item in to_delete + to_update if item.id not in existing})
    if unknown:
        raise NotFoundError(
            f'Line item with ID {unknown[0]} not found in Purchase Order {order.id}',
            payload={'line_item_ids': unknown}
        )

    delete_ids = {item.id for item in to_delete}
    clashing = sorted(delete_ids & {item.id for item in to_update})
    if clashing:
        raise ValidationError(
            f'Line item {clashing[0]} cannot be updated and deleted in the same request',
            payload={'line_item_ids': clashing}
        )

    _ensure_gl_accounts_exist(
        session, (item.gl_account_id for item in to_update + to_create)
    )

    result = ReconciliationResult()

    for line_id in sorted(delete_ids):
        # delete-orphan cascade removes the row on flush
        order.line_items.remove(existing[line_id])
        result.deleted.append(line_id)

    for item in to_update:
        line = existing[item.id]
        values = item.changes()
        for name, value in values.items():
            setattr(line, name, value)

        if 'quantity' in values or 'unit_price' in values:
            line.amount = calculate_line_amount(line.quantity, line.unit_price)
        result.updated.append(line.id)

    next_position = max((line.position for line in order.line_items), default=-1) + 1
    for offset, item in enumerate(to_create):
        line = PurchaseOrderLineItem(
            position=next_position + offset,
            item_name=item.item_name,
            quantity=item.quantity,
            unit_price=item.unit_price,
            description=item.description,
            gl_account_id=item.gl_account_id,
            amount=calculate_line_amount(item.quantity, item.unit_price),
        )
        order.line_items.append(line)

    session.flush()
    result.created.extend(line.id for line in order.line_items if line.id not in existing)

    return result


def update_purchase_order(session: Session, order_id: str, changes: PurchaseOrderUpdate) -> PurchaseOrder:
    """
    Update header fields and, when given, reconcile the line items.

    Steps:
    1. Load the order (NotFoundError)
    2. Re-check PO number uniqueness when it changes (own number is fine)
    3. Reconcile line items if the request carries them
    4. Recompute total_amount from the persisted line items
    5. Apply header changes + new total and commit
    """
    order = get_purchase_order(session, order_id)
    header = changes.header_changes()
    order_number = header.get('po_number') or order.po_number

    if order_number != order.po_number:
        _ensure_po_number_available(session, order_number, exclude_id=order.id)

    try:
        if changes.line_items is not None:
            result = reconcile_line_items(session, order, changes.line_items)
            logger.info(
                f"Purchase order {order.po_number} line items reconciled: "
                f"{len(result.deleted)} deleted, {len(result.updated)} updated, "
                f"{len(result.created)} created"
            )

        for name, value in header.items():
            setattr(order, name, value)

        order.total_amount = recalculate_total(session, order)
    except IntegrityError as e:
        session.rollback()
        raise _translate_integrity_error(e, order_number)
    except AppError:
        session.rollback()
        raise

    _commit(session, order_number)
    return order


def delete_purchase_order(session: Session, order_id: str) -> None:
    """Delete an order; its line items go with it."""
    order = get_purchase_order(session, order_id)
    po_number = order.po_number

    session.delete(order)
    _commit(session, po_number)

    logger.info(f"Purchase order {po_number} deleted")
