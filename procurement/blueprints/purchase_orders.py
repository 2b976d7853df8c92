"""Purchase orders blueprint: JSON CRUD endpoints with line items."""
from flask import Blueprint, current_app, jsonify, request
from procurement.database import get_session
from procurement.schemas import PurchaseOrderCreate, PurchaseOrderUpdate, PurchaseOrderQuery
from procurement.services import purchase_order_service
from procurement.blueprints.metrics import record_change
from procurement.utils.formatters import money, iso_date, iso_datetime, enum_value

purchase_orders_bp = Blueprint('purchase_orders', __name__, url_prefix='/purchase-orders')


def serialize_line_item(line):
    return {
        'id': line.id,
        'item_name': line.item_name,
        'quantity': money(line.quantity),
        'unit_price': money(line.unit_price),
        'description': line.description,
        'gl_account_id': line.gl_account_id,
        'amount': money(line.amount),
        'created_at': iso_datetime(line.created_at),
        'updated_at': iso_datetime(line.updated_at),
    }


def serialize_purchase_order(order):
    return {
        'id': order.id,
        'vendor_name': order.vendor_name,
        'one_time_vendor': order.one_time_vendor,
        'po_date': iso_date(order.po_date),
        'po_number': order.po_number,
        'customer_so': order.customer_so,
        'customer_invoice': order.customer_invoice,
        'ap_account': order.ap_account,
        'transaction_type': enum_value(order.transaction_type),
        'transaction_origin': enum_value(order.transaction_origin),
        'ship_via': enum_value(order.ship_via),
        'status': enum_value(order.status),
        'total_amount': money(order.total_amount),
        'created_at': iso_datetime(order.created_at),
        'updated_at': iso_datetime(order.updated_at),
        'line_items': [serialize_line_item(line) for line in order.line_items],
    }


@purchase_orders_bp.route('', methods=['POST'])
def create_purchase_order():
    """Create an order with at least one line item; totals are computed here."""
    data = PurchaseOrderCreate.from_json(request.get_json(silent=True))
    order = purchase_order_service.create_purchase_order(get_session(), data)
    record_change('purchase_order', 'create')
    return jsonify(serialize_purchase_order(order)), 201


@purchase_orders_bp.route('', methods=['GET'])
def list_purchase_orders():
    """
    Paginated listing plus aggregate stats.

    Query params: search, start_date, end_date, status, page, limit,
    sort_by, sort_order. `stats` covers every order matching the filters.
    """
    query = PurchaseOrderQuery.from_args(
        request.args,
        default_limit=current_app.config.get('DEFAULT_PAGE_SIZE', 10),
        max_limit=current_app.config.get('MAX_PAGE_SIZE', 100)
    )
    page = purchase_order_service.list_purchase_orders(get_session(), query)
    stats = page.extra['stats']

    return jsonify({
        'data': [serialize_purchase_order(order) for order in page.items],
        'total': page.total,
        'page': page.page,
        'limit': page.limit,
        'total_pages': page.total_pages,
        'stats': {
            'total_count': stats['total_count'],
            'draft_count': stats['draft_count'],
            'submitted_count': stats['submitted_count'],
            'total_value': money(stats['total_value']),
        },
    })


@purchase_orders_bp.route('/<string:order_id>', methods=['GET'])
def get_purchase_order(order_id):
    order = purchase_order_service.get_purchase_order(get_session(), order_id)
    return jsonify(serialize_purchase_order(order))


@purchase_orders_bp.route('/<string:order_id>', methods=['PATCH'])
def update_purchase_order(order_id):
    """
    Partial update.

    Only keys present in the body are applied. When `line_items` is sent,
    each entry is a create (no id), an update (id) or a delete
    (id + "_delete": true); unmentioned rows are kept.
    """
    changes = PurchaseOrderUpdate.from_json(request.get_json(silent=True))
    order = purchase_order_service.update_purchase_order(get_session(), order_id, changes)
    record_change('purchase_order', 'update')
    return jsonify(serialize_purchase_order(order))


@purchase_orders_bp.route('/<string:order_id>', methods=['DELETE'])
def delete_purchase_order(order_id):
    purchase_order_service.delete_purchase_order(get_session(), order_id)
    record_change('purchase_order', 'delete')
    return '', 204
