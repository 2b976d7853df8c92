"""GL accounts blueprint: JSON CRUD endpoints."""
from flask import Blueprint, current_app, jsonify, request
from procurement.database import get_session
from procurement.schemas import GLAccountCreate, GLAccountUpdate, GLAccountQuery
from procurement.services import gl_account_service
from procurement.blueprints.metrics import record_change
from procurement.utils.formatters import iso_datetime

gl_accounts_bp = Blueprint('gl_accounts', __name__, url_prefix='/gl-accounts')


def serialize_gl_account(account, line_item_count=None):
    data = {
        'id': account.id,
        'account_code': account.account_code,
        'account_name': account.account_name,
        'description': account.description,
        'created_at': iso_datetime(account.created_at),
        'updated_at': iso_datetime(account.updated_at),
    }
    if line_item_count is not None:
        data['line_item_count'] = int(line_item_count)
    return data


@gl_accounts_bp.route('', methods=['POST'])
def create_gl_account():
    """Create a GL account (409 if the code is taken)."""
    data = GLAccountCreate.from_json(request.get_json(silent=True))
    account = gl_account_service.create_gl_account(get_session(), data)
    record_change('gl_account', 'create')
    return jsonify(serialize_gl_account(account)), 201


@gl_accounts_bp.route('', methods=['GET'])
def list_gl_accounts():
    """
    Paginated listing.

    Query params: search, page, limit, sort_by (account_code|account_name|
    created_at), sort_order (asc|desc).
    """
    query = GLAccountQuery.from_args(
        request.args,
        default_limit=current_app.config.get('DEFAULT_PAGE_SIZE', 10),
        max_limit=current_app.config.get('MAX_PAGE_SIZE', 100)
    )
    page = gl_account_service.list_gl_accounts(get_session(), query)

    return jsonify({
        'data': [serialize_gl_account(account, count) for account, count in page.items],
        'total': page.total,
        'page': page.page,
        'limit': page.limit,
        'total_pages': page.total_pages,
    })


@gl_accounts_bp.route('/all', methods=['GET'])
def list_all_gl_accounts():
    """Every account ordered by code, for dropdowns."""
    return jsonify(gl_account_service.get_all_accounts(get_session()))


@gl_accounts_bp.route('/code/<string:account_code>', methods=['GET'])
def get_gl_account_by_code(account_code):
    account = gl_account_service.get_gl_account_by_code(get_session(), account_code)
    return jsonify(serialize_gl_account(account))


@gl_accounts_bp.route('/<string:account_id>', methods=['GET'])
def get_gl_account(account_id):
    session = get_session()
    account = gl_account_service.get_gl_account(session, account_id)
    usage = gl_account_service.count_line_item_usage(session, account.id)
    return jsonify(serialize_gl_account(account, usage))


@gl_accounts_bp.route('/<string:account_id>', methods=['PATCH'])
def update_gl_account(account_id):
    changes = GLAccountUpdate.from_json(request.get_json(silent=True))
    account = gl_account_service.update_gl_account(get_session(), account_id, changes)
    record_change('gl_account', 'update')
    return jsonify(serialize_gl_account(account))


@gl_accounts_bp.route('/<string:account_id>', methods=['DELETE'])
def delete_gl_account(account_id):
    """Delete an unused account (409 while line items reference it)."""
    gl_account_service.delete_gl_account(get_session(), account_id)
    record_change('gl_account', 'delete')
    current_app.logger.info(f"GL account {account_id} deleted via API")
    return '', 204
