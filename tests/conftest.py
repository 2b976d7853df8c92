import pytest
from procurement import create_app
from procurement.database import create_all, drop_all, get_session
from procurement.models import GLAccount
from procurement.schemas import PurchaseOrderCreate
from procurement.services.purchase_order_service import create_purchase_order


@pytest.fixture(scope='function')
def app():
    """Create application instance backed by a fresh in-memory database."""
    app = create_app('config.TestingConfig')
    create_all()
    yield app
    get_session().remove()
    drop_all()


@pytest.fixture(scope='function')
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def runner(app):
    """Create CLI runner."""
    return app.test_cli_runner()


@pytest.fixture(scope='function')
def session(app):
    """Create database session for testing."""
    session = get_session()
    yield session
    session.rollback()
    session.close()


@pytest.fixture(scope='function')
def cash_account(session):
    """GL account 1000 - Cash."""
    account = GLAccount(account_code='1000', account_name='Cash', description='Cash and cash equivalents')
    session.add(account)
    session.commit()
    return account


@pytest.fixture(scope='function')
def supplies_account(session):
    """GL account 5100 - Office Supplies."""
    account = GLAccount(account_code='5100', account_name='Office Supplies')
    session.add(account)
    session.commit()
    return account


@pytest.fixture(scope='function')
def po_payload():
    """Build a valid purchase order JSON body."""
    def _build(gl_account_id, po_number='PO-0001', line_items=None, **header):
        payload = {
            'vendor_name': 'Acme Supplies',
            'po_number': po_number,
            'ap_account': '2000 - Accounts Payable',
            'transaction_type': 'Goods',
            'line_items': line_items if line_items is not None else [
                {
                    'item_name': 'Printer paper',
                    'quantity': 10,
                    'unit_price': 25.99,
                    'gl_account_id': gl_account_id,
                }
            ],
        }
        payload.update(header)
        return payload
    return _build


@pytest.fixture(scope='function')
def purchase_order(session, supplies_account, po_payload):
    """Order PO-0001 with one line: 10 x 25.99."""
    return create_purchase_order(session, PurchaseOrderCreate.from_json(po_payload(supplies_account.id)))
