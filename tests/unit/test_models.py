"""
Unit tests for SQLAlchemy models.
"""

import pytest
from datetime import date
from decimal import Decimal
from sqlalchemy.exc import IntegrityError

from procurement.exceptions import ValidationError
from procurement.models import (
    GLAccount, PurchaseOrder, PurchaseOrderLineItem, PurchaseOrderStatus, TransactionType, ShipVia
)


def _order(po_number='PO-100'):
    return PurchaseOrder(
        vendor_name='Acme Supplies',
        po_number=po_number,
        ap_account='2000',
        transaction_type=TransactionType.GOODS,
    )


class TestGLAccountModel:
    """Tests for GLAccount model."""

    def test_create_gl_account(self, session):
        """Test creating an account assigns an opaque id and timestamps."""
        account = GLAccount(account_code='1000', account_name='Cash')
        session.add(account)
        session.commit()

        assert account.id is not None
        assert len(account.id) == 36
        assert account.created_at is not None
        assert account.description is None

    def test_account_code_unique(self, session, cash_account):
        """Test that account code must be unique."""
        session.add(GLAccount(account_code=cash_account.account_code, account_name='Duplicate'))

        with pytest.raises(IntegrityError):
            session.commit()

    def test_delete_restricted_while_referenced(self, session, cash_account):
        """Test the FK blocks deleting an account used by a line item."""
        order = _order()
        order.line_items.append(PurchaseOrderLineItem(
            item_name='Petty cash box', quantity=Decimal('1'), unit_price=Decimal('15.00'),
            gl_account_id=cash_account.id
        ))
        session.add(order)
        session.commit()

        session.delete(cash_account)
        with pytest.raises(IntegrityError):
            session.commit()


class TestPurchaseOrderModel:
    """Tests for PurchaseOrder model."""

    def test_defaults(self, session):
        """Test status, date and total defaults."""
        order = _order()
        session.add(order)
        session.commit()

        assert order.status == PurchaseOrderStatus.DRAFT
        assert order.po_date == date.today()
        assert order.total_amount == Decimal('0')

    def test_enum_values_round_trip(self, session):
        """Test enums are stored and loaded by their display value."""
        order = _order()
        order.ship_via = ShipVia.CUSTOMERS_VEHICLE
        session.add(order)
        session.commit()
        session.expire_all()

        loaded = session.query(PurchaseOrder).filter_by(po_number='PO-100').one()
        assert loaded.ship_via is ShipVia.CUSTOMERS_VEHICLE
        assert loaded.transaction_type is TransactionType.GOODS

    def test_po_number_unique(self, session):
        session.add(_order('PO-1'))
        session.commit()
        session.add(_order('PO-1'))

        with pytest.raises(IntegrityError):
            session.commit()

    def test_delete_cascades_line_items(self, session, supplies_account):
        """Test deleting an order removes its line items."""
        order = _order()
        order.line_items.append(PurchaseOrderLineItem(
            item_name='Pens', quantity=Decimal('3'), unit_price=Decimal('1.50'),
            gl_account_id=supplies_account.id
        ))
        session.add(order)
        session.commit()

        session.delete(order)
        session.commit()

        assert session.query(PurchaseOrderLineItem).count() == 0


class TestPurchaseOrderLineItemModel:
    """Tests for PurchaseOrderLineItem amount enforcement."""

    def test_amount_recomputed_on_insert(self, session, supplies_account):
        """Test a caller-supplied amount is overwritten by quantity x unit price."""
        order = _order()
        line = PurchaseOrderLineItem(
            item_name='Printer paper', quantity=Decimal('10'), unit_price=Decimal('25.99'),
            gl_account_id=supplies_account.id, amount=Decimal('1.00')
        )
        order.line_items.append(line)
        session.add(order)
        session.commit()

        assert line.amount == Decimal('259.90')

    def test_amount_recomputed_on_update(self, session, supplies_account):
        order = _order()
        line = PurchaseOrderLineItem(
            item_name='Printer paper', quantity=Decimal('10'), unit_price=Decimal('25.99'),
            gl_account_id=supplies_account.id
        )
        order.line_items.append(line)
        session.add(order)
        session.commit()

        line.quantity = Decimal('5')
        session.commit()

        assert line.amount == Decimal('129.95')

    def test_non_positive_quantity_rejected_on_flush(self, session, supplies_account):
        order = _order()
        order.line_items.append(PurchaseOrderLineItem(
            item_name='Nothing', quantity=Decimal('0'), unit_price=Decimal('2.00'),
            gl_account_id=supplies_account.id
        ))
        session.add(order)

        with pytest.raises(ValidationError):
            session.flush()
        session.rollback()
