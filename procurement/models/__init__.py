"""Models package - exports all SQLAlchemy models."""
from procurement.models.gl_account import GLAccount
from procurement.models.purchase_order import (
    PurchaseOrder, PurchaseOrderStatus, TransactionType, TransactionOrigin, ShipVia
)
from procurement.models.purchase_order_line_item import PurchaseOrderLineItem

__all__ = [
    'GLAccount',
    'PurchaseOrder', 'PurchaseOrderStatus', 'TransactionType', 'TransactionOrigin', 'ShipVia',
    'PurchaseOrderLineItem',
]
