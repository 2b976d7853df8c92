"""Request structs parsed from JSON bodies and query strings."""
from procurement.schemas.gl_account import GLAccountCreate, GLAccountUpdate, GLAccountQuery
from procurement.schemas.purchase_order import (
    LineItemCreate, LineItemUpdate, PurchaseOrderCreate, PurchaseOrderUpdate, PurchaseOrderQuery
)

__all__ = [
    'GLAccountCreate', 'GLAccountUpdate', 'GLAccountQuery',
    'LineItemCreate', 'LineItemUpdate', 'PurchaseOrderCreate', 'PurchaseOrderUpdate', 'PurchaseOrderQuery',
]
