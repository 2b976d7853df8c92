"""Purchase Order model."""
from datetime import date
from sqlalchemy import Column, String, Date, Numeric, DateTime, Enum
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from procurement.database import Base
from procurement.models.gl_account import generate_id
import enum


class PurchaseOrderStatus(enum.Enum):
    """Purchase order status enum."""
    DRAFT = "DRAFT"
    SUBMITTED = "SUBMITTED"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


class TransactionType(enum.Enum):
    """Kind of purchase."""
    GOODS = "Goods"
    SERVICES = "Services"


class TransactionOrigin(enum.Enum):
    """Where the purchase comes from."""
    LOCAL = "Local"
    IMPORTED = "Imported"


class ShipVia(enum.Enum):
    """Fixed set of carriers."""
    CUSTOMERS_VEHICLE = "Customer's Vehicle"
    COMPANY_VEHICLE = "Company Vehicle"
    COURIER = "Courier"
    MAIL = "Mail"


def _enum_values(enum_cls):
    """Persist enum values (e.g. 'Goods') rather than member names."""
    return [member.value for member in enum_cls]


class PurchaseOrder(Base):
    """
    Purchase Order (orden de compra).

    `total_amount` is derived: it is always the sum of the amounts of the
    persisted line items and is rewritten by the service on every change.
    """

    __tablename__ = 'purchase_order'

    id = Column(String(36), primary_key=True, default=generate_id)
    vendor_name = Column(String(255), nullable=False)
    one_time_vendor = Column(String(255), nullable=True)
    po_date = Column(Date, nullable=False, default=date.today)
    po_number = Column(String(50), nullable=False, unique=True)
    customer_so = Column(String(255), nullable=True)
    customer_invoice = Column(String(255), nullable=True)
    ap_account = Column(String(255), nullable=False)
    transaction_type = Column(
        Enum(TransactionType, name='transaction_type', values_callable=_enum_values),
        nullable=False
    )
    transaction_origin = Column(
        Enum(TransactionOrigin, name='transaction_origin', values_callable=_enum_values),
        nullable=True
    )
    ship_via = Column(
        Enum(ShipVia, name='ship_via', values_callable=_enum_values),
        nullable=True
    )
    status = Column(
        Enum(PurchaseOrderStatus, name='purchase_order_status'),
        nullable=False,
        default=PurchaseOrderStatus.DRAFT
    )
    total_amount = Column(Numeric(12, 2), nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    # Relationships
    line_items = relationship(
        'PurchaseOrderLineItem',
        back_populates='purchase_order',
        cascade='all, delete-orphan',
        passive_deletes=True,
        order_by='PurchaseOrderLineItem.position'
    )

    def __repr__(self):
        return f"<PurchaseOrder(id={self.id}, po_number='{self.po_number}', status={self.status.value})>"
