"""Purchase Order Line Item model."""
from decimal import Decimal
from sqlalchemy import Column, String, Text, Integer, Numeric, DateTime, ForeignKey, CheckConstraint, event
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from procurement.database import Base
from procurement.exceptions import ValidationError
from procurement.models.gl_account import generate_id
from procurement.utils.number_format import calculate_line_amount


class PurchaseOrderLineItem(Base):
    """
    Purchase Order Line Item (detalle de orden de compra).

    `amount` is never written by callers: the mapper hooks below recompute it
    from quantity and unit price right before every INSERT and UPDATE.
    """

    __tablename__ = 'purchase_order_line_item'
    __table_args__ = (
        CheckConstraint('quantity > 0', name='ck_line_item_quantity_positive'),
        CheckConstraint('unit_price > 0', name='ck_line_item_unit_price_positive'),
    )

    id = Column(String(36), primary_key=True, default=generate_id)
    purchase_order_id = Column(
        String(36),
        ForeignKey('purchase_order.id', ondelete='CASCADE'),
        nullable=False,
        index=True
    )
    gl_account_id = Column(
        String(36),
        ForeignKey('gl_account.id', ondelete='RESTRICT'),
        nullable=False,
        index=True
    )
    position = Column(Integer, nullable=False, default=0)
    item_name = Column(String(255), nullable=False)
    quantity = Column(Numeric(10, 2), nullable=False)
    unit_price = Column(Numeric(10, 2), nullable=False)
    description = Column(Text, nullable=True)
    amount = Column(Numeric(12, 2), nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    # Relationships
    purchase_order = relationship('PurchaseOrder', back_populates='line_items')
    gl_account = relationship('GLAccount', back_populates='line_items')

    def recalculate_amount(self) -> Decimal:
        """Rewrite amount from quantity x unit price and return it."""
        if self.quantity is None or self.unit_price is None:
            raise ValidationError(f'Line item "{self.item_name}" needs a quantity and a unit price')
        if Decimal(self.quantity) <= 0 or Decimal(self.unit_price) <= 0:
            raise ValidationError(f'Line item "{self.item_name}" must have a positive quantity and unit price')
        self.amount = calculate_line_amount(self.quantity, self.unit_price)
        return self.amount

    def __repr__(self):
        return f"<PurchaseOrderLineItem(id={self.id}, item_name='{self.item_name}', quantity={self.quantity}, amount={self.amount})>"


@event.listens_for(PurchaseOrderLineItem, 'before_insert')
@event.listens_for(PurchaseOrderLineItem, 'before_update')
def _enforce_line_amount(mapper, connection, target):
    target.recalculate_amount()
