"""General Ledger Account model."""
import uuid
from sqlalchemy import Column, String, Text, DateTime
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from procurement.database import Base


def generate_id() -> str:
    """Opaque primary key shared by every table."""
    return str(uuid.uuid4())


class GLAccount(Base):
    """GL Account (cuenta contable used to categorize line items)."""

    __tablename__ = 'gl_account'

    id = Column(String(36), primary_key=True, default=generate_id)
    account_code = Column(String(20), nullable=False, unique=True)
    account_name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    # Relationships (referenced, never owned: deletes are blocked while in use)
    line_items = relationship('PurchaseOrderLineItem', back_populates='gl_account', passive_deletes='all')

    def __repr__(self):
        return f"<GLAccount(id={self.id}, account_code='{self.account_code}', account_name='{self.account_name}')>"
