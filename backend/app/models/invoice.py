from datetime import datetime, timezone
from uuid import uuid4

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Numeric,
    String,
    Text,
)
from sqlalchemy.orm import relationship

from app.db import Base


class Invoice(Base):
    __tablename__ = "invoices"
    id = Column(String(36), primary_key=True, default=lambda: str(uuid4()))
    invoice_number = Column(String(64), nullable=False, index=True)
    # NULL for manually issued invoices; unique so an order can never carry two
    order_id = Column(
        String(36),
        ForeignKey("orders.id", ondelete="CASCADE"),
        nullable=True,
        unique=True,
        index=True,
    )
    customer_id = Column(String(36), nullable=True, index=True)
    customer_name = Column(String(255), nullable=True)
    issue_date = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    due_date = Column(DateTime(timezone=True), nullable=True)
    total_amount = Column(Numeric(12, 2), nullable=False)
    is_paid = Column(Boolean, nullable=False, default=False)
    notes = Column(Text, nullable=True)

    # relationship back to Order
    order = relationship("Order", back_populates="invoice")

    @property
    def items(self):
        return list(self.order.items) if self.order is not None else []
