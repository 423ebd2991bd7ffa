import enum
from datetime import datetime, timezone
from uuid import uuid4

from sqlalchemy import (
    Column,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
)
from sqlalchemy.orm import relationship

from app.db import Base
from app.models.invoice import Invoice  # noqa: F401


class OrderStatus(str, enum.Enum):
    PENDING = "قيد الانتظار"
    OUT_FOR_DELIVERY = "قيد التوصيل"
    DELIVERED = "تم التوصيل"
    CANCELLED = "ملغي"


class PaymentMethod(str, enum.Enum):
    CASH = "نقداً"
    CARD = "بطاقة ائتمانية"
    ONLINE = "دفع إلكتروني"


class SaleType(str, enum.Enum):
    WHOLESALE = "جملة"
    RETAIL = "تجزئة"


class Order(Base):
    __tablename__ = "orders"
    id = Column(String(36), primary_key=True, default=lambda: str(uuid4()))
    order_number = Column(String(32), unique=True, nullable=False, index=True)
    customer_id = Column(String(36), nullable=True, index=True)
    customer_name = Column(String(255), nullable=True)
    driver_id = Column(String(36), nullable=True)
    total_amount = Column(Numeric(12, 2), nullable=False)
    status = Column(String(32), nullable=False, default=OrderStatus.PENDING.value)
    order_date = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    delivery_date = Column(DateTime(timezone=True), nullable=True)
    payment_method = Column(String(32), nullable=False)
    sale_type = Column(String(16), nullable=False)
    delivery_address = Column(Text, nullable=True)

    items = relationship(
        "OrderItem",
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="OrderItem.line_no",
    )
    invoice = relationship("Invoice", back_populates="order", uselist=False)


class OrderItem(Base):
    __tablename__ = "order_items"
    id = Column(String(36), primary_key=True, default=lambda: str(uuid4()))
    order_id = Column(
        String(36),
        ForeignKey("orders.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    line_no = Column(Integer, nullable=False, default=1)
    # plain column, not a FK: the line keeps its own name snapshot after product edits or deletes
    product_id = Column(String(36), nullable=False, index=True)
    product_name = Column(String(255), nullable=False)
    quantity = Column(Integer, nullable=False)
    unit_price = Column(Numeric(12, 2), nullable=False)
    total_price = Column(Numeric(12, 2), nullable=False)
    sale_type = Column(String(16), nullable=False)

    order = relationship("Order", back_populates="items")
