from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from app.schemas.common import CamelModel, Money


class OrderItemIn(CamelModel):
    product_id: Optional[str] = None
    product_name: Optional[str] = None
    quantity: Optional[int] = None
    unit_price: Optional[Decimal] = None
    total_price: Optional[Decimal] = None
    sale_type: Optional[str] = None


class CreateOrderIn(CamelModel):
    # required fields are checked by OrderService so every omission is a 400
    customer_id: Optional[str] = None
    customer_name: Optional[str] = None
    driver_id: Optional[str] = None
    items: Optional[List[OrderItemIn]] = None
    total_amount: Optional[Decimal] = None
    status: Optional[str] = None
    payment_method: Optional[str] = None
    sale_type: Optional[str] = None
    delivery_address: Optional[str] = None


class StatusUpdateIn(CamelModel):
    status: Optional[str] = None


class OrderItemOut(CamelModel):
    id: str
    order_id: str
    product_id: str
    product_name: str
    quantity: int
    unit_price: Money
    total_price: Money
    sale_type: str


class OrderOut(CamelModel):
    id: str
    order_number: str
    customer_id: Optional[str] = None
    customer_name: Optional[str] = None
    driver_id: Optional[str] = None
    items: List[OrderItemOut] = []
    total_amount: Money
    status: str
    order_date: datetime
    delivery_date: Optional[datetime] = None
    payment_method: str
    sale_type: str
    delivery_address: Optional[str] = None
