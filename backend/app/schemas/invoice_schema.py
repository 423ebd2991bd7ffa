from datetime import datetime
from typing import List, Optional

from app.schemas.common import CamelModel, Money
from app.schemas.order_schema import OrderItemOut


class InvoiceOut(CamelModel):
    id: str
    invoice_number: str
    order_id: Optional[str] = None
    customer_id: Optional[str] = None
    customer_name: Optional[str] = None
    issue_date: datetime
    due_date: Optional[datetime] = None
    total_amount: Money
    is_paid: bool
    notes: Optional[str] = None
    items: List[OrderItemOut] = []
