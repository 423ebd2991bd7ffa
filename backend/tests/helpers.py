from decimal import Decimal

from app.db import SessionLocal
from app.models.product import Product

RETAIL = "تجزئة"
WHOLESALE = "جملة"
CASH = "نقداً"
PENDING = "قيد الانتظار"
OUT_FOR_DELIVERY = "قيد التوصيل"
DELIVERED = "تم التوصيل"
CANCELLED = "ملغي"


def stock_of(product_id):
    db = SessionLocal()
    try:
        return db.get(Product, product_id).stock
    finally:
        db.close()


def order_kwargs(lines, status=PENDING, **extra):
    """Keyword arguments for OrderService.create_order from (product_id, qty, unit_price) tuples."""
    items = []
    total = Decimal("0")
    for product_id, qty, unit_price in lines:
        unit = Decimal(unit_price)
        items.append(
            {
                "product_id": product_id,
                "product_name": None,
                "quantity": qty,
                "unit_price": unit,
                "total_price": unit * qty,
                "sale_type": RETAIL,
            }
        )
        total += unit * qty
    kwargs = {
        "items": items,
        "total_amount": total,
        "status": status,
        "payment_method": CASH,
        "sale_type": RETAIL,
        "customer_name": "عميل تجريبي",
    }
    kwargs.update(extra)
    return kwargs
