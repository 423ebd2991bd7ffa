from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Dict, List

from sqlalchemy import func
from sqlalchemy.orm import Session

from app.models.invoice import Invoice
from app.models.order import Order, OrderStatus


class DashboardService:
    def __init__(self, db: Session):
        self.db = db

    def stats(self) -> Dict:
        total_orders = self.db.query(func.count(Order.id)).scalar() or 0
        pending_orders = (
            self.db.query(func.count(Order.id))
            .filter(Order.status == OrderStatus.PENDING.value)
            .scalar()
            or 0
        )
        total_sales = (
            self.db.query(func.coalesce(func.sum(Order.total_amount), 0))
            .filter(Order.status == OrderStatus.DELIVERED.value)
            .scalar()
        )
        total_invoices = self.db.query(func.count(Invoice.id)).scalar() or 0
        unpaid_invoices = (
            self.db.query(func.count(Invoice.id))
            .filter(Invoice.is_paid == False)  # noqa: E712
            .scalar()
            or 0
        )
        return {
            "total_orders": total_orders,
            "pending_orders": pending_orders,
            "total_sales": Decimal(str(total_sales or 0)),
            "total_invoices": total_invoices,
            "unpaid_invoices": unpaid_invoices,
        }

    def sales_report(self, days: int = 30) -> List[Dict]:
        """Delivered sales summed per order day over the last ``days`` days, oldest first."""
        since = datetime.now(timezone.utc) - timedelta(days=days)
        day = func.date(Order.order_date)
        rows = (
            self.db.query(day.label("date"), func.sum(Order.total_amount).label("sales"))
            .filter(
                Order.status == OrderStatus.DELIVERED.value,
                Order.order_date >= since,
            )
            .group_by(day)
            .order_by(day)
            .all()
        )
        return [{"date": str(r.date), "sales": Decimal(str(r.sales or 0))} for r in rows]
