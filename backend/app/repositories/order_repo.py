from typing import List, Optional

from sqlalchemy.orm import Session, selectinload

from app.models.invoice import Invoice
from app.models.order import Order, OrderItem


class OrderRepository:
    def __init__(self, db: Session):
        self.db = db

    def get(self, order_id: str) -> Optional[Order]:
        return (
            self.db.query(Order)
            .options(selectinload(Order.items))
            .filter(Order.id == order_id)
            .first()
        )

    def get_for_update(self, order_id: str) -> Optional[Order]:
        return (
            self.db.query(Order)
            .filter(Order.id == order_id)
            .with_for_update()
            .first()
        )

    def list(self) -> List[Order]:
        return (
            self.db.query(Order)
            .options(selectinload(Order.items))
            .order_by(Order.order_date.desc(), Order.order_number.desc())
            .all()
        )

    def delete_cascade(self, order_id: str) -> None:
        """Remove the order's invoice, then its items, then the order row."""
        self.db.query(Invoice).filter(Invoice.order_id == order_id).delete(
            synchronize_session="fetch"
        )
        self.db.query(OrderItem).filter(OrderItem.order_id == order_id).delete(
            synchronize_session="fetch"
        )
        self.db.query(Order).filter(Order.id == order_id).delete(
            synchronize_session="fetch"
        )
        self.db.flush()
