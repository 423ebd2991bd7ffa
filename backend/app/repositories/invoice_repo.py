from typing import List, Optional

from sqlalchemy.orm import Session, joinedload, selectinload

from app.models.invoice import Invoice
from app.models.order import Order


class InvoiceRepository:
    def __init__(self, db: Session):
        self.db = db

    def get(self, invoice_id: str) -> Optional[Invoice]:
        return self.db.query(Invoice).filter(Invoice.id == invoice_id).first()

    def get_for_update(self, invoice_id: str) -> Optional[Invoice]:
        return (
            self.db.query(Invoice)
            .filter(Invoice.id == invoice_id)
            .with_for_update()
            .first()
        )

    def get_by_order(self, order_id: str) -> Optional[Invoice]:
        return self.db.query(Invoice).filter(Invoice.order_id == order_id).first()

    def list(self) -> List[Invoice]:
        return (
            self.db.query(Invoice)
            .options(joinedload(Invoice.order).selectinload(Order.items))
            .order_by(Invoice.issue_date.desc())
            .all()
        )

    def add(self, invoice: Invoice) -> Invoice:
        self.db.add(invoice)
        self.db.flush()
        return invoice
