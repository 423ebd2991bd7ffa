from datetime import datetime, timedelta, timezone
from typing import List

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.config import settings
from app.models.invoice import Invoice
from app.models.order import Order
from app.repositories.invoice_repo import InvoiceRepository
from app.services.errors import NotFoundError, PersistenceError
from app.utils.logging import get_logger
from app.utils.transactions import smart_transaction

log = get_logger("invoice")


def invoice_number_for(order: Order) -> str:
    return f"INV-{order.order_number}"


class InvoiceService:
    def __init__(self, db: Session):
        self.db = db
        self.repo = InvoiceRepository(db)

    def _now(self) -> datetime:
        return datetime.now(timezone.utc)

    def ensure_invoice_for_order(self, order: Order) -> Invoice:
        """
        Return the order's invoice, creating it if the order has none yet.

        Runs in the caller's transaction and does not commit: a failure here
        must abort the status change that triggered it. Calling it again for
        the same order returns the existing invoice.
        """
        existing = self.repo.get_by_order(order.id)
        if existing is not None:
            log.debug("Order %s already invoiced as %s", order.order_number, existing.invoice_number)
            return existing

        issue_date = order.delivery_date or self._now()
        invoice = Invoice(
            invoice_number=invoice_number_for(order),
            order_id=order.id,
            customer_id=order.customer_id,
            customer_name=order.customer_name,
            issue_date=issue_date,
            due_date=issue_date + timedelta(days=settings.INVOICE_DUE_DAYS),
            total_amount=order.total_amount,
            is_paid=False,
        )
        self.repo.add(invoice)
        log.info("Created invoice %s for order %s", invoice.invoice_number, order.order_number)
        return invoice

    def list_invoices(self) -> List[Invoice]:
        return self.repo.list()

    def get_invoice(self, invoice_id: str) -> Invoice:
        invoice = self.repo.get(invoice_id)
        if invoice is None:
            raise NotFoundError("الفاتورة غير موجودة")
        return invoice

    def mark_paid(self, invoice_id: str) -> Invoice:
        try:
            with smart_transaction(self.db):
                invoice = self.repo.get_for_update(invoice_id)
                if invoice is None:
                    raise NotFoundError("الفاتورة غير موجودة")
                invoice.is_paid = True
                self.db.flush()
        except SQLAlchemyError as e:
            log.exception("Failed to mark invoice %s paid", invoice_id)
            raise PersistenceError("خطأ في تحديث حالة الفاتورة") from e
        return invoice
