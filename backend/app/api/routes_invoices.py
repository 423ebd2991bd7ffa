from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.api.errors import to_http
from app.db import get_db
from app.schemas.invoice_schema import InvoiceOut
from app.services.errors import OrderServiceException
from app.services.invoice_service import InvoiceService

router = APIRouter(tags=["invoices"])


def _invoice_json(invoice) -> dict:
    return InvoiceOut.model_validate(invoice).model_dump(mode="json", by_alias=True)


@router.get("", summary="List invoices with their order items")
def list_invoices(db: Session = Depends(get_db)):
    svc = InvoiceService(db)
    return [_invoice_json(inv) for inv in svc.list_invoices()]


@router.get("/{invoice_id}", summary="Get a single invoice")
def get_invoice(invoice_id: str, db: Session = Depends(get_db)):
    svc = InvoiceService(db)
    try:
        return _invoice_json(svc.get_invoice(invoice_id))
    except OrderServiceException as e:
        raise to_http(e)


@router.put("/{invoice_id}/paid", summary="Mark an invoice as paid")
def mark_invoice_paid(invoice_id: str, db: Session = Depends(get_db)):
    svc = InvoiceService(db)
    try:
        return _invoice_json(svc.mark_paid(invoice_id))
    except OrderServiceException as e:
        raise to_http(e)
