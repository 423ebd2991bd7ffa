from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.orm import Session

from app.api.errors import to_http
from app.db import get_db
from app.schemas.order_schema import CreateOrderIn, OrderOut, StatusUpdateIn
from app.services.errors import OrderServiceException
from app.services.order_service import OrderService
from app.utils.logging import get_logger

router = APIRouter(tags=["orders"])
log = get_logger("api.orders")


def _order_json(order) -> dict:
    return OrderOut.model_validate(order).model_dump(mode="json", by_alias=True)


@router.get("", summary="List orders with their items")
def list_orders(db: Session = Depends(get_db)):
    svc = OrderService(db)
    try:
        return [_order_json(o) for o in svc.list_orders()]
    except Exception:
        log.exception("Failed to fetch orders")
        raise HTTPException(status_code=500, detail="خطأ في جلب الطلبات")


@router.get("/{order_id}", summary="Get a single order")
def get_order(order_id: str, db: Session = Depends(get_db)):
    svc = OrderService(db)
    try:
        return _order_json(svc.get_order(order_id))
    except OrderServiceException as e:
        raise to_http(e)


@router.post("", status_code=status.HTTP_201_CREATED, summary="Create order (reserves stock)")
def create_order(payload: CreateOrderIn, db: Session = Depends(get_db)):
    svc = OrderService(db)
    items = None
    if payload.items is not None:
        items = [it.model_dump() for it in payload.items]
    try:
        order = svc.create_order(
            items=items,
            total_amount=payload.total_amount,
            status=payload.status,
            payment_method=payload.payment_method,
            sale_type=payload.sale_type,
            customer_id=payload.customer_id,
            customer_name=payload.customer_name,
            driver_id=payload.driver_id,
            delivery_address=payload.delivery_address,
        )
        return _order_json(order)
    except OrderServiceException as e:
        raise to_http(e)
    except Exception:
        log.exception("Unexpected error creating order")
        raise HTTPException(status_code=500, detail="خطأ في إنشاء الطلب")


@router.put("/{order_id}/status", summary="Change order status (invoices on delivery)")
def update_order_status(order_id: str, payload: StatusUpdateIn, db: Session = Depends(get_db)):
    svc = OrderService(db)
    try:
        svc.update_status(order_id, payload.status)
        return {"message": "تم تحديث حالة الطلب بنجاح"}
    except OrderServiceException as e:
        raise to_http(e)
    except Exception:
        log.exception("Unexpected error updating status for order %s", order_id)
        raise HTTPException(status_code=500, detail="خطأ في تحديث حالة الطلب")


@router.delete("/{order_id}", status_code=status.HTTP_204_NO_CONTENT, summary="Delete order, items and invoice")
def delete_order(order_id: str, db: Session = Depends(get_db)):
    svc = OrderService(db)
    try:
        svc.delete_order(order_id)
    except OrderServiceException as e:
        raise to_http(e)
    except Exception:
        log.exception("Unexpected error deleting order %s", order_id)
        raise HTTPException(status_code=500, detail="خطأ في حذف الطلب")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
