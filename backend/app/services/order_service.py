from collections import OrderedDict
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Dict, List, Optional

from filelock import Timeout
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.models.order import Order, OrderItem, OrderStatus, PaymentMethod, SaleType
from app.models.product import Product
from app.repositories.order_repo import OrderRepository
from app.repositories.product_repo import ProductRepository
from app.services.errors import (
    InsufficientStockError,
    NotFoundError,
    PersistenceError,
    ValidationError,
)
from app.services.invoice_service import InvoiceService
from app.services.order_number import ORDER_SEQUENCE_LOCK, OrderNumberSequencer
from app.services.order_status import coerce_status, ensure_transition_allowed, parse_status
from app.utils.locks import named_locks
from app.utils.logging import get_logger
from app.utils.transactions import smart_transaction

log = get_logger("order")

MISSING_FIELDS_MESSAGE = "الحقول المطلوبة للطلب مفقودة"
ORDER_NOT_FOUND_MESSAGE = "الطلب غير موجود"


def _product_lock(product_id: str) -> str:
    return f"product-{product_id}"


def _order_lock(order_id: str) -> str:
    return f"order-{order_id}"


def _to_decimal(value, field: str) -> Decimal:
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError, TypeError):
        raise ValidationError(f"قيمة غير صالحة للحقل {field}")


def _parse_enum(enum_cls, value, field: str):
    if value is None or (isinstance(value, str) and not value.strip()):
        raise ValidationError(MISSING_FIELDS_MESSAGE)
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(str(value).strip())
    except ValueError:
        member = enum_cls.__members__.get(str(value).strip().upper())
        if member is None:
            raise ValidationError(f"قيمة غير صالحة للحقل {field}: {value}")
        return member


class OrderService:
    """
    Order lifecycle: creation with stock reservation, status changes with
    invoicing on delivery, and deletion.

    Each write runs as one unit of work (``smart_transaction``); a failure at
    any step rolls back everything written by that call.
    """

    def __init__(self, db: Session):
        self.db = db
        self.orders = OrderRepository(db)
        self.products = ProductRepository(db)
        self.sequencer = OrderNumberSequencer(db)
        self.invoices = InvoiceService(db)

    def _now(self) -> datetime:
        return datetime.now(timezone.utc)

    # -- reads -----------------------------------------------------------

    def get_order(self, order_id: str) -> Order:
        order = self.orders.get(order_id)
        if order is None:
            raise NotFoundError(ORDER_NOT_FOUND_MESSAGE)
        return order

    def list_orders(self) -> List[Order]:
        return self.orders.list()

    # -- creation --------------------------------------------------------

    def _normalize_items(self, items: Optional[List[Dict]], order_sale_type: SaleType) -> List[Dict]:
        if not items:
            raise ValidationError(MISSING_FIELDS_MESSAGE)
        normalized = []
        for it in items:
            product_id = it.get("product_id")
            quantity = it.get("quantity")
            if not product_id or quantity is None or it.get("unit_price") is None:
                raise ValidationError(MISSING_FIELDS_MESSAGE)
            if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity <= 0:
                raise ValidationError("الكمية يجب أن تكون عدداً صحيحاً موجباً")
            unit_price = _to_decimal(it["unit_price"], "unitPrice")
            # totals are taken as sent (client-side discounts); only filled in when absent
            total_price = it.get("total_price")
            total_price = (
                unit_price * quantity
                if total_price is None
                else _to_decimal(total_price, "totalPrice")
            )
            sale_type = (
                order_sale_type
                if it.get("sale_type") is None
                else _parse_enum(SaleType, it["sale_type"], "saleType")
            )
            normalized.append(
                {
                    "product_id": str(product_id),
                    "product_name": it.get("product_name"),
                    "quantity": quantity,
                    "unit_price": unit_price,
                    "total_price": total_price,
                    "sale_type": sale_type,
                }
            )
        return normalized

    def _reserve_stock(self, items: List[Dict]) -> Dict[str, Product]:
        """
        Lock every product row the order touches and check it can cover the
        order's combined quantity. Raises InsufficientStockError before any
        stock is changed.
        """
        requested = OrderedDict()
        for it in items:
            requested[it["product_id"]] = requested.get(it["product_id"], 0) + it["quantity"]

        locked = {}
        # row locks in id order, same as the file locks, so writers never wait on each other in a cycle
        for product_id in sorted(requested):
            product = self.products.get_for_update(product_id)
            if product is None or product.stock < requested[product_id]:
                name = next(
                    (it["product_name"] for it in items if it["product_id"] == product_id and it["product_name"]),
                    product.name if product is not None else None,
                )
                raise InsufficientStockError(
                    product_id, name, available=product.stock if product is not None else 0
                )
            locked[product_id] = product
        return locked

    def create_order(
        self,
        items: Optional[List[Dict]],
        total_amount,
        status,
        payment_method,
        sale_type,
        customer_id: Optional[str] = None,
        customer_name: Optional[str] = None,
        driver_id: Optional[str] = None,
        delivery_address: Optional[str] = None,
    ) -> Order:
        """
        Create an order and reserve its stock in one transaction.

        items: list of {product_id, product_name, quantity, unit_price, total_price, sale_type}
        Steps: lock and check stock for every product, take the next order
        number, insert the order and its lines, decrement stock. An order created
        directly as delivered (point-of-sale) is stamped and invoiced in the
        same transaction.

        Raises ValidationError, InsufficientStockError or PersistenceError; on
        any of them nothing has been written.
        """
        if total_amount is None or status is None:
            raise ValidationError(MISSING_FIELDS_MESSAGE)
        total_amount = _to_decimal(total_amount, "totalAmount")
        status = parse_status(status)
        payment_method = _parse_enum(PaymentMethod, payment_method, "paymentMethod")
        sale_type = _parse_enum(SaleType, sale_type, "saleType")
        lines = self._normalize_items(items, sale_type)

        lock_names = [_product_lock(it["product_id"]) for it in lines] + [ORDER_SEQUENCE_LOCK]
        try:
            with named_locks(lock_names):
                with smart_transaction(self.db):
                    products = self._reserve_stock(lines)
                    order_number = self.sequencer.next_number()
                    now = self._now()
                    order = Order(
                        order_number=order_number,
                        customer_id=customer_id,
                        customer_name=customer_name,
                        driver_id=driver_id,
                        total_amount=total_amount,
                        status=status.value,
                        order_date=now,
                        delivery_date=now if status is OrderStatus.DELIVERED else None,
                        payment_method=payment_method.value,
                        sale_type=sale_type.value,
                        delivery_address=delivery_address,
                    )
                    self.db.add(order)
                    self.db.flush()

                    for line_no, it in enumerate(lines, start=1):
                        product = products[it["product_id"]]
                        order.items.append(
                            OrderItem(
                                line_no=line_no,
                                product_id=product.id,
                                product_name=it["product_name"] or product.name,
                                quantity=it["quantity"],
                                unit_price=it["unit_price"],
                                total_price=it["total_price"],
                                sale_type=it["sale_type"].value,
                            )
                        )
                        product.stock = product.stock - it["quantity"]
                    self.db.flush()

                    if status is OrderStatus.DELIVERED:
                        self.invoices.ensure_invoice_for_order(order)
        except Timeout as e:
            log.error("Timed out waiting for stock locks: %s", e)
            raise PersistenceError("خطأ في إنشاء الطلب، حاول مرة أخرى") from e
        except SQLAlchemyError as e:
            log.exception("Failed to create order")
            raise PersistenceError("خطأ في إنشاء الطلب") from e

        log.info("Created order %s with %d item(s)", order.order_number, len(lines))
        return self.get_order(order.id)

    # -- status ----------------------------------------------------------

    def update_status(self, order_id: str, new_status) -> Order:
        """
        Move an order to ``new_status``.

        Delivered stamps the delivery date (only the first time) and makes sure
        the order has an invoice; the status change and the invoice commit or
        roll back together.
        """
        target = parse_status(new_status)
        try:
            with named_locks([_order_lock(order_id)]):
                with smart_transaction(self.db):
                    order = self.orders.get_for_update(order_id)
                    if order is None:
                        raise NotFoundError(ORDER_NOT_FOUND_MESSAGE)
                    ensure_transition_allowed(coerce_status(order.status), target)

                    order.status = target.value
                    if target is OrderStatus.DELIVERED and order.delivery_date is None:
                        order.delivery_date = self._now()
                    self.db.flush()

                    if target is OrderStatus.DELIVERED:
                        self.invoices.ensure_invoice_for_order(order)
        except Timeout as e:
            log.error("Timed out waiting for order lock %s: %s", order_id, e)
            raise PersistenceError("خطأ في تحديث حالة الطلب، حاول مرة أخرى") from e
        except SQLAlchemyError as e:
            log.exception("Failed to update status for order %s", order_id)
            raise PersistenceError("خطأ في تحديث حالة الطلب") from e

        log.info("Order %s is now %s", order.order_number, target.name)
        return order

    # -- deletion --------------------------------------------------------

    def delete_order(self, order_id: str) -> None:
        """Delete the order with its items and invoice. Stock is not restored."""
        try:
            with named_locks([_order_lock(order_id)]):
                with smart_transaction(self.db):
                    order = self.orders.get_for_update(order_id)
                    if order is None:
                        raise NotFoundError(ORDER_NOT_FOUND_MESSAGE)
                    order_number = order.order_number
                    self.orders.delete_cascade(order_id)
        except Timeout as e:
            log.error("Timed out waiting for order lock %s: %s", order_id, e)
            raise PersistenceError("خطأ في حذف الطلب، حاول مرة أخرى") from e
        except SQLAlchemyError as e:
            log.exception("Failed to delete order %s", order_id)
            raise PersistenceError("خطأ في حذف الطلب") from e

        log.info("Deleted order %s", order_number)
