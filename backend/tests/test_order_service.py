from concurrent.futures import ThreadPoolExecutor
from decimal import Decimal

import pytest

from app.db import SessionLocal
from app.models.invoice import Invoice
from app.models.order import Order, OrderItem
from app.services.errors import InsufficientStockError, ValidationError
from app.services.order_service import OrderService
from helpers import DELIVERED, PENDING, RETAIL, WHOLESALE, order_kwargs, stock_of


def _count(model):
    db = SessionLocal()
    try:
        return db.query(model).count()
    finally:
        db.close()


def test_create_order_reserves_stock_and_numbers_the_order(make_product):
    pid = make_product(name="جالون 19 لتر", stock=5, price="5.00")
    db = SessionLocal()
    try:
        order = OrderService(db).create_order(**order_kwargs([(pid, 5, "5.00")]))
        assert order.order_number == "1"
        assert order.status == PENDING
        assert order.total_amount == Decimal("25.00")
        assert order.delivery_date is None
        assert len(order.items) == 1
        item = order.items[0]
        assert item.product_id == pid
        # name snapshot is taken from the product when the caller sends none
        assert item.product_name == "جالون 19 لتر"
        assert item.quantity == 5
        assert item.total_price == Decimal("25.00")
    finally:
        db.close()

    assert stock_of(pid) == 0


def test_insufficient_stock_leaves_stock_untouched(make_product):
    pid = make_product(stock=5)
    db = SessionLocal()
    try:
        OrderService(db).create_order(**order_kwargs([(pid, 5, "1.00")]))
    finally:
        db.close()

    db = SessionLocal()
    try:
        with pytest.raises(InsufficientStockError) as exc:
            OrderService(db).create_order(**order_kwargs([(pid, 1, "1.00")]))
        assert exc.value.product_id == pid
        assert exc.value.available == 0
    finally:
        db.close()

    assert stock_of(pid) == 0
    assert _count(Order) == 1


def test_failed_multi_item_order_writes_nothing(make_product):
    plenty = make_product(name="مياه 330 مل", stock=10)
    scarce = make_product(name="كيس ثلج", stock=1)

    db = SessionLocal()
    try:
        with pytest.raises(InsufficientStockError) as exc:
            OrderService(db).create_order(
                **order_kwargs([(plenty, 3, "0.50"), (scarce, 2, "3.00")])
            )
        assert exc.value.product_name == "كيس ثلج"
    finally:
        db.close()

    assert stock_of(plenty) == 10
    assert stock_of(scarce) == 1
    assert _count(Order) == 0
    assert _count(OrderItem) == 0

    # the failed attempt did not consume a number
    db = SessionLocal()
    try:
        order = OrderService(db).create_order(**order_kwargs([(plenty, 1, "0.50")]))
        assert order.order_number == "1"
    finally:
        db.close()


def test_repeated_product_lines_are_checked_against_combined_quantity(make_product):
    pid = make_product(stock=4)
    db = SessionLocal()
    try:
        with pytest.raises(InsufficientStockError):
            OrderService(db).create_order(**order_kwargs([(pid, 3, "1.00"), (pid, 2, "1.00")]))
    finally:
        db.close()
    assert stock_of(pid) == 4

    db = SessionLocal()
    try:
        order = OrderService(db).create_order(**order_kwargs([(pid, 3, "1.00"), (pid, 1, "1.00")]))
        assert [it.line_no for it in order.items] == [1, 2]
    finally:
        db.close()
    assert stock_of(pid) == 0


def test_unknown_product_is_rejected():
    db = SessionLocal()
    try:
        with pytest.raises(InsufficientStockError):
            OrderService(db).create_order(**order_kwargs([("no-such-product", 1, "1.00")]))
    finally:
        db.close()
    assert _count(Order) == 0


@pytest.mark.parametrize(
    "override",
    [
        {"items": []},
        {"items": None},
        {"total_amount": None},
        {"status": None},
        {"payment_method": None},
        {"sale_type": None},
        {"status": "غير معروف"},
        {"payment_method": "شيك"},
    ],
)
def test_missing_or_invalid_fields_raise_validation_error(make_product, override):
    pid = make_product(stock=5)
    kwargs = order_kwargs([(pid, 1, "1.00")])
    kwargs.update(override)
    db = SessionLocal()
    try:
        with pytest.raises(ValidationError):
            OrderService(db).create_order(**kwargs)
    finally:
        db.close()
    assert stock_of(pid) == 5


@pytest.mark.parametrize("quantity", [0, -2])
def test_non_positive_quantity_is_rejected(make_product, quantity):
    pid = make_product(stock=5)
    db = SessionLocal()
    try:
        with pytest.raises(ValidationError):
            OrderService(db).create_order(**order_kwargs([(pid, quantity, "1.00")]))
    finally:
        db.close()


def test_caller_totals_are_kept_as_sent(make_product):
    pid = make_product(stock=5, price="5.00")
    kwargs = order_kwargs([(pid, 2, "5.00")], sale_type=WHOLESALE)
    kwargs["items"][0]["total_price"] = Decimal("9.00")
    kwargs["items"][0]["sale_type"] = None
    kwargs["total_amount"] = Decimal("9.00")
    db = SessionLocal()
    try:
        order = OrderService(db).create_order(**kwargs)
        assert order.total_amount == Decimal("9.00")
        assert order.items[0].total_price == Decimal("9.00")
        # line inherits the order's sale type
        assert order.items[0].sale_type == WHOLESALE
    finally:
        db.close()


def test_order_created_as_delivered_is_stamped_and_invoiced(make_product):
    pid = make_product(stock=5, price="2.00")
    db = SessionLocal()
    try:
        order = OrderService(db).create_order(**order_kwargs([(pid, 2, "2.00")], status=DELIVERED))
        assert order.delivery_date is not None
        invoice = db.query(Invoice).filter(Invoice.order_id == order.id).one()
        assert invoice.invoice_number == "INV-1"
        assert invoice.total_amount == Decimal("4.00")
    finally:
        db.close()


def test_concurrent_orders_never_oversell(make_product):
    pid = make_product(stock=5)

    def place(_):
        db = SessionLocal()
        try:
            return OrderService(db).create_order(**order_kwargs([(pid, 1, "1.00")])).order_number
        except InsufficientStockError:
            return None
        finally:
            db.close()

    with ThreadPoolExecutor(max_workers=8) as ex:
        results = list(ex.map(place, range(8)))

    numbers = sorted(int(n) for n in results if n is not None)
    assert numbers == [1, 2, 3, 4, 5]
    assert results.count(None) == 3
    assert stock_of(pid) == 0


def test_writes_on_one_session_each_commit(make_product):
    pid = make_product(stock=5)
    db = SessionLocal()
    try:
        svc = OrderService(db)
        first = svc.create_order(**order_kwargs([(pid, 1, "1.00")]))
        second = svc.create_order(**order_kwargs([(pid, 2, "1.00")]))
        assert (first.order_number, second.order_number) == ("1", "2")
        svc.update_status(first.id, DELIVERED)
    finally:
        # closing rolls back anything left uncommitted
        db.close()

    assert _count(Order) == 2
    assert _count(Invoice) == 1
    assert stock_of(pid) == 2


def test_delete_after_create_on_one_session_is_committed(make_product):
    pid = make_product(stock=5)
    db = SessionLocal()
    try:
        svc = OrderService(db)
        order = svc.create_order(**order_kwargs([(pid, 1, "1.00")]))
        svc.delete_order(order.id)
    finally:
        db.close()

    assert _count(Order) == 0
    assert _count(OrderItem) == 0
