from datetime import timedelta

import pytest
from sqlalchemy.exc import SQLAlchemyError

from app.db import SessionLocal
from app.models.invoice import Invoice
from app.models.order import Order, OrderStatus
from app.services.errors import NotFoundError, PersistenceError, ValidationError
from app.services.invoice_service import InvoiceService
from app.services.order_service import OrderService
from app.services.order_status import can_transition, coerce_status, parse_status
from helpers import CANCELLED, DELIVERED, OUT_FOR_DELIVERY, PENDING, order_kwargs


def test_parse_status_accepts_labels_and_member_names():
    assert parse_status(DELIVERED) is OrderStatus.DELIVERED
    assert parse_status("delivered") is OrderStatus.DELIVERED
    assert parse_status("OutForDelivery") is OrderStatus.OUT_FOR_DELIVERY
    assert coerce_status("something else") is None
    with pytest.raises(ValidationError):
        parse_status("")
    with pytest.raises(ValidationError):
        parse_status("shipped")


def test_transition_table():
    assert can_transition(OrderStatus.PENDING, OrderStatus.OUT_FOR_DELIVERY)
    assert can_transition(OrderStatus.OUT_FOR_DELIVERY, OrderStatus.DELIVERED)
    assert can_transition(OrderStatus.OUT_FOR_DELIVERY, OrderStatus.PENDING)
    assert can_transition(OrderStatus.PENDING, OrderStatus.CANCELLED)
    assert can_transition(OrderStatus.DELIVERED, OrderStatus.DELIVERED)
    assert can_transition(OrderStatus.DELIVERED, OrderStatus.CANCELLED)
    assert not can_transition(OrderStatus.DELIVERED, OrderStatus.PENDING)
    assert not can_transition(OrderStatus.DELIVERED, OrderStatus.OUT_FOR_DELIVERY)
    assert not can_transition(OrderStatus.CANCELLED, OrderStatus.OUT_FOR_DELIVERY)
    # legacy rows with unknown labels are not trapped
    assert can_transition(None, OrderStatus.DELIVERED)


def _new_order(make_product, status=PENDING):
    pid = make_product(stock=5, price="5.00")
    db = SessionLocal()
    try:
        return OrderService(db).create_order(**order_kwargs([(pid, 5, "5.00")], status=status)).id
    finally:
        db.close()


def _update(order_id, status):
    db = SessionLocal()
    try:
        OrderService(db).update_status(order_id, status)
    finally:
        db.close()


def _load(order_id):
    db = SessionLocal()
    try:
        order = db.get(Order, order_id)
        invoices = db.query(Invoice).filter(Invoice.order_id == order_id).all()
        db.expunge_all()
        return order, invoices
    finally:
        db.close()


def test_delivery_creates_exactly_one_invoice(make_product):
    order_id = _new_order(make_product)
    _update(order_id, OUT_FOR_DELIVERY)
    _update(order_id, DELIVERED)

    order, invoices = _load(order_id)
    assert order.status == DELIVERED
    assert order.delivery_date is not None
    assert len(invoices) == 1
    invoice = invoices[0]
    assert invoice.invoice_number == "INV-1"
    assert invoice.total_amount == order.total_amount
    assert invoice.is_paid is False
    assert invoice.issue_date == order.delivery_date
    assert invoice.due_date - invoice.issue_date == timedelta(days=15)

    _update(order_id, DELIVERED)
    again, invoices_after = _load(order_id)
    assert len(invoices_after) == 1
    assert invoices_after[0].id == invoice.id
    # first delivery timestamp is kept
    assert again.delivery_date == order.delivery_date


def test_non_delivered_statuses_do_not_invoice(make_product):
    order_id = _new_order(make_product)
    _update(order_id, OUT_FOR_DELIVERY)
    _update(order_id, CANCELLED)
    order, invoices = _load(order_id)
    assert order.status == CANCELLED
    assert order.delivery_date is None
    assert invoices == []


def test_terminal_statuses_cannot_be_reopened(make_product):
    order_id = _new_order(make_product)
    _update(order_id, DELIVERED)
    with pytest.raises(ValidationError):
        _update(order_id, PENDING)
    order, invoices = _load(order_id)
    assert order.status == DELIVERED
    assert len(invoices) == 1


def test_delivered_order_can_be_cancelled_and_keeps_its_invoice(make_product):
    order_id = _new_order(make_product)
    _update(order_id, DELIVERED)
    delivered, invoices_before = _load(order_id)

    _update(order_id, CANCELLED)

    order, invoices = _load(order_id)
    assert order.status == CANCELLED
    assert order.delivery_date == delivered.delivery_date
    assert [i.id for i in invoices] == [i.id for i in invoices_before]
    assert invoices[0].is_paid is False
    with pytest.raises(ValidationError):
        _update(order_id, DELIVERED)


def test_unknown_order_raises_not_found():
    with pytest.raises(NotFoundError):
        _update("missing-order", DELIVERED)


def test_invoice_failure_rolls_back_the_status_change(make_product, monkeypatch):
    order_id = _new_order(make_product)

    def boom(self, order):
        raise SQLAlchemyError("invoice insert failed")

    monkeypatch.setattr(InvoiceService, "ensure_invoice_for_order", boom)
    with pytest.raises(PersistenceError):
        _update(order_id, DELIVERED)

    order, invoices = _load(order_id)
    assert order.status == PENDING
    assert order.delivery_date is None
    assert invoices == []


def test_deleted_order_is_gone_with_items_and_invoice(make_product):
    order_id = _new_order(make_product)
    _update(order_id, DELIVERED)

    db = SessionLocal()
    try:
        OrderService(db).delete_order(order_id)
    finally:
        db.close()

    order, invoices = _load(order_id)
    assert order is None
    assert invoices == []
    with pytest.raises(NotFoundError):
        _update(order_id, DELIVERED)
    db = SessionLocal()
    try:
        with pytest.raises(NotFoundError):
            OrderService(db).delete_order(order_id)
    finally:
        db.close()
