# Overview: Service-layer operations for orders; lifecycle transitions, totals and bills.

"""
Order Service

Orders own their service lines. The order total is never taken from the
client: it is recomputed from the submitted lines and written in the same
transaction as the lines themselves.

Full update is a replace: header fields are written, the existing lines are
deleted, the new lines inserted, and only then is the transaction committed.
Any failure rolls back the whole unit, leaving the previous lines intact.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from ..errors import NotFoundError, OrderStateError, classify_database_error
from ..extensions import db
from ..models import Order, OrderService, OrderStatus, PaymentStatus
from ..time_utils import to_iso_date, today, utcnow
from .concurrency import run_with_retry
from .identifier_service import next_order_number


CENT = Decimal("0.01")

HEADER_FIELDS = ("customer_name", "contact_number", "customer_address", "order_date")


def _line_total(quantity: int, unit_cost) -> Decimal:
    return (Decimal(quantity) * Decimal(unit_cost)).quantize(CENT, rounding=ROUND_HALF_UP)


def compute_total(lines: Iterable) -> Decimal:
    """Sum of quantity x unit cost over the lines, in cents precision."""
    total = Decimal("0")
    for line in lines:
        if isinstance(line, dict):
            total += _line_total(line["quantity"], line["unit_cost"])
        else:
            total += _line_total(line.quantity, line.unit_cost)
    return total.quantize(CENT)


def _build_line(data: dict) -> OrderService:
    return OrderService(
        service_type=data["service_type"],
        cloth_type=data["cloth_type"],
        quantity=data["quantity"],
        unit_cost=data["unit_cost"],
        total_cost=_line_total(data["quantity"], data["unit_cost"]),
    )


def _delete_lines(order: Order) -> None:
    order.services.clear()
    db.session.flush()


def _insert_lines(order: Order, services: list[dict]) -> None:
    for data in services:
        order.services.append(_build_line(data))
    db.session.flush()


def _commit_atomically(op, failure_message: str):
    """
    Run ``op`` and commit, rolling back on any failure.

    Persistence errors become DatabaseError; domain errors are re-raised
    unchanged.
    """
    def _run():
        result = op()
        db.session.commit()
        return result

    try:
        return run_with_retry(_run)
    except SQLAlchemyError as exc:
        db.session.rollback()
        current_app.logger.exception(failure_message)
        raise classify_database_error(exc, failure_message) from exc
    except Exception:
        db.session.rollback()
        raise


# -- queries --

def get_order(order_id: int) -> Order:
    order = db.session.get(Order, order_id)
    if order is None:
        raise NotFoundError("Order not found", "order")
    return order


def list_orders(
    *,
    status: str | None = None,
    start: date | None = None,
    end: date | None = None,
) -> list[Order]:
    """Orders newest first, optionally filtered by status and order date range."""
    query = db.session.query(Order)
    if status:
        query = query.filter(Order.status == status)
    if start:
        query = query.filter(Order.order_date >= start)
    if end:
        query = query.filter(Order.order_date <= end)
    return query.order_by(Order.created_at.desc(), Order.id.desc()).all()


# -- commands --

def create_order(data: dict, created_by: int | None) -> Order:
    """Create a Pending/Unpaid order with its lines in one transaction."""
    def _op() -> Order:
        order_number = next_order_number()
        order = Order(
            order_number=order_number,
            customer_name=data["customer_name"],
            contact_number=data["contact_number"],
            customer_address=data.get("customer_address"),
            order_date=data["order_date"],
            status=OrderStatus.PENDING,
            payment_status=PaymentStatus.UNPAID,
            total_amount=compute_total(data["services"]),
            created_by=created_by,
        )
        db.session.add(order)
        db.session.flush()
        _insert_lines(order, data["services"])
        return order

    return _commit_atomically(_op, "Failed to create order")


def update_order(order_id: int, data: dict) -> Order:
    """Replace the order header and its full set of service lines."""
    def _op() -> Order:
        order = get_order(order_id)
        for field in HEADER_FIELDS:
            setattr(order, field, data.get(field))
        order.total_amount = compute_total(data["services"])
        order.updated_at = utcnow()
        db.session.flush()

        _delete_lines(order)
        _insert_lines(order, data["services"])
        return order

    return _commit_atomically(_op, "Failed to update order")


def patch_order(order_id: int, data: dict) -> Order:
    """Update only the provided header fields; replace lines when given."""
    def _op() -> Order:
        order = get_order(order_id)
        for field in HEADER_FIELDS:
            if field in data:
                setattr(order, field, data[field])

        services = data.get("services")
        if services is not None:
            order.total_amount = compute_total(services)
        order.updated_at = utcnow()
        db.session.flush()

        if services is not None:
            _delete_lines(order)
            _insert_lines(order, services)
        return order

    return _commit_atomically(_op, "Failed to update order")


def update_status(order_id: int, status: str) -> Order:
    def _op() -> Order:
        order = get_order(order_id)
        order.status = status
        if status != OrderStatus.REJECTED:
            order.rejection_reason = None
            order.rejected_at = None
            order.rejected_by = None
        order.updated_at = utcnow()
        return order

    return _commit_atomically(_op, "Failed to update order status")


def update_payment(order_id: int, payment_status: str) -> Order:
    def _op() -> Order:
        order = get_order(order_id)
        order.payment_status = payment_status
        order.updated_at = utcnow()
        return order

    return _commit_atomically(_op, "Failed to update payment status")


def reject_order(order_id: int, reason: str, rejected_by: int) -> Order:
    """
    Move an order to Rejected, recording who rejected it, when, and why.

    Only Pending and In Progress orders can be rejected.
    """
    def _op() -> Order:
        order = get_order(order_id)
        if order.status in (OrderStatus.COMPLETED, OrderStatus.REJECTED):
            raise OrderStateError(
                f"Cannot reject an order that is {order.status}",
                code="INVALID_ORDER_STATE",
            )
        now = utcnow()
        order.status = OrderStatus.REJECTED
        order.rejection_reason = reason
        order.rejected_at = now
        order.rejected_by = rejected_by
        order.updated_at = now
        return order

    return _commit_atomically(_op, "Failed to reject order")


def delete_order(order_id: int) -> dict:
    """Delete the order (lines cascade). Returns the deleted order's data."""
    def _op() -> dict:
        order = get_order(order_id)
        snapshot = order.to_dict(include_services=False)
        db.session.delete(order)
        return snapshot

    return _commit_atomically(_op, "Failed to delete order")


# -- bills --

def build_bill(order: Order, business_name: str | None = None) -> dict:
    """Bill data for a Completed order."""
    if order.status != OrderStatus.COMPLETED:
        raise OrderStateError("Bill can only be generated for completed orders")

    subtotal = compute_total(order.services)
    return {
        "billNumber": f"BILL-{order.order_number}",
        "orderNumber": order.order_number,
        "businessName": business_name,
        "customerName": order.customer_name,
        "contactNumber": order.contact_number,
        "customerAddress": order.customer_address,
        "orderDate": to_iso_date(order.order_date),
        "billDate": to_iso_date(today()),
        "services": [
            {
                "description": f"{line.service_type} - {line.cloth_type}",
                "quantity": line.quantity,
                "unitCost": float(line.unit_cost),
                "totalCost": float(line.total_cost),
            }
            for line in order.services
        ],
        "subtotal": float(subtotal),
        "totalAmount": float(order.total_amount),
        "paymentStatus": order.payment_status or PaymentStatus.UNPAID,
    }
