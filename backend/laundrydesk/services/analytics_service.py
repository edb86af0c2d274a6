# Overview: Service-layer operations for analytics rollups over orders and expenses.

from __future__ import annotations

from datetime import date
from decimal import Decimal

from sqlalchemy import case, func

from ..extensions import db
from ..models import Expense, Order, OrderService, OrderStatus
from ..time_utils import week_start


MAX_PERIODS = 30


def _money(value) -> float:
    return float(Decimal(value or 0).quantize(Decimal("0.01")))


def period_key(d: date, period: str) -> tuple[date, str]:
    """
    Bucket start date and label for ``d``.

    daily -> 2024-03-05, weekly -> 2024-W10 (ISO week, Monday start),
    monthly -> 2024-03
    """
    if period == "weekly":
        start = week_start(d)
        iso_year, iso_week, _ = start.isocalendar()
        return start, f"{iso_year}-W{iso_week:02d}"
    if period == "monthly":
        return d.replace(day=1), d.strftime("%Y-%m")
    return d, d.isoformat()


def _bucket(rows, period: str, accumulate, empty) -> list[dict]:
    buckets: dict[date, dict] = {}
    for row in rows:
        start, label = period_key(row[0], period)
        if start not in buckets:
            buckets[start] = empty(label)
        accumulate(buckets[start], row)

    newest_first = sorted(buckets.items(), key=lambda item: item[0], reverse=True)
    return [bucket for _, bucket in newest_first[:MAX_PERIODS]]


def _date_filters(column, start: date | None, end: date | None) -> list:
    filters = []
    if start:
        filters.append(column >= start)
    if end:
        filters.append(column <= end)
    return filters


def business_report(*, period: str = "daily", start: date | None = None, end: date | None = None) -> dict:
    filters = _date_filters(Order.order_date, start, end)
    is_completed = Order.status == OrderStatus.COMPLETED

    overall = db.session.query(
        func.count(Order.id),
        func.count(case((is_completed, 1))),
        func.count(case((Order.status == OrderStatus.PENDING, 1))),
        func.coalesce(func.sum(case((is_completed, Order.total_amount), else_=0)), 0),
        func.avg(case((is_completed, Order.total_amount))),
    ).filter(*filters).one()

    rows = db.session.query(Order.order_date, Order.status, Order.total_amount).filter(*filters).all()

    def empty(label):
        return {"period": label, "totalOrders": 0, "completedOrders": 0, "pendingOrders": 0, "revenue": 0.0}

    def accumulate(bucket, row):
        _, status, total = row
        bucket["totalOrders"] += 1
        if status == OrderStatus.COMPLETED:
            bucket["completedOrders"] += 1
            bucket["revenue"] = round(bucket["revenue"] + _money(total), 2)
        elif status == OrderStatus.PENDING:
            bucket["pendingOrders"] += 1

    breakdown = (
        db.session.query(
            OrderService.service_type,
            func.count(OrderService.id),
            func.coalesce(func.sum(OrderService.quantity), 0),
            func.coalesce(func.sum(OrderService.total_cost), 0),
        )
        .join(Order, OrderService.order_id == Order.id)
        .filter(is_completed, *filters)
        .group_by(OrderService.service_type)
        .all()
    )
    service_breakdown = sorted(
        (
            {
                "serviceType": service_type,
                "orderCount": int(count),
                "totalQuantity": int(quantity),
                "totalRevenue": _money(revenue),
            }
            for service_type, count, quantity, revenue in breakdown
        ),
        key=lambda item: item["totalRevenue"],
        reverse=True,
    )

    return {
        "period": period,
        "overall": {
            "totalOrders": int(overall[0]),
            "completedOrders": int(overall[1]),
            "pendingOrders": int(overall[2]),
            "totalRevenue": _money(overall[3]),
            "averageOrderValue": _money(overall[4]),
        },
        "timeSeries": _bucket(rows, period, accumulate, empty),
        "serviceBreakdown": service_breakdown,
    }


def expense_report(*, period: str = "daily", start: date | None = None, end: date | None = None) -> dict:
    filters = _date_filters(Expense.expense_date, start, end)

    overall = db.session.query(
        func.count(Expense.id),
        func.coalesce(func.sum(Expense.amount), 0),
        func.avg(Expense.amount),
    ).filter(*filters).one()

    rows = db.session.query(Expense.expense_date, Expense.amount).filter(*filters).all()

    def empty(label):
        return {"period": label, "expenseCount": 0, "totalAmount": 0.0}

    def accumulate(bucket, row):
        bucket["expenseCount"] += 1
        bucket["totalAmount"] = round(bucket["totalAmount"] + _money(row[1]), 2)

    breakdown = (
        db.session.query(
            Expense.expense_type,
            func.count(Expense.id),
            func.coalesce(func.sum(Expense.amount), 0),
            func.avg(Expense.amount),
        )
        .filter(*filters)
        .group_by(Expense.expense_type)
        .all()
    )
    type_breakdown = sorted(
        (
            {
                "expenseType": expense_type,
                "expenseCount": int(count),
                "totalAmount": _money(total),
                "averageAmount": _money(average),
            }
            for expense_type, count, total, average in breakdown
        ),
        key=lambda item: item["totalAmount"],
        reverse=True,
    )

    return {
        "period": period,
        "overall": {
            "totalExpenses": int(overall[0]),
            "totalAmount": _money(overall[1]),
            "averageExpense": _money(overall[2]),
        },
        "timeSeries": _bucket(rows, period, accumulate, empty),
        "typeBreakdown": type_breakdown,
    }
