# Overview: Service-layer operations for expenses and their bill attachments.

from __future__ import annotations

from datetime import date

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError
from werkzeug.datastructures import FileStorage

from ..errors import NotFoundError, classify_database_error
from ..extensions import db
from ..models import Expense
from . import blob_store
from .identifier_service import next_expense_id


def _commit(failure_message: str) -> None:
    try:
        db.session.commit()
    except SQLAlchemyError as exc:
        db.session.rollback()
        current_app.logger.exception(failure_message)
        raise classify_database_error(exc, failure_message) from exc


def get_expense(expense_id: int) -> Expense:
    expense = db.session.get(Expense, expense_id)
    if expense is None:
        raise NotFoundError("Expense not found", "expense")
    return expense


def list_expenses(
    *,
    start: date | None = None,
    end: date | None = None,
    expense_type: str | None = None,
) -> list[Expense]:
    """Expenses by expense date, newest first."""
    query = db.session.query(Expense)
    if start:
        query = query.filter(Expense.expense_date >= start)
    if end:
        query = query.filter(Expense.expense_date <= end)
    if expense_type:
        query = query.filter(Expense.expense_type.ilike(f"%{expense_type}%"))
    return query.order_by(Expense.expense_date.desc(), Expense.created_at.desc(), Expense.id.desc()).all()


def create_expense(data: dict, created_by: int | None, attachment: FileStorage | None = None) -> Expense:
    """
    Create an expense, optionally storing a bill attachment.

    If the database write fails after the file was stored, the file is
    removed again.
    """
    stored = None
    try:
        expense_id = next_expense_id()
        if attachment is not None and attachment.filename:
            stored = blob_store.save(blob_store.BILLS, attachment, prefix="bill")

        expense = Expense(
            expense_id=expense_id,
            expense_type=data["expense_type"],
            amount=data["amount"],
            expense_date=data["expense_date"],
            bill_attachment=stored,
            created_by=created_by,
        )
        db.session.add(expense)
        db.session.commit()
        return expense
    except SQLAlchemyError as exc:
        db.session.rollback()
        blob_store.delete(blob_store.BILLS, stored)
        current_app.logger.exception("Failed to create expense")
        raise classify_database_error(exc, "Failed to create expense") from exc
    except Exception:
        db.session.rollback()
        blob_store.delete(blob_store.BILLS, stored)
        raise


def update_expense(expense_id: int, data: dict) -> Expense:
    expense = get_expense(expense_id)
    expense.expense_type = data["expense_type"]
    expense.amount = data["amount"]
    expense.expense_date = data["expense_date"]
    _commit("Failed to update expense")
    return expense


def attach_bill(expense_id: int, attachment: FileStorage | None) -> Expense:
    """Store a new bill attachment, replacing (and deleting) any previous one."""
    expense = get_expense(expense_id)
    stored = blob_store.save(blob_store.BILLS, attachment, prefix="bill")

    previous = expense.bill_attachment
    expense.bill_attachment = stored
    try:
        _commit("Failed to upload attachment")
    except Exception:
        blob_store.delete(blob_store.BILLS, stored)
        raise

    blob_store.delete(blob_store.BILLS, previous)
    return expense


def delete_expense(expense_id: int) -> dict:
    expense = get_expense(expense_id)
    snapshot = expense.to_dict()
    attachment = expense.bill_attachment

    db.session.delete(expense)
    _commit("Failed to delete expense")

    blob_store.delete(blob_store.BILLS, attachment)
    return snapshot
