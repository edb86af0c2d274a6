# Overview: Flask API routes for expenses; parses input and returns JSON responses.

from flask import Blueprint, request

from ..context import current_principal
from ..decorators import can_edit_expense, require_auth, require_permission
from ..responses import success
from ..services import expense_service
from ..validation import validate_date_range, validate_expense_payload


expenses_bp = Blueprint("expenses", __name__, url_prefix="/api/expenses")

ATTACHMENT_FIELD = "billAttachment"


def _is_multipart() -> bool:
    return (request.mimetype or "").startswith("multipart/form-data")


@expenses_bp.get("")
@require_auth
@require_permission("expenses:read")
def list_expenses_route():
    """List expenses. Filters: startDate, endDate, expenseType (substring)."""
    start, end = validate_date_range(request.args.get("startDate"), request.args.get("endDate"))
    expense_type = (request.args.get("expenseType") or "").strip() or None
    expenses = expense_service.list_expenses(start=start, end=end, expense_type=expense_type)
    return success([expense.to_dict() for expense in expenses])


@expenses_bp.get("/<int:expense_id>")
@require_auth
@require_permission("expenses:read")
def get_expense_route(expense_id: int):
    return success(expense_service.get_expense(expense_id).to_dict())


@expenses_bp.post("")
@require_auth
@require_permission("expenses:create")
def create_expense_route():
    """Accepts JSON, or multipart form fields with an optional billAttachment file."""
    if _is_multipart():
        data = validate_expense_payload(request.form.to_dict())
        attachment = request.files.get(ATTACHMENT_FIELD)
    else:
        data = validate_expense_payload(request.get_json(silent=True))
        attachment = None

    expense = expense_service.create_expense(data, current_principal().id, attachment)
    return success(expense.to_dict(), "Expense created successfully", 201)


@expenses_bp.post("/<int:expense_id>/attachment")
@require_auth
@require_permission("expenses:create")
def upload_attachment_route(expense_id: int):
    expense = expense_service.attach_bill(expense_id, request.files.get(ATTACHMENT_FIELD))
    return success(expense.to_dict(), "Attachment uploaded successfully")


@expenses_bp.put("/<int:expense_id>")
@require_auth
@can_edit_expense
def update_expense_route(expense_id: int):
    data = validate_expense_payload(request.get_json(silent=True))
    expense = expense_service.update_expense(expense_id, data)
    return success(expense.to_dict(), "Expense updated successfully")


@expenses_bp.delete("/<int:expense_id>")
@require_auth
@can_edit_expense
@require_permission("expenses:delete")
def delete_expense_route(expense_id: int):
    deleted = expense_service.delete_expense(expense_id)
    return success(deleted, "Expense deleted successfully")
