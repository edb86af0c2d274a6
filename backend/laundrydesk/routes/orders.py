# Overview: Flask API routes for orders; parses input and returns JSON responses.

from flask import Blueprint, Response, request

from ..context import current_principal
from ..decorators import (
    can_edit_order,
    load_order,
    require_auth,
    require_permission,
)
from ..responses import success
from ..services import order_service, pdf_service, settings_service
from ..validation import (
    validate_date_range,
    validate_order_payload,
    validate_order_status,
    validate_order_status_filter,
    validate_payment_status,
    validate_rejection_reason,
)


orders_bp = Blueprint("orders", __name__, url_prefix="/api/orders")


@orders_bp.get("")
@require_auth
@require_permission("orders:read")
def list_orders_route():
    """List orders newest first. Filters: status, startDate, endDate."""
    status = validate_order_status_filter(request.args.get("status"))
    start, end = validate_date_range(request.args.get("startDate"), request.args.get("endDate"))
    orders = order_service.list_orders(status=status, start=start, end=end)
    return success([order.to_dict() for order in orders])


@orders_bp.get("/<int:order_id>")
@require_auth
@require_permission("orders:read")
def get_order_route(order_id: int):
    return success(order_service.get_order(order_id).to_dict())


@orders_bp.post("")
@require_auth
@require_permission("orders:create")
def create_order_route():
    data = validate_order_payload(request.get_json(silent=True))
    order = order_service.create_order(data, created_by=current_principal().id)
    return success(order.to_dict(), "Order created successfully", 201)


@orders_bp.put("/<int:order_id>")
@require_auth
@load_order
@can_edit_order
def update_order_route(order_id: int):
    """Full update: header fields plus a complete replacement of the services."""
    data = validate_order_payload(request.get_json(silent=True))
    order = order_service.update_order(order_id, data)
    return success(order.to_dict(), "Order updated successfully")


@orders_bp.patch("/<int:order_id>")
@require_auth
@load_order
@can_edit_order
def patch_order_route(order_id: int):
    data = validate_order_payload(request.get_json(silent=True), partial=True)
    order = order_service.patch_order(order_id, data)
    return success(order.to_dict(), "Order updated successfully")


@orders_bp.patch("/<int:order_id>/status")
@require_auth
@load_order
@can_edit_order
def update_status_route(order_id: int):
    status = validate_order_status(request.get_json(silent=True))
    order = order_service.update_status(order_id, status)
    return success(order.to_dict(), "Order status updated successfully")


@orders_bp.patch("/<int:order_id>/payment")
@require_auth
@require_permission("orders:update")
def update_payment_route(order_id: int):
    payment_status = validate_payment_status(request.get_json(silent=True))
    order = order_service.update_payment(order_id, payment_status)
    return success(order.to_dict(), "Payment status updated successfully")


@orders_bp.route("/<int:order_id>/reject", methods=["POST", "PATCH"])
@require_auth
@require_permission("orders:reject")
def reject_order_route(order_id: int):
    reason = validate_rejection_reason(request.get_json(silent=True))
    order = order_service.reject_order(order_id, reason, rejected_by=current_principal().id)
    return success(order.to_dict(), "Order rejected successfully")


@orders_bp.get("/<int:order_id>/bill")
@require_auth
@require_permission("orders:read")
def bill_route(order_id: int):
    order = order_service.get_order(order_id)
    bill = order_service.build_bill(order, settings_service.get_current().business_name)
    return success(bill)


@orders_bp.get("/<int:order_id>/pdf")
@require_auth
@require_permission("orders:read")
def pdf_route(order_id: int):
    order = order_service.get_order(order_id)
    pdf_bytes = pdf_service.render_bill(order, settings_service.get_current())
    return Response(
        pdf_bytes,
        mimetype="application/pdf",
        headers={
            "Content-Disposition": f'attachment; filename="bill-order-{order.id}.pdf"',
            "Content-Length": str(len(pdf_bytes)),
        },
    )


@orders_bp.delete("/<int:order_id>")
@require_auth
@require_permission("orders:delete")
def delete_order_route(order_id: int):
    deleted = order_service.delete_order(order_id)
    return success(deleted, "Order deleted successfully")
