# Overview: Flask API routes for analytics rollups.

from flask import Blueprint, request

from ..decorators import require_auth, require_permission
from ..responses import success
from ..services import analytics_service
from ..validation import validate_date_range, validate_period


analytics_bp = Blueprint("analytics", __name__, url_prefix="/api/analytics")


def _report_args():
    period = validate_period(request.args.get("period"))
    start, end = validate_date_range(request.args.get("startDate"), request.args.get("endDate"))
    return period, start, end


@analytics_bp.get("/business")
@require_auth
@require_permission("analytics:read")
def business_analytics_route():
    period, start, end = _report_args()
    return success(analytics_service.business_report(period=period, start=start, end=end))


@analytics_bp.get("/expenses")
@require_auth
@require_permission("analytics:read")
def expense_analytics_route():
    period, start, end = _report_args()
    return success(analytics_service.expense_report(period=period, start=start, end=end))
