from __future__ import annotations

import re
from datetime import date
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any

from .errors import ValidationError
from .models import CLOTH_TYPES, PAYMENT_STATUSES, SERVICE_TYPES, OrderStatus
from .permissions import ALL_ROLES
from .time_utils import parse_iso_date


CENT = Decimal("0.01")

# Maximum money value stored in Numeric(10, 2)
MAX_AMOUNT = Decimal("99999999.99")

MAX_DATE_RANGE_DAYS = 730

PHONE_RE = re.compile(r"^[\d\s\-+()]+$")
USERNAME_RE = re.compile(r"^[A-Za-z0-9_]+$")

ANALYTICS_PERIODS = ("daily", "weekly", "monthly")

# Statuses reachable through the plain status update; Rejected needs a reason.
SETTABLE_ORDER_STATUSES = (OrderStatus.PENDING, OrderStatus.IN_PROGRESS, OrderStatus.COMPLETED)


def _fail(field: str, message: str):
    raise ValidationError(message, details=[{"field": field, "message": message}])


def require_payload(payload: Any) -> dict:
    if payload is None:
        payload = {}
    if not isinstance(payload, dict):
        raise ValidationError("Invalid JSON payload")
    return payload


def require_string(payload: dict, field: str, *, min_len: int = 1, max_len: int = 255) -> str:
    raw = payload.get(field)
    if raw is None or (isinstance(raw, str) and raw.strip() == ""):
        _fail(field, f"{field} is required")
    if not isinstance(raw, str):
        _fail(field, f"{field} must be a string")
    value = raw.strip()
    if not (min_len <= len(value) <= max_len):
        _fail(field, f"{field} must be between {min_len} and {max_len} characters")
    return value


def optional_string(payload: dict, field: str, *, max_len: int = 255) -> str | None:
    raw = payload.get(field)
    if raw is None:
        return None
    if not isinstance(raw, str):
        _fail(field, f"{field} must be a string")
    value = raw.strip()
    if len(value) > max_len:
        _fail(field, f"{field} must not exceed {max_len} characters")
    return value or None


def require_phone(payload: dict, field: str) -> str:
    raw = payload.get(field)
    if raw is None or not isinstance(raw, str) or not raw.strip():
        _fail(field, f"{field} is required")
    value = raw.strip()
    if not PHONE_RE.match(value):
        _fail(field, f"{field} must be a valid phone number")
    if not (10 <= len(value) <= 15):
        _fail(field, f"{field} must be between 10 and 15 characters")
    return value


def require_date(payload: dict, field: str) -> date:
    raw = payload.get(field)
    if raw is None or (isinstance(raw, str) and not raw.strip()):
        _fail(field, f"{field} is required")
    if not isinstance(raw, str):
        _fail(field, f"{field} must be a valid date in ISO format (YYYY-MM-DD)")
    try:
        return parse_iso_date(raw)
    except ValueError:
        _fail(field, f"{field} must be a valid date in ISO format (YYYY-MM-DD)")


def coerce_money(value: Any, field: str) -> Decimal:
    """Non-negative currency amount rounded to cents."""
    if value is None or isinstance(value, bool):
        _fail(field, f"{field} must be a positive number")
    try:
        amount = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        _fail(field, f"{field} must be a positive number")
    if not amount.is_finite() or amount < 0:
        _fail(field, f"{field} must be a positive number")
    if amount > MAX_AMOUNT:
        _fail(field, f"{field} cannot exceed {MAX_AMOUNT}")
    return amount.quantize(CENT, rounding=ROUND_HALF_UP)


def coerce_positive_int(value: Any, field: str) -> int:
    # Strict: no floats, no booleans, no scientific notation
    if isinstance(value, bool):
        _fail(field, f"{field} must be a positive integer")
    if isinstance(value, int):
        result = value
    elif isinstance(value, str) and value.strip().isdecimal():
        try:
            result = int(value.strip())
        except ValueError:
            _fail(field, f"{field} must be a positive integer")
    else:
        _fail(field, f"{field} must be a positive integer")
    if result < 1:
        _fail(field, f"{field} must be a positive integer")
    return result


def validate_services(raw: Any) -> list[dict]:
    """Validate the submitted service lines; returns snake_case dicts with Decimal costs."""
    if not isinstance(raw, list) or not raw:
        _fail("services", "At least one service is required")

    services = []
    for index, item in enumerate(raw):
        prefix = f"services[{index}]"
        if not isinstance(item, dict):
            _fail(prefix, f"{prefix} must be an object")

        service_type = item.get("serviceType")
        if service_type not in SERVICE_TYPES:
            _fail(f"{prefix}.serviceType", f"Service type must be one of: {', '.join(SERVICE_TYPES)}")

        cloth_type = item.get("clothType")
        if cloth_type not in CLOTH_TYPES:
            _fail(f"{prefix}.clothType", f"Cloth type must be one of: {', '.join(CLOTH_TYPES)}")

        services.append({
            "service_type": service_type,
            "cloth_type": cloth_type,
            "quantity": coerce_positive_int(item.get("quantity"), f"{prefix}.quantity"),
            "unit_cost": coerce_money(item.get("unitCost"), f"{prefix}.unitCost"),
        })
    return services


def validate_order_payload(payload: Any, *, partial: bool = False) -> dict:
    """
    Validate an order create/update body.

    partial=False: create and full replace (every field, services required)
    partial=True: patch semantics (validate only provided keys)
    """
    payload = require_payload(payload)
    clean: dict = {}

    if not partial or "customerName" in payload:
        clean["customer_name"] = require_string(payload, "customerName", min_len=2, max_len=100)
    if not partial or "contactNumber" in payload:
        clean["contact_number"] = require_phone(payload, "contactNumber")
    if "customerAddress" in payload:
        clean["customer_address"] = optional_string(payload, "customerAddress", max_len=500)
    if not partial or "orderDate" in payload:
        clean["order_date"] = require_date(payload, "orderDate")
    if not partial or "services" in payload:
        clean["services"] = validate_services(payload.get("services"))

    return clean


def validate_order_status(payload: Any) -> str:
    payload = require_payload(payload)
    status = payload.get("status")
    if status not in SETTABLE_ORDER_STATUSES:
        _fail("status", f"Status must be one of: {', '.join(SETTABLE_ORDER_STATUSES)}")
    return status


def validate_payment_status(payload: Any) -> str:
    payload = require_payload(payload)
    status = payload.get("paymentStatus")
    if status not in PAYMENT_STATUSES:
        _fail("paymentStatus", 'Payment status must be either "Paid" or "Unpaid"')
    return status


def validate_rejection_reason(payload: Any) -> str:
    payload = require_payload(payload)
    reason = payload.get("rejectionReason")
    if not isinstance(reason, str) or not reason.strip():
        _fail("rejectionReason", "Rejection reason is required")
    return reason.strip()


def validate_expense_payload(payload: Any) -> dict:
    payload = require_payload(payload)
    return {
        "expense_type": require_string(payload, "expenseType", min_len=2, max_len=100),
        "amount": coerce_money(payload.get("amount"), "amount"),
        "expense_date": require_date(payload, "expenseDate"),
    }


def validate_date_range(start_raw: str | None, end_raw: str | None) -> tuple[date | None, date | None]:
    """Optional ISO date bounds; start <= end and at most two years apart."""
    try:
        start = parse_iso_date(start_raw)
    except ValueError:
        _fail("startDate", "Start date must be in ISO format (YYYY-MM-DD)")
    try:
        end = parse_iso_date(end_raw)
    except ValueError:
        _fail("endDate", "End date must be in ISO format (YYYY-MM-DD)")

    if start and end:
        if start > end:
            raise ValidationError("Start date must be before or equal to end date")
        if (end - start).days > MAX_DATE_RANGE_DAYS:
            raise ValidationError("Date range cannot exceed 2 years")
    return start, end


def validate_period(raw: str | None) -> str:
    if raw is None or raw == "":
        return "daily"
    if raw not in ANALYTICS_PERIODS:
        _fail("period", "Period must be one of: daily, weekly, monthly")
    return raw


def validate_order_status_filter(raw: str | None) -> str | None:
    if raw is None or raw == "":
        return None
    if raw not in (OrderStatus.PENDING, OrderStatus.IN_PROGRESS, OrderStatus.COMPLETED, OrderStatus.REJECTED):
        _fail("status", "Status filter must be a valid order status")
    return raw


def validate_username(raw: Any) -> str:
    if not isinstance(raw, str) or not raw.strip():
        _fail("username", "Username is required")
    value = raw.strip()
    if not (3 <= len(value) <= 50):
        _fail("username", "Username must be between 3 and 50 characters")
    if not USERNAME_RE.match(value):
        _fail("username", "Username can only contain letters, numbers, and underscores")
    return value


def validate_password(raw: Any, *, strict: bool = False) -> str:
    """
    Minimum 6 characters. ``strict`` (self-registration) also requires a
    lowercase letter, an uppercase letter and a digit.
    """
    if not isinstance(raw, str) or raw == "":
        _fail("password", "Password is required")
    if len(raw) < 6:
        _fail("password", "Password must be at least 6 characters")
    if strict and not (re.search(r"[a-z]", raw) and re.search(r"[A-Z]", raw) and re.search(r"\d", raw)):
        _fail(
            "password",
            "Password must contain at least one lowercase letter, one uppercase letter, and one number",
        )
    return raw


def validate_role(raw: Any) -> str:
    if raw not in ALL_ROLES:
        _fail("role", "Role must be one of: super_admin, admin, employee")
    return raw


def validate_business_name(payload: Any) -> str:
    payload = require_payload(payload)
    name = payload.get("businessName")
    if not isinstance(name, str) or not name.strip():
        raise ValidationError("Business name is required and must be a non-empty string")
    if len(name) > 255:
        raise ValidationError("Business name must not exceed 255 characters")
    return name.strip()
