# Overview: Authorization guards evaluated against an AuthContext.

"""
Permission guards.

Each guard is a pure function of the AuthContext and returns Allow or Deny.
Expected denials carry their own status/code; an unexpected fault while
evaluating a guard becomes a 500 AUTHORIZATION_ERROR instead of escaping.

Resource-conditioned guards inspect resource state only for employees.
Admins and super admins pass them as long as they hold the relevant
permission.
"""

from __future__ import annotations

from typing import Iterable

from flask import current_app

from ..context import Allow, AuthContext, Deny, GuardResult
from ..permissions import Role, role_has_permission


AUTHENTICATION_REQUIRED = Deny(401, "AUTHENTICATION_REQUIRED", "Authentication required")
INSUFFICIENT_PERMISSIONS = Deny(403, "INSUFFICIENT_PERMISSIONS", "You do not have permission to perform this action")
ORDER_EDIT_RESTRICTED = Deny(403, "ORDER_EDIT_RESTRICTED", "Cannot edit completed or paid orders")
EXPENSE_EDIT_RESTRICTED = Deny(403, "EXPENSE_EDIT_RESTRICTED", "Employees cannot edit expenses after creation")
ORDER_NOT_LOADED = Deny(404, "ORDER_NOT_FOUND", "Order not found")


def _fault(message: str) -> Deny:
    current_app.logger.exception(message)
    return Deny(500, "AUTHORIZATION_ERROR", message)


def check_role(ctx: AuthContext, roles: str | Iterable[str]) -> GuardResult:
    try:
        if ctx.principal is None:
            return AUTHENTICATION_REQUIRED

        allowed = [roles] if isinstance(roles, str) else list(roles)
        if ctx.principal.role not in allowed:
            return INSUFFICIENT_PERMISSIONS
        return Allow(ctx.principal)
    except Exception:
        return _fault("Authorization check failed")


def check_permission(ctx: AuthContext, token: str) -> GuardResult:
    try:
        if ctx.principal is None:
            return AUTHENTICATION_REQUIRED

        if not role_has_permission(ctx.principal.role, token):
            return INSUFFICIENT_PERMISSIONS
        return Allow(ctx.principal)
    except Exception:
        return _fault("Permission check failed")


def order_is_editable_by(principal, order) -> bool:
    if principal.role == Role.EMPLOYEE:
        return (
            role_has_permission(principal.role, "orders:update_limited")
            and order.status != "Completed"
            and order.payment_status != "Paid"
        )
    return role_has_permission(principal.role, "orders:update")


def check_order_editable(ctx: AuthContext) -> GuardResult:
    """
    Edit gate for orders.

    The target order must have been loaded onto the context; a missing order
    is a 404 for every role rather than an implicit pass.
    """
    try:
        if ctx.principal is None:
            return AUTHENTICATION_REQUIRED

        if not ctx.resource_loaded or ctx.resource is None:
            return ORDER_NOT_LOADED

        if order_is_editable_by(ctx.principal, ctx.resource):
            return Allow(ctx.principal)

        if ctx.principal.role == Role.EMPLOYEE:
            return ORDER_EDIT_RESTRICTED
        return INSUFFICIENT_PERMISSIONS
    except Exception:
        return _fault("Order edit permission check failed")


def check_expense_editable(ctx: AuthContext) -> GuardResult:
    """Employees never edit expenses; others need expenses:update."""
    try:
        if ctx.principal is None:
            return AUTHENTICATION_REQUIRED

        principal = ctx.principal
        if principal.role == Role.EMPLOYEE or not role_has_permission(principal.role, "expenses:update"):
            return EXPENSE_EDIT_RESTRICTED
        return Allow(principal)
    except Exception:
        return _fault("Expense edit permission check failed")
