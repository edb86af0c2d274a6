# Overview: Request guard decorators for API routes.

"""
Route guards.

Decorators run in the order they are stacked under the route decorator.
Each one evaluates a guard from auth_service / permission_service against
the request's AuthContext and turns the first Deny into a JSON response;
later guards and the view never run after a Deny.

Typical stack::

    @orders_bp.put("/<int:order_id>")
    @require_auth
    @load_order
    @can_edit_order
    def update_order_route(order_id): ...
"""

from functools import wraps

from flask import current_app, request
from sqlalchemy.exc import SQLAlchemyError

from .context import Deny, get_auth_context, set_auth_context
from .extensions import db
from .models import Order
from .responses import failure
from .services import auth_service, permission_service


def _deny(result: Deny):
    ctx = get_auth_context()
    principal_id = ctx.principal.id if ctx.principal is not None else None
    log = current_app.logger.warning if result.status >= 500 else current_app.logger.info
    log(
        "Denied %s %s for user %s: %s",
        request.method, request.path, principal_id, result.code,
    )
    return failure(result.status, result.code, result.message)


def _session_token() -> str | None:
    return request.cookies.get(current_app.config["SESSION_COOKIE_NAME"])


def require_auth(f):
    """
    Require an authenticated principal (Basic header first, then session).

    Sets g.auth_context.principal on success. Returns 401 with
    INVALID_CREDENTIALS, UNAUTHORIZED or USER_NOT_FOUND otherwise.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        try:
            result, method = auth_service.resolve_request(
                request.headers.get("Authorization"),
                _session_token(),
            )
        except Exception:
            db.session.rollback()
            current_app.logger.exception("Authentication failed unexpectedly")
            return failure(500, "SERVER_ERROR", "Authentication error")

        if isinstance(result, Deny):
            return _deny(result)

        set_auth_context(get_auth_context().with_principal(result.principal, method))
        return f(*args, **kwargs)

    return decorated_function


def optional_auth(f):
    """Attach the principal when credentials resolve; never reject."""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        try:
            result, method = auth_service.resolve_request(
                request.headers.get("Authorization"),
                _session_token(),
            )
        except Exception:
            db.session.rollback()
            current_app.logger.exception("Optional authentication failed")
            result, method = None, None

        if result is not None and not isinstance(result, Deny):
            set_auth_context(get_auth_context().with_principal(result.principal, method))
        return f(*args, **kwargs)

    return decorated_function


def require_role(roles):
    """Require the principal's role to be one of ``roles`` (a role or a list)."""
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            result = permission_service.check_role(get_auth_context(), roles)
            if isinstance(result, Deny):
                return _deny(result)
            return f(*args, **kwargs)

        return decorated_function
    return decorator


def require_permission(token: str):
    """Require a ``resource:action`` permission from the role table."""
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            result = permission_service.check_permission(get_auth_context(), token)
            if isinstance(result, Deny):
                return _deny(result)
            return f(*args, **kwargs)

        return decorated_function
    return decorator


def load_order(f):
    """
    Load the order named by the ``order_id`` path parameter onto the context.

    A failed lookup is logged and leaves no order attached; the edit guard
    reports that as ORDER_NOT_FOUND.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        order = None
        order_id = kwargs.get("order_id")
        if order_id is not None:
            try:
                order = db.session.get(Order, order_id)
            except SQLAlchemyError:
                db.session.rollback()
                current_app.logger.warning("Could not load order %s for permission check", order_id, exc_info=True)
        set_auth_context(get_auth_context().with_resource(order))
        return f(*args, **kwargs)

    return decorated_function


def can_edit_order(f):
    """Employees: only orders that are neither Completed nor Paid. Others: orders:update."""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        result = permission_service.check_order_editable(get_auth_context())
        if isinstance(result, Deny):
            return _deny(result)
        return f(*args, **kwargs)

    return decorated_function


def can_edit_expense(f):
    """Employees never edit expenses; admins need expenses:update."""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        result = permission_service.check_expense_editable(get_auth_context())
        if isinstance(result, Deny):
            return _deny(result)
        return f(*args, **kwargs)

    return decorated_function
