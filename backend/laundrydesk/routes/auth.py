# Overview: Flask API routes for auth operations; parses input and returns JSON responses.

"""
Authentication API routes

- POST /api/auth/login      Basic header or JSON body; issues a session cookie
- POST /api/auth/logout     revokes the session and clears the cookie
- GET  /api/auth/status     always 200, reports whether the caller is authenticated
- POST /api/auth/register   self-registration, always as an employee
- GET  /api/auth/me         current principal and its permissions
- PUT  /api/auth/password   change own password
"""

from flask import Blueprint, current_app, request

from ..context import Deny, current_principal, get_auth_context
from ..decorators import optional_auth, require_auth
from ..errors import AuthenticationError, ValidationError
from ..permissions import Role, effective_permissions
from ..responses import failure, success
from ..services import auth_service, session_service
from ..validation import require_payload, validate_password, validate_username


auth_bp = Blueprint("auth", __name__, url_prefix="/api/auth")


def _set_session_cookie(response, token: str):
    config = current_app.config
    response.set_cookie(
        config["SESSION_COOKIE_NAME"],
        token,
        max_age=int(config["SESSION_ABSOLUTE_TIMEOUT_HOURS"] * 3600),
        httponly=True,
        secure=config["SESSION_COOKIE_SECURE"],
        samesite="Lax",
    )
    return response


def _user_payload(user) -> dict:
    data = user.to_dict()
    data["permissions"] = effective_permissions(user.role)
    return data


@auth_bp.post("/login")
def login_route():
    """
    Authenticate and start a session.

    Credentials come from an ``Authorization: Basic`` header when present,
    otherwise from the JSON body.
    """
    auth_header = request.headers.get("Authorization")
    if auth_service.has_basic_header(auth_header):
        result = auth_service.resolve_basic(auth_header)
        if isinstance(result, Deny):
            return failure(result.status, result.code, result.message)
        user = result.principal
    else:
        payload = require_payload(request.get_json(silent=True))
        username = payload.get("username")
        password = payload.get("password")
        if not isinstance(username, str) or not username.strip() or not isinstance(password, str) or not password:
            raise ValidationError("Username and password are required")

        user = auth_service.authenticate(username.strip(), password)
        if user is None:
            current_app.logger.info("Failed login for %r from %s", username, request.remote_addr)
            raise AuthenticationError("Invalid username or password", code="INVALID_CREDENTIALS")

    _, token = session_service.create_session(
        user_id=user.id,
        user_agent=request.headers.get("User-Agent"),
        ip_address=request.remote_addr,
    )
    current_app.logger.info("User %s logged in", user.username)

    response, status = success({"user": _user_payload(user)}, "Login successful")
    return _set_session_cookie(response, token), status


@auth_bp.post("/logout")
def logout_route():
    cookie_name = current_app.config["SESSION_COOKIE_NAME"]
    token = request.cookies.get(cookie_name)
    if token:
        session_service.revoke_session(token, reason="User logout")

    response, status = success(message="Logged out successfully")
    response.delete_cookie(cookie_name)
    return response, status


@auth_bp.get("/status")
@optional_auth
def status_route():
    ctx = get_auth_context()
    if ctx.principal is None:
        return success({"authenticated": False})
    return success({
        "authenticated": True,
        "user": ctx.principal.to_dict(),
        "authMethod": ctx.auth_method,
    })


@auth_bp.post("/register")
def register_route():
    """Self-registration. The new account is always an employee."""
    payload = require_payload(request.get_json(silent=True))
    username = validate_username(payload.get("username"))
    password = validate_password(payload.get("password"), strict=True)

    user = auth_service.create_user(username, password, Role.EMPLOYEE)
    current_app.logger.info("User registered: %s", user.username)
    return success({"user": user.to_dict()}, "User created successfully", 201)


@auth_bp.get("/me")
@require_auth
def me_route():
    return success({"user": _user_payload(current_principal())})


@auth_bp.put("/password")
@require_auth
def change_password_route():
    payload = require_payload(request.get_json(silent=True))
    current_password = payload.get("currentPassword")
    if not isinstance(current_password, str) or not current_password:
        raise ValidationError(
            "Current password is required",
            details=[{"field": "currentPassword", "message": "Current password is required"}],
        )
    new_password = validate_password(payload.get("newPassword"))

    user = current_principal()
    auth_service.change_password(user, current_password, new_password)
    session_service.revoke_user_sessions(
        user.id,
        reason="password_change",
        keep_token=request.cookies.get(current_app.config["SESSION_COOKIE_NAME"]),
    )
    current_app.logger.info("Password changed for %s", user.username)
    return success(message="Password updated successfully")
