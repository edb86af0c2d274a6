# Overview: Flask API routes for user management (super admins only).

from flask import Blueprint, request

from ..context import current_principal
from ..decorators import require_auth, require_role
from ..errors import ValidationError
from ..permissions import Role, is_valid_role
from ..responses import success
from ..services import user_service
from ..validation import (
    require_payload,
    validate_password,
    validate_role,
    validate_username,
)


users_bp = Blueprint("users", __name__, url_prefix="/api/users")


@users_bp.get("")
@require_auth
@require_role([Role.SUPER_ADMIN])
def list_users_route():
    return success([user.to_dict() for user in user_service.list_users()])


@users_bp.get("/role/<role>")
@require_auth
@require_role([Role.SUPER_ADMIN])
def list_users_by_role_route(role: str):
    if not is_valid_role(role):
        raise ValidationError("Invalid role specified", code="INVALID_ROLE")
    return success([user.to_dict() for user in user_service.list_users_by_role(role)])


@users_bp.get("/<int:user_id>")
@require_auth
@require_role([Role.SUPER_ADMIN])
def get_user_route(user_id: int):
    return success(user_service.get_user(user_id).to_dict())


@users_bp.post("")
@require_auth
@require_role([Role.SUPER_ADMIN])
def create_user_route():
    payload = require_payload(request.get_json(silent=True))
    username = validate_username(payload.get("username"))
    password = validate_password(payload.get("password"))
    role = validate_role(payload.get("role", Role.EMPLOYEE))

    user = user_service.create_user(current_principal(), username, password, role)
    return success(user.to_dict(), "User created successfully", 201)


@users_bp.put("/<int:user_id>")
@require_auth
@require_role([Role.SUPER_ADMIN])
def update_user_route(user_id: int):
    """Update username, password and/or role; omitted fields are left unchanged."""
    payload = require_payload(request.get_json(silent=True))
    username = validate_username(payload["username"]) if payload.get("username") is not None else None
    password = validate_password(payload["password"]) if payload.get("password") else None
    role = validate_role(payload["role"]) if payload.get("role") is not None else None

    user = user_service.update_user(
        current_principal(),
        user_id,
        username=username,
        password=password,
        role=role,
    )
    return success(user.to_dict(), "User updated successfully")


@users_bp.delete("/<int:user_id>")
@require_auth
@require_role([Role.SUPER_ADMIN])
def delete_user_route(user_id: int):
    user_service.delete_user(current_principal(), user_id)
    return success(message="User deleted successfully")
