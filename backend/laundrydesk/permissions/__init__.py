# Overview: Permission system package.
# Re-exports all public APIs for convenient imports.

from .categories import ALL_CATEGORIES, PermissionCategory
from .definitions import (
    WILDCARD,
    PERMISSION_DEFINITIONS,
    ORDER_PERMISSIONS,
    EXPENSE_PERMISSIONS,
    REPORTING_PERMISSIONS,
    BUSINESS_SETTINGS_PERMISSIONS,
    USER_PERMISSIONS,
)
from .roles import (
    Role,
    ALL_ROLES,
    ROLE_PERMISSIONS,
    ROLE_DISPLAY_NAMES,
    get_role_permissions,
    role_has_permission,
    is_valid_role,
    role_display_name,
)
from .helpers import (
    get_all_permission_tokens,
    get_permissions_by_category,
    get_permission_definition,
    validate_permission_token,
    effective_permissions,
)

__all__ = [
    "PermissionCategory",
    "ALL_CATEGORIES",
    "WILDCARD",
    "PERMISSION_DEFINITIONS",
    "ORDER_PERMISSIONS",
    "EXPENSE_PERMISSIONS",
    "REPORTING_PERMISSIONS",
    "BUSINESS_SETTINGS_PERMISSIONS",
    "USER_PERMISSIONS",
    "Role",
    "ALL_ROLES",
    "ROLE_PERMISSIONS",
    "ROLE_DISPLAY_NAMES",
    "get_role_permissions",
    "role_has_permission",
    "is_valid_role",
    "role_display_name",
    "get_all_permission_tokens",
    "get_permissions_by_category",
    "get_permission_definition",
    "validate_permission_token",
    "effective_permissions",
]
