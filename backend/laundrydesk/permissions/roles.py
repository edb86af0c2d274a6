# Overview: Static role -> permission table.

"""
Role permission table.

This mapping is the single source of truth for authorization. Roles are not
ordered: super_admin holds the wildcard, admin holds order/expense/reporting
permissions, employee holds create/read plus the limited order edit.
"""

from types import MappingProxyType

from .definitions import WILDCARD


class Role:
    EMPLOYEE = "employee"
    ADMIN = "admin"
    SUPER_ADMIN = "super_admin"


ALL_ROLES = (Role.EMPLOYEE, Role.ADMIN, Role.SUPER_ADMIN)


ROLE_DISPLAY_NAMES = MappingProxyType({
    Role.SUPER_ADMIN: "Super Admin",
    Role.ADMIN: "Admin",
    Role.EMPLOYEE: "Employee",
})


ROLE_PERMISSIONS = MappingProxyType({
    Role.EMPLOYEE: frozenset({
        "orders:create",
        "orders:read",
        "orders:update_limited",  # only while not completed and not paid
        "expenses:create",
        "expenses:read",
    }),
    Role.ADMIN: frozenset({
        "orders:create",
        "orders:read",
        "orders:update",
        "orders:delete",
        "orders:reject",
        "expenses:create",
        "expenses:read",
        "expenses:update",
        "expenses:delete",
        "analytics:read",
        "dashboard:read",
    }),
    # The wildcard covers everything; the explicit tokens are listed for reference.
    Role.SUPER_ADMIN: frozenset({
        WILDCARD,
        "orders:reject",
        "business_settings:read",
        "business_settings:update",
        "users:create",
        "users:read",
        "users:update",
        "users:delete",
    }),
})


def get_role_permissions(role) -> frozenset:
    """Permission set for a role; unknown roles get an empty set."""
    return ROLE_PERMISSIONS.get(role, frozenset())


def role_has_permission(role, token) -> bool:
    permissions = get_role_permissions(role)
    return WILDCARD in permissions or token in permissions


def is_valid_role(role) -> bool:
    return role in ROLE_PERMISSIONS


def role_display_name(role) -> str:
    return ROLE_DISPLAY_NAMES.get(role, "Unknown")
