"""
Role permission table tests.

Verifies:
- Each role's declared set matches exactly
- The wildcard grants every token
- Unknown roles hold nothing
"""

import pytest

from laundrydesk.permissions import (
    ALL_CATEGORIES,
    ALL_ROLES,
    ROLE_PERMISSIONS,
    WILDCARD,
    Role,
    effective_permissions,
    get_all_permission_tokens,
    get_permission_definition,
    get_permissions_by_category,
    get_role_permissions,
    is_valid_role,
    role_display_name,
    role_has_permission,
    validate_permission_token,
)


EMPLOYEE_SET = {
    "orders:create", "orders:read", "orders:update_limited",
    "expenses:create", "expenses:read",
}

ADMIN_SET = {
    "orders:create", "orders:read", "orders:update", "orders:delete", "orders:reject",
    "expenses:create", "expenses:read", "expenses:update", "expenses:delete",
    "analytics:read", "dashboard:read",
}

SUPER_ADMIN_SET = {
    "*", "orders:reject", "business_settings:read", "business_settings:update",
    "users:create", "users:read", "users:update", "users:delete",
}


class TestRoleTable:

    def test_employee_set_is_exact(self):
        assert set(get_role_permissions(Role.EMPLOYEE)) == EMPLOYEE_SET

    def test_admin_set_is_exact(self):
        assert set(get_role_permissions(Role.ADMIN)) == ADMIN_SET

    def test_super_admin_set_is_exact(self):
        assert set(get_role_permissions(Role.SUPER_ADMIN)) == SUPER_ADMIN_SET

    def test_table_is_read_only(self):
        with pytest.raises(TypeError):
            ROLE_PERMISSIONS["intern"] = frozenset()
        with pytest.raises(AttributeError):
            ROLE_PERMISSIONS[Role.EMPLOYEE].add("orders:delete")

    def test_roles(self):
        assert set(ALL_ROLES) == {"employee", "admin", "super_admin"}
        assert is_valid_role("admin")
        assert not is_valid_role("manager")
        assert role_display_name(Role.SUPER_ADMIN) == "Super Admin"


class TestRoleHasPermission:

    @pytest.mark.parametrize("role,declared", [
        (Role.EMPLOYEE, EMPLOYEE_SET),
        (Role.ADMIN, ADMIN_SET),
    ])
    def test_true_iff_declared(self, role, declared):
        for token in get_all_permission_tokens():
            assert role_has_permission(role, token) == (token in declared), token

    @pytest.mark.parametrize("token", [
        "orders:delete",
        "users:delete",
        "business_settings:update",
        "something:never_defined",
    ])
    def test_wildcard_grants_everything(self, token):
        assert WILDCARD in get_role_permissions(Role.SUPER_ADMIN)
        assert role_has_permission(Role.SUPER_ADMIN, token)

    @pytest.mark.parametrize("role", [None, "", "manager", "SUPER_ADMIN"])
    def test_unknown_role_has_nothing(self, role):
        assert get_role_permissions(role) == frozenset()
        assert not role_has_permission(role, "orders:read")
        assert not role_has_permission(role, WILDCARD)

    def test_employee_lacks_privileged_tokens(self):
        for token in ("orders:update", "orders:delete", "orders:reject", "expenses:update", "analytics:read"):
            assert not role_has_permission(Role.EMPLOYEE, token)

    def test_admin_lacks_settings_and_users(self):
        for token in ("business_settings:read", "business_settings:update", "users:read", "users:delete"):
            assert not role_has_permission(Role.ADMIN, token)


class TestHelpers:

    def test_effective_permissions_expands_wildcard(self):
        expanded = effective_permissions(Role.SUPER_ADMIN)
        assert WILDCARD not in expanded
        assert set(expanded) == set(get_all_permission_tokens())

    def test_effective_permissions_for_employee(self):
        assert effective_permissions(Role.EMPLOYEE) == sorted(EMPLOYEE_SET)

    def test_definitions_cover_declared_tokens(self):
        known = set(get_all_permission_tokens())
        for role in ALL_ROLES:
            assert set(get_role_permissions(role)) - {WILDCARD} <= known

    def test_validate_permission_token(self):
        assert validate_permission_token("orders:reject")
        assert validate_permission_token(WILDCARD)
        assert not validate_permission_token("orders:approve")

    def test_permission_definition_lookup(self):
        definition = get_permission_definition("orders:update_limited")
        assert definition["category"] == "orders"
        assert get_permission_definition("nope") is None

    def test_categories_partition_the_tokens(self):
        grouped = [token for category in ALL_CATEGORIES for token in get_permissions_by_category(category)]
        assert sorted(grouped) == sorted(get_all_permission_tokens())
        assert get_permissions_by_category("business_settings") == [
            "business_settings:read", "business_settings:update",
        ]
