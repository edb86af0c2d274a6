# Overview: Permission category constants for grouping related permissions.


class PermissionCategory:
    """Permission categories (the resource half of a ``resource:action`` token)."""
    ORDERS = "orders"
    EXPENSES = "expenses"
    ANALYTICS = "analytics"
    DASHBOARD = "dashboard"
    BUSINESS_SETTINGS = "business_settings"
    USERS = "users"


ALL_CATEGORIES = (
    PermissionCategory.ORDERS,
    PermissionCategory.EXPENSES,
    PermissionCategory.ANALYTICS,
    PermissionCategory.DASHBOARD,
    PermissionCategory.BUSINESS_SETTINGS,
    PermissionCategory.USERS,
)
