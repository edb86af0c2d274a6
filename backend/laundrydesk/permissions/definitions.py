# Overview: All permission definitions organized by category.
# Each permission is defined as: (token, name, description, category)

from .categories import PermissionCategory


WILDCARD = "*"


ORDER_PERMISSIONS = [
    ("orders:create", "Create Orders", "Take in new laundry orders", PermissionCategory.ORDERS),
    ("orders:read", "View Orders", "List and view orders, bills and PDFs", PermissionCategory.ORDERS),
    (
        "orders:update_limited",
        "Edit Open Orders",
        "Edit orders that are neither completed nor paid",
        PermissionCategory.ORDERS,
    ),
    ("orders:update", "Edit Orders", "Edit any order and change payment status", PermissionCategory.ORDERS),
    ("orders:delete", "Delete Orders", "Delete orders and their service lines", PermissionCategory.ORDERS),
    ("orders:reject", "Reject Orders", "Reject an order with a recorded reason", PermissionCategory.ORDERS),
]


EXPENSE_PERMISSIONS = [
    ("expenses:create", "Record Expenses", "Record expenses and attach bills", PermissionCategory.EXPENSES),
    ("expenses:read", "View Expenses", "List and view expenses", PermissionCategory.EXPENSES),
    ("expenses:update", "Edit Expenses", "Edit recorded expenses", PermissionCategory.EXPENSES),
    ("expenses:delete", "Delete Expenses", "Delete expenses and their attachments", PermissionCategory.EXPENSES),
]


REPORTING_PERMISSIONS = [
    ("analytics:read", "View Analytics", "Business and expense rollups", PermissionCategory.ANALYTICS),
    ("dashboard:read", "View Dashboard", "Dashboard summary widgets", PermissionCategory.DASHBOARD),
]


BUSINESS_SETTINGS_PERMISSIONS = [
    (
        "business_settings:read",
        "View Business Settings",
        "View business name and branding",
        PermissionCategory.BUSINESS_SETTINGS,
    ),
    (
        "business_settings:update",
        "Manage Business Settings",
        "Change business name, logo and favicon",
        PermissionCategory.BUSINESS_SETTINGS,
    ),
]


USER_PERMISSIONS = [
    ("users:create", "Create Users", "Create user accounts", PermissionCategory.USERS),
    ("users:read", "View Users", "List user accounts", PermissionCategory.USERS),
    ("users:update", "Edit Users", "Change usernames, passwords and roles", PermissionCategory.USERS),
    ("users:delete", "Delete Users", "Delete user accounts", PermissionCategory.USERS),
]


PERMISSION_DEFINITIONS = (
    ORDER_PERMISSIONS
    + EXPENSE_PERMISSIONS
    + REPORTING_PERMISSIONS
    + BUSINESS_SETTINGS_PERMISSIONS
    + USER_PERMISSIONS
)
