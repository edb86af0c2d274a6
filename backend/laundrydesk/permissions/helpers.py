# Overview: Utility functions for permission lookups and validation.

from .definitions import PERMISSION_DEFINITIONS, WILDCARD
from .roles import get_role_permissions


def get_all_permission_tokens():
    """Get list of all concrete permission tokens."""
    return [perm[0] for perm in PERMISSION_DEFINITIONS]


def get_permissions_by_category(category):
    """Tokens of one category, in declaration order."""
    return [token for token, _name, _description, cat in PERMISSION_DEFINITIONS if cat == category]


def get_permission_definition(token):
    """Get full definition for a permission token."""
    for perm in PERMISSION_DEFINITIONS:
        if perm[0] == token:
            return {
                "token": perm[0],
                "name": perm[1],
                "description": perm[2],
                "category": perm[3],
            }
    return None


def validate_permission_token(token):
    """Check if a permission token is known (the wildcard counts)."""
    return token == WILDCARD or token in get_all_permission_tokens()


def effective_permissions(role):
    """Concrete tokens a role can exercise, with the wildcard expanded."""
    declared = get_role_permissions(role)
    if WILDCARD in declared:
        return sorted(get_all_permission_tokens())
    return sorted(declared)
