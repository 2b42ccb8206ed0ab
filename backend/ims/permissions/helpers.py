# Overview: Utility functions for action and role lookups.

from .definitions import ACTION_DEFINITIONS
from .roles import ROLES


def get_action_definition(code):
    """Get full definition for an action code."""
    for perm in ACTION_DEFINITIONS:
        if perm[0] == code:
            return {
                "code": perm[0],
                "name": perm[1],
                "description": perm[2],
                "category": perm[3],
            }
    return None


def validate_role(role):
    """Check if a role code is one of the four fixed roles."""
    return role in ROLES
