# Overview: Role-authorization package.
# Re-exports all public APIs so callers import from ims.permissions.

from .categories import ActionCategory
from .definitions import (
    ACTION_DEFINITIONS,
    MANAGE_USERS,
    MANAGE_CLIENTS,
    MANAGE_ITEMS,
    CREATE_ORDER,
    EDIT_ORDER,
    TOGGLE_FULFILLMENT,
    FORCE_CLOSE_ORDER,
    AUTHORIZE_ORDER,
    VIEW_ALL_ORDERS,
    RECEIVE_ORDER_NOTIFICATIONS,
    VIEW_FULFILLER,
)
from .roles import (
    ADMIN,
    MANAGER,
    CLERK,
    SALES,
    ROLES,
    ROLE_LABELS,
    ROLE_DESCRIPTIONS,
    DEFAULT_ROLE_ACTIONS,
)
from .policy import (
    PolicyContext,
    can_perform,
    allowed_actions,
    landing_page,
    menu_for_role,
)
from .helpers import (
    get_action_definition,
    validate_role,
)

__all__ = [
    "ActionCategory",
    "ACTION_DEFINITIONS",
    "MANAGE_USERS",
    "MANAGE_CLIENTS",
    "MANAGE_ITEMS",
    "CREATE_ORDER",
    "EDIT_ORDER",
    "TOGGLE_FULFILLMENT",
    "FORCE_CLOSE_ORDER",
    "AUTHORIZE_ORDER",
    "VIEW_ALL_ORDERS",
    "RECEIVE_ORDER_NOTIFICATIONS",
    "VIEW_FULFILLER",
    "ADMIN",
    "MANAGER",
    "CLERK",
    "SALES",
    "ROLES",
    "ROLE_LABELS",
    "ROLE_DESCRIPTIONS",
    "DEFAULT_ROLE_ACTIONS",
    "PolicyContext",
    "can_perform",
    "allowed_actions",
    "landing_page",
    "menu_for_role",
    "get_action_definition",
    "validate_role",
]
