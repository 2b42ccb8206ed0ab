# Overview: The four fixed staff roles and the actions each is granted outright.

from .definitions import (
    MANAGE_USERS,
    MANAGE_CLIENTS,
    MANAGE_ITEMS,
    CREATE_ORDER,
    TOGGLE_FULFILLMENT,
    FORCE_CLOSE_ORDER,
    AUTHORIZE_ORDER,
    VIEW_ALL_ORDERS,
    RECEIVE_ORDER_NOTIFICATIONS,
    VIEW_FULFILLER,
)


ADMIN = "Admin"
MANAGER = "MANG"
CLERK = "CLK"
SALES = "FSSALE"

ROLES = (ADMIN, MANAGER, CLERK, SALES)

ROLE_LABELS = {
    ADMIN: "Administrator",
    MANAGER: "Manager",
    CLERK: "Clerk",
    SALES: "Sales",
}

ROLE_DESCRIPTIONS = {
    ADMIN: "Full system access, can manage users, inventory, orders, and clients",
    MANAGER: "Can manage orders, inventory, and view all data",
    CLERK: "Can manage orders and view inventory",
    SALES: "Can create and manage their own orders",
}


# Unconditional grants. Ownership-dependent grants (FSSALE editing or
# fulfilling its own orders) live in policy.OWNER_GRANTS.
DEFAULT_ROLE_ACTIONS = {
    ADMIN: {
        MANAGE_USERS,
        MANAGE_CLIENTS,
        MANAGE_ITEMS,
        TOGGLE_FULFILLMENT,
        FORCE_CLOSE_ORDER,
        AUTHORIZE_ORDER,
        VIEW_ALL_ORDERS,
        RECEIVE_ORDER_NOTIFICATIONS,
        VIEW_FULFILLER,
    },
    MANAGER: {
        CREATE_ORDER,
        TOGGLE_FULFILLMENT,
        VIEW_ALL_ORDERS,
        RECEIVE_ORDER_NOTIFICATIONS,
    },
    CLERK: {
        TOGGLE_FULFILLMENT,
        VIEW_ALL_ORDERS,
        RECEIVE_ORDER_NOTIFICATIONS,
    },
    SALES: {
        CREATE_ORDER,
    },
}

