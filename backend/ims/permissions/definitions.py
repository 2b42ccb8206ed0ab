# Overview: All action definitions organized by category.
# Each action is defined as: (code, name, description, category)

from .categories import ActionCategory


MANAGE_USERS = "MANAGE_USERS"
MANAGE_CLIENTS = "MANAGE_CLIENTS"
MANAGE_ITEMS = "MANAGE_ITEMS"
CREATE_ORDER = "CREATE_ORDER"
EDIT_ORDER = "EDIT_ORDER"
TOGGLE_FULFILLMENT = "TOGGLE_FULFILLMENT"
FORCE_CLOSE_ORDER = "FORCE_CLOSE_ORDER"
AUTHORIZE_ORDER = "AUTHORIZE_ORDER"
VIEW_ALL_ORDERS = "VIEW_ALL_ORDERS"
RECEIVE_ORDER_NOTIFICATIONS = "RECEIVE_ORDER_NOTIFICATIONS"
VIEW_FULFILLER = "VIEW_FULFILLER"


# -- USERS --

USER_ACTIONS = [
    (
        MANAGE_USERS,
        "Manage Users",
        "Create, edit and delete staff accounts",
        ActionCategory.USERS,
    ),
]


# -- CLIENTS --

CLIENT_ACTIONS = [
    (
        MANAGE_CLIENTS,
        "Manage Clients",
        "Create, edit and delete clients",
        ActionCategory.CLIENTS,
    ),
]


# -- INVENTORY --

INVENTORY_ACTIONS = [
    (
        MANAGE_ITEMS,
        "Manage Items",
        "Create, edit and delete items and their shades",
        ActionCategory.INVENTORY,
    ),
]


# -- ORDERS --

ORDER_ACTIONS = [
    (
        CREATE_ORDER,
        "Create Order",
        "Compose a new order for a client",
        ActionCategory.ORDERS,
    ),
    (
        EDIT_ORDER,
        "Edit Order",
        "Change client, date, lines or notes of an order you created",
        ActionCategory.ORDERS,
    ),
    (
        TOGGLE_FULFILLMENT,
        "Toggle Fulfillment",
        "Mark order lines as fulfilled or pending",
        ActionCategory.ORDERS,
    ),
    (
        FORCE_CLOSE_ORDER,
        "Close Order",
        "Close an order regardless of line fulfillment (irreversible)",
        ActionCategory.ORDERS,
    ),
    (
        AUTHORIZE_ORDER,
        "Authorize Order",
        "Set or revoke the authorization flag on an order",
        ActionCategory.ORDERS,
    ),
    (
        VIEW_ALL_ORDERS,
        "View All Orders",
        "See every order, not only the ones you created",
        ActionCategory.ORDERS,
    ),
    (
        VIEW_FULFILLER,
        "View Fulfiller",
        "See who fulfilled each order line",
        ActionCategory.ORDERS,
    ),
]


# -- NOTIFICATIONS --

NOTIFICATION_ACTIONS = [
    (
        RECEIVE_ORDER_NOTIFICATIONS,
        "Receive Order Notifications",
        "Get notified when a new order is created",
        ActionCategory.NOTIFICATIONS,
    ),
]


ACTION_DEFINITIONS = (
    USER_ACTIONS
    + CLIENT_ACTIONS
    + INVENTORY_ACTIONS
    + ORDER_ACTIONS
    + NOTIFICATION_ACTIONS
)
