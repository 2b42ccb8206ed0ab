# Overview: Action category constants for grouping related actions.


class ActionCategory:
    """Action categories for organization and UI display."""
    USERS = "USERS"
    CLIENTS = "CLIENTS"
    INVENTORY = "INVENTORY"
    ORDERS = "ORDERS"
    NOTIFICATIONS = "NOTIFICATIONS"
