"""
Role-authorization policy tests.

Verifies:
- The full role x action matrix
- Ownership rules for Sales (edit/toggle own orders only)
- Unknown roles and actions are denied
- Same input, same answer
- Landing page and menu per role
"""

import pytest

from ims.permissions import (
    ACTION_DEFINITIONS,
    ADMIN,
    MANAGER,
    CLERK,
    SALES,
    ROLES,
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
    PolicyContext,
    allowed_actions,
    can_perform,
    landing_page,
    menu_for_role,
)


ALL_ACTIONS = [definition[0] for definition in ACTION_DEFINITIONS]

# Expected unconditional answers (no ownership context)
MATRIX = {
    MANAGE_USERS: {ADMIN: True, MANAGER: False, CLERK: False, SALES: False},
    MANAGE_CLIENTS: {ADMIN: True, MANAGER: False, CLERK: False, SALES: False},
    MANAGE_ITEMS: {ADMIN: True, MANAGER: False, CLERK: False, SALES: False},
    CREATE_ORDER: {ADMIN: False, MANAGER: True, CLERK: False, SALES: True},
    EDIT_ORDER: {ADMIN: False, MANAGER: False, CLERK: False, SALES: False},
    TOGGLE_FULFILLMENT: {ADMIN: True, MANAGER: True, CLERK: True, SALES: False},
    FORCE_CLOSE_ORDER: {ADMIN: True, MANAGER: False, CLERK: False, SALES: False},
    AUTHORIZE_ORDER: {ADMIN: True, MANAGER: False, CLERK: False, SALES: False},
    VIEW_ALL_ORDERS: {ADMIN: True, MANAGER: True, CLERK: True, SALES: False},
    RECEIVE_ORDER_NOTIFICATIONS: {ADMIN: True, MANAGER: True, CLERK: True, SALES: False},
    VIEW_FULFILLER: {ADMIN: True, MANAGER: False, CLERK: False, SALES: False},
}


@pytest.mark.parametrize(
    "role,action,expected",
    [(role, action, allowed) for action, row in MATRIX.items() for role, allowed in row.items()],
)
def test_matrix(role, action, expected):
    assert can_perform(role, action) is expected


def test_matrix_covers_every_action():
    assert set(MATRIX) == set(ALL_ACTIONS)


def test_is_deterministic():
    for _ in range(3):
        for role in ROLES:
            for action in ALL_ACTIONS:
                assert can_perform(role, action) == can_perform(role, action)


@pytest.mark.parametrize("role", [None, "", "admin", "SUPERUSER"])
def test_unknown_role_denied(role):
    assert all(not can_perform(role, action) for action in ALL_ACTIONS)


def test_unknown_action_denied():
    for role in ROLES:
        assert can_perform(role, "DROP_DATABASE") is False


class TestSalesOwnership:
    def test_toggle_own_order(self):
        ctx = PolicyContext(actor_id="u1", owner_id="u1", order_status="open")
        assert can_perform(SALES, TOGGLE_FULFILLMENT, ctx) is True

    def test_toggle_other_order(self):
        ctx = PolicyContext(actor_id="u1", owner_id="u2", order_status="open")
        assert can_perform(SALES, TOGGLE_FULFILLMENT, ctx) is False

    def test_edit_while_creating(self):
        assert can_perform(SALES, EDIT_ORDER, PolicyContext(actor_id="u1", is_creating=True)) is True

    def test_edit_own_open_order(self):
        ctx = PolicyContext(actor_id="u1", owner_id="u1", order_status="open")
        assert can_perform(SALES, EDIT_ORDER, ctx) is True

    @pytest.mark.parametrize("status", ["pending", "closed", "cancelled"])
    def test_edit_own_order_after_open(self, status):
        ctx = PolicyContext(actor_id="u1", owner_id="u1", order_status=status)
        assert can_perform(SALES, EDIT_ORDER, ctx) is False

    def test_edit_other_order(self):
        ctx = PolicyContext(actor_id="u1", owner_id="u2", order_status="open")
        assert can_perform(SALES, EDIT_ORDER, ctx) is False

    def test_missing_actor_is_not_owner(self):
        ctx = PolicyContext(actor_id=None, owner_id=None, order_status="open")
        assert can_perform(SALES, TOGGLE_FULFILLMENT, ctx) is False

    @pytest.mark.parametrize("role", [ADMIN, MANAGER, CLERK])
    def test_ownership_does_not_grant_edit_to_other_roles(self, role):
        ctx = PolicyContext(actor_id="u1", owner_id="u1", order_status="open")
        assert can_perform(role, EDIT_ORDER, ctx) is False


def test_allowed_actions_for_owner():
    ctx = PolicyContext(actor_id="u1", owner_id="u1", order_status="open")
    assert allowed_actions(SALES, ctx) == sorted([CREATE_ORDER, EDIT_ORDER, TOGGLE_FULFILLMENT])


@pytest.mark.parametrize(
    "role,expected",
    [(SALES, "orders"), (CLERK, "orders"), (MANAGER, "orders"), (ADMIN, "inventory"), (None, "inventory")],
)
def test_landing_page(role, expected):
    assert landing_page(role) == expected


def test_menu_admin_only_items():
    admin_keys = [m["key"] for m in menu_for_role(ADMIN)]
    assert admin_keys == ["orders", "catalogue", "inventory", "clients", "users"]
    for role in (MANAGER, CLERK, SALES):
        keys = [m["key"] for m in menu_for_role(role)]
        assert "clients" not in keys
        assert "users" not in keys
        assert "orders" in keys
