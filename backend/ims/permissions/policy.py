# Overview: Pure role-authorization decision function and navigation hints.

"""
Role-Authorization Policy

can_perform(role, action, context) is the single decision point consulted
before every mutating or sensitive-view action. It is pure: no database
access, no side effects, same input -> same answer. Unknown roles or actions
are denied (fail closed).

Most grants are unconditional (roles.DEFAULT_ROLE_ACTIONS). Two depend on
ownership of the order and are resolved from PolicyContext:

- FSSALE may EDIT_ORDER only on an order it created, and only while the
  order is being composed or is still open.
- FSSALE may TOGGLE_FULFILLMENT only on an order it created.
"""

from __future__ import annotations

from dataclasses import dataclass

from .definitions import (
    ACTION_DEFINITIONS,
    EDIT_ORDER,
    TOGGLE_FULFILLMENT,
)
from .roles import ADMIN, MANAGER, CLERK, SALES, ROLES, DEFAULT_ROLE_ACTIONS


@dataclass(frozen=True)
class PolicyContext:
    """Facts about the resource the action targets."""
    actor_id: str | None = None
    owner_id: str | None = None      # order.created_by
    is_creating: bool = False        # composing a not-yet-saved order
    order_status: str | None = None

    @property
    def is_owner(self) -> bool:
        return self.actor_id is not None and self.actor_id == self.owner_id


def _sales_can_edit(ctx: PolicyContext) -> bool:
    if ctx.is_creating:
        return True
    return ctx.is_owner and ctx.order_status == "open"


def _sales_can_toggle(ctx: PolicyContext) -> bool:
    return ctx.is_owner


OWNER_GRANTS = {
    (SALES, EDIT_ORDER): _sales_can_edit,
    (SALES, TOGGLE_FULFILLMENT): _sales_can_toggle,
}

_KNOWN_ACTIONS = frozenset(perm[0] for perm in ACTION_DEFINITIONS)


def can_perform(role: str | None, action: str, context: PolicyContext | None = None) -> bool:
    if role not in ROLES or action not in _KNOWN_ACTIONS:
        return False

    if action in DEFAULT_ROLE_ACTIONS[role]:
        return True

    rule = OWNER_GRANTS.get((role, action))
    if rule is None:
        return False
    return rule(context or PolicyContext())


def allowed_actions(role: str | None, context: PolicyContext | None = None) -> list[str]:
    """Every action the role may perform in the given context (sorted)."""
    return sorted(code for code in _KNOWN_ACTIONS if can_perform(role, code, context))


# -- Navigation --

ORDERS_FIRST_ROLES = {SALES, CLERK, MANAGER}

MENU_ITEMS = [
    ("orders", "Orders", set(ROLES)),
    ("catalogue", "Catalogue", set(ROLES)),
    ("inventory", "Inventory", set(ROLES)),
    ("clients", "Clients", {ADMIN}),
    ("users", "Users", {ADMIN}),
]


def landing_page(role: str | None) -> str:
    """FSSALE/CLK/MANG land on Orders; everyone else on Inventory."""
    if role in ORDERS_FIRST_ROLES:
        return "orders"
    return "inventory"


def menu_for_role(role: str | None) -> list[dict]:
    return [
        {"key": key, "label": label}
        for key, label, roles in MENU_ITEMS
        if role in roles
    ]
