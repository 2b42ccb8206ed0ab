# Overview: Service-layer operations for the order fulfillment state machine.

"""
Order Fulfillment State Machine

STATES:
- open: no line fulfilled (initial)
- pending: some, not all, lines fulfilled
- closed: every line fulfilled, or an Admin force-closed the order
- cancelled: terminal, no transition into it here

TRANSITIONS:
- Toggling a line recomputes the status from the order's persisted lines.
- Force-close (Admin) sets closed + closed_by/closed_at. It is terminal:
  further toggles on a force-closed order raise LifecycleError.

Every toggle writes the line and the order status in one transaction, with
the order row locked for the duration.
"""

from __future__ import annotations

from typing import Iterable

from ..extensions import db
from ..errors import LifecycleError, NotFoundError, ValidationError
from ..models import Order, OrderItem, User
from ..models.orders import STATUS_CANCELLED, STATUS_CLOSED, STATUS_OPEN, STATUS_PENDING
from ..permissions import AUTHORIZE_ORDER, FORCE_CLOSE_ORDER, TOGGLE_FULFILLMENT, PolicyContext
from ims.time_utils import utcnow
from .concurrency import commit_or_raise, lock_for_update, run_with_retry
from .permission_service import log_security_event, require_action


def derive_status(flags: Iterable[bool]) -> str:
    """
    Status implied by the lines' is_fulfilled flags.

    all fulfilled -> closed, any fulfilled -> pending, otherwise open.
    An order with no lines is open.
    """
    flags = list(flags)
    if not flags:
        return STATUS_OPEN
    if all(flags):
        return STATUS_CLOSED
    if any(flags):
        return STATUS_PENDING
    return STATUS_OPEN


def _load_order_for_update(order_id: str) -> Order:
    order = lock_for_update(db.session.query(Order).filter_by(id=order_id)).first()
    if not order:
        raise NotFoundError("Order not found")
    return order


def _order_context(order: Order, actor: User) -> PolicyContext:
    return PolicyContext(
        actor_id=actor.id,
        owner_id=order.created_by,
        order_status=order.status,
    )


def toggle_fulfillment(order_id: str, line_id: str, actor: User) -> Order:
    """
    Flip one line's fulfillment and recompute the order status.

    Fulfilled -> stamps fulfilled_by/fulfilled_at; unfulfilled -> clears them.
    Raises NotFoundError, PermissionDeniedError or LifecycleError.
    """
    def _do_toggle():
        order = _load_order_for_update(order_id)
        require_action(
            actor,
            TOGGLE_FULFILLMENT,
            _order_context(order, actor),
            resource=f"orders/{order_id}",
        )

        if order.is_force_closed:
            raise LifecycleError("Order was closed by an administrator; fulfillment can no longer change")
        if order.status == STATUS_CANCELLED:
            raise LifecycleError("Cancelled orders cannot be fulfilled")

        line = db.session.query(OrderItem).filter_by(id=line_id, order_id=order.id).first()
        if not line:
            raise NotFoundError("Order line not found")

        if line.is_fulfilled:
            line.is_fulfilled = False
            line.fulfilled_by = None
            line.fulfilled_at = None
        else:
            line.is_fulfilled = True
            line.fulfilled_by = actor.id
            line.fulfilled_at = utcnow()
        db.session.flush()

        flags = [
            fulfilled
            for (fulfilled,) in db.session.query(OrderItem.is_fulfilled).filter_by(order_id=order.id)
        ]
        order.status = derive_status(flags)

        commit_or_raise()
        return order

    return run_with_retry(_do_toggle)


def force_close(order_id: str, actor: User, *, confirm: bool = False) -> Order:
    """
    Admin override: close the order regardless of line fulfillment.

    Requires explicit confirmation. Irreversible.
    """
    def _do_close():
        order = _load_order_for_update(order_id)
        require_action(actor, FORCE_CLOSE_ORDER, resource=f"orders/{order_id}")

        if confirm is not True:
            raise ValidationError("Closing an order requires confirmation", "confirm")
        if order.status == STATUS_CLOSED:
            raise LifecycleError("Order is already closed")
        if order.status == STATUS_CANCELLED:
            raise LifecycleError("Cancelled orders cannot be closed")

        order.status = STATUS_CLOSED
        order.closed_by = actor.id
        order.closed_at = utcnow()

        log_security_event(
            user_id=actor.id,
            event_type="ORDER_FORCE_CLOSED",
            success=True,
            resource=f"orders/{order_id}",
            action=FORCE_CLOSE_ORDER,
            commit=False,
        )
        commit_or_raise()
        return order

    return run_with_retry(_do_close)


def set_authorization(order_id: str, actor: User, is_authorized: bool | None = None) -> Order:
    """
    Flip (or set) the order's authorization flag. Admin only.

    The flag is independent of status and gates nothing else.
    """
    if is_authorized is not None and not isinstance(is_authorized, bool):
        raise ValidationError("is_authorized must be true or false", "is_authorized")

    def _do_set():
        order = _load_order_for_update(order_id)
        require_action(actor, AUTHORIZE_ORDER, resource=f"orders/{order_id}")
        order.is_authorized = (not order.is_authorized) if is_authorized is None else is_authorized
        commit_or_raise()
        return order

    return run_with_retry(_do_set)
