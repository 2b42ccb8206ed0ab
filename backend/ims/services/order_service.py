# Overview: Service-layer operations for orders; encapsulates business logic and database work.

"""
Order Composition

WHY: An order and its lines are one document. They are written in a single
transaction so a failure can never leave an order without its lines.

RULES:
- A client and at least one line are required
- Each line's shade must belong to its item
- amount = quantity * rate (2 dp); total_amount = sum of line amounts
- New orders start open and unauthorized, created_by = actor
- The order number comes from the ORDER document sequence

After the commit, the notification feed announces the new order.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal

from ..extensions import db
from ..errors import NotFoundError, ValidationError
from ..models import Client, Item, Order, OrderItem, Shade, User
from ..models.orders import STATUS_OPEN, STATUS_PENDING
from ..permissions import (
    CREATE_ORDER,
    EDIT_ORDER,
    VIEW_ALL_ORDERS,
    VIEW_FULFILLER,
    PolicyContext,
    allowed_actions,
)
from ..validation import MONEY_QUANT, enforce_rules_order_line
from ims.time_utils import parse_iso_date, today
from .concurrency import commit_or_raise, lock_for_update, run_with_retry
from .document_service import next_order_number
from .notification_service import broker
from .permission_service import require_action, user_can


MAX_NOTES_LENGTH = 5000


def _require_client(client_id) -> Client:
    if not client_id:
        raise ValidationError("Please select a client", "client_id")
    client = db.session.get(Client, client_id)
    if not client:
        raise ValidationError("Client not found", "client_id")
    return client


def _parse_order_date(value) -> date:
    if value is None or value == "":
        return today()
    if isinstance(value, date):
        return value
    try:
        parsed = parse_iso_date(str(value))
    except ValueError:
        parsed = None
    if parsed is None:
        raise ValidationError("order_date must be an ISO-8601 date (YYYY-MM-DD)", "order_date")
    return parsed


def _clean_notes(value) -> str:
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValidationError("notes must be text", "notes")
    notes = value.strip()
    if len(notes) > MAX_NOTES_LENGTH:
        raise ValidationError(f"notes exceeds max length {MAX_NOTES_LENGTH}", "notes")
    return notes


def _build_lines(lines) -> list[OrderItem]:
    """Validate submitted lines and build (unsaved) OrderItem rows."""
    if not isinstance(lines, list) or not lines:
        raise ValidationError("Please add at least one item", "order_items")

    built = []
    for index, raw in enumerate(lines):
        if not isinstance(raw, dict):
            raise ValidationError(f"Line {index + 1} is invalid", "order_items")

        item = db.session.get(Item, raw.get("item_id")) if raw.get("item_id") else None
        if not item:
            raise ValidationError(f"Line {index + 1}: item not found", "item_id")

        shade = db.session.get(Shade, raw.get("shade_id")) if raw.get("shade_id") else None
        if not shade or shade.item_id != item.id:
            raise ValidationError(f"Line {index + 1}: shade not found for this item", "shade_id")

        quantity, rate = enforce_rules_order_line(raw.get("quantity"), raw.get("rate"))
        amount = (Decimal(quantity) * rate).quantize(MONEY_QUANT)

        built.append(OrderItem(
            item_id=item.id,
            shade_id=shade.id,
            quantity=quantity,
            rate=rate,
            amount=amount,
            is_fulfilled=False,
        ))
    return built


def _total(lines: list[OrderItem]) -> Decimal:
    return sum((line.amount for line in lines), Decimal("0.00"))


def create_order(
    actor: User,
    client_id: str,
    lines: list,
    order_date=None,
    notes: str | None = "",
) -> Order:
    """
    Create an order with its lines in one transaction.

    Raises PermissionDeniedError or ValidationError; nothing is written on
    failure.
    """
    require_action(actor, CREATE_ORDER, PolicyContext(is_creating=True), resource="orders")

    client = _require_client(client_id)
    parsed_date = _parse_order_date(order_date)
    clean_notes = _clean_notes(notes)
    order_lines = _build_lines(lines)

    # Allocated before the order is staged; rolled back with it on failure
    order_number = next_order_number()

    order = Order(
        order_number=order_number,
        client_id=client.id,
        created_by=actor.id,
        order_date=parsed_date,
        status=STATUS_OPEN,
        total_amount=_total(order_lines),
        notes=clean_notes,
        is_authorized=False,
    )
    order.lines = order_lines
    db.session.add(order)
    commit_or_raise()

    broker.publish_order_created(order.to_dict())
    return order


def update_order(actor: User, order_id: str, payload: dict | None) -> Order:
    """
    Replace an order's client, date, notes and/or lines.

    Only the creator may edit, and only while the order is open. Replacing
    lines resets their fulfillment; total_amount is recomputed.
    """
    payload = payload or {}
    if not isinstance(payload, dict):
        raise ValidationError("Invalid JSON payload")

    allowed = {"client_id", "order_date", "notes", "order_items"}
    for key in payload:
        if key not in allowed:
            raise ValidationError(f"Field not allowed: {key}", key)

    def _do_update():
        # The open-status check and the write happen under the row lock
        order = lock_for_update(db.session.query(Order).filter_by(id=order_id)).first()
        if not order:
            raise NotFoundError("Order not found")

        require_action(
            actor,
            EDIT_ORDER,
            PolicyContext(actor_id=actor.id, owner_id=order.created_by, order_status=order.status),
            resource=f"orders/{order_id}",
        )

        if "client_id" in payload:
            order.client_id = _require_client(payload["client_id"]).id
        if "order_date" in payload:
            order.order_date = _parse_order_date(payload["order_date"])
        if "notes" in payload:
            order.notes = _clean_notes(payload["notes"])
        if "order_items" in payload:
            order.lines = _build_lines(payload["order_items"])
            order.total_amount = _total(order.lines)

        commit_or_raise()
        return order

    return run_with_retry(_do_update)


def _visible_orders_query(actor: User):
    query = db.session.query(Order)
    if not user_can(actor, VIEW_ALL_ORDERS):
        query = query.filter(Order.created_by == actor.id)
    return query


def list_orders(actor: User, status: str | None = None) -> list[Order]:
    """Newest first. Roles without VIEW_ALL_ORDERS see only their own orders."""
    query = _visible_orders_query(actor)
    if status:
        query = query.filter(Order.status == status)
    return query.order_by(Order.created_at.desc(), Order.order_number.desc()).all()


def get_order(actor: User, order_id: str) -> Order:
    """Orders outside the actor's view are reported as not found."""
    order = _visible_orders_query(actor).filter(Order.id == order_id).first()
    if not order:
        raise NotFoundError("Order not found")
    return order


def pending_orders_for_client(client_id: str, exclude_order_id: str | None = None) -> list[Order]:
    """
    Other open/pending orders of the same client, newest first.

    Advisory only: shown while composing an order, never blocks it.
    """
    if not client_id:
        raise ValidationError("client_id is required", "client_id")
    query = db.session.query(Order).filter(
        Order.client_id == client_id,
        Order.status.in_((STATUS_OPEN, STATUS_PENDING)),
    )
    if exclude_order_id:
        query = query.filter(Order.id != exclude_order_id)
    return query.order_by(Order.created_at.desc(), Order.order_number.desc()).all()


def serialize_order(order: Order, actor: User, *, include_lines: bool = True) -> dict:
    """Order dict as the actor may see it, plus the actions allowed on it."""
    data = order.to_dict(
        include_lines=include_lines,
        show_fulfiller=user_can(actor, VIEW_FULFILLER),
    )
    ctx = PolicyContext(actor_id=actor.id, owner_id=order.created_by, order_status=order.status)
    data["allowed_actions"] = allowed_actions(actor.role, ctx)
    return data


def pending_summary(order: Order) -> dict:
    data = order.to_dict(include_lines=False)
    data["unfulfilled_count"] = sum(1 for line in order.lines if not line.is_fulfilled)
    data["line_count"] = len(order.lines)
    return data
