# Overview: Flask API routes for orders and fulfillment; parses input and returns JSON responses.

"""
Order Routes

SECURITY: All routes require authentication. The role policy is checked in
the services with the order in hand, because several rules depend on who
created the order:
- Create: MANG, FSSALE
- Edit: FSSALE, own open orders only
- Toggle line fulfillment: Admin, MANG, CLK; FSSALE on own orders
- Force-close / authorize: Admin
- FSSALE lists and reads only its own orders
"""

from flask import Blueprint, request, jsonify, current_app, g

from ..decorators import DOMAIN_ERRORS, error_response, require_auth
from ..services import fulfillment_service, order_service


orders_bp = Blueprint("orders", __name__, url_prefix="/api/orders")


@orders_bp.get("")
@require_auth
def list_orders_route():
    """
    Query parameters:
    - status: open | pending | closed | cancelled (optional)

    Returns:
        {items: Order[], count: int}, newest first
    """
    status = request.args.get("status") or None
    orders = order_service.list_orders(g.current_user, status=status)
    return jsonify({
        "items": [order_service.serialize_order(o, g.current_user) for o in orders],
        "count": len(orders),
    })


@orders_bp.post("")
@require_auth
def create_order_route():
    """
    Request body:
    {
        "client_id": "...",            // required
        "order_date": "2024-05-01",    // optional, default today (UTC)
        "notes": "...",                // optional
        "order_items": [               // at least one
            {"item_id": "...", "shade_id": "...", "quantity": 3, "rate": "10.00"}
        ]
    }
    """
    try:
        data = request.get_json(silent=True) or {}
        order = order_service.create_order(
            g.current_user,
            client_id=data.get("client_id"),
            lines=data.get("order_items"),
            order_date=data.get("order_date"),
            notes=data.get("notes"),
        )
        return jsonify(order_service.serialize_order(order, g.current_user)), 201
    except DOMAIN_ERRORS as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to create order")
        return jsonify({"error": "Internal server error"}), 500


@orders_bp.get("/pending")
@require_auth
def pending_orders_route():
    """
    Other open/pending orders of a client, for the advisory list shown
    while composing an order.

    Query parameters:
    - client_id: required
    - exclude: order id to leave out (the one being edited)
    """
    try:
        orders = order_service.pending_orders_for_client(
            request.args.get("client_id"),
            exclude_order_id=request.args.get("exclude") or None,
        )
        return jsonify({
            "items": [order_service.pending_summary(o) for o in orders],
            "count": len(orders),
        })
    except DOMAIN_ERRORS as e:
        return error_response(e)


@orders_bp.get("/<order_id>")
@require_auth
def get_order_route(order_id: str):
    try:
        order = order_service.get_order(g.current_user, order_id)
        return jsonify(order_service.serialize_order(order, g.current_user))
    except DOMAIN_ERRORS as e:
        return error_response(e)


@orders_bp.patch("/<order_id>")
@require_auth
def update_order_route(order_id: str):
    """Replace client, order_date, notes and/or order_items."""
    try:
        order = order_service.update_order(g.current_user, order_id, request.get_json(silent=True))
        return jsonify(order_service.serialize_order(order, g.current_user))
    except DOMAIN_ERRORS as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to update order")
        return jsonify({"error": "Internal server error"}), 500


@orders_bp.post("/<order_id>/lines/<line_id>/toggle")
@require_auth
def toggle_line_route(order_id: str, line_id: str):
    """
    Flip one line's fulfillment; the order status follows.

    409 if the order was force-closed or cancelled.
    """
    try:
        order = fulfillment_service.toggle_fulfillment(order_id, line_id, g.current_user)
        return jsonify(order_service.serialize_order(order, g.current_user))
    except DOMAIN_ERRORS as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to toggle order line")
        return jsonify({"error": "Internal server error"}), 500


@orders_bp.post("/<order_id>/close")
@require_auth
def force_close_route(order_id: str):
    """
    Admin force-close. Body must be {"confirm": true}.
    """
    try:
        data = request.get_json(silent=True) or {}
        order = fulfillment_service.force_close(
            order_id,
            g.current_user,
            confirm=data.get("confirm") is True,
        )
        return jsonify(order_service.serialize_order(order, g.current_user))
    except DOMAIN_ERRORS as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to close order")
        return jsonify({"error": "Internal server error"}), 500


@orders_bp.post("/<order_id>/authorize")
@require_auth
def authorize_route(order_id: str):
    """
    Body: {"is_authorized": true|false}, or empty to flip the flag.
    """
    try:
        data = request.get_json(silent=True) or {}
        order = fulfillment_service.set_authorization(
            order_id,
            g.current_user,
            data.get("is_authorized"),
        )
        return jsonify(order_service.serialize_order(order, g.current_user))
    except DOMAIN_ERRORS as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to update order authorization")
        return jsonify({"error": "Internal server error"}), 500
