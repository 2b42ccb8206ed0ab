# Overview: Server-sent events stream for new-order notifications.

"""
Notification Routes

GET /api/notifications/stream keeps a text/event-stream open and pushes one
`new_order` event per order created. Comment lines (": keepalive") are sent
every NOTIFICATION_KEEPALIVE_SECONDS so proxies keep the connection open.

The subscription is closed on every exit path: client disconnect, server
shutdown, or the user losing notification access (revoke_user).

EventSource cannot set headers, so the token may also be passed as
?access_token=...

GET /api/notifications, POST /api/notifications/<id>/read and
POST /api/notifications/clear work on the notifications the caller's open
streams have delivered; each stream keeps the last NOTIFICATION_HISTORY_LIMIT.
"""

from flask import Blueprint, Response, current_app, g, jsonify, json, request, stream_with_context

from ..decorators import bearer_token, error_response, require_action, require_auth
from ..errors import PermissionDeniedError
from ..permissions import RECEIVE_ORDER_NOTIFICATIONS
from ..services import session_service
from ..services.notification_service import broker


notifications_bp = Blueprint("notifications", __name__, url_prefix="/api/notifications")


def _format_event(notification) -> str:
    payload = json.dumps(notification.to_dict())
    return f"id: {notification.id}\nevent: {notification.type}\ndata: {payload}\n\n"


def _event_stream(subscription, keepalive: float):
    with subscription:
        yield ": connected\n\n"
        while not subscription.closed:
            notification = subscription.get(timeout=keepalive)
            if notification is None:
                if subscription.closed:
                    break
                yield ": keepalive\n\n"
                continue
            yield _format_event(notification)


@notifications_bp.get("/stream")
def stream_route():
    token = bearer_token() or request.args.get("access_token")
    if not token:
        return jsonify({"error": "Authentication required"}), 401

    context = session_service.validate_session(token)
    if not context:
        return jsonify({"error": "Invalid or expired token"}), 401

    try:
        subscription = broker.subscribe(
            context.user,
            history_limit=current_app.config.get("NOTIFICATION_HISTORY_LIMIT", 50),
        )
    except PermissionDeniedError as e:
        return error_response(e)

    keepalive = float(current_app.config.get("NOTIFICATION_KEEPALIVE_SECONDS", 15.0))
    response = Response(
        stream_with_context(_event_stream(subscription, keepalive)),
        mimetype="text/event-stream",
    )
    response.headers["Cache-Control"] = "no-cache"
    response.headers["X-Accel-Buffering"] = "no"
    # The generator may never start if the client goes away first
    response.call_on_close(subscription.close)
    return response


@notifications_bp.get("")
@require_auth
@require_action(RECEIVE_ORDER_NOTIFICATIONS)
def list_notifications_route():
    """Notifications held by the caller's open streams, newest first."""
    items = broker.history(g.current_user.id)
    return jsonify({
        "items": [n.to_dict() for n in items],
        "count": len(items),
        "unread": sum(1 for n in items if not n.read),
    })


@notifications_bp.post("/<notification_id>/read")
@require_auth
@require_action(RECEIVE_ORDER_NOTIFICATIONS)
def mark_read_route(notification_id: str):
    if not broker.mark_as_read(g.current_user.id, notification_id):
        return jsonify({"error": "Notification not found"}), 404
    return jsonify({"id": notification_id, "read": True})


@notifications_bp.post("/clear")
@require_auth
@require_action(RECEIVE_ORDER_NOTIFICATIONS)
def clear_route():
    broker.clear_all(g.current_user.id)
    return jsonify({"count": 0})
