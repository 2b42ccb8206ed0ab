# Overview: Service-layer authorization checks and security event logging.

"""
Authorization Enforcement and Security Event Logging

WHY: The role policy (ims.permissions.can_perform) is a pure function; this
module is where it meets the database. Services call require_action() before
any write so the policy is enforced server-side, not only by hiding UI
controls. Denials are written to security_events.

DESIGN PRINCIPLES:
- Fail closed: unknown role or action is denied
- Log denials only: grants are not logged
"""

from __future__ import annotations

from ..extensions import db
from ..errors import PermissionDeniedError
from ..models import SecurityEvent, User
from ..permissions import PolicyContext, can_perform, get_action_definition
from ims.time_utils import utcnow


def log_security_event(
    user_id: str | None,
    event_type: str,
    success: bool,
    resource: str | None = None,
    action: str | None = None,
    reason: str | None = None,
    ip_address: str | None = None,
    user_agent: str | None = None,
    commit: bool = True,
) -> SecurityEvent:
    """
    Append a security event to the audit trail.

    event_type examples:
    - LOGIN_FAILED
    - LOGIN_SUCCEEDED
    - LOGOUT
    - PERMISSION_DENIED
    - USER_CREATED / USER_UPDATED / USER_DELETED
    - ORDER_FORCE_CLOSED
    """
    event = SecurityEvent(
        user_id=user_id,
        event_type=event_type,
        resource=resource,
        action=action,
        success=success,
        reason=reason,
        ip_address=ip_address,
        user_agent=user_agent,
        occurred_at=utcnow(),
    )

    db.session.add(event)
    if commit:
        db.session.commit()

    return event


def user_can(user: User | None, action: str, context: PolicyContext | None = None) -> bool:
    if user is None:
        return False
    if context is not None and context.actor_id is None:
        context = PolicyContext(
            actor_id=user.id,
            owner_id=context.owner_id,
            is_creating=context.is_creating,
            order_status=context.order_status,
        )
    return can_perform(user.role, action, context)


def require_action(
    user: User | None,
    action: str,
    context: PolicyContext | None = None,
    *,
    resource: str | None = None,
    ip_address: str | None = None,
    user_agent: str | None = None,
) -> None:
    """
    Raise PermissionDeniedError (and log it) if the user may not perform action.

    The denial event is committed on its own, before the caller has staged
    any writes.
    """
    if user_can(user, action, context):
        return

    definition = get_action_definition(action)
    label = definition["name"] if definition else action
    role = user.role if user else None

    log_security_event(
        user_id=user.id if user else None,
        event_type="PERMISSION_DENIED",
        success=False,
        resource=resource,
        action=action,
        reason=f"Role {role} may not perform {action}",
        ip_address=ip_address,
        user_agent=user_agent,
    )

    raise PermissionDeniedError(f"Not allowed: {label}", action=action)
