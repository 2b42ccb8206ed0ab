# Overview: Service-layer operations for auth and user accounts; encapsulates business logic and database work.

"""
Authentication Gate and User Accounts

WHY: Every order, fulfillment and closure is attributed to a user. Login is a
two-step challenge:

1. check_username(): find exactly one user whose username matches
   case-insensitively, or fail with UsernameNotFound.
2. login(): compare the submitted password against that user's stored
   credential; on success a session is established (see session_service.py).

SECURITY NOTES:
- Passwords hashed with bcrypt (cost factor from BCRYPT_ROUNDS)
- bcrypt.checkpw is an exact, case-sensitive comparison
- A failed login never says which field was wrong
- No lockout/backoff
"""

from __future__ import annotations

from dataclasses import dataclass

import bcrypt
from flask import current_app
from sqlalchemy.exc import IntegrityError

from ..extensions import db
from ..errors import (
    ConflictError,
    InvalidCredential,
    NotFoundError,
    UniqueConstraintViolation,
    UsernameNotFound,
    ValidationError,
)
from ..models import Order, OrderItem, SessionToken, User
from ..permissions import ADMIN, RECEIVE_ORDER_NOTIFICATIONS, can_perform, validate_role
from ..validation import ModelValidationPolicy, enforce_rules_user, validate_payload
from ims.time_utils import utcnow
from . import session_service
from .concurrency import commit_or_raise
from .notification_service import broker
from .permission_service import log_security_event


USER_POLICY = ModelValidationPolicy(
    writable_fields={"username", "full_name", "role"},
    required_on_create={"username", "full_name", "role"},
)


@dataclass
class LoginResult:
    ok: bool
    token: str | None = None
    session: SessionToken | None = None

    def __bool__(self) -> bool:
        return self.ok


def hash_password(password: str) -> str:
    """Hash password using bcrypt; cost factor comes from BCRYPT_ROUNDS."""
    rounds = current_app.config.get("BCRYPT_ROUNDS", 12)
    salt = bcrypt.gensalt(rounds=rounds)
    hashed = bcrypt.hashpw(password.encode('utf-8'), salt)
    return hashed.decode('utf-8')  # Store as string in database


def verify_password(password: str, password_hash: str) -> bool:
    """
    Verify password against bcrypt hash.

    WHY timing-safe: bcrypt.checkpw() prevents timing attacks automatically.
    A malformed stored hash verifies as False.
    """
    if not password or not password_hash:
        return False
    try:
        return bcrypt.checkpw(password.encode('utf-8'), password_hash.encode('utf-8'))
    except ValueError:
        return False


def find_user_by_username(username: str | None) -> User | None:
    name = (username or "").strip()
    if not name:
        return None
    return db.session.query(User).filter(
        db.func.lower(User.username) == name.lower()
    ).first()


def get_user_by_id(user_id: str) -> User | None:
    if not user_id:
        return None
    return db.session.get(User, user_id)


def check_username(username: str | None) -> User:
    """
    Step 1 of login. Returns the candidate user (not yet authenticated).

    Raises UsernameNotFound if no username matches case-insensitively.
    """
    user = find_user_by_username(username)
    if not user:
        raise UsernameNotFound("Username not found")
    return user


def login(
    user: User,
    password: str | None,
    *,
    user_agent: str | None = None,
    ip_address: str | None = None,
) -> LoginResult:
    """
    Step 2 of login.

    Returns a truthy LoginResult carrying the plaintext session token on
    success; a falsy one (and a LOGIN_FAILED event) otherwise.
    """
    if not verify_password(password or "", user.password_hash):
        log_security_event(
            user_id=user.id,
            event_type="LOGIN_FAILED",
            success=False,
            reason="Invalid credentials",
            ip_address=ip_address,
            user_agent=user_agent,
        )
        return LoginResult(ok=False)

    user.last_login_at = utcnow()
    session, token = session_service.create_session(
        user.id,
        user_agent=user_agent,
        ip_address=ip_address,
        commit=False,
    )
    log_security_event(
        user_id=user.id,
        event_type="LOGIN_SUCCEEDED",
        success=True,
        ip_address=ip_address,
        user_agent=user_agent,
        commit=False,
    )
    commit_or_raise()
    return LoginResult(ok=True, token=token, session=session)


def authenticate(username: str, password: str, **client) -> LoginResult:
    """
    Both steps in one call.

    Raises UsernameNotFound or InvalidCredential; used by the CLI and by
    callers that want exceptions instead of a boolean.
    """
    user = check_username(username)
    result = login(user, password, **client)
    if not result:
        raise InvalidCredential("Invalid credentials")
    return result


def list_users() -> list[User]:
    return db.session.query(User).order_by(User.full_name.asc(), User.username.asc()).all()


def get_user(user_id: str) -> User:
    user = get_user_by_id(user_id)
    if not user:
        raise NotFoundError("User not found")
    return user


def _username_taken(username: str, exclude_id: str | None = None) -> bool:
    query = db.session.query(User.id).filter(
        db.func.lower(User.username) == username.lower()
    )
    if exclude_id:
        query = query.filter(User.id != exclude_id)
    return query.first() is not None


def _clean_user_payload(payload: dict | None, *, creating: bool) -> tuple[dict, str | None]:
    payload = dict(payload or {})
    password = payload.pop("password", None)
    if password is not None and not isinstance(password, str):
        raise ValidationError("password must be a string", "password")

    patch = validate_payload(model=User, payload=payload, policy=USER_POLICY, partial=not creating)
    enforce_rules_user({**patch, "password": password}, creating=creating)

    if "role" in patch and not validate_role(patch["role"]):
        raise ValidationError(f"Unknown role: {patch['role']}", "role")
    return patch, password


def create_user(payload: dict | None) -> User:
    """
    Create a staff account.

    Username uniqueness is case-insensitive; the stored value keeps its case.
    Raises ValidationError or UniqueConstraintViolation.
    """
    patch, password = _clean_user_payload(payload, creating=True)

    if _username_taken(patch["username"]):
        raise UniqueConstraintViolation("Username already exists")

    user = User(password_hash=hash_password(password), **patch)
    db.session.add(user)
    try:
        commit_or_raise()
    except IntegrityError:
        # Lost a race with a concurrent insert of the same username
        raise UniqueConstraintViolation("Username already exists")
    return user


def update_user(user_id: str, payload: dict | None) -> User:
    """Patch a user. Password is changed only when a non-empty one is sent."""
    user = get_user(user_id)
    patch, password = _clean_user_payload(payload, creating=False)

    if "username" in patch and _username_taken(patch["username"], exclude_id=user.id):
        raise UniqueConstraintViolation("Username already exists")

    was_eligible = can_perform(user.role, RECEIVE_ORDER_NOTIFICATIONS)

    for key, value in patch.items():
        setattr(user, key, value)
    if password:
        user.password_hash = hash_password(password)

    try:
        commit_or_raise()
    except IntegrityError:
        raise UniqueConstraintViolation("Username already exists")

    if was_eligible and not can_perform(user.role, RECEIVE_ORDER_NOTIFICATIONS):
        broker.revoke_user(user.id)
    return user


def _is_referenced(user_id: str) -> bool:
    if db.session.query(Order.id).filter(
        db.or_(Order.created_by == user_id, Order.closed_by == user_id)
    ).first():
        return True
    return db.session.query(OrderItem.id).filter(OrderItem.fulfilled_by == user_id).first() is not None


def delete_user(user_id: str, *, actor: User) -> None:
    """
    Delete a user. Never the acting user, never one that orders point to.

    Live sessions and notification subscriptions of the user end with it.
    """
    user = get_user(user_id)
    if user.id == actor.id:
        raise ConflictError("You cannot delete your own account")
    if _is_referenced(user.id):
        raise ConflictError("User has orders or fulfillments and cannot be deleted")

    session_service.revoke_all_user_sessions(user.id, reason="User deleted", commit=False)
    db.session.delete(user)
    commit_or_raise()
    broker.revoke_user(user_id)


def ensure_bootstrap_admin(username: str, password: str, full_name: str = "Administrator") -> User | None:
    """
    Create the first Admin if no Admin exists yet.

    Returns the created user, or None when an Admin is already present.
    """
    if db.session.query(User.id).filter(User.role == ADMIN).first():
        return None
    return create_user({
        "username": username,
        "full_name": full_name,
        "role": ADMIN,
        "password": password,
    })
