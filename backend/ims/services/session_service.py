# Overview: Service-layer operations for sessions; encapsulates business logic and database work.

"""
Session Token Management Service

WHY: A session is the durable record of "who is logged in". The client keeps
an opaque token (its only persisted state); the server maps the token's hash
to a user id. Restoring a session re-fetches that user by id.

LIFECYCLE:
- create_session: on successful login
- validate_session: on every authenticated request (session restore)
- revoke_session: on logout
- revoke_all_user_sessions: when a user is deleted

SECURITY FEATURES:
- Cryptographically secure random tokens (32 bytes)
- Tokens hashed with SHA-256 before storage (fast, one-way)
- Absolute timeout from SESSION_TIMEOUT_HOURS
- Revoked on logout, or when the user it belongs to no longer exists
"""

import secrets
import hashlib
from dataclasses import dataclass
from datetime import timedelta

from flask import current_app

from ..extensions import db
from ..models import SessionToken, User
from ims.time_utils import utcnow


DEFAULT_SESSION_TIMEOUT = timedelta(hours=24)


@dataclass
class SessionContext:
    """
    Identity of the caller for the duration of one request.

    Replaces a global "current user": routes receive it from require_auth
    and hand the user to services explicitly.
    """
    user: User
    session: SessionToken

    @property
    def user_id(self) -> str:
        return self.user.id

    @property
    def role(self) -> str:
        return self.user.role


def _session_timeout() -> timedelta:
    hours = current_app.config.get("SESSION_TIMEOUT_HOURS")
    if not hours:
        return DEFAULT_SESSION_TIMEOUT
    return timedelta(hours=float(hours))


def generate_token() -> str:
    """
    Generate cryptographically secure random token.

    Returns 64-character hex string (32 bytes of entropy).
    This is the plaintext token sent to client (never stored).
    """
    return secrets.token_hex(32)


def hash_token(token: str) -> str:
    """
    Hash token for database storage using SHA-256.

    WHY SHA-256 not bcrypt: Tokens are already high-entropy (unlike passwords).
    """
    return hashlib.sha256(token.encode('utf-8')).hexdigest()


def create_session(
    user_id: str,
    user_agent: str | None = None,
    ip_address: str | None = None,
    *,
    commit: bool = True,
) -> tuple[SessionToken, str]:
    """
    Create new session token for user.

    Returns (session_record, plaintext_token).
    Client receives plaintext_token, database stores only the hash.

    Raises ValueError if the user does not exist.
    """
    user = db.session.get(User, user_id)
    if not user:
        raise ValueError("User not found")

    plaintext_token = generate_token()

    now = utcnow()
    session = SessionToken(
        user_id=user_id,
        token_hash=hash_token(plaintext_token),
        created_at=now,
        last_used_at=now,
        expires_at=now + _session_timeout(),
        user_agent=user_agent,
        ip_address=ip_address,
        is_revoked=False,
    )

    db.session.add(session)
    if commit:
        db.session.commit()

    return session, plaintext_token


def _discard(session: SessionToken, reason: str) -> None:
    session.is_revoked = True
    session.revoked_at = utcnow()
    session.revoked_reason = reason
    db.session.commit()


def validate_session(token: str) -> SessionContext | None:
    """
    Restore the session for a token.

    Returns None (caller proceeds unauthenticated) if:
    - Token is unknown, revoked or expired
    - The user it points to no longer exists (the session is discarded)

    Updates last_used_at on success.
    """
    if not token:
        return None

    session = db.session.query(SessionToken).filter_by(
        token_hash=hash_token(token),
        is_revoked=False,
    ).first()

    if not session:
        return None

    now = utcnow()
    if session.expires_at < now:
        _discard(session, "Expired")
        return None

    user = db.session.get(User, session.user_id)
    if not user:
        _discard(session, "User no longer exists")
        return None

    session.last_used_at = now
    db.session.commit()

    return SessionContext(user=user, session=session)


def revoke_session(token: str, reason: str = "User logout") -> bool:
    """
    Revoke session token.

    Returns True if session was revoked, False if not found.
    """
    session = db.session.query(SessionToken).filter_by(
        token_hash=hash_token(token),
        is_revoked=False,
    ).first()

    if not session:
        return False

    _discard(session, reason)
    return True


def revoke_all_user_sessions(user_id: str, reason: str = "Revoke all sessions", *, commit: bool = True) -> int:
    """Revoke all active sessions for a user. Returns count revoked."""
    now = utcnow()

    sessions = db.session.query(SessionToken).filter_by(
        user_id=user_id,
        is_revoked=False,
    ).all()

    for session in sessions:
        session.is_revoked = True
        session.revoked_at = now
        session.revoked_reason = reason

    if commit:
        db.session.commit()
    return len(sessions)


def cleanup_expired_sessions(retention_days: int = 30) -> int:
    """
    Delete expired and revoked sessions older than retention_days.

    Returns count of sessions deleted.
    """
    now = utcnow()
    cutoff = now - timedelta(days=retention_days)

    deleted = db.session.query(SessionToken).filter(
        db.or_(
            SessionToken.expires_at < now,
            SessionToken.is_revoked.is_(True),
        ),
        SessionToken.created_at < cutoff,
    ).delete(synchronize_session=False)

    db.session.commit()
    return deleted
