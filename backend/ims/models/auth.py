from __future__ import annotations

from ..extensions import db
from ims.time_utils import to_utc_z, utcnow
from .common import ID_LENGTH, new_id


class User(db.Model):
    """
    Staff accounts for authentication and attribution.

    Username is unique case-insensitively (functional index on lower(username));
    the stored value keeps the case it was entered with.

    WHY: Every order, fulfillment and closure is attributed to a user.
    """
    __tablename__ = "users"

    id = db.Column(db.String(ID_LENGTH), primary_key=True, default=new_id)

    username = db.Column(db.String(64), nullable=False, index=True)
    full_name = db.Column(db.String(128), nullable=False)

    # Bcrypt hashed password
    password_hash = db.Column(db.String(255), nullable=False)

    # One of ims.permissions.ROLES: Admin, MANG, CLK, FSSALE
    role = db.Column(db.String(16), nullable=False, index=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)
    last_login_at = db.Column(db.DateTime(timezone=True), nullable=True)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "username": self.username,
            "full_name": self.full_name,
            "role": self.role,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
            "last_login_at": to_utc_z(self.last_login_at) if self.last_login_at else None,
        }

    def to_summary(self) -> dict:
        return {"id": self.id, "username": self.username, "full_name": self.full_name}


db.Index("uq_users_username_lower", db.func.lower(User.username), unique=True)


class SessionToken(db.Model):
    """
    Durable session record.

    The client keeps the plaintext token; the server stores only its SHA-256
    hash and the user id it maps to. Restoring a session re-reads the user by
    id, so deleting a user ends every session they had.

    - Absolute timeout taken from SESSION_TIMEOUT_HOURS
    - Revocable on logout or when the user disappears
    """
    __tablename__ = "session_tokens"
    __table_args__ = (
        db.Index("ix_session_tokens_user_active", "user_id", "is_revoked"),
    )

    id = db.Column(db.String(ID_LENGTH), primary_key=True, default=new_id)

    # Not a foreign key: a session must survive long enough to notice its user was deleted
    user_id = db.Column(db.String(ID_LENGTH), nullable=False, index=True)

    # Token hash (never store plaintext tokens!)
    token_hash = db.Column(db.String(255), nullable=False, unique=True, index=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)
    last_used_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)
    expires_at = db.Column(db.DateTime(timezone=True), nullable=False, index=True)

    is_revoked = db.Column(db.Boolean, nullable=False, default=False, index=True)
    revoked_at = db.Column(db.DateTime(timezone=True), nullable=True)
    revoked_reason = db.Column(db.String(255), nullable=True)

    # Client information (for security monitoring)
    user_agent = db.Column(db.String(512), nullable=True)
    ip_address = db.Column(db.String(45), nullable=True)  # IPv6 max length

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "created_at": to_utc_z(self.created_at),
            "last_used_at": to_utc_z(self.last_used_at),
            "expires_at": to_utc_z(self.expires_at),
            "is_revoked": self.is_revoked,
            "revoked_at": to_utc_z(self.revoked_at) if self.revoked_at else None,
        }
