from __future__ import annotations

from ..extensions import db
from ims.time_utils import to_utc_z, utcnow
from .common import ID_LENGTH, new_id


class Client(db.Model):
    """Customer an order is placed for. Managed by Admin only."""
    __tablename__ = "clients"
    __table_args__ = (
        db.Index("ix_clients_name", "name"),
    )

    id = db.Column(db.String(ID_LENGTH), primary_key=True, default=new_id)
    name = db.Column(db.String(255), nullable=False)
    address = db.Column(db.Text, nullable=False, default="")
    phone = db.Column(db.String(32), nullable=False, default="")
    email = db.Column(db.String(255), nullable=False, default="")

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "address": self.address,
            "phone": self.phone,
            "email": self.email,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }
