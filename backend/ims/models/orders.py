from __future__ import annotations

from ..extensions import db
from ims.time_utils import to_utc_z, utcnow
from .common import ID_LENGTH, new_id, money_str


STATUS_OPEN = "open"
STATUS_PENDING = "pending"
STATUS_CLOSED = "closed"
STATUS_CANCELLED = "cancelled"
ORDER_STATUSES = (STATUS_OPEN, STATUS_PENDING, STATUS_CLOSED, STATUS_CANCELLED)


class Order(db.Model):
    """
    Client order (document header).

    WHY: Status is derived from line fulfillment (see fulfillment_service),
    except for an Admin force-close which stamps closed_by/closed_at and is
    terminal.

    total_amount is a stored cache of sum(line.amount), recomputed whenever the
    lines are written.
    """
    __tablename__ = "orders"
    __table_args__ = (
        db.UniqueConstraint("order_number", name="uq_orders_order_number"),
        db.Index("ix_orders_client_status", "client_id", "status"),
        db.Index("ix_orders_created_by", "created_by"),
        db.Index("ix_orders_created_at", "created_at"),
    )

    id = db.Column(db.String(ID_LENGTH), primary_key=True, default=new_id)

    # Human-readable document number (e.g., "ORD-000123")
    order_number = db.Column(db.String(32), nullable=False)

    client_id = db.Column(db.String(ID_LENGTH), db.ForeignKey("clients.id"), nullable=False)
    created_by = db.Column(db.String(ID_LENGTH), db.ForeignKey("users.id"), nullable=False)

    order_date = db.Column(db.Date, nullable=False)
    status = db.Column(db.String(16), nullable=False, default=STATUS_OPEN, index=True)
    total_amount = db.Column(db.Numeric(12, 2), nullable=False, default=0)
    notes = db.Column(db.Text, nullable=False, default="")
    is_authorized = db.Column(db.Boolean, nullable=False, default=False)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    # Force-close audit trail (Admin only)
    closed_by = db.Column(db.String(ID_LENGTH), db.ForeignKey("users.id"), nullable=True)
    closed_at = db.Column(db.DateTime(timezone=True), nullable=True)

    version_id = db.Column(db.Integer, nullable=False, default=1)

    client = db.relationship("Client", backref=db.backref("orders", lazy=True))
    creator = db.relationship("User", foreign_keys=[created_by])
    closer = db.relationship("User", foreign_keys=[closed_by])
    lines = db.relationship(
        "OrderItem",
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="OrderItem.created_at",
        lazy=True,
    )
    __mapper_args__ = {"version_id_col": version_id}

    @property
    def is_force_closed(self) -> bool:
        return self.status == STATUS_CLOSED and self.closed_by is not None

    def to_dict(self, *, include_lines: bool = True, show_fulfiller: bool = False) -> dict:
        data = {
            "id": self.id,
            "order_number": self.order_number,
            "client_id": self.client_id,
            "client": self.client.to_dict() if self.client else None,
            "created_by": self.created_by,
            "creator": self.creator.to_summary() if self.creator else None,
            "order_date": self.order_date.isoformat() if self.order_date else None,
            "status": self.status,
            "total_amount": money_str(self.total_amount),
            "notes": self.notes,
            "is_authorized": self.is_authorized,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
            "closed_by": self.closed_by,
            "closer": self.closer.to_summary() if self.closer else None,
            "closed_at": to_utc_z(self.closed_at) if self.closed_at else None,
        }
        if include_lines:
            data["order_items"] = [line.to_dict(show_fulfiller=show_fulfiller) for line in self.lines]
            data["unfulfilled_count"] = sum(1 for line in self.lines if not line.is_fulfilled)
            data["line_count"] = len(self.lines)
        return data


class OrderItem(db.Model):
    """One (item, shade, quantity, rate) line of an order."""
    __tablename__ = "order_items"
    __table_args__ = (
        db.CheckConstraint("quantity > 0", name="ck_order_items_quantity_positive"),
        db.CheckConstraint("rate >= 0", name="ck_order_items_rate_nonnegative"),
    )

    id = db.Column(db.String(ID_LENGTH), primary_key=True, default=new_id)
    order_id = db.Column(db.String(ID_LENGTH), db.ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True)
    item_id = db.Column(db.String(ID_LENGTH), db.ForeignKey("items.id"), nullable=False, index=True)
    shade_id = db.Column(db.String(ID_LENGTH), db.ForeignKey("shades.id"), nullable=False, index=True)

    quantity = db.Column(db.Integer, nullable=False)
    rate = db.Column(db.Numeric(12, 2), nullable=False)
    amount = db.Column(db.Numeric(14, 2), nullable=False)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)

    is_fulfilled = db.Column(db.Boolean, nullable=False, default=False)
    fulfilled_by = db.Column(db.String(ID_LENGTH), db.ForeignKey("users.id"), nullable=True)
    fulfilled_at = db.Column(db.DateTime(timezone=True), nullable=True)

    order = db.relationship("Order", back_populates="lines")
    item = db.relationship("Item")
    shade = db.relationship("Shade")
    fulfiller = db.relationship("User", foreign_keys=[fulfilled_by])

    def to_dict(self, *, show_fulfiller: bool = False) -> dict:
        data = {
            "id": self.id,
            "order_id": self.order_id,
            "item_id": self.item_id,
            "item_name": self.item.name if self.item else None,
            "shade_id": self.shade_id,
            "shade_number": self.shade.shade_number if self.shade else None,
            "shade_name": self.shade.shade_name if self.shade else None,
            "quantity": self.quantity,
            "rate": money_str(self.rate),
            "amount": money_str(self.amount),
            "created_at": to_utc_z(self.created_at),
            "is_fulfilled": self.is_fulfilled,
            "fulfilled_at": to_utc_z(self.fulfilled_at) if self.fulfilled_at else None,
        }
        # Fulfiller identity is Admin-only information
        if show_fulfiller:
            data["fulfilled_by"] = self.fulfilled_by
            data["fulfiller"] = self.fulfiller.to_summary() if self.fulfiller else None
        return data


class DocumentSequence(db.Model):
    """
    Atomic per-type document sequences.

    WHY: Prevent race conditions when generating order numbers.
    """
    __tablename__ = "document_sequences"
    __table_args__ = (
        db.UniqueConstraint("document_type", name="uq_doc_sequences_type"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    document_type = db.Column(db.String(32), nullable=False, index=True)
    next_number = db.Column(db.Integer, nullable=False, default=1)
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "document_type": self.document_type,
            "next_number": self.next_number,
            "updated_at": to_utc_z(self.updated_at),
        }
