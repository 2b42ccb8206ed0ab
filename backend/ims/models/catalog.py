from __future__ import annotations

from ..extensions import db
from ims.time_utils import to_utc_z, utcnow
from .common import ID_LENGTH, new_id


class Item(db.Model):
    """
    Catalogue item. Owns its shades; deleting an item deletes them.

    track_inventory=False means shade stock counts are stored but not
    meaningful for display.
    """
    __tablename__ = "items"
    __table_args__ = (
        db.Index("ix_items_name", "name"),
    )

    id = db.Column(db.String(ID_LENGTH), primary_key=True, default=new_id)
    name = db.Column(db.String(255), nullable=False)
    photo_url = db.Column(db.String(1024), nullable=False, default="")
    description = db.Column(db.Text, nullable=False, default="")
    track_inventory = db.Column(db.Boolean, nullable=False, default=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    shades = db.relationship(
        "Shade",
        back_populates="item",
        cascade="all, delete-orphan",
        order_by="Shade.shade_number",
        lazy=True,
    )

    def to_dict(self, include_shades: bool = True) -> dict:
        data = {
            "id": self.id,
            "name": self.name,
            "photo_url": self.photo_url,
            "description": self.description,
            "track_inventory": self.track_inventory,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }
        if include_shades:
            data["shades"] = [shade.to_dict() for shade in self.shades]
        return data


class Shade(db.Model):
    """A variant (colour/size) of an item with its own stock count."""
    __tablename__ = "shades"
    __table_args__ = (
        db.CheckConstraint("stock_count >= 0", name="ck_shades_stock_nonnegative"),
    )

    id = db.Column(db.String(ID_LENGTH), primary_key=True, default=new_id)
    item_id = db.Column(db.String(ID_LENGTH), db.ForeignKey("items.id", ondelete="CASCADE"), nullable=False, index=True)
    shade_number = db.Column(db.String(64), nullable=False)
    shade_name = db.Column(db.String(255), nullable=False, default="")
    stock_count = db.Column(db.Integer, nullable=False, default=0)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    item = db.relationship("Item", back_populates="shades")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "item_id": self.item_id,
            "shade_number": self.shade_number,
            "shade_name": self.shade_name,
            "stock_count": self.stock_count,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }
