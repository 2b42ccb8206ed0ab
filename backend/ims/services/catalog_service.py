# Overview: Service-layer operations for items and shades; encapsulates business logic and database work.

"""
Catalogue Service

WHY: Items are what orders are made of; each item owns its shades (colour or
size variants) and each shade carries its own stock count.

DESIGN:
- Shades live and die with their item (delete item -> delete shades)
- Shades are written through their item: upsert by id, delete by id
- Items or shades that order lines point to cannot be deleted
- stock_count is stored even when track_inventory is false
"""

from __future__ import annotations

from ..extensions import db
from ..errors import ConflictError, NotFoundError, ValidationError
from ..models import Item, OrderItem, Shade
from ..validation import ModelValidationPolicy, enforce_rules_shade, validate_payload
from .concurrency import commit_or_raise


ITEM_POLICY = ModelValidationPolicy(
    writable_fields={"name", "photo_url", "description", "track_inventory"},
    required_on_create={"name"},
)

SHADE_POLICY = ModelValidationPolicy(
    writable_fields={"shade_number", "shade_name", "stock_count"},
    required_on_create={"shade_number"},
)


def list_items() -> list[Item]:
    return db.session.query(Item).order_by(Item.name.asc()).all()


def get_item(item_id: str) -> Item:
    item = db.session.get(Item, item_id)
    if not item:
        raise NotFoundError("Item not found")
    return item


def _split_item_payload(payload: dict | None) -> tuple[dict, list | None]:
    if payload is None:
        payload = {}
    if not isinstance(payload, dict):
        raise ValidationError("Invalid JSON payload")
    payload = dict(payload)
    shades = payload.pop("shades", None)
    if shades is not None and not isinstance(shades, list):
        raise ValidationError("shades must be a list", "shades")
    return payload, shades


def _validated_shade(raw, *, partial: bool) -> dict:
    if not isinstance(raw, dict):
        raise ValidationError("Each shade must be an object", "shades")
    raw = {k: v for k, v in raw.items() if k != "id"}
    patch = validate_payload(model=Shade, payload=raw, policy=SHADE_POLICY, partial=partial)
    enforce_rules_shade(patch)
    return patch


def create_item(payload: dict | None) -> Item:
    """Create an item, optionally with its initial shades."""
    item_payload, shades = _split_item_payload(payload)
    patch = validate_payload(model=Item, payload=item_payload, policy=ITEM_POLICY, partial=False)
    if not patch.get("name"):
        raise ValidationError("Name is required", "name")

    item = Item(**patch)
    for raw in shades or []:
        item.shades.append(Shade(**_validated_shade(raw, partial=False)))

    db.session.add(item)
    commit_or_raise()
    return item


def update_item(item_id: str, payload: dict | None) -> Item:
    item = get_item(item_id)
    item_payload, shades = _split_item_payload(payload)
    patch = validate_payload(model=Item, payload=item_payload, policy=ITEM_POLICY, partial=True)
    if "name" in patch and not patch["name"]:
        raise ValidationError("Name is required", "name")

    for key, value in patch.items():
        setattr(item, key, value)
    if shades is not None:
        _apply_shades(item, shades)

    commit_or_raise()
    return item


def _apply_shades(item: Item, shades: list) -> None:
    by_id = {shade.id: shade for shade in item.shades}
    for raw in shades:
        shade_id = raw.get("id") if isinstance(raw, dict) else None
        if shade_id:
            shade = by_id.get(shade_id)
            if not shade:
                raise NotFoundError("Shade not found")
            for key, value in _validated_shade(raw, partial=True).items():
                setattr(shade, key, value)
        else:
            item.shades.append(Shade(**_validated_shade(raw, partial=False)))


def upsert_shades(item_id: str, shades) -> Item:
    """Update shades that carry an id, add the ones that don't."""
    item = get_item(item_id)
    if not isinstance(shades, list):
        raise ValidationError("shades must be a list", "shades")
    _apply_shades(item, shades)
    commit_or_raise()
    return item


def _shade_in_use(shade_ids) -> bool:
    if not shade_ids:
        return False
    return db.session.query(OrderItem.id).filter(OrderItem.shade_id.in_(shade_ids)).first() is not None


def delete_shade(item_id: str, shade_id: str) -> None:
    item = get_item(item_id)
    shade = next((s for s in item.shades if s.id == shade_id), None)
    if not shade:
        raise NotFoundError("Shade not found")
    if _shade_in_use([shade.id]):
        raise ConflictError("Shade is used by orders and cannot be deleted")
    item.shades.remove(shade)
    commit_or_raise()


def delete_item(item_id: str) -> None:
    """Delete an item and its shades."""
    item = get_item(item_id)
    in_use = db.session.query(OrderItem.id).filter(OrderItem.item_id == item.id).first()
    if in_use or _shade_in_use([s.id for s in item.shades]):
        raise ConflictError("Item is used by orders and cannot be deleted")
    db.session.delete(item)
    commit_or_raise()
