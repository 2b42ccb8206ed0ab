# Overview: Flask API routes for catalogue items and shades; parses input and returns JSON responses.

"""
Item Routes

SECURITY: All routes require authentication.
- Any role may browse items and their shades (Catalogue / Inventory)
- Writes require MANAGE_ITEMS (Admin)
"""

from flask import Blueprint, request, jsonify, current_app

from ..decorators import DOMAIN_ERRORS, error_response, require_action, require_auth
from ..permissions import MANAGE_ITEMS
from ..services import catalog_service


items_bp = Blueprint("items", __name__, url_prefix="/api/items")


@items_bp.get("")
@require_auth
def list_items_route():
    """
    Query parameters:
    - include_shades: default true
    """
    include_shades = request.args.get("include_shades", "true").lower() != "false"
    items = catalog_service.list_items()
    return jsonify({
        "items": [i.to_dict(include_shades=include_shades) for i in items],
        "count": len(items),
    })


@items_bp.post("")
@require_auth
@require_action(MANAGE_ITEMS)
def create_item_route():
    """
    Request body:
    {
        "name": "Silk Thread",   // required
        "photo_url": "...",      // optional
        "description": "...",    // optional
        "track_inventory": true, // optional, default true
        "shades": [{"shade_number": "101", "shade_name": "Red", "stock_count": 5}]
    }
    """
    try:
        item = catalog_service.create_item(request.get_json(silent=True))
        return jsonify(item.to_dict()), 201
    except DOMAIN_ERRORS as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to create item")
        return jsonify({"error": "Internal server error"}), 500


@items_bp.get("/<item_id>")
@require_auth
def get_item_route(item_id: str):
    try:
        return jsonify(catalog_service.get_item(item_id).to_dict())
    except DOMAIN_ERRORS as e:
        return error_response(e)


@items_bp.patch("/<item_id>")
@require_auth
@require_action(MANAGE_ITEMS)
def update_item_route(item_id: str):
    try:
        item = catalog_service.update_item(item_id, request.get_json(silent=True))
        return jsonify(item.to_dict())
    except DOMAIN_ERRORS as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to update item")
        return jsonify({"error": "Internal server error"}), 500


@items_bp.delete("/<item_id>")
@require_auth
@require_action(MANAGE_ITEMS)
def delete_item_route(item_id: str):
    try:
        catalog_service.delete_item(item_id)
        return jsonify({"message": "Item deleted"}), 200
    except DOMAIN_ERRORS as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to delete item")
        return jsonify({"error": "Internal server error"}), 500


@items_bp.put("/<item_id>/shades")
@require_auth
@require_action(MANAGE_ITEMS)
def upsert_shades_route(item_id: str):
    """
    Body: {"shades": [...]}. Entries with an id are updated, others added.
    """
    try:
        data = request.get_json(silent=True) or {}
        item = catalog_service.upsert_shades(item_id, data.get("shades"))
        return jsonify(item.to_dict())
    except DOMAIN_ERRORS as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to save shades")
        return jsonify({"error": "Internal server error"}), 500


@items_bp.delete("/<item_id>/shades/<shade_id>")
@require_auth
@require_action(MANAGE_ITEMS)
def delete_shade_route(item_id: str, shade_id: str):
    try:
        catalog_service.delete_shade(item_id, shade_id)
        return jsonify({"message": "Shade deleted"}), 200
    except DOMAIN_ERRORS as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to delete shade")
        return jsonify({"error": "Internal server error"}), 500
