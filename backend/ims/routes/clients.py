# Overview: Flask API routes for client operations; parses input and returns JSON responses.

"""
Client Routes

SECURITY: All routes require authentication.
- Any role may read clients (needed to compose orders)
- Create/update/delete require MANAGE_CLIENTS (Admin)
"""

from flask import Blueprint, request, jsonify, current_app

from ..decorators import DOMAIN_ERRORS, error_response, require_action, require_auth
from ..permissions import MANAGE_CLIENTS
from ..services import client_service


clients_bp = Blueprint("clients", __name__, url_prefix="/api/clients")


@clients_bp.get("")
@require_auth
def list_clients_route():
    clients = client_service.list_clients()
    return jsonify({
        "items": [c.to_dict() for c in clients],
        "count": len(clients),
    })


@clients_bp.post("")
@require_auth
@require_action(MANAGE_CLIENTS)
def create_client_route():
    """
    Request body:
    {
        "name": "Client Name",  // required
        "address": "...",       // optional
        "phone": "...",         // optional
        "email": "..."          // optional
    }
    """
    try:
        client = client_service.create_client(request.get_json(silent=True))
        return jsonify(client.to_dict()), 201
    except DOMAIN_ERRORS as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to create client")
        return jsonify({"error": "Internal server error"}), 500


@clients_bp.get("/<client_id>")
@require_auth
def get_client_route(client_id: str):
    try:
        return jsonify(client_service.get_client(client_id).to_dict())
    except DOMAIN_ERRORS as e:
        return error_response(e)


@clients_bp.patch("/<client_id>")
@require_auth
@require_action(MANAGE_CLIENTS)
def update_client_route(client_id: str):
    try:
        client = client_service.update_client(client_id, request.get_json(silent=True))
        return jsonify(client.to_dict())
    except DOMAIN_ERRORS as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to update client")
        return jsonify({"error": "Internal server error"}), 500


@clients_bp.delete("/<client_id>")
@require_auth
@require_action(MANAGE_CLIENTS)
def delete_client_route(client_id: str):
    try:
        client_service.delete_client(client_id)
        return jsonify({"message": "Client deleted"}), 200
    except DOMAIN_ERRORS as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to delete client")
        return jsonify({"error": "Internal server error"}), 500
