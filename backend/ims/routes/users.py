# Overview: Flask API routes for staff account management; parses input and returns JSON responses.

"""
User Routes

SECURITY: All routes require authentication and MANAGE_USERS (Admin).
Credentials are never returned.
"""

from flask import Blueprint, request, jsonify, current_app, g

from ..decorators import DOMAIN_ERRORS, error_response, require_action, require_auth
from ..permissions import MANAGE_USERS, ROLES, ROLE_DESCRIPTIONS, ROLE_LABELS
from ..services import auth_service


users_bp = Blueprint("users", __name__, url_prefix="/api/users")


@users_bp.get("")
@require_auth
@require_action(MANAGE_USERS)
def list_users_route():
    users = auth_service.list_users()
    return jsonify({
        "items": [u.to_dict() for u in users],
        "count": len(users),
    })


@users_bp.get("/roles")
@require_auth
@require_action(MANAGE_USERS)
def list_roles_route():
    """Role choices for the user form."""
    return jsonify({
        "items": [
            {"code": role, "label": ROLE_LABELS[role], "description": ROLE_DESCRIPTIONS[role]}
            for role in ROLES
        ]
    })


@users_bp.post("")
@require_auth
@require_action(MANAGE_USERS)
def create_user_route():
    """
    Create a staff account.

    Request body:
    {
        "username": "sales",      // required, unique (case-insensitive), >= 3 chars
        "full_name": "Sales One", // required
        "role": "FSSALE",         // Admin | MANG | CLK | FSSALE
        "password": "sales123"    // required, >= 6 chars
    }
    """
    try:
        user = auth_service.create_user(request.get_json(silent=True))
        return jsonify(user.to_dict()), 201
    except DOMAIN_ERRORS as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to create user")
        return jsonify({"error": "Internal server error"}), 500


@users_bp.get("/<user_id>")
@require_auth
@require_action(MANAGE_USERS)
def get_user_route(user_id: str):
    try:
        return jsonify(auth_service.get_user(user_id).to_dict())
    except DOMAIN_ERRORS as e:
        return error_response(e)


@users_bp.patch("/<user_id>")
@require_auth
@require_action(MANAGE_USERS)
def update_user_route(user_id: str):
    """Patch a user. An empty or missing password leaves it unchanged."""
    try:
        user = auth_service.update_user(user_id, request.get_json(silent=True))
        return jsonify(user.to_dict())
    except DOMAIN_ERRORS as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to update user")
        return jsonify({"error": "Internal server error"}), 500


@users_bp.delete("/<user_id>")
@require_auth
@require_action(MANAGE_USERS)
def delete_user_route(user_id: str):
    try:
        auth_service.delete_user(user_id, actor=g.current_user)
        return jsonify({"message": "User deleted"}), 200
    except DOMAIN_ERRORS as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to delete user")
        return jsonify({"error": "Internal server error"}), 500
