# Overview: Flask API routes for auth operations; parses input and returns JSON responses.

"""
Authentication API routes

Two-step login:
1. POST /check-username  -> candidate user (public fields only)
2. POST /login           -> session token on exact password match

The token is the client's only persisted state. /validate restores the
session from it after a reload; /logout revokes it.
"""

from flask import Blueprint, request, jsonify, current_app, g

from ..decorators import DOMAIN_ERRORS, bearer_token, error_response, require_auth
from ..errors import UsernameNotFound
from ..permissions import allowed_actions, landing_page, menu_for_role, ROLE_LABELS
from ..services import auth_service
from ..services import session_service


auth_bp = Blueprint("auth", __name__, url_prefix="/api/auth")


def _identity_payload(user) -> dict:
    """User info plus what the client needs to build its navigation."""
    return {
        "user": user.to_dict(),
        "role_label": ROLE_LABELS.get(user.role, user.role),
        "landing_page": landing_page(user.role),
        "menu": menu_for_role(user.role),
        "actions": allowed_actions(user.role),
    }


@auth_bp.post("/check-username")
def check_username_route():
    """
    Step 1: verify a username exists (case-insensitive).

    Returns the candidate's public fields; never the credential.
    """
    try:
        data = request.get_json(silent=True) or {}
        username = data.get("username")
        if not isinstance(username, str) or not username.strip():
            return jsonify({"error": "username required", "field": "username"}), 400

        user = auth_service.check_username(username)
        return jsonify({"user": user.to_summary()}), 200

    except UsernameNotFound as e:
        return jsonify({"error": str(e), "field": "username"}), 404
    except Exception:
        current_app.logger.exception("Failed to check username")
        return jsonify({"error": "Internal server error"}), 500


@auth_bp.post("/login")
def login_route():
    """
    Step 2: match the password and create a session token.

    Body: {"user_id": "..."} from step 1, or {"username": "..."}, plus
    {"password": "..."}. A mismatch answers 401 without saying which part
    was wrong.
    """
    try:
        data = request.get_json(silent=True) or {}
        password = data.get("password")
        if not isinstance(password, str) or password == "":
            return jsonify({"error": "password required", "field": "password"}), 400

        user = None
        if data.get("user_id"):
            user = auth_service.get_user_by_id(data["user_id"])
        elif data.get("username"):
            user = auth_service.find_user_by_username(data["username"])
        else:
            return jsonify({"error": "user_id or username required"}), 400

        if not user:
            return jsonify({"error": "Invalid credentials"}), 401

        result = auth_service.login(
            user,
            password,
            user_agent=request.headers.get("User-Agent"),
            ip_address=request.remote_addr,
        )
        if not result:
            return jsonify({"error": "Invalid credentials"}), 401

        return jsonify({
            **_identity_payload(user),
            "token": result.token,
            "session": result.session.to_dict(),
            "message": "Login successful",
        }), 200

    except DOMAIN_ERRORS as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to login user")
        return jsonify({"error": "Internal server error"}), 500


@auth_bp.post("/logout")
def logout_route():
    """
    Revoke session token (logout).

    Expects Authorization header: Bearer <token>
    """
    try:
        token = bearer_token()
        if not token:
            return jsonify({"error": "Authorization header required"}), 401

        revoked = session_service.revoke_session(token, reason="User logout")
        if not revoked:
            return jsonify({"error": "Invalid or expired token"}), 401

        return jsonify({"message": "Logout successful"}), 200

    except Exception:
        current_app.logger.exception("Failed to logout user")
        return jsonify({"error": "Internal server error"}), 500


@auth_bp.post("/validate")
def validate_route():
    """
    Restore a session after reload.

    Unknown, expired or revoked tokens, and tokens whose user has been
    deleted, answer 401; the client then discards its token.
    """
    try:
        token = bearer_token()
        if not token:
            return jsonify({"error": "Authorization header required"}), 401

        context = session_service.validate_session(token)
        if not context:
            return jsonify({"error": "Invalid or expired token"}), 401

        return jsonify({
            **_identity_payload(context.user),
            "session": context.session.to_dict(),
            "message": "Token valid",
        }), 200

    except Exception:
        current_app.logger.exception("Failed to validate session")
        return jsonify({"error": "Internal server error"}), 500


@auth_bp.get("/me")
@require_auth
def me_route():
    return jsonify(_identity_payload(g.current_user)), 200
