# Overview: Request and permission decorators for API routes.

from functools import wraps
from flask import request, jsonify, g, current_app

from .errors import (
    BackendError,
    ConflictError,
    InvalidCredential,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from .services import session_service, permission_service


DOMAIN_ERRORS = (
    ValidationError,
    InvalidCredential,
    PermissionDeniedError,
    NotFoundError,
    ConflictError,
    BackendError,
)


def error_response(exc: Exception):
    """Translate a domain error into a JSON (body, status) pair."""
    if isinstance(exc, ValidationError):
        body = {"error": str(exc)}
        if exc.field:
            body["field"] = exc.field
        return jsonify(body), 400
    if isinstance(exc, InvalidCredential):
        return jsonify({"error": "Invalid credentials"}), 401
    if isinstance(exc, PermissionDeniedError):
        return jsonify({
            "error": "Permission denied",
            "required_action": exc.action,
            "message": str(exc),
        }), 403
    if isinstance(exc, NotFoundError):
        return jsonify({"error": str(exc)}), 404
    if isinstance(exc, ConflictError):
        return jsonify({"error": str(exc)}), 409
    current_app.logger.exception("Storage operation failed")
    return jsonify({"error": "Internal server error"}), 500


def bearer_token() -> str | None:
    auth_header = request.headers.get("Authorization")
    if not auth_header or not auth_header.startswith("Bearer "):
        return None
    return auth_header.split(" ", 1)[1].strip() or None


def _is_authenticated() -> bool:
    return hasattr(g, 'current_user') and hasattr(g, 'session_context')


def require_auth(f):
    """
    Require a live session.

    Sets the following Flask g attributes:
    - g.current_user: The authenticated User object
    - g.session_context: The full SessionContext object

    Returns 401 if there is no bearer token, or the token is unknown,
    revoked, expired, or belongs to a user that no longer exists.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        token = bearer_token()
        if not token:
            return jsonify({"error": "Authentication required"}), 401

        context = session_service.validate_session(token)
        if not context:
            return jsonify({"error": "Invalid or expired token"}), 401

        g.current_user = context.user
        g.session_context = context

        return f(*args, **kwargs)

    return decorated_function


def require_action(action: str):
    """
    Require that the caller's role may perform action.

    Role-only check; ownership rules (FSSALE editing its own order) are
    checked again in the service with the order in hand.
    """
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            # Ensure @require_auth was called first
            if not _is_authenticated():
                return jsonify({"error": "Authentication required"}), 401

            try:
                permission_service.require_action(
                    g.current_user,
                    action,
                    resource=request.path,
                    ip_address=request.remote_addr,
                    user_agent=request.headers.get("User-Agent"),
                )
            except PermissionDeniedError as e:
                return error_response(e)

            return f(*args, **kwargs)

        return decorated_function
    return decorator
