"""
Role checks for the JSON API.

Authentication is a JWT Bearer token resolved by Flask-Login's
``request_loader`` (see ``gym_office.main``). Use ``@login_required`` for
routes any authenticated user may call and ``@require_role(...)`` for routes
restricted to clients or providers.

Returns 401 (through the login manager's unauthorized handler) when there is
no authenticated user and 403 when the role does not match.

Example:
    @rental_requests_bp.route("/<int:rental_request_id>/approve", methods=["POST"])
    @require_role(ROLE_PROVIDER)
    def approve_rental_request(rental_request_id):
        ...
"""

from functools import wraps

from flask import current_app
from flask_login import current_user

from gym_office.core.api_utils import api_response

ROLE_CLIENT = "client"
ROLE_PROVIDER = "provider"
ROLES = (ROLE_CLIENT, ROLE_PROVIDER)


def require_role(*roles: str):
    """Decorator factory restricting a route to users holding one of ``roles``."""

    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            if not current_user or not current_user.is_authenticated:
                return current_app.login_manager.unauthorized()

            role = (getattr(current_user, "role", "") or "").lower()
            if role not in roles:
                return api_response(
                    False,
                    "Access denied. This action requires role: " + ", ".join(roles),
                    None,
                    403,
                )

            return f(*args, **kwargs)

        return decorated_function

    return decorator
