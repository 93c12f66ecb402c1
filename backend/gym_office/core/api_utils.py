"""
Common API utilities for consistent response formatting across all controllers.
"""

from typing import Any, Optional

from flask import current_app, jsonify, request


def api_response(
    success: bool, message: str, data: Optional[Any] = None, status_code: int = 200
) -> tuple:
    """
    Standardized API response format for all endpoints.

    Args:
        success: Whether the operation was successful
        message: Human-readable message about the operation
        data: Optional data payload
        status_code: HTTP status code

    Returns:
        Tuple of (json_response, status_code)
    """
    response = {"success": success, "message": message}

    if data is not None:
        response["data"] = data

    return jsonify(response), status_code


def get_json_body() -> dict:
    """Return the request JSON object, or an empty dict for missing/invalid bodies."""
    payload = request.get_json(silent=True)
    return payload if isinstance(payload, dict) else {}


def get_session_factory():
    """Session factory for the current app (tests inject SESSION_FACTORY)."""
    factory = current_app.config.get("SESSION_FACTORY")
    if factory is not None:
        return factory

    from gym_office.db.session import get_sessionmaker

    return get_sessionmaker()
