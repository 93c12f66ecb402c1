"""
Translate typed domain errors into JSON responses.

    NotFoundError            -> 404
    AccessDeniedError        -> 403
    ConflictError            -> 409
    InvalidTransitionError   -> 409
    PolicyViolationError     -> 422
    ValidationError          -> 400
"""

import logging

from flask import Flask
from werkzeug.exceptions import HTTPException

from gym_office.core.api_utils import api_response
from gym_office.core.exceptions import (
    AccessDeniedError,
    ClientNotFoundError,
    ConflictError,
    GymOfficeError,
    InvalidTransitionError,
    NotFoundError,
    PolicyViolationError,
    ValidationError,
)

logger = logging.getLogger(__name__)

# Checked in order; first match wins
STATUS_BY_ERROR = (
    (NotFoundError, 404),
    (AccessDeniedError, 403),
    (ConflictError, 409),
    (InvalidTransitionError, 409),
    (PolicyViolationError, 422),
    (ValidationError, 400),
)


def status_for(error: GymOfficeError) -> int:
    for error_cls, status in STATUS_BY_ERROR:
        if isinstance(error, error_cls):
            return status
    return 400


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(GymOfficeError)
    def handle_domain_error(error: GymOfficeError):
        status = status_for(error)
        log = logger.error if isinstance(error, ClientNotFoundError) else logger.warning
        log(
            error.message,
            extra={"context": {**error.to_dict(), "status_code": status}},
        )
        return api_response(False, error.message, error.to_dict(), status)

    @app.errorhandler(HTTPException)
    def handle_http_error(error: HTTPException):
        return api_response(False, error.description or error.name, None, error.code or 500)

    @app.errorhandler(Exception)
    def handle_unexpected_error(error: Exception):
        logger.error(
            "Unhandled error",
            extra={"context": {"error": str(error), "type": type(error).__name__}},
            exc_info=True,
        )
        return api_response(False, "Internal server error", None, 500)
