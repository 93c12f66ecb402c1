"""
Health controller - database connectivity check for monitoring.
"""

import logging

from flask import Blueprint
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from gym_office.core.api_utils import api_response, get_session_factory

logger = logging.getLogger(__name__)

health_bp = Blueprint("health", __name__, url_prefix="/health")


@health_bp.route("", methods=["GET"])
def health_check():
    """
    Report whether the database answers a trivial query.

    Status codes:
        200: database reachable
        503: database unreachable
    """
    session = get_session_factory()()
    try:
        session.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        logger.error(
            "Health check: database unreachable",
            extra={"context": {"error": str(e)}},
            exc_info=True,
        )
        return api_response(False, "Database unreachable", {"database": "down"}, 503)
    finally:
        session.close()

    return api_response(True, "OK", {"database": "up"})
