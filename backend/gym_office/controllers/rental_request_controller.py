"""
Rental request endpoints.

    POST   /api/v1/rental-requests                 client    create
    GET    /api/v1/rental-requests[?status=]       any user  list
    GET    /api/v1/rental-requests/<id>            any user  detail
    GET    /api/v1/rental-requests/client/<id>     any user  list by client
    PUT    /api/v1/rental-requests/<id>            provider  status update
    POST   /api/v1/rental-requests/<id>/approve    provider  approve + invoice
    POST   /api/v1/rental-requests/<id>/cancel     client    cancel own request
"""

import logging

from flask import Blueprint, request
from flask_login import current_user, login_required

from gym_office.core.api_utils import api_response, get_json_body, get_session_factory
from gym_office.core.auth_decorators import (
    ROLE_CLIENT,
    ROLE_PROVIDER,
    require_role,
)
from gym_office.core.limiter_config import limiter
from gym_office.db.unit_of_work import SqlAlchemyUnitOfWork
from gym_office.schemas.dtos import (
    RentalRequestCreateRequest,
    RentalRequestStatusUpdateRequest,
)
from gym_office.services.rental_request_service import (
    RentalRequestCommandService,
    RentalRequestQueryService,
)

logger = logging.getLogger(__name__)

rental_requests_bp = Blueprint(
    "rental_requests", __name__, url_prefix="/api/v1/rental-requests"
)


def _not_found(rental_request_id: int):
    return api_response(
        False, f"Rental request {rental_request_id} not found", None, 404
    )


@rental_requests_bp.route("", methods=["POST"])
@limiter.limit("30 per minute")
@require_role(ROLE_CLIENT)
def create_rental_request():
    dto = RentalRequestCreateRequest.from_json(
        get_json_body(), default_client_id=current_user.id
    )
    if dto.client_id != current_user.id:
        return api_response(
            False, "Clients can only create rental requests for themselves", None, 403
        )

    with SqlAlchemyUnitOfWork(get_session_factory()) as uow:
        created = RentalRequestCommandService(uow).create(dto)
        response = RentalRequestQueryService(uow).get_by_id(created.id)

    return api_response(True, "Rental request created", response.to_dict(), 201)


@rental_requests_bp.route("", methods=["GET"])
@limiter.limit("100 per minute")
@login_required
def list_rental_requests():
    status = request.args.get("status")
    with SqlAlchemyUnitOfWork(get_session_factory()) as uow:
        queries = RentalRequestQueryService(uow)
        results = queries.list_by_status(status) if status else queries.list_all()

    return api_response(
        True, "Rental requests retrieved", [r.to_dict() for r in results]
    )


@rental_requests_bp.route("/<int:rental_request_id>", methods=["GET"])
@limiter.limit("100 per minute")
@login_required
def get_rental_request(rental_request_id: int):
    with SqlAlchemyUnitOfWork(get_session_factory()) as uow:
        result = RentalRequestQueryService(uow).get_by_id(rental_request_id)

    if result is None:
        return _not_found(rental_request_id)
    return api_response(True, "Rental request retrieved", result.to_dict())


@rental_requests_bp.route("/client/<int:client_id>", methods=["GET"])
@limiter.limit("100 per minute")
@login_required
def list_client_rental_requests(client_id: int):
    with SqlAlchemyUnitOfWork(get_session_factory()) as uow:
        results = RentalRequestQueryService(uow).list_by_client(client_id)

    return api_response(
        True, "Rental requests retrieved", [r.to_dict() for r in results]
    )


@rental_requests_bp.route("/<int:rental_request_id>", methods=["PUT"])
@limiter.limit("30 per minute")
@require_role(ROLE_PROVIDER)
def update_rental_request_status(rental_request_id: int):
    dto = RentalRequestStatusUpdateRequest(status=get_json_body().get("status"))
    dto.validate()

    with SqlAlchemyUnitOfWork(get_session_factory()) as uow:
        updated = RentalRequestCommandService(uow).update_status(
            rental_request_id, dto.status
        )
        if updated is None:
            return _not_found(rental_request_id)
        response = RentalRequestQueryService(uow).project([updated])[0]

    return api_response(True, "Rental request status updated", response.to_dict())


@rental_requests_bp.route("/<int:rental_request_id>/approve", methods=["POST"])
@limiter.limit("30 per minute")
@require_role(ROLE_PROVIDER)
def approve_rental_request(rental_request_id: int):
    with SqlAlchemyUnitOfWork(get_session_factory()) as uow:
        approved = RentalRequestCommandService(uow).approve(
            rental_request_id, current_user.id
        )
        if approved is None:
            return _not_found(rental_request_id)
        response = RentalRequestQueryService(uow).project([approved])[0]

    return api_response(True, "Rental request approved", response.to_dict())


@rental_requests_bp.route("/<int:rental_request_id>/cancel", methods=["POST"])
@limiter.limit("30 per minute")
@require_role(ROLE_CLIENT)
def cancel_rental_request(rental_request_id: int):
    with SqlAlchemyUnitOfWork(get_session_factory()) as uow:
        cancelled = RentalRequestCommandService(uow).cancel(
            rental_request_id, requested_by=current_user.id
        )
        if cancelled is None:
            return _not_found(rental_request_id)
        response = RentalRequestQueryService(uow).project([cancelled])[0]

    return api_response(True, "Rental request cancelled", response.to_dict())
