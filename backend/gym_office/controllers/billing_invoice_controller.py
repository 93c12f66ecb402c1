"""
Billing invoice endpoints.

    GET    /api/v1/billing/invoices[?user_id=]             client    own invoices
    GET    /api/v1/billing/invoices/<id>                   client    own invoice
    POST   /api/v1/billing/invoices/<id>/mark-as-paid      client    pay own invoice
    POST   /api/v1/billing/invoices                        provider  issue manually
    GET    /api/v1/billing/invoices/all                    provider  every invoice
    GET    /api/v1/billing/invoices/rental-request/<id>    provider  by rental
    DELETE /api/v1/billing/invoices/<id>                   provider  cancel

Clients only ever see their own invoices. Cancelling keeps the row with
status ``cancelled``; paid invoices cannot be cancelled.
"""

from flask import Blueprint, request
from flask_login import current_user

from gym_office.core import config
from gym_office.core.api_utils import api_response, get_json_body, get_session_factory
from gym_office.core.auth_decorators import ROLE_CLIENT, ROLE_PROVIDER, require_role
from gym_office.core.exceptions import ClientNotFoundError
from gym_office.core.limiter_config import limiter
from gym_office.db.unit_of_work import SqlAlchemyUnitOfWork
from gym_office.schemas.dtos import (
    InvoiceCreateRequest,
    InvoiceMarkPaidRequest,
    InvoiceResponse,
)
from gym_office.services.billing_invoice_service import BillingInvoiceService

billing_invoices_bp = Blueprint(
    "billing_invoices", __name__, url_prefix="/api/v1/billing/invoices"
)


def _forbidden():
    return api_response(False, "You can only access your own invoices", None, 403)


@billing_invoices_bp.route("", methods=["GET"])
@limiter.limit("100 per minute")
@require_role(ROLE_CLIENT)
def list_invoices():
    user_id = request.args.get("user_id", type=int)
    if user_id is None:
        user_id = current_user.id
    if user_id <= 0:
        return api_response(False, "user_id must be a positive number", None, 400)
    if user_id != current_user.id:
        return _forbidden()

    with SqlAlchemyUnitOfWork(get_session_factory()) as uow:
        invoices = BillingInvoiceService(uow).list_by_user(user_id)

    return api_response(
        True,
        "Invoices retrieved",
        [InvoiceResponse.from_domain(i).to_dict() for i in invoices],
    )


@billing_invoices_bp.route("/<int:invoice_id>", methods=["GET"])
@limiter.limit("100 per minute")
@require_role(ROLE_CLIENT)
def get_invoice(invoice_id: int):
    with SqlAlchemyUnitOfWork(get_session_factory()) as uow:
        invoice = BillingInvoiceService(uow).get_by_id(invoice_id)

    if invoice is None:
        return api_response(False, f"Invoice {invoice_id} not found", None, 404)
    if invoice.user_id != current_user.id:
        return _forbidden()
    return api_response(
        True, "Invoice retrieved", InvoiceResponse.from_domain(invoice).to_dict()
    )


@billing_invoices_bp.route("/<int:invoice_id>/mark-as-paid", methods=["POST"])
@limiter.limit("30 per minute")
@require_role(ROLE_CLIENT)
def mark_invoice_as_paid(invoice_id: int):
    dto = InvoiceMarkPaidRequest.from_json(get_json_body())

    with SqlAlchemyUnitOfWork(get_session_factory()) as uow:
        service = BillingInvoiceService(uow)
        invoice = service.get_by_id(invoice_id)
        if invoice is None:
            return api_response(False, f"Invoice {invoice_id} not found", None, 404)
        if invoice.user_id != current_user.id:
            return _forbidden()
        paid = service.mark_as_paid(invoice_id, dto.paid_at)

    return api_response(
        True, "Invoice marked as paid", InvoiceResponse.from_domain(paid).to_dict()
    )


@billing_invoices_bp.route("/rental-request/<int:rental_request_id>", methods=["GET"])
@limiter.limit("100 per minute")
@require_role(ROLE_PROVIDER)
def list_rental_request_invoices(rental_request_id: int):
    with SqlAlchemyUnitOfWork(get_session_factory()) as uow:
        invoices = BillingInvoiceService(uow).list_by_rental_request(rental_request_id)

    return api_response(
        True,
        "Invoices retrieved",
        [InvoiceResponse.from_domain(i).to_dict() for i in invoices],
    )


@billing_invoices_bp.route("", methods=["POST"])
@limiter.limit("30 per minute")
@require_role(ROLE_PROVIDER)
def create_invoice():
    dto = InvoiceCreateRequest.from_json(
        get_json_body(),
        default_provider_id=current_user.id,
        default_currency=config.get_default_invoice_currency(),
    )
    dto.validate()

    with SqlAlchemyUnitOfWork(get_session_factory()) as uow:
        if uow.users.get_by_id(dto.user_id) is None:
            raise ClientNotFoundError(dto.user_id)
        invoice = BillingInvoiceService(uow).create(dto)

    return api_response(
        True, "Invoice created", InvoiceResponse.from_domain(invoice).to_dict(), 201
    )


@billing_invoices_bp.route("/all", methods=["GET"])
@limiter.limit("100 per minute")
@require_role(ROLE_PROVIDER)
def list_all_invoices():
    with SqlAlchemyUnitOfWork(get_session_factory()) as uow:
        invoices = BillingInvoiceService(uow).list_all()

    return api_response(
        True,
        "Invoices retrieved",
        [InvoiceResponse.from_domain(i).to_dict() for i in invoices],
    )


@billing_invoices_bp.route("/<int:invoice_id>", methods=["DELETE"])
@limiter.limit("30 per minute")
@require_role(ROLE_PROVIDER)
def cancel_invoice(invoice_id: int):
    with SqlAlchemyUnitOfWork(get_session_factory()) as uow:
        cancelled = BillingInvoiceService(uow).cancel(invoice_id)

    return api_response(
        True, "Invoice cancelled", InvoiceResponse.from_domain(cancelled).to_dict()
    )
