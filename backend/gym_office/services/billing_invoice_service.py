import logging
from datetime import datetime
from typing import List, Optional

from gym_office.core.exceptions import InvoiceNotFoundError
from gym_office.domain.entities import BillingInvoice
from gym_office.domain.interfaces import IUnitOfWork
from gym_office.schemas.dtos import InvoiceCreateRequest

logger = logging.getLogger(__name__)


class BillingInvoiceService:
    """Invoice issuance and lifecycle.

    ``issue`` only stages the invoice in the caller's unit of work so it can
    join a larger transaction (rental approval). The other commands commit.
    """

    def __init__(self, uow: IUnitOfWork):
        self.uow = uow

    def issue(self, request: InvoiceCreateRequest) -> BillingInvoice:
        request.validate()
        invoice = BillingInvoice(
            user_id=request.user_id,
            company_name=request.company_name,
            amount=request.amount,
            currency=request.currency,
            status=request.status,
            issued_at=request.issued_at,
            paid_at=request.paid_at,
            provider_id=request.provider_id,
            maintenance_request_id=request.maintenance_request_id,
            rental_request_id=request.rental_request_id,
        )
        created = self.uow.invoices.add(invoice)
        logger.info(
            "Invoice staged",
            extra={
                "context": {
                    "invoice_id": created.id,
                    "user_id": created.user_id,
                    "amount": str(created.amount),
                    "currency": created.currency,
                    "rental_request_id": created.rental_request_id,
                }
            },
        )
        return created

    def create(self, request: InvoiceCreateRequest) -> BillingInvoice:
        try:
            invoice = self.issue(request)
            self.uow.commit()
        except Exception:
            self.uow.rollback()
            raise
        return invoice

    def mark_as_paid(
        self, invoice_id: int, paid_at: Optional[datetime] = None
    ) -> BillingInvoice:
        try:
            invoice = self._get_or_raise(invoice_id)
            invoice.mark_as_paid(paid_at)
            updated = self.uow.invoices.update(invoice)
            self.uow.commit()
        except Exception:
            self.uow.rollback()
            raise

        logger.info(
            "Invoice marked as paid",
            extra={"context": {"invoice_id": invoice_id, "paid_at": updated.paid_at}},
        )
        return updated

    def cancel(self, invoice_id: int) -> BillingInvoice:
        try:
            invoice = self._get_or_raise(invoice_id)
            invoice.cancel()
            updated = self.uow.invoices.update(invoice)
            self.uow.commit()
        except Exception:
            self.uow.rollback()
            raise

        logger.info("Invoice cancelled", extra={"context": {"invoice_id": invoice_id}})
        return updated

    def get_by_id(self, invoice_id: int) -> Optional[BillingInvoice]:
        return self.uow.invoices.get_by_id(invoice_id)

    def list_by_user(self, user_id: int) -> List[BillingInvoice]:
        return self.uow.invoices.list_by_user(user_id)

    def list_by_rental_request(self, rental_request_id: int) -> List[BillingInvoice]:
        return self.uow.invoices.list_by_rental_request(rental_request_id)

    def list_all(self) -> List[BillingInvoice]:
        return self.uow.invoices.list_all()

    def _get_or_raise(self, invoice_id: int) -> BillingInvoice:
        invoice = self.uow.invoices.get_by_id(invoice_id)
        if invoice is None:
            raise InvoiceNotFoundError(invoice_id)
        return invoice
