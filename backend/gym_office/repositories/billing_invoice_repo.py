from typing import List, Optional

from gym_office.core.exceptions import InvoiceNotFoundError
from gym_office.db.base import BillingInvoice as BillingInvoiceModel
from gym_office.domain.entities import BillingInvoice
from gym_office.domain.interfaces import IBillingInvoiceRepository


class BillingInvoiceRepository(IBillingInvoiceRepository):
    def __init__(self, db_session):
        self.db = db_session

    def add(self, invoice: BillingInvoice) -> BillingInvoice:
        db_invoice = BillingInvoiceModel(
            user_id=invoice.user_id,
            company_name=invoice.company_name,
            amount=invoice.amount,
            currency=invoice.currency,
            status=invoice.status,
            issued_at=invoice.issued_at,
            paid_at=invoice.paid_at,
            provider_id=invoice.provider_id,
            maintenance_request_id=invoice.maintenance_request_id,
            rental_request_id=invoice.rental_request_id,
        )
        self.db.add(db_invoice)
        self.db.flush()
        return self._to_domain(db_invoice)

    def update(self, invoice: BillingInvoice) -> BillingInvoice:
        db_invoice = self.db.get(BillingInvoiceModel, invoice.id)
        if db_invoice is None:
            raise InvoiceNotFoundError(invoice.id)

        db_invoice.status = invoice.status
        db_invoice.paid_at = invoice.paid_at
        db_invoice.updated_at = invoice.updated_at
        self.db.flush()
        return self._to_domain(db_invoice)

    def get_by_id(self, invoice_id: int) -> Optional[BillingInvoice]:
        db_invoice = self.db.get(BillingInvoiceModel, invoice_id)
        return self._to_domain(db_invoice) if db_invoice else None

    def list_by_user(self, user_id: int) -> List[BillingInvoice]:
        rows = (
            self.db.query(BillingInvoiceModel)
            .filter(BillingInvoiceModel.user_id == user_id)
            .order_by(BillingInvoiceModel.issued_at.desc(), BillingInvoiceModel.id.desc())
            .all()
        )
        return [self._to_domain(r) for r in rows]

    def list_by_rental_request(self, rental_request_id: int) -> List[BillingInvoice]:
        rows = (
            self.db.query(BillingInvoiceModel)
            .filter(BillingInvoiceModel.rental_request_id == rental_request_id)
            .order_by(BillingInvoiceModel.id.asc())
            .all()
        )
        return [self._to_domain(r) for r in rows]

    def list_all(self) -> List[BillingInvoice]:
        rows = (
            self.db.query(BillingInvoiceModel)
            .order_by(BillingInvoiceModel.issued_at.desc(), BillingInvoiceModel.id.desc())
            .all()
        )
        return [self._to_domain(r) for r in rows]

    def _to_domain(self, db_invoice: BillingInvoiceModel) -> BillingInvoice:
        return BillingInvoice(
            id=db_invoice.id,
            user_id=db_invoice.user_id,
            company_name=db_invoice.company_name,
            amount=db_invoice.amount,
            currency=db_invoice.currency,
            status=db_invoice.status,
            issued_at=db_invoice.issued_at,
            paid_at=db_invoice.paid_at,
            provider_id=db_invoice.provider_id,
            maintenance_request_id=db_invoice.maintenance_request_id,
            rental_request_id=db_invoice.rental_request_id,
            created_at=db_invoice.created_at,
            updated_at=db_invoice.updated_at,
        )
