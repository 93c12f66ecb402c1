"""
Rental request use cases.

Command side: create, approve, update_status and cancel. Each command runs
inside the unit of work it was given and commits at most once; any failure
rolls the whole unit back.

Query side: read-only projections joining the aggregate with equipment,
client and provider display data looked up by id.
"""

import logging
from typing import Iterable, List, Optional

from gym_office.core import config
from gym_office.core.exceptions import (
    AccessDeniedError,
    ClientNotFoundError,
    DuplicatePendingRequestError,
    EquipmentNotFoundError,
    NotPendingError,
)
from gym_office.domain.entities import RentalRequest, utcnow
from gym_office.domain.interfaces import IUnitOfWork
from gym_office.domain.quota import check_plan_quota
from gym_office.domain.statuses import InvoiceStatus, RentalStatus
from gym_office.schemas.dtos import (
    InvoiceCreateRequest,
    RentalRequestCreateRequest,
    RentalRequestResponse,
)
from gym_office.services.billing_invoice_service import BillingInvoiceService

logger = logging.getLogger(__name__)


class RentalRequestCommandService:
    def __init__(
        self,
        uow: IUnitOfWork,
        invoice_service: Optional[BillingInvoiceService] = None,
        missing_plan_policy: Optional[str] = None,
        status_policy: Optional[str] = None,
        invoice_currency: Optional[str] = None,
    ):
        self.uow = uow
        self.invoice_service = invoice_service or BillingInvoiceService(uow)
        self.missing_plan_policy = (
            missing_plan_policy or config.get_missing_plan_policy()
        )
        self.status_policy = status_policy or config.get_rental_status_policy()
        self.invoice_currency = (
            invoice_currency or config.get_default_invoice_currency()
        )

    def create(self, request: RentalRequestCreateRequest) -> RentalRequest:
        """Create a pending rental request.

        Raises:
            DuplicatePendingRequestError: the client already has a pending,
                undeleted request for the same equipment
            ClientNotFoundError / EquipmentNotFoundError: unknown references
        """
        request.validate()
        try:
            # Locking the client serializes concurrent creations for the same client
            client = self.uow.users.get_by_id(request.client_id, for_update=True)
            if client is None:
                raise ClientNotFoundError(request.client_id)
            if request.equipment_id not in self.uow.equipment.get_by_ids(
                [request.equipment_id]
            ):
                raise EquipmentNotFoundError(request.equipment_id)

            existing = self.uow.rental_requests.list_by_client(request.client_id)
            if any(
                r.equipment_id == request.equipment_id and r.is_pending
                for r in existing
            ):
                raise DuplicatePendingRequestError(
                    request.client_id, request.equipment_id
                )

            rental = RentalRequest.create(
                equipment_id=request.equipment_id,
                client_id=request.client_id,
                monthly_price=request.monthly_price,
                notes=request.notes,
            )
            created = self.uow.rental_requests.add(rental)
            self.uow.commit()
        except Exception:
            self.uow.rollback()
            raise

        logger.info(
            "Rental request created",
            extra={
                "context": {
                    "rental_request_id": created.id,
                    "client_id": created.client_id,
                    "equipment_id": created.equipment_id,
                }
            },
        )
        return created

    def approve(
        self, rental_request_id: int, provider_id: int
    ) -> Optional[RentalRequest]:
        """Approve a pending request and issue its invoice in one transaction.

        Returns None when the request does not exist.

        Raises:
            NotPendingError: the request is not pending
            ClientNotFoundError: the request references a missing client
            PlanLimitExceededError / PlanNotFoundError: quota policy refused
            ConcurrentModificationError: another writer changed the request
        """
        context = {"rental_request_id": rental_request_id, "provider_id": provider_id}
        try:
            rental = self.uow.rental_requests.get_by_id(
                rental_request_id, include_deleted=True, for_update=True
            )
            if rental is None:
                logger.info("Rental request not found for approval", extra={"context": context})
                return None
            if not rental.is_pending:
                raise NotPendingError(rental.id, rental.status)

            client = self.uow.users.get_by_id(rental.client_id, for_update=True)
            if client is None:
                logger.error(
                    "Rental request references a missing client",
                    extra={"context": {**context, "client_id": rental.client_id}},
                )
                raise ClientNotFoundError(rental.client_id)

            plan = None
            if client.client_plan_id is not None:
                plan = self.uow.client_plans.get_by_id(client.client_plan_id)
            approved_count = self.uow.rental_requests.count_by_client_and_status(
                client.id, RentalStatus.APPROVED.value
            )
            decision = check_plan_quota(
                client.client_plan_id, plan, approved_count, self.missing_plan_policy
            )
            logger.info(
                "Plan quota check passed",
                extra={
                    "context": {
                        **context,
                        "client_id": client.id,
                        "client_plan_id": client.client_plan_id,
                        "approved_count": approved_count,
                        "limit": decision.limit,
                        "reason": decision.reason,
                    }
                },
            )

            rental.approve(provider_id)
            approved = self.uow.rental_requests.update(rental)

            self.invoice_service.issue(
                InvoiceCreateRequest(
                    user_id=client.id,
                    company_name=client.display_name,
                    amount=approved.monthly_price,
                    currency=self.invoice_currency,
                    status=InvoiceStatus.PENDING.value,
                    issued_at=utcnow(),
                    provider_id=provider_id,
                    rental_request_id=approved.id,
                )
            )
            self.uow.commit()
        except Exception:
            self.uow.rollback()
            raise

        logger.info("Rental request approved", extra={"context": context})
        return approved

    def update_status(
        self, rental_request_id: int, new_status: str
    ) -> Optional[RentalRequest]:
        """Generic provider status update governed by the configured status policy."""
        RentalStatus.parse(new_status)
        try:
            rental = self.uow.rental_requests.get_by_id(
                rental_request_id, include_deleted=True, for_update=True
            )
            if rental is None:
                return None

            previous = rental.status
            rental.update_status(new_status, policy=self.status_policy)
            updated = self.uow.rental_requests.update(rental)
            self.uow.commit()
        except Exception:
            self.uow.rollback()
            raise

        logger.info(
            "Rental request status updated",
            extra={
                "context": {
                    "rental_request_id": rental_request_id,
                    "from_status": previous,
                    "to_status": updated.status,
                    "policy": self.status_policy,
                }
            },
        )
        return updated

    def cancel(
        self, rental_request_id: int, requested_by: Optional[int] = None
    ) -> Optional[RentalRequest]:
        """Cancel and soft-delete a request; ``requested_by`` must own it when given."""
        try:
            rental = self.uow.rental_requests.get_by_id(
                rental_request_id, include_deleted=True, for_update=True
            )
            if rental is None:
                return None
            if requested_by is not None and rental.client_id != requested_by:
                raise AccessDeniedError("Clients can only cancel their own rental requests")

            rental.cancel()
            cancelled = self.uow.rental_requests.update(rental)
            self.uow.commit()
        except Exception:
            self.uow.rollback()
            raise

        logger.info(
            "Rental request cancelled",
            extra={"context": {"rental_request_id": rental_request_id}},
        )
        return cancelled


class RentalRequestQueryService:
    def __init__(self, uow: IUnitOfWork):
        self.uow = uow

    def get_by_id(self, rental_request_id: int) -> Optional[RentalRequestResponse]:
        rental = self.uow.rental_requests.get_by_id(rental_request_id)
        if rental is None:
            return None
        return self.project([rental])[0]

    def list_by_client(self, client_id: int) -> List[RentalRequestResponse]:
        return self.project(self.uow.rental_requests.list_by_client(client_id))

    def list_by_status(self, status: str) -> List[RentalRequestResponse]:
        return self.project(self.uow.rental_requests.list_by_status(status))

    def list_all(self) -> List[RentalRequestResponse]:
        return self.project(self.uow.rental_requests.list_all())

    def project(
        self, rentals: Iterable[RentalRequest]
    ) -> List[RentalRequestResponse]:
        """Compose responses with one lookup per referenced table."""
        rentals = list(rentals)
        if not rentals:
            return []

        equipment = self.uow.equipment.get_by_ids(r.equipment_id for r in rentals)
        users = self.uow.users.get_by_ids(
            [r.client_id for r in rentals] + [r.provider_id for r in rentals]
        )
        return [
            RentalRequestResponse.from_domain(
                r,
                equipment=equipment.get(r.equipment_id),
                client=users.get(r.client_id),
                provider=users.get(r.provider_id),
            )
            for r in rentals
        ]
