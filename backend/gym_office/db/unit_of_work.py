"""
SQLAlchemy unit of work.

Every repository exposed by the unit of work shares one Session, so a
command that touches several aggregates (rental approval + invoice) commits
or rolls back as a single transaction.

Usage:
    with SqlAlchemyUnitOfWork() as uow:
        request = uow.rental_requests.get_by_id(1, for_update=True)
        ...
        uow.commit()
"""

import logging
from typing import Callable, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from gym_office.core.exceptions import ConcurrentModificationError
from gym_office.db.session import get_sessionmaker
from gym_office.domain.interfaces import IUnitOfWork
from gym_office.repositories import (
    BillingInvoiceRepository,
    ClientPlanRepository,
    EquipmentRepository,
    RentalRequestRepository,
    UserRepository,
)

logger = logging.getLogger(__name__)


class SqlAlchemyUnitOfWork(IUnitOfWork):
    def __init__(self, session_factory: Optional[Callable[[], Session]] = None):
        self.session_factory = session_factory or get_sessionmaker()
        self.session: Optional[Session] = None

    def __enter__(self) -> "SqlAlchemyUnitOfWork":
        self.session = self.session_factory()
        self.rental_requests = RentalRequestRepository(self.session)
        self.users = UserRepository(self.session)
        self.client_plans = ClientPlanRepository(self.session)
        self.equipment = EquipmentRepository(self.session)
        self.invoices = BillingInvoiceRepository(self.session)
        return self

    def __exit__(self, exc_type, exc, tb):
        try:
            # No-op after a successful commit; discards anything left staged
            self.rollback()
        finally:
            if self.session is not None:
                self.session.close()
                self.session = None

    def commit(self) -> None:
        try:
            self.session.commit()
        except StaleDataError as e:
            self.session.rollback()
            logger.warning(
                "Commit lost an optimistic version race",
                extra={"context": {"error": str(e)}},
            )
            raise ConcurrentModificationError("RentalRequest") from e
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.error(
                "Database error during commit",
                extra={"context": {"error": str(e)}},
                exc_info=True,
            )
            raise

    def rollback(self) -> None:
        if self.session is not None:
            self.session.rollback()
