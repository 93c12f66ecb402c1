import logging
from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.orm.exc import StaleDataError

from gym_office.core.exceptions import (
    ConcurrentModificationError,
    RentalRequestNotFoundError,
)
from gym_office.db.base import RentalRequest as RentalRequestModel
from gym_office.domain.entities import RentalRequest
from gym_office.domain.interfaces import IRentalRequestRepository
from gym_office.domain.statuses import RentalStatus

logger = logging.getLogger(__name__)


class RentalRequestRepository(IRentalRequestRepository):
    """SQLAlchemy storage for rental requests.

    Reads hide soft-deleted rows unless asked otherwise and return newest
    ``request_date`` first. Writes are flushed, never committed.
    """

    def __init__(self, db_session):
        self.db = db_session

    def _undeleted(self):
        return self.db.query(RentalRequestModel).filter(
            RentalRequestModel.is_deleted.is_(False)
        )

    def add(self, rental_request: RentalRequest) -> RentalRequest:
        db_request = RentalRequestModel(
            equipment_id=rental_request.equipment_id,
            client_id=rental_request.client_id,
            provider_id=rental_request.provider_id,
            request_date=rental_request.request_date,
            status=rental_request.status,
            notes=rental_request.notes,
            monthly_price=rental_request.monthly_price,
            is_deleted=rental_request.is_deleted,
        )
        self.db.add(db_request)
        self.db.flush()
        return self._to_domain(db_request)

    def update(self, rental_request: RentalRequest) -> RentalRequest:
        db_request = self.db.get(RentalRequestModel, rental_request.id)
        if db_request is None:
            raise RentalRequestNotFoundError(rental_request.id)

        if db_request.version != rental_request.version:
            raise ConcurrentModificationError("RentalRequest", rental_request.id)

        db_request.status = rental_request.status
        db_request.provider_id = rental_request.provider_id
        db_request.notes = rental_request.notes
        db_request.is_deleted = rental_request.is_deleted
        db_request.updated_at = rental_request.updated_at

        try:
            self.db.flush()
        except StaleDataError as e:
            logger.warning(
                "Rental request changed concurrently",
                extra={"context": {"rental_request_id": rental_request.id}},
            )
            raise ConcurrentModificationError(
                "RentalRequest", rental_request.id
            ) from e

        return self._to_domain(db_request)

    def get_by_id(
        self,
        rental_request_id: int,
        include_deleted: bool = False,
        for_update: bool = False,
    ) -> Optional[RentalRequest]:
        query = self.db.query(RentalRequestModel).filter(
            RentalRequestModel.id == rental_request_id
        )
        if not include_deleted:
            query = query.filter(RentalRequestModel.is_deleted.is_(False))
        if for_update:
            # Row is re-read under the lock, bypassing the identity map
            query = query.with_for_update().populate_existing()

        db_request = query.first()
        return self._to_domain(db_request) if db_request else None

    def list_by_client(self, client_id: int) -> List[RentalRequest]:
        rows = (
            self._undeleted()
            .filter(RentalRequestModel.client_id == client_id)
            .order_by(RentalRequestModel.request_date.desc(), RentalRequestModel.id.desc())
            .all()
        )
        return [self._to_domain(r) for r in rows]

    def list_by_status(self, status: str) -> List[RentalRequest]:
        normalized = RentalStatus.parse(status).value
        rows = (
            self._undeleted()
            .filter(RentalRequestModel.status == normalized)
            .order_by(RentalRequestModel.request_date.desc(), RentalRequestModel.id.desc())
            .all()
        )
        return [self._to_domain(r) for r in rows]

    def list_all(self) -> List[RentalRequest]:
        rows = (
            self._undeleted()
            .order_by(RentalRequestModel.request_date.desc(), RentalRequestModel.id.desc())
            .all()
        )
        return [self._to_domain(r) for r in rows]

    def count_by_client_and_status(self, client_id: int, status: str) -> int:
        normalized = RentalStatus.parse(status).value
        return (
            self.db.query(func.count(RentalRequestModel.id))
            .filter(
                RentalRequestModel.client_id == client_id,
                RentalRequestModel.status == normalized,
                RentalRequestModel.is_deleted.is_(False),
            )
            .scalar()
            or 0
        )

    def _to_domain(self, db_request: RentalRequestModel) -> RentalRequest:
        return RentalRequest(
            id=db_request.id,
            equipment_id=db_request.equipment_id,
            client_id=db_request.client_id,
            provider_id=db_request.provider_id,
            request_date=db_request.request_date,
            status=db_request.status,
            notes=db_request.notes,
            monthly_price=db_request.monthly_price,
            is_deleted=bool(db_request.is_deleted),
            version=db_request.version,
            created_at=db_request.created_at,
            updated_at=db_request.updated_at,
        )
