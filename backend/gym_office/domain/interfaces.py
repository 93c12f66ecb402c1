"""
Abstract interfaces for repositories following Interface Segregation Principle.

These interfaces define contracts without implementation details,
enabling dependency injection and easier testing. Repositories stage changes
in the session they were built with; only the unit of work commits.
"""

from abc import ABC, abstractmethod
from typing import Dict, Iterable, List, Optional

from .entities import BillingInvoice, ClientPlan, Equipment, RentalRequest, User


class IRentalRequestReader(ABC):
    """Interface for rental request read operations."""

    @abstractmethod
    def get_by_id(
        self,
        rental_request_id: int,
        include_deleted: bool = False,
        for_update: bool = False,
    ) -> Optional[RentalRequest]:
        """Get a rental request by ID, optionally row-locked."""
        pass

    @abstractmethod
    def list_by_client(self, client_id: int) -> List[RentalRequest]:
        """Get undeleted requests of a client, newest first."""
        pass

    @abstractmethod
    def list_by_status(self, status: str) -> List[RentalRequest]:
        """Get undeleted requests in a status, newest first."""
        pass

    @abstractmethod
    def list_all(self) -> List[RentalRequest]:
        """Get all undeleted requests, newest first."""
        pass

    @abstractmethod
    def count_by_client_and_status(self, client_id: int, status: str) -> int:
        """Count undeleted requests of a client in a status."""
        pass


class IRentalRequestWriter(ABC):
    """Interface for rental request write operations."""

    @abstractmethod
    def add(self, rental_request: RentalRequest) -> RentalRequest:
        """Stage a new rental request and return it with its id."""
        pass

    @abstractmethod
    def update(self, rental_request: RentalRequest) -> RentalRequest:
        """Stage changes of an existing rental request."""
        pass


class IRentalRequestRepository(IRentalRequestReader, IRentalRequestWriter):
    """Complete rental request repository interface."""

    pass


class IUserReader(ABC):
    """Client/provider lookup."""

    @abstractmethod
    def get_by_id(self, user_id: int, for_update: bool = False) -> Optional[User]:
        """Get user by ID, optionally row-locked."""
        pass

    @abstractmethod
    def get_by_ids(self, user_ids: Iterable[int]) -> Dict[int, User]:
        """Get users keyed by ID; unknown ids are omitted."""
        pass


class IClientPlanReader(ABC):
    """Plan lookup."""

    @abstractmethod
    def get_by_id(self, plan_id: int) -> Optional[ClientPlan]:
        """Get client plan by ID."""
        pass


class IEquipmentReader(ABC):
    """Equipment display data lookup."""

    @abstractmethod
    def get_by_ids(self, equipment_ids: Iterable[int]) -> Dict[int, Equipment]:
        """Get equipment keyed by ID; unknown ids are omitted."""
        pass


class IBillingInvoiceRepository(ABC):
    """Invoice storage."""

    @abstractmethod
    def add(self, invoice: BillingInvoice) -> BillingInvoice:
        """Stage a new invoice and return it with its id."""
        pass

    @abstractmethod
    def update(self, invoice: BillingInvoice) -> BillingInvoice:
        """Stage changes of an existing invoice."""
        pass

    @abstractmethod
    def get_by_id(self, invoice_id: int) -> Optional[BillingInvoice]:
        """Get invoice by ID."""
        pass

    @abstractmethod
    def list_by_user(self, user_id: int) -> List[BillingInvoice]:
        """Get invoices of a user, newest first."""
        pass

    @abstractmethod
    def list_by_rental_request(self, rental_request_id: int) -> List[BillingInvoice]:
        """Get invoices issued for a rental request."""
        pass

    @abstractmethod
    def list_all(self) -> List[BillingInvoice]:
        """Get all invoices, newest first."""
        pass


class IUnitOfWork(ABC):
    """One transaction shared by every repository it exposes.

    Usage:
        with uow:
            uow.rental_requests.add(...)
            uow.commit()

    Leaving the block without ``commit()`` discards staged changes.
    """

    rental_requests: IRentalRequestRepository
    users: IUserReader
    client_plans: IClientPlanReader
    equipment: IEquipmentReader
    invoices: IBillingInvoiceRepository

    def __enter__(self) -> "IUnitOfWork":
        return self

    def __exit__(self, exc_type, exc, tb):
        self.rollback()

    @abstractmethod
    def commit(self) -> None:
        """Commit every staged change atomically."""
        pass

    @abstractmethod
    def rollback(self) -> None:
        """Discard every staged change."""
        pass
