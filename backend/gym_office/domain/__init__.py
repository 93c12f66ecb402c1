"""
Domain package - Pure business logic layer.

This package contains:
- entities.py: Domain entities with business logic
- statuses.py: Status vocabularies and transition tables
- quota.py: Plan-limit policy
- interfaces.py: Repository and unit of work contracts
"""

from .entities import BillingInvoice, ClientPlan, Equipment, RentalRequest, User
from .interfaces import (
    IBillingInvoiceRepository,
    IClientPlanReader,
    IEquipmentReader,
    IRentalRequestReader,
    IRentalRequestRepository,
    IRentalRequestWriter,
    IUnitOfWork,
    IUserReader,
)
from .statuses import InvoiceStatus, RentalStatus

__all__ = [
    # Domain entities
    "User",
    "ClientPlan",
    "Equipment",
    "RentalRequest",
    "BillingInvoice",
    # Statuses
    "RentalStatus",
    "InvoiceStatus",
    # Repository interfaces
    "IRentalRequestRepository",
    "IBillingInvoiceRepository",
    "IUnitOfWork",
    # Segregated interfaces
    "IRentalRequestReader",
    "IRentalRequestWriter",
    "IUserReader",
    "IClientPlanReader",
    "IEquipmentReader",
]
