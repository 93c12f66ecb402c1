from .billing_invoice_repo import BillingInvoiceRepository
from .catalog_repo import ClientPlanRepository, EquipmentRepository
from .rental_request_repo import RentalRequestRepository
from .user_repo import UserRepository

__all__ = [
    "BillingInvoiceRepository",
    "ClientPlanRepository",
    "EquipmentRepository",
    "RentalRequestRepository",
    "UserRepository",
]
