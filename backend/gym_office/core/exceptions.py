"""
Typed exceptions for the gym office back office.

Every error carries a machine-readable ``code`` so controllers can map it to
an HTTP status without parsing messages. Structured data (ids, counts,
statuses) is kept on the instance for logging and API payloads.

    GymOfficeError
    +-- NotFoundError
    |   +-- RentalRequestNotFoundError
    |   +-- ClientNotFoundError
    |   +-- EquipmentNotFoundError
    |   +-- InvoiceNotFoundError
    +-- AccessDeniedError
    +-- ConflictError
    |   +-- DuplicatePendingRequestError
    |   +-- ConcurrentModificationError
    +-- PolicyViolationError
    |   +-- PlanLimitExceededError
    |   +-- PlanNotFoundError
    +-- InvalidTransitionError
    |   +-- NotPendingError
    |   +-- InvoiceStatusTransitionError
    +-- ValidationError (also a ValueError)
        +-- InvalidStatusError
        +-- InvalidRentalRequestDataError
        +-- InvalidInvoiceDataError
"""

from typing import Any, Dict, Optional


class GymOfficeError(Exception):
    """Base exception for all domain errors."""

    code: str = "GYM_OFFICE_ERROR"

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        return {"code": self.code}


# ===========================
# Not found
# ===========================


class NotFoundError(GymOfficeError):
    code = "NOT_FOUND"


class RentalRequestNotFoundError(NotFoundError):
    code = "RENTAL_REQUEST_NOT_FOUND"

    def __init__(self, rental_request_id: int):
        self.rental_request_id = rental_request_id
        super().__init__(f"Rental request {rental_request_id} not found")


class ClientNotFoundError(NotFoundError):
    code = "CLIENT_NOT_FOUND"

    def __init__(self, client_id: int):
        self.client_id = client_id
        super().__init__("Client not found")

    def to_dict(self) -> Dict[str, Any]:
        return {"code": self.code, "client_id": self.client_id}


class EquipmentNotFoundError(NotFoundError):
    code = "EQUIPMENT_NOT_FOUND"

    def __init__(self, equipment_id: int):
        self.equipment_id = equipment_id
        super().__init__(f"Equipment {equipment_id} not found")


class InvoiceNotFoundError(NotFoundError):
    code = "INVOICE_NOT_FOUND"

    def __init__(self, invoice_id: int):
        self.invoice_id = invoice_id
        super().__init__(f"Invoice {invoice_id} not found")


# ===========================
# Access
# ===========================


class AccessDeniedError(GymOfficeError):
    code = "ACCESS_DENIED"


# ===========================
# Conflicts
# ===========================


class ConflictError(GymOfficeError):
    code = "CONFLICT"


class DuplicatePendingRequestError(ConflictError):
    code = "DUPLICATE_PENDING_REQUEST"

    def __init__(self, client_id: int, equipment_id: int):
        self.client_id = client_id
        self.equipment_id = equipment_id
        super().__init__("A pending rental request already exists for this equipment")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code,
            "client_id": self.client_id,
            "equipment_id": self.equipment_id,
        }


class ConcurrentModificationError(ConflictError):
    code = "CONCURRENT_MODIFICATION"

    def __init__(self, entity: str, entity_id: Optional[int] = None):
        self.entity = entity
        self.entity_id = entity_id
        target = entity if entity_id is None else f"{entity} {entity_id}"
        super().__init__(f"{target} was modified by another transaction")


# ===========================
# Policy violations
# ===========================


class PolicyViolationError(GymOfficeError):
    code = "POLICY_VIOLATION"


class PlanLimitExceededError(PolicyViolationError):
    code = "PLAN_LIMIT_EXCEEDED"

    def __init__(self, current_count: int, limit: int):
        self.current_count = current_count
        self.limit = limit
        super().__init__(
            f"Client has reached their plan limit of {limit} machines "
            f"({current_count}/{limit}). They must upgrade their plan before "
            "accepting this request."
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code,
            "current_count": self.current_count,
            "limit": self.limit,
        }


class PlanNotFoundError(PolicyViolationError):
    code = "PLAN_NOT_FOUND"

    def __init__(self, plan_id: int):
        self.plan_id = plan_id
        super().__init__(
            f"Client plan {plan_id} could not be resolved; approval denied"
        )


# ===========================
# Invalid transitions
# ===========================


class InvalidTransitionError(GymOfficeError):
    code = "INVALID_TRANSITION"

    def __init__(self, from_status: str, to_status: str, message: Optional[str] = None):
        self.from_status = from_status
        self.to_status = to_status
        super().__init__(
            message or f"Cannot change status from '{from_status}' to '{to_status}'"
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code,
            "from_status": self.from_status,
            "to_status": self.to_status,
        }


class NotPendingError(InvalidTransitionError):
    code = "NOT_PENDING"

    def __init__(self, rental_request_id: Optional[int], status: str):
        self.rental_request_id = rental_request_id
        super().__init__(
            status, "approved", "Only pending rental requests can be approved"
        )


class InvoiceStatusTransitionError(InvalidTransitionError):
    code = "INVOICE_STATUS_TRANSITION"


# ===========================
# Validation
# ===========================


class ValidationError(GymOfficeError, ValueError):
    code = "VALIDATION_ERROR"


class InvalidStatusError(ValidationError):
    code = "INVALID_STATUS"

    def __init__(self, status: Any):
        self.status = status
        super().__init__(f"Invalid status: {status}")


class InvalidRentalRequestDataError(ValidationError):
    code = "INVALID_RENTAL_REQUEST"


class InvalidInvoiceDataError(ValidationError):
    code = "INVALID_INVOICE"
