"""
Domain entities - Pure business logic, no framework dependencies.

The RentalRequest is the aggregate root of the rental workflow. Users,
client plans, equipment and invoices are referenced by id only; display data
is composed by the query side (see ``schemas.dtos``).
"""

import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional

from gym_office.core.config import STATUS_POLICY_PERMISSIVE
from gym_office.core.exceptions import (
    InvalidInvoiceDataError,
    InvalidRentalRequestDataError,
    InvalidTransitionError,
    InvoiceStatusTransitionError,
    NotPendingError,
)
from gym_office.domain.statuses import (
    InvoiceStatus,
    RentalStatus,
    is_transition_allowed,
)

_CURRENCY_RE = re.compile(r"^[A-Z]{3}$")
COMPANY_NAME_MAX_LENGTH = 255


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes; treat them as UTC for comparisons
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


def _to_decimal(value, field_name: str, error_cls) -> Decimal:
    try:
        result = value if isinstance(value, Decimal) else Decimal(str(value))
    except (ArithmeticError, ValueError, TypeError):
        raise error_cls(f"{field_name} must be a number") from None
    # NaN and infinities cannot be compared or stored in a NUMERIC column
    if not result.is_finite():
        raise error_cls(f"{field_name} must be a finite number")
    return result


@dataclass
class User:
    """Read-only view of a user account (client or provider)."""

    id: Optional[int] = None
    email: Optional[str] = None
    name: str = ""
    role: str = "client"  # 'client', 'provider'
    client_plan_id: Optional[int] = None
    is_active: bool = True
    created_at: Optional[datetime] = None

    @property
    def display_name(self) -> str:
        """Name printed on invoices: email when known, else a stable placeholder."""
        return self.email or f"Client #{self.id}"


@dataclass
class ClientPlan:
    """Subscription tier limiting how many machines a client may rent."""

    id: Optional[int] = None
    name: str = ""
    description: Optional[str] = None
    monthly_price: Decimal = Decimal("0")
    max_equipment_access: int = 0
    has_maintenance_support: bool = False
    has_priority_support: bool = False

    def __post_init__(self):
        if not self.name or not self.name.strip():
            raise ValueError("Plan name is required")
        if self.monthly_price < 0:
            raise ValueError("Monthly price cannot be negative")
        if self.max_equipment_access < 0:
            raise ValueError("Max equipment access cannot be negative")


@dataclass
class Equipment:
    """Display data for a rentable machine."""

    id: Optional[int] = None
    name: str = ""
    type: Optional[str] = None
    image: Optional[str] = None


@dataclass
class RentalRequest:
    """A client's request to rent one piece of equipment at a monthly price.

    State machine:
        pending -> approved -> completed
        pending -> rejected
        pending/approved -> cancelled (soft-deleted)

    ``version`` mirrors the optimistic-locking counter of the persisted row
    and is never changed by the entity itself.
    """

    equipment_id: int = 0
    client_id: int = 0
    monthly_price: Decimal = Decimal("0")
    notes: Optional[str] = None
    status: str = RentalStatus.PENDING.value
    provider_id: Optional[int] = None
    request_date: Optional[datetime] = None
    is_deleted: bool = False
    id: Optional[int] = None
    version: int = 0
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def __post_init__(self):
        """Validate business rules."""
        if not self.equipment_id or self.equipment_id <= 0:
            raise InvalidRentalRequestDataError("Valid equipment_id is required")
        if not self.client_id or self.client_id <= 0:
            raise InvalidRentalRequestDataError("Valid client_id is required")

        self.monthly_price = _to_decimal(
            self.monthly_price, "monthly_price", InvalidRentalRequestDataError
        )
        if self.monthly_price < 0:
            raise InvalidRentalRequestDataError("Monthly price cannot be negative")

        self.status = RentalStatus.parse(self.status).value
        if self.request_date is None:
            self.request_date = utcnow()

    @classmethod
    def create(
        cls,
        equipment_id: int,
        client_id: int,
        monthly_price,
        notes: Optional[str] = None,
    ) -> "RentalRequest":
        """New request in ``pending`` state dated now."""
        return cls(
            equipment_id=equipment_id,
            client_id=client_id,
            monthly_price=monthly_price,
            notes=notes,
            status=RentalStatus.PENDING.value,
            request_date=utcnow(),
        )

    @property
    def current_status(self) -> RentalStatus:
        return RentalStatus(self.status)

    @property
    def is_pending(self) -> bool:
        return self.current_status is RentalStatus.PENDING

    def approve(self, provider_id: int, now: Optional[datetime] = None) -> None:
        if not self.is_pending:
            raise NotPendingError(self.id, self.status)
        if not provider_id or provider_id <= 0:
            raise InvalidRentalRequestDataError("Valid provider_id is required")

        self.provider_id = provider_id
        self.status = RentalStatus.APPROVED.value
        self.updated_at = now or utcnow()

    def cancel(self, now: Optional[datetime] = None) -> None:
        self.status = RentalStatus.CANCELLED.value
        self.is_deleted = True
        self.updated_at = now or utcnow()

    def update_status(
        self,
        new_status: str,
        policy: str = STATUS_POLICY_PERMISSIVE,
        now: Optional[datetime] = None,
    ) -> None:
        """Generic status setter used by providers.

        ``policy`` selects the transition table (``permissive`` or ``strict``).
        Re-setting the current status is a no-op. Moving to ``cancelled``
        goes through ``cancel`` so the row is soft-deleted.
        Under ``permissive`` a pending request can be set to ``approved``
        here without the provider, quota check or invoice of ``approve``.
        """
        target = RentalStatus.parse(new_status)
        current = self.current_status

        if target is current:
            return

        if not is_transition_allowed(current, target, policy):
            raise InvalidTransitionError(current.value, target.value)

        if target is RentalStatus.CANCELLED:
            self.cancel(now)
            return

        self.status = target.value
        self.updated_at = now or utcnow()


@dataclass
class BillingInvoice:
    """Invoice owed by a user. Approval of a rental creates one in ``pending``."""

    user_id: int = 0
    company_name: str = ""
    amount: Decimal = Decimal("0")
    currency: str = "USD"
    status: str = InvoiceStatus.PENDING.value
    issued_at: datetime = field(default_factory=utcnow)
    paid_at: Optional[datetime] = None
    provider_id: Optional[int] = None
    maintenance_request_id: Optional[int] = None
    rental_request_id: Optional[int] = None
    id: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def __post_init__(self):
        """Validate business rules."""
        if not self.user_id or self.user_id <= 0:
            raise InvalidInvoiceDataError("User ID must be a positive number.")

        self.company_name = (self.company_name or "").strip()
        if not self.company_name:
            raise InvalidInvoiceDataError("Company name is required.")
        if len(self.company_name) > COMPANY_NAME_MAX_LENGTH:
            raise InvalidInvoiceDataError(
                f"Company name cannot exceed {COMPANY_NAME_MAX_LENGTH} characters."
            )

        self.amount = _to_decimal(self.amount, "amount", InvalidInvoiceDataError)
        if self.amount < 0:
            raise InvalidInvoiceDataError("Amount cannot be negative.")

        self.currency = (self.currency or "").strip().upper()
        if not _CURRENCY_RE.match(self.currency):
            raise InvalidInvoiceDataError("Currency must be a 3-letter ISO code.")

        try:
            self.status = InvoiceStatus.parse(self.status).value
        except ValueError:
            raise InvalidInvoiceDataError(
                f"Invalid invoice status: {self.status}"
            ) from None

        if self.issued_at is None:
            raise InvalidInvoiceDataError("Issued date is required.")

        if self.status == InvoiceStatus.PAID.value and self.paid_at is None:
            raise InvalidInvoiceDataError("Paid invoices must have a paid date.")
        if self.status != InvoiceStatus.PAID.value and self.paid_at is not None:
            raise InvalidInvoiceDataError("Only paid invoices can have a paid date.")
        if self.paid_at is not None and _as_utc(self.paid_at) < _as_utc(self.issued_at):
            raise InvalidInvoiceDataError("Paid date cannot be before issued date.")

    def mark_as_paid(self, paid_at: Optional[datetime] = None) -> None:
        if self.status == InvoiceStatus.PAID.value:
            raise InvoiceStatusTransitionError(
                self.status, InvoiceStatus.PAID.value, "Invoice is already paid."
            )
        if self.status == InvoiceStatus.CANCELLED.value:
            raise InvoiceStatusTransitionError(
                self.status, InvoiceStatus.PAID.value, "Cannot pay a cancelled invoice."
            )

        paid_at = paid_at or utcnow()
        if _as_utc(paid_at) < _as_utc(self.issued_at):
            raise InvalidInvoiceDataError("Paid date cannot be before issued date.")

        self.status = InvoiceStatus.PAID.value
        self.paid_at = paid_at
        self.updated_at = utcnow()

    def cancel(self) -> None:
        if self.status == InvoiceStatus.PAID.value:
            raise InvoiceStatusTransitionError(
                self.status, InvoiceStatus.CANCELLED.value, "Cannot cancel a paid invoice."
            )

        self.status = InvoiceStatus.CANCELLED.value
        self.updated_at = utcnow()
