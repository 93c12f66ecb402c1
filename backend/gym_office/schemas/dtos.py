"""
Data Transfer Objects (DTOs) for the rental and billing API.

Request DTOs parse and validate JSON payloads. Response DTOs are read-only
projections composed from domain entities plus display data looked up by id;
they are never persisted.
"""

from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Optional

from gym_office.core.exceptions import (
    InvalidInvoiceDataError,
    InvalidRentalRequestDataError,
)
from gym_office.domain.statuses import InvoiceStatus, RentalStatus


def _parse_decimal(value: Any, field_name: str, error_cls) -> Decimal:
    if value is None or isinstance(value, bool):
        raise error_cls(f"{field_name} is required")
    try:
        result = Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise error_cls(f"{field_name} must be a number") from None
    if not result.is_finite():
        raise error_cls(f"{field_name} must be a finite number")
    return result


def _parse_int(value: Any, field_name: str, error_cls) -> Optional[int]:
    if value is None:
        return None
    if isinstance(value, bool):
        raise error_cls(f"{field_name} must be an integer")
    try:
        return int(value)
    except (TypeError, ValueError):
        raise error_cls(f"{field_name} must be an integer") from None


def parse_datetime(value: Any, field_name: str, error_cls) -> Optional[datetime]:
    if value is None or isinstance(value, datetime):
        return value
    try:
        return datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except ValueError:
        raise error_cls(f"{field_name} must be an ISO 8601 datetime") from None


def _serialize(value: Any) -> Any:
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, Decimal):
        return str(value)
    return value


# ===========================
# Rental requests
# ===========================


@dataclass
class RentalRequestCreateRequest:
    """DTO for rental request creation."""

    equipment_id: int
    client_id: int
    monthly_price: Decimal
    notes: Optional[str] = None

    @classmethod
    def from_json(
        cls, payload: Dict[str, Any], default_client_id: Optional[int] = None
    ) -> "RentalRequestCreateRequest":
        client_id = _parse_int(
            payload.get("client_id"), "client_id", InvalidRentalRequestDataError
        )
        return cls(
            equipment_id=_parse_int(
                payload.get("equipment_id"),
                "equipment_id",
                InvalidRentalRequestDataError,
            ),
            client_id=client_id if client_id is not None else default_client_id,
            monthly_price=_parse_decimal(
                payload.get("monthly_price"),
                "monthly_price",
                InvalidRentalRequestDataError,
            ),
            notes=payload.get("notes"),
        )

    def validate(self) -> None:
        """Validate the request data."""
        if not self.equipment_id or self.equipment_id <= 0:
            raise InvalidRentalRequestDataError("Valid equipment_id is required")
        if not self.client_id or self.client_id <= 0:
            raise InvalidRentalRequestDataError("Valid client_id is required")
        price = self.monthly_price
        if isinstance(price, Decimal) and not price.is_finite():
            raise InvalidRentalRequestDataError("Monthly price must be a finite number")
        if price < 0:
            raise InvalidRentalRequestDataError("Monthly price cannot be negative")
        if self.notes is not None and not isinstance(self.notes, str):
            raise InvalidRentalRequestDataError("Notes must be text")


@dataclass
class RentalRequestStatusUpdateRequest:
    """DTO for the provider's generic status update."""

    status: str

    def validate(self) -> None:
        RentalStatus.parse(self.status)


@dataclass
class RentalRequestResponse:
    """Rental request joined with equipment, client and provider display data."""

    id: int
    equipment_id: int
    equipment_name: Optional[str]
    equipment_type: Optional[str]
    equipment_image: Optional[str]
    client_id: int
    client_email: Optional[str]
    provider_id: Optional[int]
    provider_email: Optional[str]
    provider_name: Optional[str]
    request_date: Optional[datetime]
    status: str
    notes: Optional[str]
    monthly_price: Decimal
    created_at: Optional[datetime]
    updated_at: Optional[datetime]

    @classmethod
    def from_domain(
        cls, rental_request, equipment=None, client=None, provider=None
    ) -> "RentalRequestResponse":
        """Create response from the aggregate and its looked-up references."""
        return cls(
            id=rental_request.id,
            equipment_id=rental_request.equipment_id,
            equipment_name=getattr(equipment, "name", None),
            equipment_type=getattr(equipment, "type", None),
            equipment_image=getattr(equipment, "image", None),
            client_id=rental_request.client_id,
            client_email=getattr(client, "email", None),
            provider_id=rental_request.provider_id,
            provider_email=getattr(provider, "email", None),
            provider_name=getattr(provider, "name", None),
            request_date=rental_request.request_date,
            status=rental_request.status,
            notes=rental_request.notes,
            monthly_price=rental_request.monthly_price,
            created_at=rental_request.created_at,
            updated_at=rental_request.updated_at or rental_request.created_at,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {k: _serialize(v) for k, v in asdict(self).items()}


# ===========================
# Billing invoices
# ===========================


@dataclass
class InvoiceCreateRequest:
    """DTO for invoice issuance."""

    user_id: int
    company_name: str
    amount: Decimal
    currency: str
    issued_at: datetime
    status: str = InvoiceStatus.PENDING.value
    paid_at: Optional[datetime] = None
    provider_id: Optional[int] = None
    maintenance_request_id: Optional[int] = None
    rental_request_id: Optional[int] = None

    @classmethod
    def from_json(
        cls,
        payload: Dict[str, Any],
        default_provider_id: Optional[int] = None,
        default_currency: Optional[str] = None,
    ) -> "InvoiceCreateRequest":
        """Parse a provider's manual invoice payload.

        ``issued_at`` defaults to now, ``currency`` to ``default_currency`` and
        ``provider_id`` to the issuing provider.
        """
        error = InvalidInvoiceDataError
        provider_id = _parse_int(payload.get("provider_id"), "provider_id", error)
        issued_at = parse_datetime(payload.get("issued_at"), "issued_at", error)
        return cls(
            user_id=_parse_int(payload.get("user_id"), "user_id", error),
            company_name=payload.get("company_name") or "",
            amount=_parse_decimal(payload.get("amount"), "amount", error),
            currency=payload.get("currency") or default_currency or "",
            issued_at=issued_at or datetime.now(timezone.utc),
            status=payload.get("status") or InvoiceStatus.PENDING.value,
            paid_at=parse_datetime(payload.get("paid_at"), "paid_at", error),
            provider_id=provider_id if provider_id is not None else default_provider_id,
            maintenance_request_id=_parse_int(
                payload.get("maintenance_request_id"), "maintenance_request_id", error
            ),
            rental_request_id=_parse_int(
                payload.get("rental_request_id"), "rental_request_id", error
            ),
        )

    def validate(self) -> None:
        if not self.user_id or self.user_id <= 0:
            raise InvalidInvoiceDataError("User ID must be a positive number.")
        if self.issued_at is None:
            raise InvalidInvoiceDataError("Issued date is required.")
        for field_name in ("company_name", "currency", "status"):
            if not isinstance(getattr(self, field_name), str):
                raise InvalidInvoiceDataError(f"{field_name} must be text.")


@dataclass
class InvoiceMarkPaidRequest:
    paid_at: Optional[datetime] = None

    @classmethod
    def from_json(cls, payload: Dict[str, Any]) -> "InvoiceMarkPaidRequest":
        return cls(
            paid_at=parse_datetime(
                payload.get("paid_at"), "paid_at", InvalidInvoiceDataError
            )
        )


@dataclass
class InvoiceResponse:
    id: int
    user_id: int
    company_name: str
    amount: Decimal
    currency: str
    status: str
    issued_at: datetime
    paid_at: Optional[datetime]
    provider_id: Optional[int]
    maintenance_request_id: Optional[int]
    rental_request_id: Optional[int]

    @classmethod
    def from_domain(cls, invoice) -> "InvoiceResponse":
        return cls(
            id=invoice.id,
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

    def to_dict(self) -> Dict[str, Any]:
        return {k: _serialize(v) for k, v in asdict(self).items()}
