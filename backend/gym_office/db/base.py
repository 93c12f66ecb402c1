from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional

from sqlalchemy import (
    Boolean,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column

from .session import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ClientPlan(Base):
    """Subscription tier catalogue"""

    __tablename__ = "client_plans"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    monthly_price: Mapped[Decimal] = mapped_column(
        Numeric(10, 2), nullable=False, default=Decimal("0")
    )
    max_equipment_access: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0
    )
    has_maintenance_support: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False
    )
    has_priority_support: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False
    )
    created_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), default=_utcnow
    )
    updated_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), onupdate=_utcnow
    )

    def __repr__(self):
        return f"<ClientPlan(id={self.id}, name='{self.name}', max={self.max_equipment_access})>"


# Explicitly implement Flask-Login interface without inheriting UserMixin
class User(Base):
    """Client or provider account"""

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    email: Mapped[Optional[str]] = mapped_column(
        String(255), unique=True, nullable=True
    )
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    phone: Mapped[Optional[str]] = mapped_column(String(30), nullable=True)
    role: Mapped[str] = mapped_column(
        String(20), nullable=False, default="client"
    )  # 'client', 'provider'
    client_plan_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("client_plans.id"), nullable=True
    )
    active_flag: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), default=_utcnow
    )
    updated_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), onupdate=_utcnow
    )

    @property
    def is_active(self) -> bool:
        # Flask-Login expects this property
        return self.active_flag

    @is_active.setter
    def is_active(self, value: bool) -> None:
        self.active_flag = bool(value)

    def get_id(self):
        """Return user identifier for Flask-Login"""
        return str(self.id)

    @property
    def is_authenticated(self):
        return True

    @property
    def is_anonymous(self):
        return False

    def __repr__(self):
        return f"<User(id={self.id}, role='{self.role}')>"


class Equipment(Base):
    """Rentable gym machine (display fields only)"""

    __tablename__ = "equipments"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    type: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    image: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    created_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), default=_utcnow
    )

    def __repr__(self):
        return f"<Equipment(id={self.id}, name='{self.name}')>"


class RentalRequest(Base):
    """Client request to rent a machine; approval issues an invoice"""

    __tablename__ = "rental_requests"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    equipment_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("equipments.id"), nullable=False
    )
    client_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id"), nullable=False
    )
    provider_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("users.id"), nullable=True
    )
    request_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow
    )
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default="pending"
    )  # pending, approved, rejected, completed, cancelled
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    monthly_price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    is_deleted: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    # Optimistic locking: UPDATE ... WHERE version = <loaded version>
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    created_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), default=_utcnow
    )
    updated_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    __mapper_args__ = {"version_id_col": version}
    __table_args__ = (
        Index("ix_rental_requests_client_status", "client_id", "status"),
    )

    def __repr__(self):
        return f"<RentalRequest(id={self.id}, client_id={self.client_id}, status='{self.status}')>"


class BillingInvoice(Base):
    """Invoice owed by a user, optionally linked to a rental request"""

    __tablename__ = "billing_invoices"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id"), nullable=False, index=True
    )
    company_name: Mapped[str] = mapped_column(String(255), nullable=False)
    amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    currency: Mapped[str] = mapped_column(String(3), nullable=False, default="USD")
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default="pending"
    )  # pending, paid, cancelled
    issued_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    paid_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    provider_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("users.id"), nullable=True
    )
    maintenance_request_id: Mapped[Optional[int]] = mapped_column(
        Integer, nullable=True
    )
    rental_request_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("rental_requests.id"), nullable=True, index=True
    )
    created_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), default=_utcnow
    )
    updated_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    def __repr__(self):
        return f"<BillingInvoice(id={self.id}, user_id={self.user_id}, status='{self.status}')>"
