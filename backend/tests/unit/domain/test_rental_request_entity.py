"""Unit tests for the RentalRequest aggregate and its state machine."""

from decimal import Decimal

import pytest

from gym_office.core.exceptions import (
    InvalidRentalRequestDataError,
    InvalidStatusError,
    InvalidTransitionError,
    NotPendingError,
)
from gym_office.domain.entities import RentalRequest
from gym_office.domain.statuses import RentalStatus
from tests.fixtures.domain_fixtures import make_rental_request


@pytest.mark.domain
class TestRentalRequestCreation:
    def test_create_starts_pending_with_request_date(self):
        rental = RentalRequest.create(
            equipment_id=3, client_id=7, monthly_price="89.90", notes="Garage"
        )

        assert rental.status == "pending"
        assert rental.provider_id is None
        assert rental.is_deleted is False
        assert rental.request_date is not None
        assert rental.monthly_price == Decimal("89.90")

    @pytest.mark.parametrize(
        "overrides",
        [
            {"equipment_id": 0},
            {"client_id": -1},
            {"monthly_price": Decimal("-1")},
            {"monthly_price": "not-a-number"},
        ],
    )
    def test_invalid_fields_are_rejected(self, overrides):
        with pytest.raises(InvalidRentalRequestDataError):
            make_rental_request(**overrides)

    @pytest.mark.parametrize("price", ["NaN", "sNaN", "Infinity"])
    def test_non_finite_price_is_rejected(self, price):
        with pytest.raises(InvalidRentalRequestDataError, match="finite"):
            make_rental_request(monthly_price=Decimal(price))
        with pytest.raises(InvalidRentalRequestDataError, match="finite"):
            make_rental_request(monthly_price=price)

    def test_status_is_normalized_case_insensitively(self):
        rental = make_rental_request(status="APPROVED", provider_id=2)
        assert rental.status == "approved"

    def test_unknown_status_is_rejected(self):
        with pytest.raises(InvalidStatusError):
            make_rental_request(status="archived")


@pytest.mark.domain
class TestRentalRequestApprove:
    def test_approve_sets_provider_and_status(self, pending_request):
        pending_request.approve(provider_id=42)

        assert pending_request.status == "approved"
        assert pending_request.provider_id == 42
        assert pending_request.updated_at is not None

    def test_approve_keeps_monthly_price(self, pending_request):
        price = pending_request.monthly_price
        pending_request.approve(provider_id=42)
        assert pending_request.monthly_price == price

    @pytest.mark.parametrize("status", ["approved", "rejected", "completed", "cancelled"])
    def test_approve_requires_pending(self, status):
        rental = make_rental_request(status=status)

        with pytest.raises(NotPendingError) as exc_info:
            rental.approve(provider_id=42)

        assert rental.status == status
        assert rental.provider_id is None
        assert exc_info.value.code == "NOT_PENDING"
        assert isinstance(exc_info.value, InvalidTransitionError)

    def test_approve_rejects_missing_provider(self, pending_request):
        with pytest.raises(InvalidRentalRequestDataError):
            pending_request.approve(provider_id=0)
        assert pending_request.status == "pending"


@pytest.mark.domain
class TestRentalRequestCancel:
    @pytest.mark.parametrize("status", ["pending", "approved", "completed"])
    def test_cancel_soft_deletes_from_any_state(self, status):
        rental = make_rental_request(status=status)

        rental.cancel()

        assert rental.status == "cancelled"
        assert rental.is_deleted is True
        assert rental.updated_at is not None


@pytest.mark.domain
class TestRentalRequestUpdateStatus:
    def test_permissive_allows_correcting_completed(self):
        rental = make_rental_request(status="completed", provider_id=2)

        rental.update_status("PENDING", policy="permissive")

        assert rental.status == "pending"

    def test_permissive_allows_approving_through_setter(self, pending_request):
        pending_request.update_status("approved", policy="permissive")

        assert pending_request.status == "approved"
        assert pending_request.provider_id is None

    def test_permissive_rejects_leaving_rejected(self):
        rental = make_rental_request(status="rejected")

        with pytest.raises(InvalidTransitionError):
            rental.update_status("pending", policy="permissive")

    def test_strict_rejects_completed_to_pending(self):
        rental = make_rental_request(status="completed", provider_id=2)

        with pytest.raises(InvalidTransitionError) as exc_info:
            rental.update_status("pending", policy="strict")

        assert exc_info.value.from_status == "completed"
        assert exc_info.value.to_status == "pending"
        assert rental.status == "completed"

    def test_strict_forbids_approval_through_setter(self, pending_request):
        with pytest.raises(InvalidTransitionError):
            pending_request.update_status("approved", policy="strict")
        assert pending_request.provider_id is None

    def test_strict_allows_rejecting_pending(self, pending_request):
        pending_request.update_status("rejected", policy="strict")
        assert pending_request.current_status is RentalStatus.REJECTED

    def test_setting_cancelled_soft_deletes(self, pending_request):
        pending_request.update_status("cancelled")

        assert pending_request.status == "cancelled"
        assert pending_request.is_deleted is True

    def test_same_status_is_a_no_op(self):
        rental = make_rental_request(status="rejected")
        rental.update_status("rejected", policy="strict")
        assert rental.status == "rejected"
        assert rental.updated_at is None

    def test_unknown_status_raises_invalid_status(self, pending_request):
        with pytest.raises(InvalidStatusError) as exc_info:
            pending_request.update_status("paused")

        assert str(exc_info.value) == "Invalid status: paused"
        assert pending_request.status == "pending"
