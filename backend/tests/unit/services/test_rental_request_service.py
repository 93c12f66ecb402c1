"""
Unit tests for RentalRequestCommandService and RentalRequestQueryService.

The unit of work and its repositories are spec'd mocks; these tests pin the
order of effects and the single-commit / rollback contract.
"""

from decimal import Decimal
from unittest.mock import Mock

import pytest

from gym_office.core.exceptions import (
    AccessDeniedError,
    ClientNotFoundError,
    DuplicatePendingRequestError,
    EquipmentNotFoundError,
    InvalidRentalRequestDataError,
    InvalidStatusError,
    InvalidTransitionError,
    NotPendingError,
    PlanLimitExceededError,
    PlanNotFoundError,
)
from gym_office.domain.entities import ClientPlan, Equipment, User
from gym_office.schemas.dtos import RentalRequestCreateRequest
from gym_office.services.rental_request_service import (
    RentalRequestCommandService,
    RentalRequestQueryService,
)
from tests.factories.repository_factories import UnitOfWorkFactory
from tests.fixtures.domain_fixtures import make_rental_request


@pytest.fixture
def uow():
    return UnitOfWorkFactory.create_mock()


@pytest.fixture
def service(uow):
    return RentalRequestCommandService(
        uow,
        missing_plan_policy="unrestricted",
        status_policy="permissive",
        invoice_currency="USD",
    )


def _staged_invoice(uow):
    uow.invoices.add.assert_called_once()
    return uow.invoices.add.call_args[0][0]


@pytest.mark.services
class TestApprove:
    def test_returns_none_when_request_missing(self, service, uow):
        assert service.approve(999, provider_id=42) is None

        uow.rental_requests.get_by_id.assert_called_once_with(
            999, include_deleted=True, for_update=True
        )
        uow.commit.assert_not_called()
        uow.invoices.add.assert_not_called()

    def test_approves_and_stages_invoice_then_commits_once(
        self, service, uow, pending_request, client_user, basic_plan
    ):
        uow.rental_requests.get_by_id.return_value = pending_request
        uow.users.get_by_id.return_value = client_user
        uow.client_plans.get_by_id.return_value = basic_plan
        uow.rental_requests.count_by_client_and_status.return_value = 1

        result = service.approve(pending_request.id, provider_id=42)

        assert result.status == "approved"
        assert result.provider_id == 42
        uow.rental_requests.update.assert_called_once_with(pending_request)
        uow.rental_requests.count_by_client_and_status.assert_called_once_with(
            client_user.id, "approved"
        )
        uow.commit.assert_called_once()
        uow.rollback.assert_not_called()

        invoice = _staged_invoice(uow)
        assert invoice.user_id == client_user.id
        assert invoice.company_name == "client@gym.test"
        assert invoice.amount == Decimal("120.00")
        assert invoice.currency == "USD"
        assert invoice.status == "pending"
        assert invoice.provider_id == 42
        assert invoice.rental_request_id == pending_request.id

    def test_invoice_uses_placeholder_when_client_has_no_email(
        self, service, uow, pending_request
    ):
        uow.rental_requests.get_by_id.return_value = pending_request
        uow.users.get_by_id.return_value = User(id=100, email=None, role="client")

        service.approve(pending_request.id, provider_id=42)

        assert _staged_invoice(uow).company_name == "Client #100"

    def test_invoice_currency_is_configurable(self, uow, pending_request):
        uow.rental_requests.get_by_id.return_value = pending_request
        uow.users.get_by_id.return_value = User(id=100, email="a@b.test")

        RentalRequestCommandService(uow, invoice_currency="EUR").approve(1, 42)

        assert _staged_invoice(uow).currency == "EUR"

    @pytest.mark.parametrize("status", ["approved", "rejected", "completed", "cancelled"])
    def test_not_pending_is_rejected_before_quota(self, service, uow, status):
        uow.rental_requests.get_by_id.return_value = make_rental_request(
            status=status, is_deleted=status == "cancelled"
        )

        with pytest.raises(NotPendingError):
            service.approve(1, provider_id=42)

        uow.users.get_by_id.assert_not_called()
        uow.rental_requests.update.assert_not_called()
        uow.invoices.add.assert_not_called()
        uow.commit.assert_not_called()
        uow.rollback.assert_called_once()

    def test_missing_client_raises(self, service, uow, pending_request):
        uow.rental_requests.get_by_id.return_value = pending_request

        with pytest.raises(ClientNotFoundError) as exc_info:
            service.approve(1, provider_id=42)

        assert str(exc_info.value) == "Client not found"
        uow.rental_requests.update.assert_not_called()
        uow.invoices.add.assert_not_called()
        uow.rollback.assert_called_once()

    def test_plan_limit_leaves_request_untouched(
        self, service, uow, pending_request, client_user, basic_plan
    ):
        uow.rental_requests.get_by_id.return_value = pending_request
        uow.users.get_by_id.return_value = client_user
        uow.client_plans.get_by_id.return_value = basic_plan
        uow.rental_requests.count_by_client_and_status.return_value = 2

        with pytest.raises(PlanLimitExceededError) as exc_info:
            service.approve(1, provider_id=42)

        assert exc_info.value.current_count == 2
        assert exc_info.value.limit == 2
        assert pending_request.status == "pending"
        assert pending_request.provider_id is None
        uow.rental_requests.update.assert_not_called()
        uow.invoices.add.assert_not_called()
        uow.commit.assert_not_called()

    def test_client_without_plan_skips_plan_lookup(self, service, uow, pending_request):
        uow.rental_requests.get_by_id.return_value = pending_request
        uow.users.get_by_id.return_value = User(id=100, email="c@gym.test")
        uow.rental_requests.count_by_client_and_status.return_value = 99

        service.approve(1, provider_id=42)

        uow.client_plans.get_by_id.assert_not_called()
        uow.commit.assert_called_once()

    def test_dangling_plan_fails_open_by_default(
        self, service, uow, pending_request, client_user
    ):
        uow.rental_requests.get_by_id.return_value = pending_request
        uow.users.get_by_id.return_value = client_user
        uow.rental_requests.count_by_client_and_status.return_value = 99

        assert service.approve(1, provider_id=42).status == "approved"

    def test_dangling_plan_denied_when_configured(self, uow, pending_request, client_user):
        uow.rental_requests.get_by_id.return_value = pending_request
        uow.users.get_by_id.return_value = client_user
        service = RentalRequestCommandService(uow, missing_plan_policy="deny")

        with pytest.raises(PlanNotFoundError):
            service.approve(1, provider_id=42)

        uow.invoices.add.assert_not_called()
        uow.commit.assert_not_called()

    def test_invoice_failure_rolls_back(self, uow, pending_request, client_user):
        uow.rental_requests.get_by_id.return_value = pending_request
        uow.users.get_by_id.return_value = client_user
        invoice_service = Mock()
        invoice_service.issue.side_effect = RuntimeError("invoice store down")
        service = RentalRequestCommandService(uow, invoice_service=invoice_service)

        with pytest.raises(RuntimeError, match="invoice store down"):
            service.approve(1, provider_id=42)

        uow.commit.assert_not_called()
        uow.rollback.assert_called_once()

    def test_commit_failure_propagates_after_rollback(
        self, service, uow, pending_request, client_user
    ):
        uow.rental_requests.get_by_id.return_value = pending_request
        uow.users.get_by_id.return_value = client_user
        uow.commit.side_effect = RuntimeError("disk full")

        with pytest.raises(RuntimeError):
            service.approve(1, provider_id=42)

        uow.rollback.assert_called_once()


@pytest.mark.services
class TestCreate:
    @pytest.fixture
    def dto(self):
        return RentalRequestCreateRequest(
            equipment_id=10, client_id=100, monthly_price=Decimal("75.00"), notes="Hall"
        )

    @pytest.fixture
    def known_refs(self, uow, client_user):
        uow.users.get_by_id.return_value = client_user
        uow.equipment.get_by_ids.return_value = {10: Equipment(id=10, name="Treadmill")}

    def test_creates_pending_request(self, service, uow, dto, known_refs):
        created = service.create(dto)

        assert created.status == "pending"
        assert created.monthly_price == Decimal("75.00")
        assert created.notes == "Hall"
        uow.users.get_by_id.assert_called_once_with(100, for_update=True)
        uow.rental_requests.add.assert_called_once()
        uow.commit.assert_called_once()

    def test_duplicate_pending_is_rejected(self, service, uow, dto, known_refs):
        uow.rental_requests.list_by_client.return_value = [make_rental_request()]

        with pytest.raises(DuplicatePendingRequestError):
            service.create(dto)

        uow.rental_requests.add.assert_not_called()
        uow.rollback.assert_called_once()

    def test_other_equipment_or_non_pending_is_not_a_duplicate(
        self, service, uow, dto, known_refs
    ):
        uow.rental_requests.list_by_client.return_value = [
            make_rental_request(id=2, equipment_id=11),
            make_rental_request(id=3, status="rejected"),
        ]

        assert service.create(dto).status == "pending"

    def test_unknown_client(self, service, uow, dto):
        with pytest.raises(ClientNotFoundError):
            service.create(dto)
        uow.rental_requests.add.assert_not_called()

    def test_unknown_equipment(self, service, uow, dto, client_user):
        uow.users.get_by_id.return_value = client_user

        with pytest.raises(EquipmentNotFoundError):
            service.create(dto)
        uow.rental_requests.add.assert_not_called()

    def test_invalid_payload_never_touches_storage(self, service, uow, dto):
        dto.monthly_price = Decimal("-5")

        with pytest.raises(InvalidRentalRequestDataError):
            service.create(dto)

        uow.users.get_by_id.assert_not_called()


@pytest.mark.services
class TestUpdateStatusAndCancel:
    def test_update_status_missing_returns_none(self, service, uow):
        assert service.update_status(5, "rejected") is None
        uow.commit.assert_not_called()

    def test_update_status_rejects_unknown_status_before_loading(self, service, uow):
        with pytest.raises(InvalidStatusError):
            service.update_status(1, "archived")
        uow.rental_requests.get_by_id.assert_not_called()

    def test_update_status_applies_and_commits(self, service, uow, pending_request):
        uow.rental_requests.get_by_id.return_value = pending_request

        updated = service.update_status(1, "REJECTED")

        assert updated.status == "rejected"
        uow.rental_requests.update.assert_called_once_with(pending_request)
        uow.commit.assert_called_once()

    def test_strict_policy_blocks_lifecycle_violation(self, uow):
        uow.rental_requests.get_by_id.return_value = make_rental_request(
            status="completed"
        )
        service = RentalRequestCommandService(uow, status_policy="strict")

        with pytest.raises(InvalidTransitionError):
            service.update_status(1, "pending")

        uow.rental_requests.update.assert_not_called()
        uow.rollback.assert_called_once()

    def test_cancel_soft_deletes(self, service, uow, pending_request):
        uow.rental_requests.get_by_id.return_value = pending_request

        cancelled = service.cancel(1, requested_by=100)

        assert cancelled.status == "cancelled"
        assert cancelled.is_deleted is True
        uow.commit.assert_called_once()

    def test_cancel_by_other_client_is_denied(self, service, uow, pending_request):
        uow.rental_requests.get_by_id.return_value = pending_request

        with pytest.raises(AccessDeniedError):
            service.cancel(1, requested_by=555)

        assert pending_request.status == "pending"
        uow.rental_requests.update.assert_not_called()


@pytest.mark.services
class TestQueryService:
    def test_get_by_id_missing(self, uow):
        assert RentalRequestQueryService(uow).get_by_id(1) is None

    def test_projection_joins_display_data(self, uow):
        rental = make_rental_request(status="approved", provider_id=7)
        uow.rental_requests.list_all.return_value = [rental]
        uow.equipment.get_by_ids.return_value = {
            10: Equipment(id=10, name="Rower", type="cardio", image="rower.png")
        }
        uow.users.get_by_ids.return_value = {
            100: User(id=100, email="client@gym.test"),
            7: User(id=7, email="prov@gym.test", name="Pat", role="provider"),
        }

        [response] = RentalRequestQueryService(uow).list_all()

        assert response.equipment_name == "Rower"
        assert response.equipment_type == "cardio"
        assert response.client_email == "client@gym.test"
        assert response.provider_email == "prov@gym.test"
        assert response.provider_name == "Pat"
        assert response.to_dict()["monthly_price"] == "120.00"

    def test_projection_tolerates_missing_references(self, uow):
        uow.rental_requests.list_by_client.return_value = [make_rental_request()]

        [response] = RentalRequestQueryService(uow).list_by_client(100)

        assert response.equipment_name is None
        assert response.client_email is None
        assert response.provider_id is None

    def test_empty_list_skips_lookups(self, uow):
        assert RentalRequestQueryService(uow).list_by_status("pending") == []
        uow.equipment.get_by_ids.assert_not_called()
