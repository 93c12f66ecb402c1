"""
Repository test factories following Interface Segregation Principle.

Mocks are built with ``spec=`` on the domain interfaces so a test fails if
the service calls a method the contract does not define.
"""

from unittest.mock import Mock

from gym_office.domain.interfaces import (
    IBillingInvoiceRepository,
    IClientPlanReader,
    IEquipmentReader,
    IRentalRequestRepository,
    IUnitOfWork,
    IUserReader,
)


class RentalRequestRepositoryFactory:
    @staticmethod
    def create_mock_full() -> Mock:
        mock_repo = Mock(spec=IRentalRequestRepository)
        mock_repo.get_by_id.return_value = None
        mock_repo.list_by_client.return_value = []
        mock_repo.list_by_status.return_value = []
        mock_repo.list_all.return_value = []
        mock_repo.count_by_client_and_status.return_value = 0
        mock_repo.add.side_effect = lambda r: r
        mock_repo.update.side_effect = lambda r: r
        return mock_repo


class UserRepositoryFactory:
    @staticmethod
    def create_mock_reader() -> Mock:
        mock_reader = Mock(spec=IUserReader)
        mock_reader.get_by_id.return_value = None
        mock_reader.get_by_ids.return_value = {}
        return mock_reader


class CatalogRepositoryFactory:
    @staticmethod
    def create_mock_plan_reader() -> Mock:
        mock_reader = Mock(spec=IClientPlanReader)
        mock_reader.get_by_id.return_value = None
        return mock_reader

    @staticmethod
    def create_mock_equipment_reader() -> Mock:
        mock_reader = Mock(spec=IEquipmentReader)
        mock_reader.get_by_ids.return_value = {}
        return mock_reader


class BillingInvoiceRepositoryFactory:
    @staticmethod
    def create_mock_full() -> Mock:
        mock_repo = Mock(spec=IBillingInvoiceRepository)
        mock_repo.get_by_id.return_value = None
        mock_repo.list_by_user.return_value = []
        mock_repo.list_by_rental_request.return_value = []
        mock_repo.list_all.return_value = []
        mock_repo.add.side_effect = lambda i: i
        mock_repo.update.side_effect = lambda i: i
        return mock_repo


class UnitOfWorkFactory:
    @staticmethod
    def create_mock() -> Mock:
        """Unit of work whose repositories are all spec'd mocks."""
        uow = Mock(spec=IUnitOfWork)
        uow.rental_requests = RentalRequestRepositoryFactory.create_mock_full()
        uow.users = UserRepositoryFactory.create_mock_reader()
        uow.client_plans = CatalogRepositoryFactory.create_mock_plan_reader()
        uow.equipment = CatalogRepositoryFactory.create_mock_equipment_reader()
        uow.invoices = BillingInvoiceRepositoryFactory.create_mock_full()
        return uow
