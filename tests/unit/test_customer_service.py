"""
Unit tests for CustomerService.
"""

import pytest

from petstore.core.exceptions import InvalidStateError, NotFoundError
from petstore.domain.entities import Customer
from petstore.services.customer_service import CustomerService
from tests.factories.repository_factories import FakeUnitOfWorkFactory


@pytest.fixture
def uow_factory() -> FakeUnitOfWorkFactory:
    return FakeUnitOfWorkFactory()


@pytest.fixture
def service(uow_factory) -> CustomerService:
    return CustomerService(uow_factory)


@pytest.mark.unit
class TestCustomerService:
    """Test customer registration, lookup and deletion."""

    def test_create_customer(self, service, uow_factory):
        uow_factory.customers.create.side_effect = lambda c: Customer(
            id=1, name=c.name, email=c.email
        )

        created = service.create_customer(Customer(name="Ada", email="ada@example.com"))

        assert created.id == 1
        assert uow_factory.uow.commits == 1

    def test_get_customer_not_found(self, service):
        with pytest.raises(NotFoundError) as exc_info:
            service.get_customer(5)
        assert str(exc_info.value) == "Customer 5 not found"

    def test_list_customers(self, service, uow_factory):
        uow_factory.customers.list_all.return_value = [Customer(id=1, name="Ada")]

        assert [c.id for c in service.list_customers()] == [1]

    def test_delete_customer(self, service, uow_factory):
        service.delete_customer(3)

        uow_factory.customers.delete.assert_called_once_with(3)
        assert uow_factory.uow.commits == 1

    def test_delete_customer_with_orders_refused(self, service, uow_factory):
        uow_factory.customers.delete.side_effect = InvalidStateError("has orders")

        with pytest.raises(InvalidStateError):
            service.delete_customer(3)

        assert uow_factory.uow.commits == 0
