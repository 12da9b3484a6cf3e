"""Customer service for registration and lookup use-cases."""

import logging
from dataclasses import replace
from typing import Callable, List

from petstore.core.exceptions import NotFoundError
from petstore.domain.entities import Customer
from petstore.domain.interfaces import IUnitOfWork

logger = logging.getLogger(__name__)


class CustomerService:
    """Application service for customer-related use-cases."""

    def __init__(self, uow_factory: Callable[[], IUnitOfWork]) -> None:
        self.uow_factory = uow_factory

    def create_customer(self, customer: Customer) -> Customer:
        with self.uow_factory() as uow:
            created = uow.customers.create(replace(customer, id=None))
            uow.commit()
        logger.info("Customer registered", extra={"context": {"customer_id": created.id}})
        return created

    def get_customer(self, customer_id: int) -> Customer:
        with self.uow_factory() as uow:
            customer = uow.customers.get_by_id(customer_id)
        if customer is None:
            raise NotFoundError("Customer", customer_id)
        return customer

    def list_customers(self) -> List[Customer]:
        with self.uow_factory() as uow:
            return uow.customers.list_all()

    def delete_customer(self, customer_id: int) -> None:
        """Delete a customer. Refused while any order references them."""
        with self.uow_factory() as uow:
            uow.customers.delete(customer_id)
            uow.commit()
        logger.info("Customer deleted", extra={"context": {"customer_id": customer_id}})
