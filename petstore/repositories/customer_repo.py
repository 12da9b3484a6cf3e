"""Customer repository implementation."""

from typing import List, Optional

from petstore.core.exceptions import InvalidStateError, NotFoundError
from petstore.db.base import Customer as DbCustomer
from petstore.db.base import Order as DbOrder
from petstore.domain.entities import Customer
from petstore.domain.interfaces import ICustomerRepository

from .db_errors import translate_db_errors


class CustomerRepository(ICustomerRepository):
    """Repository for Customer persistence operations."""

    def __init__(self, db_session) -> None:
        self.db = db_session

    def get_by_id(self, customer_id: int) -> Optional[Customer]:
        with translate_db_errors("load customer"):
            db_customer = self.db.query(DbCustomer).filter_by(id=customer_id).first()
            return self._to_domain(db_customer) if db_customer else None

    def list_all(self) -> List[Customer]:
        with translate_db_errors("list customers"):
            db_customers = self.db.query(DbCustomer).order_by(DbCustomer.id).all()
            return [self._to_domain(c) for c in db_customers]

    def create(self, customer: Customer) -> Customer:
        with translate_db_errors("create customer"):
            db_customer = DbCustomer(
                name=customer.name, email=customer.email, phone=customer.phone
            )
            self.db.add(db_customer)
            self.db.flush()
            self.db.refresh(db_customer)
            return self._to_domain(db_customer)

    def delete(self, customer_id: int) -> None:
        with translate_db_errors("delete customer"):
            db_customer = self.db.query(DbCustomer).filter_by(id=customer_id).first()
            if db_customer is None:
                raise NotFoundError("Customer", customer_id)

            order_count = (
                self.db.query(DbOrder).filter_by(customer_id=customer_id).count()
            )
            if order_count:
                raise InvalidStateError(
                    f"Customer {customer_id} has {order_count} order(s) and cannot be deleted",
                    customer_id=customer_id,
                )

            self.db.delete(db_customer)
            self.db.flush()

    def _to_domain(self, db_customer: DbCustomer) -> Customer:
        return Customer(
            id=db_customer.id,
            name=db_customer.name,
            email=db_customer.email,
            phone=db_customer.phone,
            created_at=db_customer.created_at,
        )
