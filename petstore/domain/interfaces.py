"""
Abstract interfaces for repositories following Interface Segregation Principle.

These interfaces define contracts without implementation details, so the
use-case services can run against SQLAlchemy in production and against
test doubles in unit tests.

Write contract shared by every writer: an update of an existing row is
always conditional on a precondition supplied by the caller (expected
status or expected version). A write whose precondition no longer holds
raises ConflictError instead of overwriting the concurrent change.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Iterable, List, Optional

from .entities import Category, Customer, Order, OrderStatus, Pet, PetStatus, Tag


class IPetReader(ABC):
    """Interface for pet read operations."""

    @abstractmethod
    def get_by_id(self, pet_id: int) -> Optional[Pet]:
        """Get pet by ID."""
        pass

    @abstractmethod
    def get_by_name(self, name: str) -> Optional[Pet]:
        """Get pet by its unique name."""
        pass

    @abstractmethod
    def get_by_status(self, statuses: Iterable[PetStatus]) -> List[Pet]:
        """Get all pets whose status is one of the given statuses."""
        pass

    @abstractmethod
    def list_all(self) -> List[Pet]:
        """Get all pets."""
        pass

    @abstractmethod
    def get_unheld_reservations(self, stale_before: datetime) -> List[Pet]:
        """Get pending pets last changed at or before stale_before that no
        placed order references."""
        pass


class IPetWriter(ABC):
    """Interface for pet write operations."""

    @abstractmethod
    def create(self, pet: Pet) -> Pet:
        """Insert a new pet. Raises DuplicateError when the name is taken."""
        pass

    @abstractmethod
    def save(self, pet: Pet, expected_version: int) -> Pet:
        """Update pet details if the stored version still equals expected_version.

        Raises NotFoundError if the pet is gone, ConflictError if the version moved.
        """
        pass

    @abstractmethod
    def transition_status(
        self, pet_id: int, expected: PetStatus, new: PetStatus
    ) -> Pet:
        """Compare-and-swap the pet status in one conditional write.

        Raises NotFoundError if the pet is gone, ConflictError if its status
        is no longer `expected`.
        """
        pass

    @abstractmethod
    def release_unheld_reservation(self, pet_id: int, stale_before: datetime) -> Pet:
        """Swap pending -> available in one conditional write that also
        requires no placed order for the pet and a last change at or before
        stale_before.

        Raises NotFoundError if the pet is gone, ConflictError if any of the
        conditions no longer holds.
        """
        pass


class IPetRepository(IPetReader, IPetWriter):
    """Complete pet repository interface."""

    pass


class IOrderReader(ABC):
    """Interface for order read operations."""

    @abstractmethod
    def get_by_id(self, order_id: int) -> Optional[Order]:
        """Get order by ID."""
        pass

    @abstractmethod
    def get_by_status(self, statuses: Iterable[OrderStatus]) -> List[Order]:
        """Get all orders in any of the given statuses."""
        pass

    @abstractmethod
    def get_by_customer(self, customer_id: int) -> List[Order]:
        """Get all orders placed by a customer."""
        pass

    @abstractmethod
    def get_by_pet(self, pet_id: int) -> List[Order]:
        """Get all orders referencing a pet."""
        pass


class IOrderWriter(ABC):
    """Interface for order write operations. Orders are never deleted."""

    @abstractmethod
    def create(self, order: Order) -> Order:
        """Insert a new order."""
        pass

    @abstractmethod
    def transition_status(
        self, order_id: int, expected: OrderStatus, new: OrderStatus
    ) -> Order:
        """Compare-and-swap the order status (same contract as pets)."""
        pass


class IOrderRepository(IOrderReader, IOrderWriter):
    """Complete order repository interface."""

    pass


class ICustomerReader(ABC):
    """Interface for customer read operations."""

    @abstractmethod
    def get_by_id(self, customer_id: int) -> Optional[Customer]:
        """Get customer by ID."""
        pass

    @abstractmethod
    def list_all(self) -> List[Customer]:
        """Get all customers."""
        pass


class ICustomerWriter(ABC):
    """Interface for customer write operations."""

    @abstractmethod
    def create(self, customer: Customer) -> Customer:
        """Insert a new customer."""
        pass

    @abstractmethod
    def delete(self, customer_id: int) -> None:
        """Delete a customer that no order references.

        Raises NotFoundError or InvalidStateError.
        """
        pass


class ICustomerRepository(ICustomerReader, ICustomerWriter):
    """Complete customer repository interface."""

    pass


class ICatalogReader(ABC):
    """Interface for category and tag reference data."""

    @abstractmethod
    def list_categories(self) -> List[Category]:
        """Get all categories ordered by name."""
        pass

    @abstractmethod
    def list_tags(self) -> List[Tag]:
        """Get all tags ordered by name."""
        pass


class IUnitOfWork(ABC):
    """Transactional scope shared by the repositories of one operation.

    Usage:
        with uow_factory() as uow:
            uow.orders.transition_status(...)
            uow.pets.transition_status(...)
            uow.commit()

    Leaving the block without commit(), or through an exception, rolls back.
    """

    pets: IPetRepository
    orders: IOrderRepository
    customers: ICustomerRepository
    catalog: ICatalogReader

    def __enter__(self) -> "IUnitOfWork":
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        self.rollback()
        return False

    @abstractmethod
    def commit(self) -> None:
        """Commit every write made through this unit of work."""
        pass

    @abstractmethod
    def rollback(self) -> None:
        """Discard uncommitted writes. Safe to call after commit()."""
        pass
