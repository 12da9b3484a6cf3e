"""
Domain package - Pure business logic layer.

This package contains:
- entities.py: Domain entities, status enums and the transition table
- interfaces.py: Repository and unit-of-work contracts (ports)
"""

from .entities import (
    Category,
    Customer,
    Order,
    OrderStatus,
    Pet,
    PetStatus,
    Tag,
    is_administrative_transition,
    is_valid_order_transition,
    is_valid_transition,
    transition_trigger,
)
from .interfaces import (
    ICatalogReader,
    ICustomerReader,
    ICustomerRepository,
    ICustomerWriter,
    IOrderReader,
    IOrderRepository,
    IOrderWriter,
    IPetReader,
    IPetRepository,
    IPetWriter,
    IUnitOfWork,
)

__all__ = [
    # Domain entities
    "Category",
    "Customer",
    "Order",
    "OrderStatus",
    "Pet",
    "PetStatus",
    "Tag",
    # Transition rules
    "is_administrative_transition",
    "is_valid_order_transition",
    "is_valid_transition",
    "transition_trigger",
    # Repository interfaces
    "IPetRepository",
    "IOrderRepository",
    "ICustomerRepository",
    "ICatalogReader",
    "IUnitOfWork",
    # Segregated interfaces
    "IPetReader",
    "IPetWriter",
    "IOrderReader",
    "IOrderWriter",
    "ICustomerReader",
    "ICustomerWriter",
]
