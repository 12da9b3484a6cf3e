"""Use-case services. They depend on the domain ports only."""

from .customer_service import CustomerService
from .order_service import OrderService
from .pet_service import PetService

__all__ = ["CustomerService", "OrderService", "PetService"]
