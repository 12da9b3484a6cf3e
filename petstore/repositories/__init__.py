"""SQLAlchemy adapters for the domain repository interfaces."""

from .catalog_repo import CatalogRepository
from .customer_repo import CustomerRepository
from .order_repo import OrderRepository
from .pet_repo import PetRepository
from .unit_of_work import SqlAlchemyUnitOfWork, sqlalchemy_uow_factory

__all__ = [
    "CatalogRepository",
    "CustomerRepository",
    "OrderRepository",
    "PetRepository",
    "SqlAlchemyUnitOfWork",
    "sqlalchemy_uow_factory",
]
