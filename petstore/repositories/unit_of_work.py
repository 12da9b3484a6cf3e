"""SQLAlchemy unit of work: one session, one transaction, every repository on it."""

import logging
from typing import Callable, Optional

from sqlalchemy.orm import Session

from petstore.db.session import SessionLocal
from petstore.domain.interfaces import IUnitOfWork

from .catalog_repo import CatalogRepository
from .customer_repo import CustomerRepository
from .db_errors import translate_db_errors
from .order_repo import OrderRepository
from .pet_repo import PetRepository

logger = logging.getLogger(__name__)


class SqlAlchemyUnitOfWork(IUnitOfWork):
    """
    Opens a session on enter, closes it on exit. Nothing is persisted unless
    commit() is called inside the block.
    """

    def __init__(self, session_factory: Optional[Callable[[], Session]] = None):
        self.session_factory = session_factory or SessionLocal
        self.session: Optional[Session] = None

    def __enter__(self) -> "SqlAlchemyUnitOfWork":
        self.session = self.session_factory()
        self.pets = PetRepository(self.session)
        self.orders = OrderRepository(self.session)
        self.customers = CustomerRepository(self.session)
        self.catalog = CatalogRepository(self.session)
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        try:
            self.rollback()
        finally:
            self.session.close()
            self.session = None
        return False

    def commit(self) -> None:
        with translate_db_errors("commit"):
            self.session.commit()

    def rollback(self) -> None:
        if self.session is None:
            return
        with translate_db_errors("rollback"):
            self.session.rollback()


def sqlalchemy_uow_factory(
    session_factory: Optional[Callable[[], Session]] = None,
) -> Callable[[], SqlAlchemyUnitOfWork]:
    """Build the zero-argument factory the services expect."""

    def factory() -> SqlAlchemyUnitOfWork:
        return SqlAlchemyUnitOfWork(session_factory)

    return factory
