"""
Central pytest configuration for the pet store tests.

Environment variables are set before any petstore import so that module
level objects (limiter, engine settings) see the test configuration.
"""

import os

os.environ["DATABASE_URL"] = "sqlite:///:memory:"
os.environ["TESTING"] = "true"
os.environ["RATE_LIMIT_ENABLED"] = "0"
os.environ.setdefault("LOG_LEVEL", "WARNING")

from decimal import Decimal  # noqa: E402

import pytest  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402

from petstore.db import base  # noqa: E402,F401
from petstore.db.session import Base, build_engine  # noqa: E402
from petstore.domain.entities import Category, Customer, Pet, Tag  # noqa: E402
from petstore.repositories.unit_of_work import sqlalchemy_uow_factory  # noqa: E402

# =====================================================
# DATABASE FIXTURES
# =====================================================


@pytest.fixture
def engine():
    """Fresh in-memory SQLite database per test."""
    test_engine = build_engine("sqlite:///:memory:")
    Base.metadata.create_all(bind=test_engine)
    yield test_engine
    test_engine.dispose()


@pytest.fixture
def file_engine(tmp_path):
    """File-backed SQLite database, for tests that need real connections per thread."""
    test_engine = build_engine(f"sqlite:///{tmp_path / 'petstore-test.db'}")
    Base.metadata.create_all(bind=test_engine)
    yield test_engine
    test_engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(
        bind=engine, autocommit=False, autoflush=False, expire_on_commit=False
    )


@pytest.fixture
def db_session(session_factory):
    session = session_factory()
    yield session
    session.rollback()
    session.close()


@pytest.fixture
def uow_factory(session_factory):
    return sqlalchemy_uow_factory(session_factory)


# =====================================================
# FLASK FIXTURES
# =====================================================


@pytest.fixture
def app(session_factory):
    from petstore.main import create_app

    flask_app = create_app(session_factory=session_factory)
    flask_app.config["TESTING"] = True
    return flask_app


@pytest.fixture
def client(app):
    return app.test_client()


# =====================================================
# DATA HELPERS
# =====================================================


@pytest.fixture
def sample_pet() -> Pet:
    """Unsaved pet with a category, tags and photos."""
    return Pet(
        name="Rex",
        price=Decimal("120.00"),
        category=Category(name="Dogs"),
        tags=frozenset({Tag(name="friendly"), Tag(name="vaccinated")}),
        photo_urls=["https://example.com/rex-1.jpg", "https://example.com/rex-2.jpg"],
    )


@pytest.fixture
def sample_customer() -> Customer:
    return Customer(name="Ada Lovelace", email="ada@example.com", phone="555-0100")


@pytest.fixture
def stored_pet(uow_factory, sample_pet) -> Pet:
    with uow_factory() as uow:
        pet = uow.pets.create(sample_pet)
        uow.commit()
    return pet


@pytest.fixture
def stored_customer(uow_factory, sample_customer) -> Customer:
    with uow_factory() as uow:
        customer = uow.customers.create(sample_customer)
        uow.commit()
    return customer
