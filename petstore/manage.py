"""Management commands for the pet store backend."""

from __future__ import annotations

import logging
from datetime import timedelta
from decimal import Decimal
from typing import Optional

import click

from petstore.core.exceptions import ConflictError, DuplicateError, InvalidStateError
from petstore.db.session import create_tables
from petstore.domain.entities import Category, Customer, Pet, Tag
from petstore.repositories.unit_of_work import sqlalchemy_uow_factory
from petstore.services.customer_service import CustomerService
from petstore.services.order_service import OrderService
from petstore.services.pet_service import PetService

logging.basicConfig(level=logging.INFO, format="[%(levelname)s] %(message)s")

DEMO_PETS = [
    ("Rex", "120.00", "Dogs", ["friendly", "vaccinated"]),
    ("Whiskers", "80.00", "Cats", ["indoor"]),
    ("Nemo", "15.50", "Fish", []),
    ("Polly", "210.00", "Birds", ["talkative"]),
    ("Bun", "45.00", "Rabbits", ["indoor", "calm"]),
]

DEMO_CUSTOMER = ("Demo Customer", "demo@example.com")


@click.group()
def cli() -> None:
    """Entry point for management commands."""


@cli.command("create_tables")
def create_tables_command() -> None:
    """Create every table from the ORM metadata (no migrations)."""
    create_tables()
    logging.info("Tables created")


@cli.command("seed")
def seed() -> None:
    """Insert demo pets and a demo customer. Existing names are skipped."""
    create_tables()
    uow_factory = sqlalchemy_uow_factory()
    pets = PetService(uow_factory)

    for name, price, category, tags in DEMO_PETS:
        try:
            pet = pets.create_pet(
                Pet(
                    name=name,
                    price=Decimal(price),
                    category=Category(name=category),
                    tags=frozenset(Tag(name=t) for t in tags),
                )
            )
            logging.info("Created pet %s (id=%s)", pet.name, pet.id)
        except DuplicateError:
            logging.info("Pet %s already present; skipped", name)

    customers = CustomerService(uow_factory)
    existing = [c for c in customers.list_customers() if c.name == DEMO_CUSTOMER[0]]
    if existing:
        logging.info("Customer %s already present; skipped", DEMO_CUSTOMER[0])
        return
    customer = customers.create_customer(
        Customer(name=DEMO_CUSTOMER[0], email=DEMO_CUSTOMER[1])
    )
    logging.info("Created customer id=%s", customer.id)


@cli.command("stuck_reservations")
@click.option(
    "--release",
    is_flag=True,
    default=False,
    help="Put every stuck pet back on sale instead of only listing them.",
)
@click.option(
    "--grace-seconds",
    type=click.IntRange(min=0),
    default=None,
    help="Minimum reservation age to treat as stuck (default: RESERVATION_GRACE_SECONDS).",
)
def stuck_reservations(release: bool, grace_seconds: Optional[int]) -> None:
    """List (or release) pending pets that no open order holds."""
    grace = timedelta(seconds=grace_seconds) if grace_seconds is not None else None
    service = OrderService(sqlalchemy_uow_factory(), reservation_grace=grace)
    stuck = service.find_stuck_reservations()
    if not stuck:
        logging.info("No stuck reservations")
        return

    for pet in stuck:
        if not release:
            logging.info("Stuck: pet %s (id=%s)", pet.name, pet.id)
            continue
        try:
            service.release_stuck_reservation(pet.id)
        except (ConflictError, InvalidStateError) as e:
            logging.warning("Pet %s (id=%s) not released: %s", pet.name, pet.id, e)
            continue
        logging.info("Released pet %s (id=%s)", pet.name, pet.id)


if __name__ == "__main__":
    cli()
