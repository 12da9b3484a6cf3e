"""
Order service: the inventory reservation protocol.

Placing an order is two committed steps. The pet is reserved first with a
compare-and-swap (available -> pending) in its own transaction, so of any
number of concurrent attempts on one pet exactly one wins. The order row is
then written in a second transaction. If that write fails the reservation is
released with the reverse swap; if the release fails too, the pet is left
pending and CompensationError is raised for an operator to resolve.

Between the two commits a pending pet has no order row yet. The operator
repair therefore only touches reservations older than a grace period
(RESERVATION_GRACE_SECONDS), and its final write requires that no placed
order exists for the pet.

Fulfillment and cancellation touch the order and the pet in one transaction.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Callable, List, Optional

from petstore.core.config import get_reservation_grace_seconds
from petstore.core.exceptions import (
    CompensationError,
    ConflictError,
    InvalidStateError,
    NotFoundError,
)
from petstore.domain.entities import Order, OrderStatus, Pet, PetStatus
from petstore.domain.interfaces import IUnitOfWork

logger = logging.getLogger(__name__)


class OrderService:
    """Application service for order-related use-cases."""

    def __init__(
        self,
        uow_factory: Callable[[], IUnitOfWork],
        reservation_grace: Optional[timedelta] = None,
    ) -> None:
        self.uow_factory = uow_factory
        if reservation_grace is None:
            reservation_grace = timedelta(seconds=get_reservation_grace_seconds())
        self.reservation_grace = reservation_grace

    def place_order(self, customer_id: int, pet_id: int) -> Order:
        """Reserve a pet for a customer and record the order.

        Raises:
            NotFoundError: pet or customer does not exist
            InvalidStateError: pet is sold or withdrawn
            ConflictError: another order holds or just took the reservation
            CompensationError: order write and reservation release both failed
        """
        with self.uow_factory() as uow:
            pet = uow.pets.get_by_id(pet_id)
            if pet is None:
                raise NotFoundError("Pet", pet_id)
            if uow.customers.get_by_id(customer_id) is None:
                raise NotFoundError("Customer", customer_id)

            # A pending pet is held by another order; the swap below reports
            # that as the ConflictError of a lost race.
            if pet.status not in (PetStatus.AVAILABLE, PetStatus.PENDING):
                raise InvalidStateError(
                    f"Pet {pet_id} is {pet.status.value}, not available",
                    pet_id=pet_id,
                    current_status=pet.status.value,
                )

            try:
                uow.pets.transition_status(
                    pet_id, PetStatus.AVAILABLE, PetStatus.PENDING
                )
            except ConflictError:
                logger.info(
                    "Reservation lost to a concurrent order",
                    extra={"context": {"pet_id": pet_id, "customer_id": customer_id}},
                )
                raise
            uow.commit()

        try:
            with self.uow_factory() as uow:
                order = uow.orders.create(Order(pet_id=pet_id, customer_id=customer_id))
                uow.commit()
        except Exception as e:
            self._release_reservation(pet_id, e)
            raise

        logger.info(
            "Order placed",
            extra={
                "context": {
                    "order_id": order.id,
                    "pet_id": pet_id,
                    "customer_id": customer_id,
                }
            },
        )
        return order

    def _release_reservation(self, pet_id: int, cause: Exception) -> None:
        """Undo the reservation after the order write failed."""
        logger.warning(
            "Order write failed after reservation, releasing pet",
            extra={"context": {"pet_id": pet_id, "error": str(cause)}},
        )
        try:
            with self.uow_factory() as uow:
                uow.pets.transition_status(
                    pet_id, PetStatus.PENDING, PetStatus.AVAILABLE
                )
                uow.commit()
        except Exception as compensation_error:
            logger.critical(
                "Reservation release failed, pet left pending",
                extra={
                    "context": {
                        "pet_id": pet_id,
                        "error": str(cause),
                        "compensation_error": str(compensation_error),
                    }
                },
            )
            raise CompensationError(
                f"Order for pet {pet_id} failed and the reservation could not be "
                f"released; pet {pet_id} needs manual review",
                original_error=cause,
                compensation_error=compensation_error,
                pet_id=pet_id,
            ) from compensation_error

    def fulfill_order(self, order_id: int) -> Order:
        """Deliver a placed order: order -> delivered, pet -> sold."""
        return self._close_order(
            order_id,
            order_status=OrderStatus.DELIVERED,
            pet_status=PetStatus.SOLD,
            action="fulfill",
        )

    def cancel_order(self, order_id: int) -> Order:
        """Cancel a placed order: order -> cancelled, pet -> available."""
        return self._close_order(
            order_id,
            order_status=OrderStatus.CANCELLED,
            pet_status=PetStatus.AVAILABLE,
            action="cancel",
        )

    def _close_order(
        self,
        order_id: int,
        order_status: OrderStatus,
        pet_status: PetStatus,
        action: str,
    ) -> Order:
        with self.uow_factory() as uow:
            order = uow.orders.get_by_id(order_id)
            if order is None:
                raise NotFoundError("Order", order_id)
            if order.status != OrderStatus.PLACED:
                raise InvalidStateError(
                    f"Cannot {action} order {order_id}: it is {order.status.value}",
                    order_id=order_id,
                    current_status=order.status.value,
                )

            pet = uow.pets.get_by_id(order.pet_id)
            if pet is None:
                raise NotFoundError("Pet", order.pet_id)
            if pet.status != PetStatus.PENDING:
                raise InvalidStateError(
                    f"Cannot {action} order {order_id}: pet {pet.id} is "
                    f"{pet.status.value}, not pending",
                    order_id=order_id,
                    pet_id=pet.id,
                    current_status=pet.status.value,
                )

            # Order first: a concurrent fulfill/cancel of the same order loses here
            closed = uow.orders.transition_status(
                order_id, OrderStatus.PLACED, order_status
            )
            uow.pets.transition_status(pet.id, PetStatus.PENDING, pet_status)
            uow.commit()

        logger.info(
            f"Order {action} complete",
            extra={
                "context": {
                    "order_id": order_id,
                    "pet_id": closed.pet_id,
                    "order_status": order_status.value,
                    "pet_status": pet_status.value,
                }
            },
        )
        return closed

    def _stale_before(self) -> datetime:
        return datetime.now(timezone.utc) - self.reservation_grace

    def find_stuck_reservations(self) -> List[Pet]:
        """Pending pets with no placed order, reserved longer ago than the grace
        period: left behind by a failed compensation."""
        with self.uow_factory() as uow:
            return uow.pets.get_unheld_reservations(self._stale_before())

    def release_stuck_reservation(self, pet_id: int) -> Pet:
        """Operator repair: put a stuck pending pet back on sale.

        A reservation younger than the grace period may still be waiting for
        its order row, so it is refused. The final write re-checks every
        condition, and loses with ConflictError if an order arrived meanwhile.
        """
        stale_before = self._stale_before()
        with self.uow_factory() as uow:
            pet = uow.pets.get_by_id(pet_id)
            if pet is None:
                raise NotFoundError("Pet", pet_id)
            if pet.status != PetStatus.PENDING:
                raise InvalidStateError(
                    f"Pet {pet_id} is {pet.status.value}, not pending",
                    pet_id=pet_id,
                    current_status=pet.status.value,
                )
            if any(order.is_open for order in uow.orders.get_by_pet(pet_id)):
                raise InvalidStateError(
                    f"Pet {pet_id} is held by an open order", pet_id=pet_id
                )
            if pet.updated_at is not None and _as_utc(pet.updated_at) > stale_before:
                raise InvalidStateError(
                    f"Pet {pet_id} was reserved less than "
                    f"{int(self.reservation_grace.total_seconds())}s ago; "
                    "its order may still be in flight",
                    pet_id=pet_id,
                )

            released = uow.pets.release_unheld_reservation(pet_id, stale_before)
            uow.commit()

        logger.warning(
            "Stuck reservation released",
            extra={"context": {"pet_id": pet_id}},
        )
        return released

    def get_order(self, order_id: int) -> Order:
        with self.uow_factory() as uow:
            order = uow.orders.get_by_id(order_id)
        if order is None:
            raise NotFoundError("Order", order_id)
        return order

    def list_orders_for_customer(self, customer_id: int) -> List[Order]:
        with self.uow_factory() as uow:
            if uow.customers.get_by_id(customer_id) is None:
                raise NotFoundError("Customer", customer_id)
            return uow.orders.get_by_customer(customer_id)


def _as_utc(value: datetime) -> datetime:
    # SQLite hands timestamps back without tzinfo; they are stored as UTC
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
