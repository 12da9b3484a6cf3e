"""Order repository implementation. Orders are append-only; status moves by CAS."""

from typing import Iterable, List, Optional

from sqlalchemy import update

from petstore.core.exceptions import ConflictError, NotFoundError
from petstore.db.base import Order as DbOrder
from petstore.domain.entities import Order, OrderStatus
from petstore.domain.interfaces import IOrderRepository

from .db_errors import translate_db_errors


class OrderRepository(IOrderRepository):
    """Repository for Order persistence operations."""

    def __init__(self, db_session) -> None:
        self.db = db_session

    def get_by_id(self, order_id: int) -> Optional[Order]:
        with translate_db_errors("load order"):
            db_order = (
                self.db.query(DbOrder).populate_existing().filter_by(id=order_id).first()
            )
            return self._to_domain(db_order) if db_order else None

    def get_by_status(self, statuses: Iterable[OrderStatus]) -> List[Order]:
        values = [OrderStatus.parse(s).value for s in statuses]
        if not values:
            return []
        with translate_db_errors("find orders by status"):
            db_orders = (
                self.db.query(DbOrder)
                .filter(DbOrder.status.in_(values))
                .order_by(DbOrder.id)
                .all()
            )
            return [self._to_domain(o) for o in db_orders]

    def get_by_customer(self, customer_id: int) -> List[Order]:
        with translate_db_errors("list customer orders"):
            db_orders = (
                self.db.query(DbOrder)
                .filter_by(customer_id=customer_id)
                .order_by(DbOrder.created_at, DbOrder.id)
                .all()
            )
            return [self._to_domain(o) for o in db_orders]

    def get_by_pet(self, pet_id: int) -> List[Order]:
        with translate_db_errors("list pet orders"):
            db_orders = (
                self.db.query(DbOrder)
                .filter_by(pet_id=pet_id)
                .order_by(DbOrder.id)
                .all()
            )
            return [self._to_domain(o) for o in db_orders]

    def create(self, order: Order) -> Order:
        with translate_db_errors("create order"):
            db_order = DbOrder(
                pet_id=order.pet_id,
                customer_id=order.customer_id,
                quantity=order.quantity,
                status=order.status.value,
                created_at=order.created_at,
            )
            self.db.add(db_order)
            self.db.flush()
            return self._to_domain(db_order)

    def transition_status(
        self, order_id: int, expected: OrderStatus, new: OrderStatus
    ) -> Order:
        expected = OrderStatus.parse(expected)
        new = OrderStatus.parse(new)
        with translate_db_errors("transition order status"):
            result = self.db.execute(
                update(DbOrder)
                .where(DbOrder.id == order_id, DbOrder.status == expected.value)
                .values(status=new.value)
            )
            if result.rowcount != 1:
                current = (
                    self.db.query(DbOrder.status).filter(DbOrder.id == order_id).first()
                )
                if current is None:
                    raise NotFoundError("Order", order_id)
                raise ConflictError(
                    f"Order {order_id} is no longer {expected.value}",
                    order_id=order_id,
                    current_status=current[0],
                )

            order = self.get_by_id(order_id)
            if order is None:
                raise NotFoundError("Order", order_id)
            return order

    def _to_domain(self, db_order: DbOrder) -> Order:
        return Order(
            id=db_order.id,
            pet_id=db_order.pet_id,
            customer_id=db_order.customer_id,
            quantity=db_order.quantity,
            status=OrderStatus(db_order.status),
            created_at=db_order.created_at,
            updated_at=db_order.updated_at,
        )
