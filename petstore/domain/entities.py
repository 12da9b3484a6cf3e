"""
Domain entities - Pure business logic, no framework dependencies.

This is the only place that knows the pet status transition table. Every
other layer asks it through is_valid_transition() and friends.
"""

from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Dict, FrozenSet, List, Optional, Tuple

from petstore.core.exceptions import ValidationError


class PetStatus(str, Enum):
    AVAILABLE = "available"
    PENDING = "pending"
    SOLD = "sold"
    WITHDRAWN = "withdrawn"

    @classmethod
    def parse(cls, value) -> "PetStatus":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise ValidationError(f"Invalid pet status: {value}", field="status")


class OrderStatus(str, Enum):
    PLACED = "placed"
    APPROVED = "approved"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"

    @classmethod
    def parse(cls, value) -> "OrderStatus":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise ValidationError(f"Invalid order status: {value}", field="status")


# (from, to) -> trigger
PET_TRANSITIONS: Dict[Tuple[PetStatus, PetStatus], str] = {
    (PetStatus.AVAILABLE, PetStatus.PENDING): "reservation",
    (PetStatus.PENDING, PetStatus.AVAILABLE): "cancellation",
    (PetStatus.PENDING, PetStatus.SOLD): "fulfillment",
    (PetStatus.AVAILABLE, PetStatus.WITHDRAWN): "withdrawal",
    (PetStatus.WITHDRAWN, PetStatus.AVAILABLE): "reinstatement",
}

ADMINISTRATIVE_TRIGGERS = frozenset({"withdrawal", "reinstatement"})

# Statuses a pet may be created with; pending and sold only arise from orders.
INITIAL_PET_STATUSES = frozenset({PetStatus.AVAILABLE, PetStatus.WITHDRAWN})

ORDER_TRANSITIONS: Dict[Tuple[OrderStatus, OrderStatus], str] = {
    (OrderStatus.PLACED, OrderStatus.DELIVERED): "fulfillment",
    (OrderStatus.PLACED, OrderStatus.CANCELLED): "cancellation",
}


def transition_trigger(from_status, to_status) -> Optional[str]:
    """Name of the event that moves a pet between two statuses, or None."""
    return PET_TRANSITIONS.get((PetStatus.parse(from_status), PetStatus.parse(to_status)))


def is_valid_transition(from_status, to_status) -> bool:
    return transition_trigger(from_status, to_status) is not None


def is_administrative_transition(from_status, to_status) -> bool:
    """Transitions allowed outside the order flow (withdraw / reinstate)."""
    return transition_trigger(from_status, to_status) in ADMINISTRATIVE_TRIGGERS


def is_valid_order_transition(from_status, to_status) -> bool:
    return (OrderStatus.parse(from_status), OrderStatus.parse(to_status)) in ORDER_TRANSITIONS

# Matches the pets.price column: Numeric(10, 2)
PRICE_QUANTUM = Decimal("0.01")
MAX_PRICE = Decimal("99999999.99")


def _require_name(value: str, field_name: str = "name") -> str:
    if value is None or not str(value).strip():
        raise ValidationError(f"{field_name.capitalize()} is required", field=field_name)
    return str(value).strip()


def _to_price(value) -> Decimal:
    try:
        price = value if isinstance(value, Decimal) else Decimal(str(value))
    except (InvalidOperation, ValueError, TypeError):
        raise ValidationError(f"Invalid price: {value}", field="price")
    if not price.is_finite():
        raise ValidationError(f"Invalid price: {value}", field="price")
    if price < 0:
        raise ValidationError("Price cannot be negative", field="price")
    if price > MAX_PRICE:
        raise ValidationError(f"Price cannot exceed {MAX_PRICE}", field="price")
    if price != price.quantize(PRICE_QUANTUM):
        raise ValidationError(
            "Price cannot have more than 2 decimal places", field="price"
        )
    return price


@dataclass(frozen=True)
class Category:
    """Reference data: many pets to one category."""

    name: str = ""
    id: Optional[int] = field(default=None, compare=False)

    def __post_init__(self):
        object.__setattr__(self, "name", _require_name(self.name, "category"))


@dataclass(frozen=True)
class Tag:
    """Reference data: many pets to many tags."""

    name: str = ""
    id: Optional[int] = field(default=None, compare=False)

    def __post_init__(self):
        object.__setattr__(self, "name", _require_name(self.name, "tag"))


@dataclass
class Pet:
    """Domain entity for a pet offered by the store.

    Pets are never deleted. They leave the catalogue by being sold or
    withdrawn.
    """

    name: str = ""
    price: Decimal = Decimal("0")
    status: PetStatus = PetStatus.AVAILABLE
    category: Optional[Category] = None
    tags: FrozenSet[Tag] = frozenset()
    photo_urls: List[str] = field(default_factory=list)
    id: Optional[int] = None
    version: int = 1
    created_at: Optional[datetime] = field(default=None, compare=False)
    updated_at: Optional[datetime] = field(default=None, compare=False)

    def __post_init__(self):
        """Validate business rules."""
        self.name = _require_name(self.name)
        self.price = _to_price(self.price)
        self.status = PetStatus.parse(self.status)
        self.tags = frozenset(self.tags or ())
        self.photo_urls = [str(url).strip() for url in (self.photo_urls or []) if str(url).strip()]

    @property
    def is_available(self) -> bool:
        return self.status == PetStatus.AVAILABLE

    def can_transition_to(self, status) -> bool:
        return is_valid_transition(self.status, status)

    def with_status(self, status) -> "Pet":
        return replace(self, status=PetStatus.parse(status))

    def sorted_tags(self) -> List[Tag]:
        return sorted(self.tags, key=lambda tag: tag.name)


@dataclass
class Customer:
    """Domain entity for a customer placing orders."""

    name: str = ""
    email: Optional[str] = None
    phone: Optional[str] = None
    id: Optional[int] = None
    created_at: Optional[datetime] = field(default=None, compare=False)

    def __post_init__(self):
        self.name = _require_name(self.name)
        if self.email is not None:
            self.email = self.email.strip() or None
        if self.email and "@" not in self.email:
            raise ValidationError("Invalid email format", field="email")
        if self.phone is not None:
            self.phone = self.phone.strip() or None


@dataclass
class Order:
    """Relationship between one pet and one customer.

    Holds references to both aggregates but owns neither; orders are kept
    for audit and never deleted.
    """

    pet_id: int = 0
    customer_id: int = 0
    quantity: int = 1
    status: OrderStatus = OrderStatus.PLACED
    id: Optional[int] = None
    created_at: datetime = field(
        default_factory=lambda: datetime.now(timezone.utc), compare=False
    )
    updated_at: Optional[datetime] = field(default=None, compare=False)

    def __post_init__(self):
        if not isinstance(self.pet_id, int) or self.pet_id <= 0:
            raise ValidationError("Valid pet_id is required", field="pet_id")
        if not isinstance(self.customer_id, int) or self.customer_id <= 0:
            raise ValidationError("Valid customer_id is required", field="customer_id")
        # One order per animal, never a stock count
        if self.quantity != 1:
            raise ValidationError("Quantity must be 1", field="quantity")
        self.status = OrderStatus.parse(self.status)

    @property
    def is_open(self) -> bool:
        return self.status == OrderStatus.PLACED

    def with_status(self, status) -> "Order":
        return replace(self, status=OrderStatus.parse(status))
