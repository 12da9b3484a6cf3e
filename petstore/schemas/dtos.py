"""
Data Transfer Objects (DTOs) and validation schemas.

Request DTOs parse a JSON body (`from_json`) and check its shape
(`validate`); business rules stay in the domain entities. Response DTOs
turn domain entities into JSON-ready dicts.
"""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional

from petstore.core.exceptions import ValidationError
from petstore.domain.entities import (
    Category,
    Customer,
    Order,
    Pet,
    PetStatus,
    Tag,
)


def _require_object(payload: Any) -> Dict[str, Any]:
    if not isinstance(payload, dict):
        raise ValidationError("Request body must be a JSON object")
    return payload


def _parse_id(value: Any, field_name: str) -> int:
    if isinstance(value, bool) or value is None:
        raise ValidationError(f"Valid {field_name} is required", field=field_name)
    try:
        parsed = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"Valid {field_name} is required", field=field_name)
    if parsed <= 0 or (isinstance(value, float) and not value.is_integer()):
        raise ValidationError(f"Valid {field_name} is required", field=field_name)
    return parsed


def _parse_name_ref(value: Any, field_name: str) -> str:
    """Accept either {"name": "..."} or a bare string."""
    if isinstance(value, dict):
        value = value.get("name")
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{field_name} requires a name", field=field_name)
    return value.strip()


def _parse_category(value: Any) -> Optional[Category]:
    if value is None:
        return None
    return Category(name=_parse_name_ref(value, "category"))


def _parse_tags(value: Any) -> List[Tag]:
    if value is None:
        return []
    if not isinstance(value, list):
        raise ValidationError("tags must be a list", field="tags")
    return [Tag(name=_parse_name_ref(item, "tags")) for item in value]


def _parse_photo_urls(value: Any) -> List[str]:
    if value is None:
        return []
    if not isinstance(value, list) or not all(isinstance(u, str) for u in value):
        raise ValidationError("photo_urls must be a list of strings", field="photo_urls")
    return list(value)


def _photo_urls_from(payload: Dict[str, Any]) -> Any:
    # camelCase is accepted for clients written against the classic petstore API
    if "photo_urls" in payload:
        return payload["photo_urls"]
    return payload.get("photoUrls")


def _format_price(price: Decimal) -> str:
    return f"{price:.2f}"


def _isoformat(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


@dataclass
class PetCreateRequest:
    """DTO for pet creation requests."""

    name: str
    price: Any = "0"
    status: str = PetStatus.AVAILABLE.value
    category: Optional[Category] = None
    tags: List[Tag] = field(default_factory=list)
    photo_urls: List[str] = field(default_factory=list)

    @classmethod
    def from_json(cls, payload: Any) -> "PetCreateRequest":
        data = _require_object(payload)
        return cls(
            name=data.get("name"),
            price=data.get("price", "0"),
            status=data.get("status") or PetStatus.AVAILABLE.value,
            category=_parse_category(data.get("category")),
            tags=_parse_tags(data.get("tags")),
            photo_urls=_parse_photo_urls(_photo_urls_from(data)),
        )

    def validate(self) -> None:
        """Validate the request data."""
        if not isinstance(self.name, str) or not self.name.strip():
            raise ValidationError("Name is required", field="name")
        if isinstance(self.price, bool) or self.price is None:
            raise ValidationError("Invalid price", field="price")

    def to_domain(self) -> Pet:
        return Pet(
            name=self.name,
            price=self.price,
            status=PetStatus.parse(self.status),
            category=self.category,
            tags=frozenset(self.tags),
            photo_urls=self.photo_urls,
        )


@dataclass
class PetUpdateRequest:
    """DTO for pet detail updates. Only the keys present in the body change."""

    changes: Dict[str, Any]
    expected_version: Optional[int] = None

    @classmethod
    def from_json(cls, payload: Any) -> "PetUpdateRequest":
        data = _require_object(payload)
        if "status" in data:
            raise ValidationError(
                "Status is changed through PATCH /pets/<id>/status", field="status"
            )

        changes: Dict[str, Any] = {}
        if "name" in data:
            changes["name"] = data["name"]
        if "price" in data:
            changes["price"] = data["price"]
        if "category" in data:
            changes["category"] = _parse_category(data["category"])
        if "tags" in data:
            changes["tags"] = frozenset(_parse_tags(data["tags"]))
        if "photo_urls" in data or "photoUrls" in data:
            changes["photo_urls"] = _parse_photo_urls(_photo_urls_from(data))

        expected_version = None
        if data.get("version") is not None:
            expected_version = _parse_id(data["version"], "version")
        return cls(changes=changes, expected_version=expected_version)

    def validate(self) -> None:
        """Validate the request data."""
        if not self.changes:
            raise ValidationError("No updatable fields supplied")
        if "name" in self.changes and (
            not isinstance(self.changes["name"], str) or not self.changes["name"].strip()
        ):
            raise ValidationError("Name is required", field="name")
        if "price" in self.changes and (
            isinstance(self.changes["price"], bool) or self.changes["price"] is None
        ):
            raise ValidationError("Invalid price", field="price")


@dataclass
class PetStatusUpdateRequest:
    """DTO for administrative status changes."""

    status: str

    @classmethod
    def from_json(cls, payload: Any) -> "PetStatusUpdateRequest":
        data = _require_object(payload)
        return cls(status=data.get("status"))

    def validate(self) -> None:
        """Validate the request data."""
        if not isinstance(self.status, str) or not self.status.strip():
            raise ValidationError("Status is required", field="status")
        PetStatus.parse(self.status)


@dataclass
class OrderCreateRequest:
    """DTO for order placement requests."""

    customer_id: int
    pet_id: int

    @classmethod
    def from_json(cls, payload: Any) -> "OrderCreateRequest":
        data = _require_object(payload)
        return cls(
            customer_id=_parse_id(data.get("customer_id"), "customer_id"),
            pet_id=_parse_id(data.get("pet_id"), "pet_id"),
        )

    def validate(self) -> None:
        """Validate the request data."""
        if self.customer_id <= 0:
            raise ValidationError("Valid customer_id is required", field="customer_id")
        if self.pet_id <= 0:
            raise ValidationError("Valid pet_id is required", field="pet_id")


@dataclass
class CustomerCreateRequest:
    """DTO for customer registration requests."""

    name: str
    email: Optional[str] = None
    phone: Optional[str] = None

    @classmethod
    def from_json(cls, payload: Any) -> "CustomerCreateRequest":
        data = _require_object(payload)
        return cls(name=data.get("name"), email=data.get("email"), phone=data.get("phone"))

    def validate(self) -> None:
        """Validate the request data."""
        if not isinstance(self.name, str) or not self.name.strip():
            raise ValidationError("Name is required", field="name")
        for key in ("email", "phone"):
            value = getattr(self, key)
            if value is not None and not isinstance(value, str):
                raise ValidationError(f"{key} must be a string", field=key)

    def to_domain(self) -> Customer:
        return Customer(name=self.name, email=self.email, phone=self.phone)


@dataclass
class PetResponse:
    """DTO for pet API responses."""

    id: int
    name: str
    status: str
    price: str
    version: int
    category: Optional[Dict[str, Any]]
    tags: List[Dict[str, Any]]
    photo_urls: List[str]
    created_at: Optional[str]
    updated_at: Optional[str]

    @classmethod
    def from_domain(cls, pet: Pet) -> "PetResponse":
        """Create response from domain entity."""
        category = None
        if pet.category is not None:
            category = {"id": pet.category.id, "name": pet.category.name}
        return cls(
            id=pet.id,
            name=pet.name,
            status=pet.status.value,
            price=_format_price(pet.price),
            version=pet.version,
            category=category,
            tags=[{"id": t.id, "name": t.name} for t in pet.sorted_tags()],
            photo_urls=list(pet.photo_urls),
            created_at=_isoformat(pet.created_at),
            updated_at=_isoformat(pet.updated_at),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "status": self.status,
            "price": self.price,
            "version": self.version,
            "category": self.category,
            "tags": self.tags,
            "photo_urls": self.photo_urls,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }


@dataclass
class OrderResponse:
    """DTO for order API responses."""

    id: int
    pet_id: int
    customer_id: int
    quantity: int
    status: str
    complete: bool
    created_at: Optional[str]

    @classmethod
    def from_domain(cls, order: Order) -> "OrderResponse":
        """Create response from domain entity."""
        return cls(
            id=order.id,
            pet_id=order.pet_id,
            customer_id=order.customer_id,
            quantity=order.quantity,
            status=order.status.value,
            complete=not order.is_open,
            created_at=_isoformat(order.created_at),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "pet_id": self.pet_id,
            "customer_id": self.customer_id,
            "quantity": self.quantity,
            "status": self.status,
            "complete": self.complete,
            "created_at": self.created_at,
        }


@dataclass
class CustomerResponse:
    """DTO for customer API responses."""

    id: int
    name: str
    email: Optional[str]
    phone: Optional[str]
    created_at: Optional[str]

    @classmethod
    def from_domain(cls, customer: Customer) -> "CustomerResponse":
        """Create response from domain entity."""
        return cls(
            id=customer.id,
            name=customer.name,
            email=customer.email,
            phone=customer.phone,
            created_at=_isoformat(customer.created_at),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "phone": self.phone,
            "created_at": self.created_at,
        }


def reference_to_dict(ref) -> Dict[str, Any]:
    """Category or tag as JSON."""
    return {"id": ref.id, "name": ref.name}
