"""
Pet service for catalogue use-cases.

This service:
- Depends on the unit-of-work port, never on SQLAlchemy or Flask
- Works with domain entities, not database models
- Writes status only through the repository's compare-and-swap primitive
"""

import logging
from dataclasses import replace
from typing import Any, Callable, Dict, Iterable, List, Optional

from petstore.core.exceptions import (
    DuplicateError,
    InvalidStateError,
    NotFoundError,
    ValidationError,
)
from petstore.domain.entities import (
    INITIAL_PET_STATUSES,
    Pet,
    PetStatus,
    is_administrative_transition,
)
from petstore.domain.interfaces import IUnitOfWork

logger = logging.getLogger(__name__)

UPDATABLE_PET_FIELDS = frozenset({"name", "price", "category", "tags", "photo_urls"})


class PetService:
    """Application service for pet-related use-cases."""

    def __init__(self, uow_factory: Callable[[], IUnitOfWork]) -> None:
        self.uow_factory = uow_factory

    def create_pet(self, pet: Pet) -> Pet:
        """Register a new pet.

        Business Rules:
        - Name must be unique across all pets
        - A pet enters the catalogue available or withdrawn; pending and
          sold are only reachable through orders
        """
        if pet.status not in INITIAL_PET_STATUSES:
            raise InvalidStateError(
                f"A new pet cannot be created with status '{pet.status.value}'",
                status=pet.status.value,
            )

        with self.uow_factory() as uow:
            if uow.pets.get_by_name(pet.name) is not None:
                raise DuplicateError(
                    f"Pet name '{pet.name}' already exists", name=pet.name
                )
            created = uow.pets.create(replace(pet, id=None, version=1))
            uow.commit()

        logger.info(
            "Pet registered",
            extra={"context": {"pet_id": created.id, "status": created.status.value}},
        )
        return created

    def get_pet(self, pet_id: int) -> Pet:
        with self.uow_factory() as uow:
            pet = uow.pets.get_by_id(pet_id)
        if pet is None:
            raise NotFoundError("Pet", pet_id)
        return pet

    def find_pets_by_status(self, statuses: Iterable) -> List[Pet]:
        parsed = []
        for status in statuses:
            value = PetStatus.parse(status)
            if value not in parsed:
                parsed.append(value)
        if not parsed:
            raise ValidationError("At least one status is required", field="status")

        with self.uow_factory() as uow:
            return uow.pets.get_by_status(parsed)

    def update_pet(
        self,
        pet_id: int,
        changes: Dict[str, Any],
        expected_version: Optional[int] = None,
    ) -> Pet:
        """Update pet details (not status).

        The write is conditional on the version the caller saw; without one,
        the version read here is used, so a concurrent update still
        surfaces as ConflictError instead of being overwritten.
        """
        unknown = set(changes) - UPDATABLE_PET_FIELDS
        if unknown:
            raise ValidationError(
                f"Unknown or read-only field(s): {', '.join(sorted(unknown))}",
                field=sorted(unknown)[0],
            )

        with self.uow_factory() as uow:
            current = uow.pets.get_by_id(pet_id)
            if current is None:
                raise NotFoundError("Pet", pet_id)

            updated = replace(current, **changes)
            if updated.name != current.name:
                holder = uow.pets.get_by_name(updated.name)
                if holder is not None and holder.id != pet_id:
                    raise DuplicateError(
                        f"Pet name '{updated.name}' already exists", name=updated.name
                    )

            version = current.version if expected_version is None else expected_version
            saved = uow.pets.save(updated, expected_version=version)
            uow.commit()

        logger.info(
            "Pet details updated",
            extra={"context": {"pet_id": pet_id, "version": saved.version}},
        )
        return saved

    def update_pet_status(self, pet_id: int, status) -> Pet:
        """Administrative status change (withdraw / reinstate).

        Reservation, fulfillment and cancellation belong to the order flow
        and are rejected here with InvalidStateError.
        """
        target = PetStatus.parse(status)

        with self.uow_factory() as uow:
            current = uow.pets.get_by_id(pet_id)
            if current is None:
                raise NotFoundError("Pet", pet_id)

            if current.status == target:
                return current

            if not is_administrative_transition(current.status, target):
                raise InvalidStateError(
                    f"Cannot change pet {pet_id} from '{current.status.value}' "
                    f"to '{target.value}' outside the order flow",
                    pet_id=pet_id,
                    current_status=current.status.value,
                    requested_status=target.value,
                )

            updated = uow.pets.transition_status(pet_id, current.status, target)
            uow.commit()

        logger.info(
            "Pet status changed",
            extra={
                "context": {
                    "pet_id": pet_id,
                    "from": current.status.value,
                    "to": target.value,
                }
            },
        )
        return updated

    def retire_pet(self, pet_id: int) -> Pet:
        return self.update_pet_status(pet_id, PetStatus.WITHDRAWN)

    def list_categories(self):
        with self.uow_factory() as uow:
            return uow.catalog.list_categories()

    def list_tags(self):
        with self.uow_factory() as uow:
            return uow.catalog.list_tags()
