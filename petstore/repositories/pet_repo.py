"""Pet repository implementation.

Every status change is a single conditional UPDATE keyed on the status the
caller read, so two concurrent reservations of the same pet can never both
succeed: the loser sees zero affected rows and gets a ConflictError.
"""

import logging
from datetime import datetime, timezone
from typing import Iterable, List, Optional

from sqlalchemy import exists, update
from sqlalchemy.exc import IntegrityError

from petstore.core.exceptions import ConflictError, DuplicateError, NotFoundError
from petstore.db.base import Category as DbCategory
from petstore.db.base import Order as DbOrder
from petstore.db.base import Pet as DbPet
from petstore.db.base import PetPhoto as DbPetPhoto
from petstore.db.base import Tag as DbTag
from petstore.domain.entities import Category, OrderStatus, Pet, PetStatus, Tag
from petstore.domain.interfaces import IPetRepository

from .db_errors import translate_db_errors

logger = logging.getLogger(__name__)


class PetRepository(IPetRepository):
    """Repository for Pet persistence operations. Never commits; the unit of work does."""

    def __init__(self, db_session) -> None:
        self.db = db_session

    def get_by_id(self, pet_id: int) -> Optional[Pet]:
        with translate_db_errors("load pet"):
            db_pet = (
                self.db.query(DbPet).populate_existing().filter_by(id=pet_id).first()
            )
            return self._to_domain(db_pet) if db_pet else None

    def get_by_name(self, name: str) -> Optional[Pet]:
        with translate_db_errors("load pet"):
            db_pet = self.db.query(DbPet).filter_by(name=name.strip()).first()
            return self._to_domain(db_pet) if db_pet else None

    def get_by_status(self, statuses: Iterable[PetStatus]) -> List[Pet]:
        values = [PetStatus.parse(s).value for s in statuses]
        if not values:
            return []
        with translate_db_errors("find pets by status"):
            db_pets = (
                self.db.query(DbPet)
                .filter(DbPet.status.in_(values))
                .order_by(DbPet.id)
                .all()
            )
            return [self._to_domain(p) for p in db_pets]

    def list_all(self) -> List[Pet]:
        with translate_db_errors("list pets"):
            db_pets = self.db.query(DbPet).order_by(DbPet.id).all()
            return [self._to_domain(p) for p in db_pets]

    def create(self, pet: Pet) -> Pet:
        try:
            with translate_db_errors("create pet"):
                db_pet = DbPet(
                    name=pet.name,
                    status=pet.status.value,
                    price=pet.price,
                    version=1,
                    category=self._resolve_category(pet.category),
                    tags=self._resolve_tags(pet.tags),
                    photos=self._build_photos(pet.photo_urls),
                )
                self.db.add(db_pet)
                self.db.flush()
                self.db.refresh(db_pet)
        except ConflictError as e:
            if _is_name_violation(e.__cause__):
                raise DuplicateError(
                    f"Pet name '{pet.name}' already exists", name=pet.name
                ) from e.__cause__
            raise

        logger.info(
            "Pet created",
            extra={"context": {"pet_id": db_pet.id, "status": db_pet.status}},
        )
        return self._to_domain(db_pet)

    def save(self, pet: Pet, expected_version: int) -> Pet:
        """Write name, price, category, tags and photos. Status is left alone."""
        if pet.id is None:
            raise NotFoundError("Pet", None)

        try:
            with translate_db_errors("update pet"):
                db_category = self._resolve_category(pet.category)
                result = self.db.execute(
                    update(DbPet)
                    .where(DbPet.id == pet.id, DbPet.version == expected_version)
                    .values(
                        name=pet.name,
                        price=pet.price,
                        category_id=db_category.id if db_category else None,
                        version=DbPet.version + 1,
                        updated_at=_utcnow(),
                    )
                )
                if result.rowcount != 1:
                    self._raise_missing_or_conflict(
                        pet.id,
                        f"Pet {pet.id} was modified concurrently "
                        f"(expected version {expected_version})",
                    )

                db_pet = (
                    self.db.query(DbPet).populate_existing().filter_by(id=pet.id).one()
                )
                db_pet.tags = self._resolve_tags(pet.tags)
                db_pet.photos = self._build_photos(pet.photo_urls)
                self.db.flush()
                self.db.refresh(db_pet)
        except ConflictError as e:
            if _is_name_violation(e.__cause__):
                raise DuplicateError(
                    f"Pet name '{pet.name}' already exists", name=pet.name
                ) from e.__cause__
            raise

        return self._to_domain(db_pet)

    def transition_status(
        self, pet_id: int, expected: PetStatus, new: PetStatus
    ) -> Pet:
        expected = PetStatus.parse(expected)
        new = PetStatus.parse(new)
        with translate_db_errors("transition pet status"):
            result = self.db.execute(
                update(DbPet)
                .where(DbPet.id == pet_id, DbPet.status == expected.value)
                .values(
                    status=new.value,
                    version=DbPet.version + 1,
                    updated_at=_utcnow(),
                )
            )
            if result.rowcount != 1:
                self._raise_missing_or_conflict(
                    pet_id, f"Pet {pet_id} is no longer {expected.value}"
                )

            logger.debug(
                "Pet status swapped",
                extra={
                    "context": {
                        "pet_id": pet_id,
                        "from": expected.value,
                        "to": new.value,
                    }
                },
            )
            pet = self.get_by_id(pet_id)
            if pet is None:
                raise NotFoundError("Pet", pet_id)
            return pet

    def get_unheld_reservations(self, stale_before: datetime) -> List[Pet]:
        with translate_db_errors("find unheld reservations"):
            db_pets = (
                self.db.query(DbPet)
                .filter(
                    DbPet.status == PetStatus.PENDING.value,
                    DbPet.updated_at <= stale_before,
                    ~_placed_order_for(DbPet.id),
                )
                .order_by(DbPet.id)
                .all()
            )
            return [self._to_domain(p) for p in db_pets]

    def release_unheld_reservation(self, pet_id: int, stale_before: datetime) -> Pet:
        with translate_db_errors("release unheld reservation"):
            result = self.db.execute(
                update(DbPet)
                .where(
                    DbPet.id == pet_id,
                    DbPet.status == PetStatus.PENDING.value,
                    DbPet.updated_at <= stale_before,
                    ~_placed_order_for(pet_id),
                )
                .values(
                    status=PetStatus.AVAILABLE.value,
                    version=DbPet.version + 1,
                    updated_at=_utcnow(),
                )
                .execution_options(synchronize_session=False)
            )
            if result.rowcount != 1:
                self._raise_missing_or_conflict(
                    pet_id, f"Pet {pet_id} is no longer an unheld reservation"
                )

            pet = self.get_by_id(pet_id)
            if pet is None:
                raise NotFoundError("Pet", pet_id)
            return pet

    def _raise_missing_or_conflict(self, pet_id: int, message: str) -> None:
        current = self.db.query(DbPet.status).filter(DbPet.id == pet_id).first()
        if current is None:
            raise NotFoundError("Pet", pet_id)
        raise ConflictError(message, pet_id=pet_id, current_status=current[0])

    def _resolve_category(self, category: Optional[Category]) -> Optional[DbCategory]:
        """Find a category by name, creating it on first use."""
        if category is None:
            return None
        db_category = self.db.query(DbCategory).filter_by(name=category.name).first()
        if db_category is None:
            db_category = DbCategory(name=category.name)
            self.db.add(db_category)
            self.db.flush()
        return db_category

    def _resolve_tags(self, tags: Iterable[Tag]) -> List[DbTag]:
        names = sorted({tag.name for tag in tags})
        if not names:
            return []
        existing = {
            t.name: t for t in self.db.query(DbTag).filter(DbTag.name.in_(names)).all()
        }
        resolved = []
        for name in names:
            db_tag = existing.get(name)
            if db_tag is None:
                db_tag = DbTag(name=name)
                self.db.add(db_tag)
            resolved.append(db_tag)
        self.db.flush()
        return resolved

    @staticmethod
    def _build_photos(photo_urls: List[str]) -> List[DbPetPhoto]:
        return [
            DbPetPhoto(position=position, url=url)
            for position, url in enumerate(photo_urls)
        ]

    def _to_domain(self, db_pet: DbPet) -> Pet:
        category = None
        if db_pet.category is not None:
            category = Category(id=db_pet.category.id, name=db_pet.category.name)
        return Pet(
            id=db_pet.id,
            name=db_pet.name,
            price=db_pet.price,
            status=PetStatus(db_pet.status),
            category=category,
            tags=frozenset(Tag(id=t.id, name=t.name) for t in db_pet.tags),
            photo_urls=[photo.url for photo in db_pet.photos],
            version=db_pet.version,
            created_at=db_pet.created_at,
            updated_at=db_pet.updated_at,
        )


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _placed_order_for(pet_id):
    """EXISTS clause for a placed order on pet_id (a value or a pets column)."""
    return exists().where(
        DbOrder.pet_id == pet_id, DbOrder.status == OrderStatus.PLACED.value
    )


def _is_name_violation(error) -> bool:
    if not isinstance(error, IntegrityError):
        return False
    message = str(error.orig).lower()
    return "pets.name" in message or "pets_name" in message
