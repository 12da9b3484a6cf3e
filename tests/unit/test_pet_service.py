"""
Unit tests for PetService.

This module tests pet use-cases against mocked repositories:
- Creation rules (initial status, duplicate names)
- Detail updates guarded by version
- Administrative status changes through compare-and-swap
"""

from decimal import Decimal

import pytest

from petstore.core.exceptions import (
    ConflictError,
    DuplicateError,
    InvalidStateError,
    NotFoundError,
    ValidationError,
)
from petstore.domain.entities import Category, Pet, PetStatus
from petstore.services.pet_service import PetService
from tests.factories.repository_factories import FakeUnitOfWorkFactory


@pytest.fixture
def uow_factory() -> FakeUnitOfWorkFactory:
    return FakeUnitOfWorkFactory()


@pytest.fixture
def service(uow_factory) -> PetService:
    return PetService(uow_factory)


def _stored(**overrides) -> Pet:
    values = dict(id=7, name="Rex", price=Decimal("50"), version=3)
    values.update(overrides)
    return Pet(**values)


@pytest.mark.unit
class TestPetServiceCreation:
    """Test pet registration."""

    def test_create_pet_success(self, service, uow_factory):
        uow_factory.pets.create.side_effect = lambda pet: _stored(name=pet.name)

        created = service.create_pet(Pet(name="Rex", price="50"))

        assert created.id == 7
        assert uow_factory.uow.commits == 1
        uow_factory.pets.get_by_name.assert_called_once_with("Rex")

    def test_create_withdrawn_pet_allowed(self, service, uow_factory):
        service.create_pet(Pet(name="Rex", status=PetStatus.WITHDRAWN))

        stored = uow_factory.pets.create.call_args[0][0]
        assert stored.status == PetStatus.WITHDRAWN

    @pytest.mark.parametrize("status", [PetStatus.PENDING, PetStatus.SOLD])
    def test_create_rejects_order_path_status(self, service, uow_factory, status):
        with pytest.raises(InvalidStateError):
            service.create_pet(Pet(name="Rex", status=status))

        uow_factory.pets.create.assert_not_called()

    def test_create_duplicate_name(self, service, uow_factory):
        uow_factory.pets.get_by_name.return_value = _stored()

        with pytest.raises(DuplicateError):
            service.create_pet(Pet(name="Rex"))

        uow_factory.pets.create.assert_not_called()
        assert uow_factory.uow.commits == 0


@pytest.mark.unit
class TestPetServiceQueries:
    """Test pet lookups."""

    def test_get_pet_not_found(self, service):
        with pytest.raises(NotFoundError) as exc_info:
            service.get_pet(99)
        assert exc_info.value.entity == "Pet"

    def test_find_by_status_parses_and_dedupes(self, service, uow_factory):
        service.find_pets_by_status(["available", "PENDING", "available"])

        uow_factory.pets.get_by_status.assert_called_once_with(
            [PetStatus.AVAILABLE, PetStatus.PENDING]
        )

    def test_find_by_status_requires_a_status(self, service):
        with pytest.raises(ValidationError):
            service.find_pets_by_status([])

    def test_find_by_unknown_status(self, service):
        with pytest.raises(ValidationError):
            service.find_pets_by_status(["missing"])


@pytest.mark.unit
class TestPetServiceUpdates:
    """Test detail updates."""

    def test_update_uses_read_version_by_default(self, service, uow_factory):
        uow_factory.pets.get_by_id.return_value = _stored()

        updated = service.update_pet(7, {"price": "75.50"})

        saved_pet, = uow_factory.pets.save.call_args[0]
        assert saved_pet.price == Decimal("75.50")
        assert uow_factory.pets.save.call_args[1] == {"expected_version": 3}
        assert updated.price == Decimal("75.50")
        assert uow_factory.uow.commits == 1

    def test_update_with_explicit_version(self, service, uow_factory):
        uow_factory.pets.get_by_id.return_value = _stored()

        service.update_pet(7, {"category": Category(name="Dogs")}, expected_version=2)

        assert uow_factory.pets.save.call_args[1] == {"expected_version": 2}

    def test_update_conflict_propagates(self, service, uow_factory):
        uow_factory.pets.get_by_id.return_value = _stored()
        uow_factory.pets.save.side_effect = ConflictError("version moved")

        with pytest.raises(ConflictError):
            service.update_pet(7, {"price": "1"}, expected_version=1)

        assert uow_factory.uow.commits == 0

    def test_update_rejects_status_field(self, service):
        with pytest.raises(ValidationError):
            service.update_pet(7, {"status": "sold"})

    def test_update_invalid_price(self, service, uow_factory):
        uow_factory.pets.get_by_id.return_value = _stored()

        with pytest.raises(ValidationError):
            service.update_pet(7, {"price": "-4"})

        uow_factory.pets.save.assert_not_called()

    def test_rename_to_taken_name(self, service, uow_factory):
        uow_factory.pets.get_by_id.return_value = _stored()
        uow_factory.pets.get_by_name.return_value = _stored(id=8, name="Fido")

        with pytest.raises(DuplicateError):
            service.update_pet(7, {"name": "Fido"})

    def test_update_missing_pet(self, service):
        with pytest.raises(NotFoundError):
            service.update_pet(7, {"price": "1"})


@pytest.mark.unit
class TestPetServiceStatus:
    """Test administrative status changes."""

    def test_withdraw_available_pet(self, service, uow_factory):
        uow_factory.pets.get_by_id.return_value = _stored()
        uow_factory.pets.transition_status.return_value = _stored(
            status=PetStatus.WITHDRAWN, version=4
        )

        result = service.update_pet_status(7, "withdrawn")

        uow_factory.pets.transition_status.assert_called_once_with(
            7, PetStatus.AVAILABLE, PetStatus.WITHDRAWN
        )
        assert result.status == PetStatus.WITHDRAWN
        assert uow_factory.uow.commits == 1

    def test_reinstate_withdrawn_pet(self, service, uow_factory):
        uow_factory.pets.get_by_id.return_value = _stored(status=PetStatus.WITHDRAWN)
        uow_factory.pets.transition_status.return_value = _stored()

        service.update_pet_status(7, PetStatus.AVAILABLE)

        uow_factory.pets.transition_status.assert_called_once_with(
            7, PetStatus.WITHDRAWN, PetStatus.AVAILABLE
        )

    @pytest.mark.parametrize(
        "current,target",
        [
            (PetStatus.AVAILABLE, PetStatus.SOLD),
            (PetStatus.AVAILABLE, PetStatus.PENDING),
            (PetStatus.PENDING, PetStatus.AVAILABLE),
            (PetStatus.PENDING, PetStatus.SOLD),
            (PetStatus.SOLD, PetStatus.AVAILABLE),
        ],
    )
    def test_order_path_transitions_rejected(self, service, uow_factory, current, target):
        uow_factory.pets.get_by_id.return_value = _stored(status=current)

        with pytest.raises(InvalidStateError):
            service.update_pet_status(7, target)

        uow_factory.pets.transition_status.assert_not_called()

    def test_same_status_is_noop(self, service, uow_factory):
        pet = _stored(status=PetStatus.WITHDRAWN)
        uow_factory.pets.get_by_id.return_value = pet

        assert service.update_pet_status(7, "withdrawn") == pet
        uow_factory.pets.transition_status.assert_not_called()
        assert uow_factory.uow.commits == 0

    def test_concurrent_reservation_surfaces_conflict(self, service, uow_factory):
        uow_factory.pets.get_by_id.return_value = _stored()
        uow_factory.pets.transition_status.side_effect = ConflictError(
            "Pet 7 is no longer available"
        )

        with pytest.raises(ConflictError):
            service.retire_pet(7)

        assert uow_factory.uow.commits == 0

    def test_retire_missing_pet(self, service):
        with pytest.raises(NotFoundError):
            service.retire_pet(7)
