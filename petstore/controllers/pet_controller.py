"""
Pet controller - catalogue endpoints plus category/tag reference data.
"""

import logging

from flask import Blueprint, current_app, request

from petstore.core.api_utils import api_response
from petstore.core.exceptions import ValidationError
from petstore.core.limiter_config import limiter
from petstore.schemas.dtos import (
    PetCreateRequest,
    PetResponse,
    PetStatusUpdateRequest,
    PetUpdateRequest,
    reference_to_dict,
)
from petstore.services.pet_service import PetService

logger = logging.getLogger(__name__)

pets_bp = Blueprint("pets", __name__, url_prefix="/pets")
catalog_bp = Blueprint("catalog", __name__)


def _get_pet_service() -> PetService:
    return PetService(current_app.config["UOW_FACTORY"])


@pets_bp.route("", methods=["POST"])
@limiter.limit("30 per minute")
def create_pet():
    """Register a new pet. Status defaults to available."""
    req = PetCreateRequest.from_json(request.get_json(silent=True))
    req.validate()
    pet = _get_pet_service().create_pet(req.to_domain())
    return api_response(True, "Pet created", PetResponse.from_domain(pet).to_dict(), 201)


@pets_bp.route("/<int:pet_id>", methods=["GET"])
@limiter.limit("100 per minute")
def get_pet(pet_id: int):
    pet = _get_pet_service().get_pet(pet_id)
    return api_response(True, "Pet found", PetResponse.from_domain(pet).to_dict())


@pets_bp.route("/<int:pet_id>", methods=["PUT"])
@limiter.limit("30 per minute")
def update_pet(pet_id: int):
    """Update pet details. Send `version` to guard against lost updates."""
    req = PetUpdateRequest.from_json(request.get_json(silent=True))
    req.validate()
    pet = _get_pet_service().update_pet(pet_id, req.changes, req.expected_version)
    return api_response(True, "Pet updated", PetResponse.from_domain(pet).to_dict())


@pets_bp.route("/<int:pet_id>/status", methods=["PATCH"])
@limiter.limit("30 per minute")
def update_pet_status(pet_id: int):
    """Administrative status change (withdrawn <-> available)."""
    req = PetStatusUpdateRequest.from_json(request.get_json(silent=True))
    req.validate()
    pet = _get_pet_service().update_pet_status(pet_id, req.status)
    return api_response(True, "Pet status updated", PetResponse.from_domain(pet).to_dict())


@pets_bp.route("/<int:pet_id>", methods=["DELETE"])
@limiter.limit("30 per minute")
def retire_pet(pet_id: int):
    """Pets are never deleted; DELETE withdraws the pet from sale."""
    pet = _get_pet_service().retire_pet(pet_id)
    return api_response(True, "Pet retired", PetResponse.from_domain(pet).to_dict())


@pets_bp.route("/findByStatus", methods=["GET"])
@limiter.limit("100 per minute")
def find_pets_by_status():
    """Accepts `?status=available,pending` or repeated `status` parameters."""
    raw_values = request.args.getlist("status")
    statuses = [s for value in raw_values for s in value.split(",") if s.strip()]
    if not statuses:
        raise ValidationError("status query parameter is required", field="status")

    pets = _get_pet_service().find_pets_by_status(statuses)
    data = [PetResponse.from_domain(p).to_dict() for p in pets]
    return api_response(True, f"{len(data)} pet(s) found", data)


@catalog_bp.route("/categories", methods=["GET"])
@limiter.limit("100 per minute")
def list_categories():
    categories = _get_pet_service().list_categories()
    return api_response(True, "Categories", [reference_to_dict(c) for c in categories])


@catalog_bp.route("/tags", methods=["GET"])
@limiter.limit("100 per minute")
def list_tags():
    tags = _get_pet_service().list_tags()
    return api_response(True, "Tags", [reference_to_dict(t) for t in tags])
