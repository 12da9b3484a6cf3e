"""
Order controller - placing, fulfilling and cancelling orders.
"""

import logging

from flask import Blueprint, current_app, request

from petstore.core.api_utils import api_response
from petstore.core.limiter_config import limiter
from petstore.schemas.dtos import OrderCreateRequest, OrderResponse
from petstore.services.order_service import OrderService

logger = logging.getLogger(__name__)

orders_bp = Blueprint("orders", __name__, url_prefix="/orders")


def _get_order_service() -> OrderService:
    return OrderService(current_app.config["UOW_FACTORY"])


@orders_bp.route("", methods=["POST"])
@limiter.limit("30 per minute")
def place_order():
    """
    Reserve a pet and create an order for it.

    Status codes:
        201: Order placed
        404: Pet or customer not found
        409: Pet not available, or reserved concurrently by another order
        503: Store temporarily unavailable (retry)
    """
    req = OrderCreateRequest.from_json(request.get_json(silent=True))
    req.validate()
    order = _get_order_service().place_order(req.customer_id, req.pet_id)
    return api_response(
        True, "Order placed", OrderResponse.from_domain(order).to_dict(), 201
    )


@orders_bp.route("/<int:order_id>", methods=["GET"])
@limiter.limit("100 per minute")
def get_order(order_id: int):
    order = _get_order_service().get_order(order_id)
    return api_response(True, "Order found", OrderResponse.from_domain(order).to_dict())


@orders_bp.route("/<int:order_id>/fulfill", methods=["POST"])
@limiter.limit("30 per minute")
def fulfill_order(order_id: int):
    order = _get_order_service().fulfill_order(order_id)
    return api_response(
        True, "Order delivered", OrderResponse.from_domain(order).to_dict()
    )


@orders_bp.route("/<int:order_id>/cancel", methods=["POST"])
@limiter.limit("30 per minute")
def cancel_order(order_id: int):
    order = _get_order_service().cancel_order(order_id)
    return api_response(
        True, "Order cancelled", OrderResponse.from_domain(order).to_dict()
    )
