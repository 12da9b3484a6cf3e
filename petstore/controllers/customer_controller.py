"""
Customer controller - registration, lookup and order history.
"""

import logging

from flask import Blueprint, current_app, request

from petstore.core.api_utils import api_response
from petstore.core.limiter_config import limiter
from petstore.schemas.dtos import (
    CustomerCreateRequest,
    CustomerResponse,
    OrderResponse,
)
from petstore.services.customer_service import CustomerService
from petstore.services.order_service import OrderService

logger = logging.getLogger(__name__)

customers_bp = Blueprint("customers", __name__, url_prefix="/customers")


def _get_customer_service() -> CustomerService:
    return CustomerService(current_app.config["UOW_FACTORY"])


@customers_bp.route("", methods=["POST"])
@limiter.limit("30 per minute")
def create_customer():
    req = CustomerCreateRequest.from_json(request.get_json(silent=True))
    req.validate()
    customer = _get_customer_service().create_customer(req.to_domain())
    return api_response(
        True, "Customer created", CustomerResponse.from_domain(customer).to_dict(), 201
    )


@customers_bp.route("", methods=["GET"])
@limiter.limit("100 per minute")
def list_customers():
    customers = _get_customer_service().list_customers()
    data = [CustomerResponse.from_domain(c).to_dict() for c in customers]
    return api_response(True, f"{len(data)} customer(s)", data)


@customers_bp.route("/<int:customer_id>", methods=["GET"])
@limiter.limit("100 per minute")
def get_customer(customer_id: int):
    customer = _get_customer_service().get_customer(customer_id)
    return api_response(
        True, "Customer found", CustomerResponse.from_domain(customer).to_dict()
    )


@customers_bp.route("/<int:customer_id>", methods=["DELETE"])
@limiter.limit("30 per minute")
def delete_customer(customer_id: int):
    """Refused with 409 while any order references the customer."""
    _get_customer_service().delete_customer(customer_id)
    return api_response(True, "Customer deleted")


@customers_bp.route("/<int:customer_id>/orders", methods=["GET"])
@limiter.limit("100 per minute")
def list_customer_orders(customer_id: int):
    orders = OrderService(current_app.config["UOW_FACTORY"]).list_orders_for_customer(
        customer_id
    )
    data = [OrderResponse.from_domain(o).to_dict() for o in orders]
    return api_response(True, f"{len(data)} order(s)", data)
