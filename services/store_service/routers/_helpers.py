"""Shared dependencies for store routers."""

from fastapi import Request
from services.store_service.services import OrderService, ProductService


def get_order_service(request: Request) -> OrderService:
    """The process-wide OrderService built in ``create_app``."""
    return request.app.state.order_service


def get_product_service(request: Request) -> ProductService:
    return request.app.state.product_service
