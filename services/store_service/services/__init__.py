"""Store service business logic."""

from services.store_service.services.order_service import OrderService
from services.store_service.services.product_service import ProductService

__all__ = ["OrderService", "ProductService"]
