"""Store Service models package."""

from services.store_service.models.catalog import Product
from services.store_service.models.commerce import Order, OrderItem
from services.store_service.models.enums import (
    OrderStatus,
    ProductCategory,
    ProductSize,
)

__all__ = [
    "Order",
    "OrderItem",
    "OrderStatus",
    "Product",
    "ProductCategory",
    "ProductSize",
]
