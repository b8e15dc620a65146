"""
Model factories for creating valid test data.

Every factory produces a valid, insertable SQLAlchemy model instance.
Override any field via kwargs.

Usage:
    product = ProductFactory.create(stock=3)
    db_session.add(product)
    await db_session.commit()
"""

import uuid
from datetime import datetime, timezone
from decimal import Decimal

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _uuid() -> uuid.UUID:
    return uuid.uuid4()


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _unique_slug(prefix: str = "product") -> str:
    return f"{prefix}-{uuid.uuid4().hex[:8]}"


# ---------------------------------------------------------------------------
# Store Service
# ---------------------------------------------------------------------------


class ProductFactory:
    @staticmethod
    def create(**overrides):
        from services.store_service.models import Product, ProductCategory

        defaults = {
            "id": _uuid(),
            "name": "Test Tee",
            "slug": _unique_slug(),
            "description": "A test product used by the suite.",
            "category": ProductCategory.TSHIRTS,
            "price": Decimal("100.00"),
            "old_price": None,
            "images": ["https://cdn.zonastreet.test/test.jpg"],
            "sizes": ["M", "G"],
            "stock": 10,
            "is_new_drop": False,
            "is_featured": False,
            "is_active": True,
            "created_at": _now(),
            "updated_at": _now(),
        }
        defaults.update(overrides)
        return Product(**defaults)


def order_item_payload(product, quantity: int = 1, size: str = "M", price=None) -> dict:
    """A checkout line item snapshotting ``product``."""
    return {
        "product_id": str(product.id),
        "product_name": product.name,
        "product_price": str(price if price is not None else product.price),
        "product_image": product.images[0] if product.images else "",
        "size": size,
        "quantity": quantity,
    }


def order_payload(*items: dict, **overrides) -> dict:
    """A valid POST /orders body."""
    payload = {
        "customer_name": "Maria Silva",
        "customer_phone": "21987654321",
        "customer_email": "maria@example.com",
        "items": list(items),
        "notes": None,
    }
    payload.update(overrides)
    return payload


async def add_products(db, *products):
    """Persist products and return them refreshed."""
    db.add_all(products)
    await db.commit()
    for product in products:
        await db.refresh(product)
    return products
