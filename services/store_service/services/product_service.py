"""Catalog operations: listing, lookup, admin CRUD and stock checks."""

import uuid
from decimal import Decimal
from typing import Optional

from libs.common.logging import get_logger
from services.store_service.errors import InvalidState, NotFound, ValidationFailed
from services.store_service.models import OrderItem, Product
from services.store_service.schemas import ProductCreate, ProductFilters, ProductUpdate
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)

RELATED_PRODUCTS_LIMIT = 4


def _check_prices(price: Optional[Decimal], old_price: Optional[Decimal]) -> None:
    if price is not None and old_price is not None and old_price <= price:
        raise ValidationFailed(
            "Old price must be greater than the current price",
            details=[{"field": "old_price", "message": "must exceed price"}],
        )


class ProductService:
    """Product catalog. Stock is only ever set here by admins; the order
    service is the sole path that decrements it."""

    async def list_products(
        self, db: AsyncSession, filters: Optional[ProductFilters] = None
    ) -> list[Product]:
        filters = filters or ProductFilters()
        if (
            filters.min_price is not None
            and filters.max_price is not None
            and filters.min_price > filters.max_price
        ):
            raise ValidationFailed("Minimum price cannot exceed maximum price")

        query = select(Product)
        if not filters.include_inactive:
            query = query.where(Product.is_active.is_(True))
        if filters.category:
            query = query.where(Product.category == filters.category)
        if filters.is_new_drop is not None:
            query = query.where(Product.is_new_drop.is_(filters.is_new_drop))
        if filters.is_featured is not None:
            query = query.where(Product.is_featured.is_(filters.is_featured))
        if filters.min_price is not None:
            query = query.where(Product.price >= filters.min_price)
        if filters.max_price is not None:
            query = query.where(Product.price <= filters.max_price)

        result = await db.execute(query.order_by(Product.created_at.desc()))
        return list(result.scalars().all())

    async def featured(self, db: AsyncSession) -> list[Product]:
        return await self.list_products(db, ProductFilters(is_featured=True))

    async def new_drops(self, db: AsyncSession) -> list[Product]:
        return await self.list_products(db, ProductFilters(is_new_drop=True))

    async def get_by_id(self, db: AsyncSession, product_id: uuid.UUID) -> Product:
        product = await db.get(Product, product_id, populate_existing=True)
        if not product:
            raise NotFound("Product not found")
        return product

    async def get_by_slug(self, db: AsyncSession, slug: str) -> Product:
        result = await db.execute(select(Product).where(Product.slug == slug))
        product = result.scalar_one_or_none()
        if not product:
            raise NotFound("Product not found")
        return product

    async def related(
        self, db: AsyncSession, product: Product, limit: int = RELATED_PRODUCTS_LIMIT
    ) -> list[Product]:
        """Other active products in the same category."""
        result = await db.execute(
            select(Product)
            .where(
                Product.category == product.category,
                Product.id != product.id,
                Product.is_active.is_(True),
            )
            .order_by(Product.created_at.desc())
            .limit(limit)
        )
        return list(result.scalars().all())

    async def check_stock(
        self, db: AsyncSession, product_id: uuid.UUID, quantity: int
    ) -> bool:
        product = await self.get_by_id(db, product_id)
        return product.stock >= quantity

    async def _slug_taken(
        self, db: AsyncSession, slug: str, exclude_id: Optional[uuid.UUID] = None
    ) -> bool:
        query = select(Product.id).where(Product.slug == slug)
        if exclude_id:
            query = query.where(Product.id != exclude_id)
        return (await db.execute(query)).first() is not None

    async def create(self, db: AsyncSession, data: ProductCreate) -> Product:
        if await self._slug_taken(db, data.slug):
            raise InvalidState("A product with this slug already exists")
        _check_prices(data.price, data.old_price)

        payload = data.model_dump()
        payload["sizes"] = [size.value for size in data.sizes]
        product = Product(**payload)
        db.add(product)
        await db.commit()
        await db.refresh(product)

        logger.info("Created product %s (%s)", product.id, product.slug)
        return product

    async def update(
        self, db: AsyncSession, product_id: uuid.UUID, data: ProductUpdate
    ) -> Product:
        product = await self.get_by_id(db, product_id)

        if data.slug and data.slug != product.slug:
            if await self._slug_taken(db, data.slug, exclude_id=product_id):
                raise InvalidState("A product with this slug already exists")
        price = data.price if data.price is not None else product.price
        old_price = (
            data.old_price if "old_price" in data.model_fields_set else product.old_price
        )
        _check_prices(price, old_price)

        changes = data.model_dump(exclude_unset=True)
        for key, value in changes.items():
            if value is None and key != "old_price":
                continue
            if key == "sizes":
                value = [size.value for size in data.sizes]
            setattr(product, key, value)

        await db.commit()
        await db.refresh(product)

        logger.info("Updated product %s fields=%s", product_id, sorted(changes))
        return product

    async def _set_active(
        self, db: AsyncSession, product_id: uuid.UUID, active: bool
    ) -> Product:
        product = await self.get_by_id(db, product_id)
        product.is_active = active
        await db.commit()
        await db.refresh(product)

        logger.info(
            "%s product %s", "Restored" if active else "Archived", product_id
        )
        return product

    async def archive(self, db: AsyncSession, product_id: uuid.UUID) -> Product:
        """Hide a product from the storefront; its order history is kept."""
        return await self._set_active(db, product_id, False)

    async def restore(self, db: AsyncSession, product_id: uuid.UUID) -> Product:
        return await self._set_active(db, product_id, True)

    async def delete(self, db: AsyncSession, product_id: uuid.UUID) -> None:
        """Hard-delete a product that no order has ever referenced.

        Products with order history must be archived instead.
        """
        product = await self.get_by_id(db, product_id)

        referenced = (
            await db.execute(
                select(func.count(OrderItem.id)).where(
                    OrderItem.product_id == product_id
                )
            )
        ).scalar()
        if referenced:
            raise InvalidState(
                "Product is referenced by existing orders; archive it instead"
            )

        await db.delete(product)
        await db.commit()
        logger.info("Deleted product %s", product_id)
