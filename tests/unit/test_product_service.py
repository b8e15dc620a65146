"""Unit tests for the product catalog service."""

import uuid
from decimal import Decimal

import pytest
from services.store_service.errors import InvalidState, NotFound, ValidationFailed
from services.store_service.models import ProductCategory
from services.store_service.schemas import (
    OrderCreate,
    ProductCreate,
    ProductFilters,
    ProductUpdate,
)
from services.store_service.services import OrderService, ProductService
from tests.factories import ProductFactory, add_products, order_item_payload, order_payload

service = ProductService()


def _create_payload(**overrides) -> ProductCreate:
    data = {
        "name": "Box Logo Hoodie",
        "slug": "box-logo-hoodie",
        "description": "Brushed fleece hoodie with an embroidered logo.",
        "category": "hoodies",
        "price": "289.90",
        "images": ["https://cdn.zonastreet.test/hoodie.jpg"],
        "sizes": ["M", "G"],
        "stock": 12,
    }
    data.update(overrides)
    return ProductCreate(**data)


@pytest.mark.asyncio
@pytest.mark.unit
async def test_create_product(db_session):
    product = await service.create(db_session, _create_payload())

    assert product.id is not None
    assert product.category == ProductCategory.HOODIES
    assert product.sizes == ["M", "G"]
    assert product.stock == 12
    assert product.is_active is True


@pytest.mark.asyncio
@pytest.mark.unit
async def test_create_product_duplicate_slug(db_session):
    await service.create(db_session, _create_payload())

    with pytest.raises(InvalidState):
        await service.create(db_session, _create_payload(name="Another Hoodie"))


@pytest.mark.asyncio
@pytest.mark.unit
async def test_create_product_old_price_must_exceed_price(db_session):
    with pytest.raises(ValidationFailed):
        await service.create(db_session, _create_payload(old_price="200.00"))


@pytest.mark.asyncio
@pytest.mark.unit
async def test_discount_percent(db_session):
    product = await service.create(
        db_session, _create_payload(price="75.00", old_price="100.00")
    )
    assert product.discount_percent == 25

    plain = ProductFactory.create(old_price=None)
    assert plain.discount_percent is None


@pytest.mark.asyncio
@pytest.mark.unit
async def test_list_filters(db_session):
    await add_products(
        db_session,
        ProductFactory.create(name="Cheap Tee", price=Decimal("50.00"), is_new_drop=True),
        ProductFactory.create(
            name="Hoodie",
            category=ProductCategory.HOODIES,
            price=Decimal("300.00"),
            is_featured=True,
        ),
        ProductFactory.create(name="Hidden", is_active=False),
    )

    active = await service.list_products(db_session)
    assert {p.name for p in active} == {"Cheap Tee", "Hoodie"}

    everything = await service.list_products(
        db_session, ProductFilters(include_inactive=True)
    )
    assert len(everything) == 3

    hoodies = await service.list_products(
        db_session, ProductFilters(category=ProductCategory.HOODIES)
    )
    assert [p.name for p in hoodies] == ["Hoodie"]

    affordable = await service.list_products(
        db_session, ProductFilters(max_price=Decimal("100.00"))
    )
    assert [p.name for p in affordable] == ["Cheap Tee"]

    assert [p.name for p in await service.featured(db_session)] == ["Hoodie"]
    assert [p.name for p in await service.new_drops(db_session)] == ["Cheap Tee"]


@pytest.mark.asyncio
@pytest.mark.unit
async def test_list_rejects_inverted_price_range(db_session):
    with pytest.raises(ValidationFailed):
        await service.list_products(
            db_session,
            ProductFilters(min_price=Decimal("200"), max_price=Decimal("100")),
        )


@pytest.mark.asyncio
@pytest.mark.unit
async def test_related_products_same_category(db_session):
    tee, other_tee, hoodie = await add_products(
        db_session,
        ProductFactory.create(name="Tee"),
        ProductFactory.create(name="Other Tee"),
        ProductFactory.create(name="Hoodie", category=ProductCategory.HOODIES),
    )

    related = await service.related(db_session, tee)

    assert [p.id for p in related] == [other_tee.id]


@pytest.mark.asyncio
@pytest.mark.unit
async def test_get_by_slug_not_found(db_session):
    with pytest.raises(NotFound):
        await service.get_by_slug(db_session, "does-not-exist")


@pytest.mark.asyncio
@pytest.mark.unit
async def test_check_stock(db_session):
    (tee,) = await add_products(db_session, ProductFactory.create(stock=3))

    assert await service.check_stock(db_session, tee.id, 3) is True
    assert await service.check_stock(db_session, tee.id, 4) is False
    with pytest.raises(NotFound):
        await service.check_stock(db_session, uuid.uuid4(), 1)


@pytest.mark.asyncio
@pytest.mark.unit
async def test_update_product_partial(db_session):
    (tee,) = await add_products(db_session, ProductFactory.create(stock=3))

    updated = await service.update(
        db_session, tee.id, ProductUpdate(stock=20, sizes=["GG"], is_featured=True)
    )

    assert updated.stock == 20
    assert updated.sizes == ["GG"]
    assert updated.is_featured is True
    assert updated.name == "Test Tee"


@pytest.mark.asyncio
@pytest.mark.unit
async def test_update_product_slug_conflict(db_session):
    first, second = await add_products(
        db_session, ProductFactory.create(), ProductFactory.create()
    )

    with pytest.raises(InvalidState):
        await service.update(db_session, second.id, ProductUpdate(slug=first.slug))


@pytest.mark.asyncio
@pytest.mark.unit
async def test_delete_unordered_product(db_session):
    (tee,) = await add_products(db_session, ProductFactory.create())

    await service.delete(db_session, tee.id)

    with pytest.raises(NotFound):
        await service.get_by_id(db_session, tee.id)


@pytest.mark.asyncio
@pytest.mark.unit
async def test_delete_ordered_product_is_refused(db_session):
    (tee,) = await add_products(db_session, ProductFactory.create())
    await OrderService().create(
        db_session, OrderCreate(**order_payload(order_item_payload(tee)))
    )

    with pytest.raises(InvalidState):
        await service.delete(db_session, tee.id)

    assert (await service.get_by_id(db_session, tee.id)).id == tee.id


@pytest.mark.asyncio
@pytest.mark.unit
async def test_archive_hides_ordered_product_and_restore_brings_it_back(db_session):
    (tee,) = await add_products(db_session, ProductFactory.create())
    await OrderService().create(
        db_session, OrderCreate(**order_payload(order_item_payload(tee)))
    )

    archived = await service.archive(db_session, tee.id)

    assert archived.is_active is False
    assert tee.id not in {p.id for p in await service.list_products(db_session)}

    restored = await service.restore(db_session, tee.id)

    assert restored.is_active is True
    assert tee.id in {p.id for p in await service.list_products(db_session)}


@pytest.mark.asyncio
@pytest.mark.unit
async def test_archive_missing_product_raises_not_found(db_session):
    with pytest.raises(NotFound):
        await service.archive(db_session, uuid.uuid4())
