"""Store catalog router: public browsing and admin product management."""

import uuid
from decimal import Decimal
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from libs.auth.dependencies import require_admin
from libs.auth.models import AuthUser
from libs.db.session import get_async_db
from services.store_service.models import ProductCategory
from services.store_service.routers._helpers import get_product_service
from services.store_service.schemas import (
    ApiResponse,
    ProductCreate,
    ProductDetailResponse,
    ProductFilters,
    ProductResponse,
    ProductUpdate,
    StockCheckResponse,
)
from services.store_service.services import ProductService
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(prefix="/products", tags=["products"])


# ============================================================================
# CATALOG (public)
# ============================================================================


@router.get("", response_model=ApiResponse[list[ProductResponse]])
async def list_products(
    category: Optional[ProductCategory] = None,
    is_new_drop: Optional[bool] = None,
    is_featured: Optional[bool] = None,
    include_inactive: bool = False,
    min_price: Optional[Decimal] = Query(None, gt=0),
    max_price: Optional[Decimal] = Query(None, gt=0),
    db: AsyncSession = Depends(get_async_db),
    service: ProductService = Depends(get_product_service),
):
    """List products with optional filters."""
    filters = ProductFilters(
        category=category,
        is_new_drop=is_new_drop,
        is_featured=is_featured,
        include_inactive=include_inactive,
        min_price=min_price,
        max_price=max_price,
    )
    products = await service.list_products(db, filters)
    return ApiResponse(
        data=[ProductResponse.model_validate(p) for p in products],
        meta={
            "total": len(products),
            "filters": filters.model_dump(mode="json", exclude_none=True),
        },
    )


@router.get("/featured", response_model=ApiResponse[list[ProductResponse]])
async def list_featured_products(
    db: AsyncSession = Depends(get_async_db),
    service: ProductService = Depends(get_product_service),
):
    products = await service.featured(db)
    return ApiResponse(data=[ProductResponse.model_validate(p) for p in products])


@router.get("/new-drops", response_model=ApiResponse[list[ProductResponse]])
async def list_new_drops(
    db: AsyncSession = Depends(get_async_db),
    service: ProductService = Depends(get_product_service),
):
    products = await service.new_drops(db)
    return ApiResponse(data=[ProductResponse.model_validate(p) for p in products])


@router.get("/{product_id}/stock", response_model=ApiResponse[StockCheckResponse])
async def check_product_stock(
    product_id: uuid.UUID,
    quantity: int = Query(1, gt=0),
    db: AsyncSession = Depends(get_async_db),
    service: ProductService = Depends(get_product_service),
):
    """Whether ``quantity`` units are currently available."""
    in_stock = await service.check_stock(db, product_id, quantity)
    return ApiResponse(
        data=StockCheckResponse(
            product_id=product_id, quantity=quantity, in_stock=in_stock
        )
    )


@router.get("/{slug}", response_model=ApiResponse[ProductDetailResponse])
async def get_product(
    slug: str,
    db: AsyncSession = Depends(get_async_db),
    service: ProductService = Depends(get_product_service),
):
    """Product detail by slug, with related products from the same category."""
    product = await service.get_by_slug(db, slug)
    related = await service.related(db, product)
    return ApiResponse(
        data=ProductDetailResponse(
            product=ProductResponse.model_validate(product),
            related=[ProductResponse.model_validate(p) for p in related],
        )
    )


# ============================================================================
# ADMIN
# ============================================================================


@router.post(
    "",
    response_model=ApiResponse[ProductResponse],
    status_code=status.HTTP_201_CREATED,
)
async def create_product(
    payload: ProductCreate,
    current_user: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
    service: ProductService = Depends(get_product_service),
):
    product = await service.create(db, payload)
    return ApiResponse(
        data=ProductResponse.model_validate(product), message="Product created"
    )


@router.put("/{product_id}", response_model=ApiResponse[ProductResponse])
async def update_product(
    product_id: uuid.UUID,
    payload: ProductUpdate,
    current_user: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
    service: ProductService = Depends(get_product_service),
):
    product = await service.update(db, product_id, payload)
    return ApiResponse(
        data=ProductResponse.model_validate(product), message="Product updated"
    )


@router.patch("/{product_id}/archive", response_model=ApiResponse[ProductResponse])
async def archive_product(
    product_id: uuid.UUID,
    current_user: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
    service: ProductService = Depends(get_product_service),
):
    """Hide a product from the catalog without deleting it."""
    product = await service.archive(db, product_id)
    return ApiResponse(
        data=ProductResponse.model_validate(product), message="Product archived"
    )


@router.patch("/{product_id}/restore", response_model=ApiResponse[ProductResponse])
async def restore_product(
    product_id: uuid.UUID,
    current_user: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
    service: ProductService = Depends(get_product_service),
):
    product = await service.restore(db, product_id)
    return ApiResponse(
        data=ProductResponse.model_validate(product), message="Product restored"
    )


@router.delete("/{product_id}", response_model=ApiResponse[None])
async def delete_product(
    product_id: uuid.UUID,
    current_user: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
    service: ProductService = Depends(get_product_service),
):
    """Delete a product that has never been ordered."""
    await service.delete(db, product_id)
    return ApiResponse(message="Product deleted")
