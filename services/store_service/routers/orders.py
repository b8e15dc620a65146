"""Store orders router: public checkout and admin order management."""

import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from libs.auth.dependencies import require_admin
from libs.auth.models import AuthUser
from libs.db.session import get_async_db
from services.store_service.models import OrderStatus
from services.store_service.routers._helpers import get_order_service
from services.store_service.schemas import (
    ApiResponse,
    OrderCreate,
    OrderDetailResponse,
    OrderItemResponse,
    OrderResponse,
    OrderStats,
    OrderUpdate,
)
from services.store_service.services import OrderService
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(prefix="/orders", tags=["orders"])


def _detail(order, items) -> OrderDetailResponse:
    return OrderDetailResponse(
        order=OrderResponse.model_validate(order),
        items=[OrderItemResponse.model_validate(item) for item in items],
    )


# ============================================================================
# CHECKOUT (public)
# ============================================================================


@router.post(
    "",
    response_model=ApiResponse[OrderDetailResponse],
    status_code=status.HTTP_201_CREATED,
)
async def create_order(
    payload: OrderCreate,
    db: AsyncSession = Depends(get_async_db),
    service: OrderService = Depends(get_order_service),
):
    """Record an order placed from the storefront cart."""
    order, items = await service.create(db, payload)
    return ApiResponse(data=_detail(order, items), message="Order created")


# ============================================================================
# ADMIN
# ============================================================================


@router.get("", response_model=ApiResponse[list[OrderResponse]])
async def list_orders(
    status_filter: Optional[OrderStatus] = Query(None, alias="status"),
    current_user: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
    service: OrderService = Depends(get_order_service),
):
    """List orders, newest first."""
    orders = await service.list_orders(db, status=status_filter)
    return ApiResponse(data=[OrderResponse.model_validate(o) for o in orders])


@router.get("/stats", response_model=ApiResponse[OrderStats])
async def get_order_stats(
    current_user: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
    service: OrderService = Depends(get_order_service),
):
    """Total sales of completed orders and order counts per status."""
    stats = await service.get_stats(db)
    return ApiResponse(data=OrderStats(**stats))


@router.get("/{order_id}", response_model=ApiResponse[OrderDetailResponse])
async def get_order(
    order_id: uuid.UUID,
    current_user: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
    service: OrderService = Depends(get_order_service),
):
    order, items = await service.get(db, order_id)
    return ApiResponse(data=_detail(order, items))


@router.put("/{order_id}", response_model=ApiResponse[OrderDetailResponse])
async def update_order(
    order_id: uuid.UUID,
    payload: OrderUpdate,
    current_user: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
    service: OrderService = Depends(get_order_service),
):
    """Edit a pending order's customer details, notes or items."""
    order, items = await service.update(db, order_id, payload)
    return ApiResponse(data=_detail(order, items), message="Order updated")


@router.patch("/{order_id}/validate", response_model=ApiResponse[OrderResponse])
async def validate_order(
    order_id: uuid.UUID,
    current_user: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
    service: OrderService = Depends(get_order_service),
):
    """Confirm a pending order and decrement stock for all its items."""
    order = await service.validate(db, order_id)
    return ApiResponse(
        data=OrderResponse.model_validate(order),
        message="Order validated and stock updated",
    )


@router.patch("/{order_id}/cancel", response_model=ApiResponse[OrderResponse])
async def cancel_order(
    order_id: uuid.UUID,
    current_user: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
    service: OrderService = Depends(get_order_service),
):
    order = await service.cancel(db, order_id)
    return ApiResponse(
        data=OrderResponse.model_validate(order), message="Order cancelled"
    )
