"""Pydantic schemas for store service."""

import uuid
from datetime import datetime
from decimal import Decimal
from typing import Generic, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, EmailStr, Field
from services.store_service.models import OrderStatus, ProductCategory, ProductSize

T = TypeVar("T")

SLUG_PATTERN = r"^[a-z0-9]+(?:-[a-z0-9]+)*$"


class ApiResponse(BaseModel, Generic[T]):
    """Response envelope shared by every store endpoint."""

    success: bool = True
    data: Optional[T] = None
    message: Optional[str] = None
    meta: Optional[dict] = None


# ============================================================================
# PRODUCT SCHEMAS
# ============================================================================


class ProductBase(BaseModel):
    name: str = Field(..., min_length=3, max_length=255)
    slug: str = Field(..., max_length=255, pattern=SLUG_PATTERN)
    description: str = Field(..., min_length=10)
    category: ProductCategory
    price: Decimal = Field(..., gt=0, max_digits=10, decimal_places=2)
    old_price: Optional[Decimal] = Field(None, gt=0, max_digits=10, decimal_places=2)
    images: list[str] = Field(..., min_length=1)
    sizes: list[ProductSize] = Field(..., min_length=1)
    stock: int = Field(0, ge=0)
    is_new_drop: bool = False
    is_featured: bool = False
    is_active: bool = True


class ProductCreate(ProductBase):
    pass


class ProductUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=3, max_length=255)
    slug: Optional[str] = Field(None, max_length=255, pattern=SLUG_PATTERN)
    description: Optional[str] = Field(None, min_length=10)
    category: Optional[ProductCategory] = None
    price: Optional[Decimal] = Field(None, gt=0, max_digits=10, decimal_places=2)
    old_price: Optional[Decimal] = Field(None, gt=0, max_digits=10, decimal_places=2)
    images: Optional[list[str]] = Field(None, min_length=1)
    sizes: Optional[list[ProductSize]] = Field(None, min_length=1)
    stock: Optional[int] = Field(None, ge=0)
    is_new_drop: Optional[bool] = None
    is_featured: Optional[bool] = None
    is_active: Optional[bool] = None


class ProductResponse(ProductBase):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    # Relaxed on output: stored rows predate any tightened input rules
    name: str
    description: str
    images: list[str]
    sizes: list[str]
    discount_percent: Optional[int] = None
    created_at: datetime
    updated_at: datetime


class ProductDetailResponse(BaseModel):
    product: ProductResponse
    related: list[ProductResponse] = []


class ProductFilters(BaseModel):
    category: Optional[ProductCategory] = None
    is_new_drop: Optional[bool] = None
    is_featured: Optional[bool] = None
    include_inactive: bool = False
    min_price: Optional[Decimal] = Field(None, gt=0)
    max_price: Optional[Decimal] = Field(None, gt=0)


class StockCheckResponse(BaseModel):
    product_id: uuid.UUID
    quantity: int
    in_stock: bool


# ============================================================================
# ORDER SCHEMAS
# ============================================================================


class OrderItemInput(BaseModel):
    product_id: uuid.UUID
    product_name: str = Field(..., min_length=1, max_length=255)
    product_price: Decimal = Field(..., gt=0, max_digits=10, decimal_places=2)
    product_image: str = ""
    size: str = Field(..., min_length=1, max_length=10)
    quantity: int = Field(..., gt=0)


class OrderCreate(BaseModel):
    customer_name: str = Field(..., min_length=2, max_length=255)
    customer_phone: str = Field(..., min_length=10, max_length=50)
    customer_email: Optional[EmailStr] = None
    items: list[OrderItemInput] = Field(..., min_length=1)
    notes: Optional[str] = None


class OrderUpdate(BaseModel):
    customer_name: Optional[str] = Field(None, min_length=2, max_length=255)
    customer_phone: Optional[str] = Field(None, min_length=10, max_length=50)
    customer_email: Optional[EmailStr] = None
    # Only honoured when no replacement items are sent; stored as given
    total: Optional[Decimal] = Field(None, gt=0, max_digits=10, decimal_places=2)
    notes: Optional[str] = None
    items: Optional[list[OrderItemInput]] = Field(None, min_length=1)


class OrderItemResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    order_id: uuid.UUID
    product_id: uuid.UUID
    product_name: str
    product_price: Decimal
    product_image: str
    size: str
    quantity: int
    subtotal: Decimal


class OrderResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    customer_name: str
    customer_phone: str
    customer_email: Optional[str] = None
    total: Decimal
    status: OrderStatus
    notes: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    validated_at: Optional[datetime] = None


class OrderDetailResponse(BaseModel):
    order: OrderResponse
    items: list[OrderItemResponse]


class OrderStats(BaseModel):
    total_sales: Decimal
    orders_by_status: dict[str, int]
