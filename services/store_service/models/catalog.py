"""Store catalog models: products and their stock."""

import uuid
from datetime import datetime
from decimal import Decimal
from typing import Optional

from libs.common.datetime_utils import utc_now
from libs.db.base import Base
from services.store_service.models.enums import ProductCategory, enum_values
from sqlalchemy import JSON, Boolean, CheckConstraint, DateTime
from sqlalchemy import Enum as SAEnum
from sqlalchemy import Integer, Numeric, String, Text, Uuid
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

# JSONB on Postgres, plain JSON elsewhere (SQLite for local runs)
JSONList = JSON().with_variant(JSONB(), "postgresql")


class Product(Base):
    """Products available in the store (e.g., 'Oversized Tee Black')."""

    __tablename__ = "products"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4
    )

    # Basic info
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    slug: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    category: Mapped[ProductCategory] = mapped_column(
        SAEnum(
            ProductCategory,
            values_callable=enum_values,
            name="product_category_enum",
        ),
        nullable=False,
        index=True,
    )

    # Pricing
    price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    old_price: Mapped[Optional[Decimal]] = mapped_column(
        Numeric(10, 2), nullable=True
    )  # "was" price for sales display

    # Media and sizing
    images: Mapped[list[str]] = mapped_column(JSONList, nullable=False, default=list)
    sizes: Mapped[list[str]] = mapped_column(JSONList, nullable=False, default=list)

    # Units available for sale; only order validation decrements it
    stock: Mapped[int] = mapped_column(
        Integer, default=0, server_default="0", nullable=False
    )

    # Flags
    is_new_drop: Mapped[bool] = mapped_column(
        Boolean, default=False, server_default="false"
    )
    is_featured: Mapped[bool] = mapped_column(
        Boolean, default=False, server_default="false"
    )
    is_active: Mapped[bool] = mapped_column(
        Boolean, default=True, server_default="true"
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, onupdate=utc_now
    )

    __table_args__ = (CheckConstraint("stock >= 0", name="non_negative_stock"),)

    @property
    def discount_percent(self) -> Optional[int]:
        """Percentage off the old price, if the product is on sale."""
        if not self.old_price:
            return None
        return round((self.old_price - self.price) / self.old_price * 100)

    def __repr__(self):
        return f"<Product {self.slug} stock={self.stock}>"
