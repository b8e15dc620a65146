"""Order lifecycle: checkout, admin edits, validation with stock decrement, cancellation.

State machine::

    PENDING --validate--> COMPLETED
    PENDING --cancel----> CANCELLED

COMPLETED and CANCELLED are terminal; only PENDING orders can be edited.
"""

import uuid
from collections import defaultdict
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Optional, Sequence

from libs.common.datetime_utils import utc_now
from libs.common.logging import get_logger
from services.store_service.errors import (
    InsufficientStock,
    InvalidState,
    NotFound,
    ValidationFailed,
)
from services.store_service.models import Order, OrderItem, OrderStatus, Product
from services.store_service.schemas import OrderCreate, OrderItemInput, OrderUpdate
from sqlalchemy import delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

logger = get_logger(__name__)

CENTS = Decimal("0.01")

# Nullable order columns an admin edit may reset to null
CLEARABLE_ORDER_FIELDS = frozenset({"customer_email", "notes"})


def to_money(value) -> Decimal:
    """Quantize to cents."""
    return Decimal(str(value)).quantize(CENTS, rounding=ROUND_HALF_UP)


def line_subtotal(price: Decimal, quantity: int) -> Decimal:
    return to_money(to_money(price) * quantity)


def compute_total(items: Iterable[OrderItemInput]) -> Decimal:
    """Sum of ``price * quantity`` over the line items."""
    return to_money(
        sum(
            (line_subtotal(item.product_price, item.quantity) for item in items),
            Decimal("0"),
        )
    )


class OrderService:
    """Owns the order state machine and the stock decrement transaction.

    Stateless; one instance is built per process and every call receives the
    session it should run in. Each public mutation commits or rolls back its
    own transaction.
    """

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _build_items(
        order_id: uuid.UUID, items: Sequence[OrderItemInput]
    ) -> list[OrderItem]:
        return [
            OrderItem(
                order_id=order_id,
                product_id=item.product_id,
                product_name=item.product_name,
                product_price=to_money(item.product_price),
                product_image=item.product_image,
                size=item.size,
                quantity=item.quantity,
                subtotal=line_subtotal(item.product_price, item.quantity),
                position=position,
            )
            for position, item in enumerate(items)
        ]

    @staticmethod
    async def _ensure_products_exist(
        db: AsyncSession, items: Sequence[OrderItemInput]
    ) -> None:
        wanted = {item.product_id for item in items}
        result = await db.execute(select(Product.id).where(Product.id.in_(wanted)))
        missing = wanted - set(result.scalars().all())
        if missing:
            raise ValidationFailed(
                "Order references unknown products",
                details=[
                    {"field": "items.product_id", "message": f"Unknown product {pid}"}
                    for pid in sorted(missing)
                ],
            )

    @staticmethod
    async def _lock_order(db: AsyncSession, order_id: uuid.UUID) -> Order:
        """SELECT ... FOR UPDATE on the order row, re-read from the database."""
        result = await db.execute(
            select(Order)
            .where(Order.id == order_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        order = result.scalar_one_or_none()
        if not order:
            raise NotFound("Order not found")
        return order

    @staticmethod
    async def _transition(
        db: AsyncSession,
        order: Order,
        allowed: Iterable[OrderStatus],
        message: str,
        **values,
    ) -> None:
        """Compare-and-set on the order row.

        ``values`` are written only while the stored status is still one of
        ``allowed``. A concurrent transition that committed first leaves no
        matching row, which is reported as InvalidState. On SQLite this write
        also takes the database write lock, so everything after it in the
        transaction is serialized.
        """
        outcome = await db.execute(
            update(Order)
            .where(Order.id == order.id, Order.status.in_(list(allowed)))
            .values(**values)
            .execution_options(synchronize_session="evaluate")
        )
        if outcome.rowcount != 1:
            raise InvalidState(message)

    # ------------------------------------------------------------------
    # Create / read
    # ------------------------------------------------------------------

    async def create(
        self, db: AsyncSession, data: OrderCreate
    ) -> tuple[Order, list[OrderItem]]:
        """Insert a PENDING order and its line items in one transaction."""
        try:
            await self._ensure_products_exist(db, data.items)

            order = Order(
                id=uuid.uuid4(),
                customer_name=data.customer_name,
                customer_phone=data.customer_phone,
                customer_email=data.customer_email,
                notes=data.notes,
                total=compute_total(data.items),
                status=OrderStatus.PENDING,
            )
            items = self._build_items(order.id, data.items)
            db.add(order)
            db.add_all(items)
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        logger.info(
            "Created order %s with %d items (total=%s)", order.id, len(items), order.total
        )
        return await self.get(db, order.id)

    async def get(
        self, db: AsyncSession, order_id: uuid.UUID
    ) -> tuple[Order, list[OrderItem]]:
        result = await db.execute(
            select(Order)
            .where(Order.id == order_id)
            .options(selectinload(Order.items))
            .execution_options(populate_existing=True)
        )
        order = result.scalar_one_or_none()
        if not order:
            raise NotFound("Order not found")
        return order, list(order.items)

    async def list_orders(
        self, db: AsyncSession, status: Optional[OrderStatus] = None
    ) -> list[Order]:
        """All orders, newest first."""
        query = select(Order).order_by(Order.created_at.desc())
        if status:
            query = query.where(Order.status == status)
        result = await db.execute(query)
        return list(result.scalars().all())

    # ------------------------------------------------------------------
    # Update (PENDING only)
    # ------------------------------------------------------------------

    async def update(
        self, db: AsyncSession, order_id: uuid.UUID, data: OrderUpdate
    ) -> tuple[Order, list[OrderItem]]:
        """Edit a pending order.

        Replacement items recompute the total and replace the whole item set.
        Without items, an explicit ``total`` is stored as sent by the caller.
        Only fields present in the payload change; ``customer_email`` and
        ``notes`` can be cleared with an explicit null.
        """
        message = "Only pending orders can be edited"
        try:
            order = await self._lock_order(db, order_id)
            if order.status != OrderStatus.PENDING:
                raise InvalidState(message)

            values = {
                key: value
                for key, value in data.model_dump(
                    exclude_unset=True, exclude={"items", "total"}
                ).items()
                if value is not None or key in CLEARABLE_ORDER_FIELDS
            }
            if data.items is not None:
                values["total"] = compute_total(data.items)
            elif data.total is not None:
                values["total"] = to_money(data.total)
            values["updated_at"] = utc_now()

            await self._transition(db, order, [OrderStatus.PENDING], message, **values)

            if data.items is not None:
                await self._ensure_products_exist(db, data.items)
                await db.execute(delete(OrderItem).where(OrderItem.order_id == order.id))
                db.add_all(self._build_items(order.id, data.items))

            await db.commit()
        except Exception:
            await db.rollback()
            raise

        logger.info("Updated order %s (total=%s)", order_id, order.total)
        return await self.get(db, order_id)

    # ------------------------------------------------------------------
    # Validate (atomic stock decrement)
    # ------------------------------------------------------------------

    async def validate(self, db: AsyncSession, order_id: uuid.UUID) -> Order:
        """Confirm a pending order and take its items out of stock.

        1. SELECT FOR UPDATE on the order row; must be PENDING
        2. Compare-and-set PENDING -> COMPLETED; losing a race is InvalidState
        3. Sum requested quantity per product
        4. SELECT FOR UPDATE on the product rows, in id order
        5. Fail the whole transaction if any product is short
        6. Guarded decrement (stock >= qty), checking the affected row count
        7. Commit

        Either every product is decremented and the order completes, or
        nothing changes.
        """
        message = "Only pending orders can be validated"
        try:
            # 1. Lock order row
            order = await self._lock_order(db, order_id)
            if order.status != OrderStatus.PENDING:
                raise InvalidState(message)

            # 2. Claim the transition before touching stock
            now = utc_now()
            await self._transition(
                db,
                order,
                [OrderStatus.PENDING],
                message,
                status=OrderStatus.COMPLETED,
                validated_at=now,
                updated_at=now,
            )

            # 3. Requested quantity per product
            result = await db.execute(
                select(OrderItem).where(OrderItem.order_id == order.id)
            )
            items = result.scalars().all()
            requested: dict[uuid.UUID, int] = defaultdict(int)
            names: dict[uuid.UUID, str] = {}
            for item in items:
                requested[item.product_id] += item.quantity
                names.setdefault(item.product_id, item.product_name)

            # 4. Lock product rows
            result = await db.execute(
                select(Product)
                .where(Product.id.in_(list(requested)))
                .order_by(Product.id)
                .with_for_update()
                .execution_options(populate_existing=True)
            )
            products = {product.id: product for product in result.scalars().all()}

            # 5. Check everything before touching anything
            for product_id in sorted(requested):
                product = products.get(product_id)
                if product is None:
                    raise NotFound(f"Product {names[product_id]} not found")
                if product.stock < requested[product_id]:
                    raise InsufficientStock(
                        product.name, product.stock, requested[product_id]
                    )

            # 6. Decrement
            for product_id in sorted(requested):
                quantity = requested[product_id]
                outcome = await db.execute(
                    update(Product)
                    .where(Product.id == product_id, Product.stock >= quantity)
                    .values(stock=Product.stock - quantity, updated_at=now)
                    .execution_options(synchronize_session="evaluate")
                )
                if outcome.rowcount != 1:
                    available = (
                        await db.execute(
                            select(Product.stock).where(Product.id == product_id)
                        )
                    ).scalar_one()
                    raise InsufficientStock(
                        products[product_id].name, available, quantity
                    )

            await db.commit()
        except InsufficientStock as exc:
            await db.rollback()
            logger.warning(
                "Validation of order %s rejected: %s (available=%d, requested=%d)",
                order_id,
                exc.product_name,
                exc.available,
                exc.requested,
            )
            raise
        except Exception:
            await db.rollback()
            raise

        logger.info(
            "Validated order %s, decremented stock for %d products",
            order_id,
            len(requested),
        )
        return order

    # ------------------------------------------------------------------
    # Cancel
    # ------------------------------------------------------------------

    async def cancel(self, db: AsyncSession, order_id: uuid.UUID) -> Order:
        """Cancel an order. No stock is restored since none was taken.

        Re-cancelling a cancelled order re-applies the same update.
        """
        message = "Completed orders cannot be cancelled"
        try:
            order = await self._lock_order(db, order_id)
            if order.status == OrderStatus.COMPLETED:
                raise InvalidState(message)

            await self._transition(
                db,
                order,
                [OrderStatus.PENDING, OrderStatus.CANCELLED],
                message,
                status=OrderStatus.CANCELLED,
                updated_at=utc_now(),
            )
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        logger.info("Cancelled order %s", order_id)
        return order

    # ------------------------------------------------------------------
    # Stats
    # ------------------------------------------------------------------

    async def get_stats(self, db: AsyncSession) -> dict:
        total_sales = (
            await db.execute(
                select(func.coalesce(func.sum(Order.total), 0)).where(
                    Order.status == OrderStatus.COMPLETED
                )
            )
        ).scalar()

        rows = await db.execute(
            select(Order.status, func.count(Order.id)).group_by(Order.status)
        )
        orders_by_status = {status.value: 0 for status in OrderStatus}
        for status, count in rows.all():
            orders_by_status[OrderStatus(status).value] = count

        return {
            "total_sales": to_money(total_sales or 0),
            "orders_by_status": orders_by_status,
        }
