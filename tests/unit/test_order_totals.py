"""Money arithmetic used for order totals."""

from decimal import Decimal

import pytest
from services.store_service.schemas import OrderItemInput
from services.store_service.services.order_service import (
    compute_total,
    line_subtotal,
    to_money,
)


def _item(price: str, quantity: int) -> OrderItemInput:
    return OrderItemInput(
        product_id="00000000-0000-0000-0000-000000000001",
        product_name="Tee",
        product_price=price,
        size="M",
        quantity=quantity,
    )


@pytest.mark.unit
def test_compute_total_example_order():
    items = [_item("100.00", 2), _item("50.00", 1)]
    assert compute_total(items) == Decimal("250.00")


@pytest.mark.unit
def test_compute_total_has_no_float_drift():
    items = [_item("0.10", 1), _item("0.20", 1)]
    assert compute_total(items) == Decimal("0.30")


@pytest.mark.unit
def test_line_subtotal_quantizes_to_cents():
    assert line_subtotal(Decimal("19.99"), 3) == Decimal("59.97")
    assert str(line_subtotal(Decimal("5"), 2)) == "10.00"


@pytest.mark.unit
def test_to_money_rounds_half_up():
    assert to_money("2.345") == Decimal("2.35")
    assert to_money(0) == Decimal("0.00")
