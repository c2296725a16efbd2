from decimal import Decimal

import pytest

from frame_pricing.engine import Discount, DiscountType, InvalidDiscount
from frame_pricing.engine.order_group import (
    OrderGroupPolicy, validate_discount, resolve_discount_amount,
)


@pytest.fixture
def hundred_dollar_order(engine, make_order, builders):
    """10x10 piece: $50 labor + $10 minimum backing + $40 service = $100 pre-tax."""
    def _make(order_id=None):
        return engine.price_order(make_order(
            width="10", height="10", services=[builders.service("40")], order_id=order_id,
        ))
    return _make


@pytest.fixture
def two_orders(hundred_dollar_order):
    orders = [hundred_dollar_order("a"), hundred_dollar_order("b")]
    assert sum(o.pre_tax_total for o in orders) == Decimal("200.00")
    return orders


def test_percentage_discount_group(engine, two_orders):
    group = engine.price_order_group(two_orders, discount=Discount(DiscountType.PERCENTAGE, Decimal("10")))
    assert group.subtotal == Decimal("200.00")
    assert group.discount_amount == Decimal("20.00")
    assert group.discounted_subtotal == Decimal("180.00")
    assert group.tax == Decimal("14.85")
    assert group.total == Decimal("194.85")
    assert group.order_ids == ["a", "b"]


def test_no_discount(engine, two_orders):
    group = engine.price_order_group(two_orders)
    assert group.discount is None
    assert group.discount_amount == Decimal("0")
    assert group.tax == Decimal("16.50")
    assert group.total == Decimal("216.50")


def test_fixed_discount(engine, two_orders):
    group = engine.price_order_group(two_orders, discount=Discount(DiscountType.FIXED, Decimal("25.50")))
    assert group.discounted_subtotal == Decimal("174.50")


def test_fixed_discount_is_clamped_to_subtotal(engine, two_orders):
    group = engine.price_order_group(two_orders, discount=Discount(DiscountType.FIXED, Decimal("500")))
    assert group.discount_amount == Decimal("200.00")
    assert group.discounted_subtotal == Decimal("0")
    assert group.tax == Decimal("0")
    assert group.total == Decimal("0")


def test_full_percentage_discount(engine, two_orders):
    group = engine.price_order_group(two_orders, discount=Discount(DiscountType.PERCENTAGE, Decimal("100")))
    assert group.discounted_subtotal == Decimal("0")


def test_group_tax_exempt(engine, two_orders):
    group = engine.price_order_group(two_orders, tax_exempt=True)
    assert group.tax == Decimal("0")
    assert group.total == Decimal("200.00")


def test_group_uses_pre_tax_totals_with_quantity(engine, make_order, builders):
    order = engine.price_order(make_order(
        width="10", height="10", services=[builders.service("40")], quantity=3,
    ))
    group = engine.price_order_group([order])
    assert group.subtotal == Decimal("300.00")


def test_empty_group(engine):
    group = engine.price_order_group([])
    assert group.subtotal == group.total == Decimal("0")


def test_group_trace(engine, two_orders):
    group = engine.price_order_group(two_orders, discount=Discount(DiscountType.PERCENTAGE, Decimal("10")))
    text = group.get_trace_text()
    assert "10% of $200.00" in text
    assert text.splitlines()[-1] == "• Total: Group total = $194.85"


@pytest.mark.parametrize("discount", [
    Discount(DiscountType.PERCENTAGE, Decimal("0")),
    Discount(DiscountType.PERCENTAGE, Decimal("-5")),
    Discount(DiscountType.PERCENTAGE, Decimal("100.01")),
    Discount(DiscountType.FIXED, Decimal("0")),
    Discount(DiscountType.FIXED, Decimal("-10")),
    Discount(DiscountType.FIXED, Decimal("Infinity")),
    Discount(DiscountType.PERCENTAGE, Decimal("NaN")),
    Discount(DiscountType.FIXED, None),
    Discount("coupon", Decimal("5")),
])
def test_invalid_discounts_are_rejected(engine, two_orders, discount):
    with pytest.raises(InvalidDiscount):
        engine.price_order_group(two_orders, discount=discount)


def test_discount_from_dict_rejects_unknown_type():
    with pytest.raises(InvalidDiscount):
        Discount.from_dict({"type": "bogo", "amount": "5"})
    assert Discount.from_dict(None) is None
    assert Discount.from_dict({}) is None


def test_validate_discount_normalizes():
    discount = validate_discount(Discount("percentage", "12.5"))
    assert discount.type is DiscountType.PERCENTAGE
    assert discount.amount == Decimal("12.5")


@pytest.mark.parametrize("subtotal", ["0", "0.01", "19.99", "200", "12345.67"])
@pytest.mark.parametrize("discount", [
    Discount(DiscountType.PERCENTAGE, Decimal("0.5")),
    Discount(DiscountType.PERCENTAGE, Decimal("100")),
    Discount(DiscountType.FIXED, Decimal("0.01")),
    Discount(DiscountType.FIXED, Decimal("1000")),
])
def test_discounted_subtotal_stays_in_bounds(subtotal, discount):
    subtotal = Decimal(subtotal)
    amount = resolve_discount_amount(subtotal, discount)
    assert Decimal("0") <= subtotal - amount <= subtotal


def test_policy_uses_its_tax_rate(two_orders):
    group = OrderGroupPolicy(tax_rate=Decimal("0.10")).aggregate(two_orders)
    assert group.tax == Decimal("20.00")


def test_oversized_fixed_discount_is_clamped(engine, two_orders):
    group = engine.price_order_group(two_orders, discount=Discount(DiscountType.FIXED, Decimal("1e30")))
    assert group.discount_amount == Decimal("200.00")
    assert group.total == Decimal("0")
