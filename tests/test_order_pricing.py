"""
Order pricing tests: totals, quantity, tax exemption and input validation.
"""
from decimal import Decimal

import pytest

import decimal

from frame_pricing.engine import (
    InvalidDimension, InvalidQuantity, InvalidCatalogPrice, InvalidSelection, PricingError,
)
from frame_pricing.engine.money import money
from frame_pricing.engine.rate_tables import MAX_DIMENSION, MAX_CATALOG_PRICE, MAX_QUANTITY


@pytest.fixture
def full_order(make_order, builders):
    def _make(**overrides):
        params = dict(
            frames=[builders.frame(price="10")],
            mats=[builders.mat(price="0.02", width="2")],
            glass_sel=builders.glass(price="0.50"),
        )
        params.update(overrides)
        return make_order(**params)
    return _make


def test_full_order_totals(engine, full_order):
    priced = engine.price_order(full_order())
    assert priced.frame_price == Decimal("132.00")
    assert priced.mat_price == Decimal("3.08")
    assert priced.glass_price == Decimal("115.50")
    assert priced.backing_price == Decimal("11.52")
    assert priced.labor_price == Decimal("50.00")
    assert priced.special_services_price == Decimal("0")
    assert priced.subtotal == Decimal("312.10")
    assert priced.pre_tax_total == Decimal("312.10")
    # 312.10 x 0.0825 = 25.74825
    assert priced.tax == Decimal("25.75")
    assert priced.total == Decimal("337.85")


def test_trace_ends_with_total(engine, full_order):
    priced = engine.price_order(full_order())
    steps = [t.step for t in priced.trace]
    assert steps[0] == "Artwork"
    assert steps[-1] == "Total"
    assert "Backing" in steps and "Labor" in steps
    assert "$337.85" in priced.get_trace_text()


def test_pricing_is_deterministic(engine, full_order):
    first = engine.price_order(full_order())
    second = engine.price_order(full_order())
    assert first == second
    assert first.to_dict() == second.to_dict()


@pytest.mark.parametrize("quantity", [1, 2, 3, 7])
def test_quantity_scales_pre_tax_total_only(engine, full_order, quantity):
    single = engine.price_order(full_order())
    multi = engine.price_order(full_order(quantity=quantity))

    assert multi.frame_price == single.frame_price
    assert multi.subtotal == single.subtotal
    assert multi.pre_tax_total == single.pre_tax_total * quantity
    assert multi.tax == money(multi.pre_tax_total * Decimal("0.0825"))
    assert multi.total == multi.pre_tax_total + multi.tax


def test_tax_exempt_order(engine, full_order):
    priced = engine.price_order(full_order(tax_exempt=True, quantity=4))
    assert priced.tax == Decimal("0")
    assert priced.total == priced.pre_tax_total


def test_special_services_added_per_piece(engine, full_order, builders):
    priced = engine.price_order(full_order(
        services=[builders.service("15", "dry-mount"), builders.service("50", "rush")],
        quantity=2,
    ))
    assert priced.special_services_price == Decimal("65.00")
    assert priced.subtotal == Decimal("377.10")
    assert priced.pre_tax_total == Decimal("754.20")


def test_bare_order_still_gets_backing_and_labor(engine, make_order):
    priced = engine.price_order(make_order(width="8", height="10"))
    assert priced.frame_price == priced.mat_price == priced.glass_price == Decimal("0")
    assert priced.backing_price == Decimal("10.00")
    assert priced.labor_price == Decimal("50.00")
    assert priced.subtotal == Decimal("60.00")


@pytest.mark.parametrize("widths,field", [
    (("16", "20.00"), "frame_price"),
    (("16", "20.00"), "mat_price"),
    (("16", "20.00"), "glass_price"),
    (("16", "16.75"), "backing_price"),
])
def test_monotonic_in_artwork_size_within_bracket(engine, full_order, widths, field):
    """Growing the artwork never lowers a component price while the bracket holds."""
    start, stop = (Decimal(w) for w in widths)
    previous = None
    width = start
    while width <= stop:
        price = getattr(engine.price_order(full_order(width=width)), field)
        if previous is not None:
            assert price >= previous
        previous = price
        width += Decimal("0.25")


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------

@pytest.mark.parametrize("width", ["0", "-1", "NaN", "Infinity"])
def test_rejects_bad_artwork_width(engine, make_order, width):
    with pytest.raises(InvalidDimension) as exc:
        engine.price_order(make_order(width=width))
    assert exc.value.field == "artwork_width"


def test_rejects_missing_height(engine, make_order):
    with pytest.raises(InvalidDimension):
        engine.price_order(make_order(height=None))


@pytest.mark.parametrize("mat_width", ["0", "-2", "NaN"])
def test_rejects_bad_mat_width(engine, make_order, builders, mat_width):
    with pytest.raises(InvalidDimension):
        engine.price_order(make_order(mats=[builders.mat(width=mat_width)]))


def test_rejects_negative_mat_offset(engine, make_order, builders):
    with pytest.raises(InvalidDimension):
        engine.price_order(make_order(mats=[builders.mat(offset="-0.5")]))


@pytest.mark.parametrize("price", [None, "-1", "NaN", "abc"])
def test_rejects_bad_frame_price(engine, make_order, builders, price):
    with pytest.raises(InvalidCatalogPrice):
        engine.price_order(make_order(frames=[builders.frame(price=price)]))


def test_rejects_bad_glass_and_service_prices(engine, make_order, builders):
    with pytest.raises(InvalidCatalogPrice):
        engine.price_order(make_order(glass_sel=builders.glass(price=None)))
    with pytest.raises(InvalidCatalogPrice):
        engine.price_order(make_order(services=[builders.service("-5")]))


def test_zero_catalog_price_is_allowed(engine, make_order, builders):
    priced = engine.price_order(make_order(frames=[builders.frame(price="0")]))
    assert priced.frame_price == Decimal("0")


@pytest.mark.parametrize("quantity", [0, -1, 1.5, "2", True, MAX_QUANTITY + 1, 10 ** 30])
def test_rejects_bad_quantity(engine, make_order, quantity):
    with pytest.raises(InvalidQuantity):
        engine.price_order(make_order(quantity=quantity))


def test_errors_are_pricing_errors_and_value_errors(engine, make_order):
    with pytest.raises(PricingError):
        engine.price_order(make_order(width="0"))
    with pytest.raises(ValueError):
        engine.price_order(make_order(width="0"))


def test_no_partial_result_on_late_failure(engine, make_order, builders):
    """A bad price on the last service still rejects the whole order."""
    order = make_order(
        frames=[builders.frame(price="10")],
        services=[builders.service("15"), builders.service(None, "broken")],
    )
    with pytest.raises(InvalidCatalogPrice) as exc:
        engine.price_order(order)
    assert exc.value.field == "special_services[1].fixed_price"
    assert exc.value.to_dict()["error"] == "InvalidCatalogPrice"


def test_input_order_is_not_mutated(engine, make_order, builders):
    order = make_order(frames=[builders.frame(price="10")])
    engine.price_order(order)
    assert order.frames[0].frame.price_per_linear_foot == "10"


def test_module_level_price_order(make_order, builders):
    from frame_pricing.engine import price_order

    priced = price_order(make_order(frames=[builders.frame(price="10")]))
    assert priced.frame_price == Decimal("132.00")


@pytest.mark.parametrize("width", ["1e30", "10000.01", "1E+400"])
def test_rejects_oversized_artwork(engine, make_order, builders, width):
    with pytest.raises(InvalidDimension) as exc:
        engine.price_order(make_order(width=width, frames=[builders.frame(price="10")]))
    assert exc.value.field == "artwork_width"


def test_largest_allowed_order_prices(engine, make_order, builders):
    priced = engine.price_order(make_order(
        width=str(MAX_DIMENSION), height=str(MAX_DIMENSION),
        frames=[builders.frame(price=str(MAX_CATALOG_PRICE))],
        mats=[builders.mat(price=str(MAX_CATALOG_PRICE), width=str(MAX_DIMENSION))],
        glass_sel=builders.glass(price=str(MAX_CATALOG_PRICE)),
        services=[builders.service(str(MAX_CATALOG_PRICE))],
        quantity=MAX_QUANTITY,
    ))
    assert priced.total > 0
    assert priced.total == priced.pre_tax_total + priced.tax


def test_rejects_oversized_mat_width(engine, make_order, builders):
    with pytest.raises(InvalidDimension) as exc:
        engine.price_order(make_order(mats=[builders.mat(width="1e30")]))
    assert exc.value.field == "mats[0].width"


@pytest.mark.parametrize("price", ["1e30", "1000000.01"])
def test_rejects_oversized_catalog_price(engine, make_order, builders, price):
    with pytest.raises(InvalidCatalogPrice):
        engine.price_order(make_order(frames=[builders.frame(price=price)]))
    with pytest.raises(InvalidCatalogPrice):
        engine.price_order(make_order(services=[builders.service(price)]))


@pytest.mark.parametrize("position", ["top", 1.5, None, True, "²"])
def test_rejects_bad_layer_position(engine, make_order, builders, position):
    with pytest.raises(InvalidSelection) as exc:
        engine.price_order(make_order(mats=[builders.mat(position=position)]))
    assert exc.value.field == "mats[0].position"


def test_accepts_integral_string_position(engine, make_order, builders):
    priced = engine.price_order(make_order(mats=[builders.mat(position="-2")]))
    assert priced.order.mats[0].position == -2


def test_rejects_unknown_pricing_method(engine, make_order, builders):
    selection = builders.frame(price="10")
    selection.pricing_method = "bogus"
    with pytest.raises(InvalidSelection) as exc:
        engine.price_order(make_order(frames=[selection]))
    assert exc.value.field == "frames[0].pricing_method"
    assert isinstance(exc.value, PricingError)


def test_result_ignores_callers_decimal_context(engine, make_order, builders):
    order = make_order(
        width="11", height="14",
        frames=[builders.frame(price="3.25")],
        mats=[builders.mat(price="0.0868", width="2.5")],
        glass_sel=builders.glass(price="0.25"),
        quantity=3,
    )
    expected = engine.price_order(order)

    with decimal.localcontext() as ctx:
        ctx.prec = 4
        ctx.rounding = decimal.ROUND_DOWN
        priced = engine.price_order(order)
        data = priced.to_dict()

    assert priced == expected
    assert data == expected.to_dict()
