"""
Order Group Aggregator - group-level discount and tax for a set of priced orders.
"""
import logging
from decimal import Decimal
from typing import Optional, Sequence

from .errors import InvalidDiscount
from .models import Discount, DiscountType, PricedOrder, PricedOrderGroup
from .money import ZERO, money, to_decimal, pricing_context
from .rate_tables import TAX_RATE

logger = logging.getLogger(__name__)

HUNDRED = Decimal('100')


def validate_discount(discount: Optional[Discount]) -> Optional[Discount]:
    """
    Reject a discount before it is stored or applied.

    Percentage must be in (0, 100]; a fixed amount must be > 0. Both must be
    finite. Returns a normalized copy (Decimal amount, enum type).
    """
    if discount is None:
        return None

    try:
        discount_type = DiscountType(discount.type)
    except ValueError:
        raise InvalidDiscount("Discount type must be 'percentage' or 'fixed'",
                              field="discount.type", value=discount.type)

    amount = to_decimal(discount.amount)
    if amount is None or not amount.is_finite() or amount <= 0:
        raise InvalidDiscount("Discount amount must be a positive finite number",
                              field="discount.amount", value=discount.amount)
    if discount_type == DiscountType.PERCENTAGE and amount > HUNDRED:
        raise InvalidDiscount("Percentage discount must be at most 100",
                              field="discount.amount", value=discount.amount)

    return Discount(type=discount_type, amount=amount)


def resolve_discount_amount(subtotal: Decimal, discount: Optional[Discount]) -> Decimal:
    """
    Dollar discount for a group subtotal, clamped to [0, subtotal].

    The clamp also covers discounts that were stored before validation existed.
    """
    if discount is None:
        return ZERO

    if discount.type == DiscountType.PERCENTAGE:
        amount = money(subtotal * discount.amount / HUNDRED)
    else:
        # Clamp first: quantize rejects amounts wider than PRICING_PRECISION
        amount = money(min(discount.amount, subtotal))

    return min(max(amount, ZERO), subtotal)


class OrderGroupPolicy:
    """
    Aggregates priced orders into a priced order group.

    1. Sum pre-tax totals (quantity already applied per order)
    2. Apply the single group discount
    3. Apply tax unless the group is tax exempt
    """

    def __init__(self, tax_rate: Decimal = TAX_RATE):
        self.tax_rate = tax_rate

    def aggregate(
        self,
        orders: Sequence[PricedOrder],
        discount: Optional[Discount] = None,
        tax_exempt: bool = False
    ) -> PricedOrderGroup:
        with pricing_context():
            return self._aggregate(orders, discount, tax_exempt)

    def _aggregate(
        self,
        orders: Sequence[PricedOrder],
        discount: Optional[Discount],
        tax_exempt: bool
    ) -> PricedOrderGroup:
        discount = validate_discount(discount)

        subtotal = sum((o.pre_tax_total for o in orders), ZERO)
        discount_amount = resolve_discount_amount(subtotal, discount)
        discounted = subtotal - discount_amount
        tax = ZERO if tax_exempt else money(discounted * self.tax_rate)

        group = PricedOrderGroup(
            orders=list(orders),
            discount=discount,
            tax_exempt=bool(tax_exempt),
            subtotal=subtotal,
            discount_amount=discount_amount,
            discounted_subtotal=discounted,
            tax=tax,
            total=discounted + tax,
        )

        group.add_trace("Orders", f"{len(orders)} order(s) pre-tax", f"${subtotal}")
        if discount is None:
            group.add_trace("Discount", "No group discount")
        elif discount.type == DiscountType.PERCENTAGE:
            group.add_trace("Discount", f"{discount.amount}% of ${subtotal}", f"-${discount_amount}")
        else:
            group.add_trace("Discount", f"Fixed ${discount.amount}", f"-${discount_amount}")
        if tax_exempt:
            group.add_trace("Tax", "Tax exempt", "$0.00")
        else:
            group.add_trace("Tax", f"${discounted} × {self.tax_rate}", f"${tax}")
        group.add_trace("Total", "Group total", f"${group.total}")

        logger.debug("Priced order group of %d orders: total %s", len(orders), group.total)
        return group
