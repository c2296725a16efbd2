"""
Pricing Engine - composes the component pricers into priced orders and groups.

Pure computation: every call validates its input, recomputes from scratch and
returns new objects. Nothing is cached between calls.
"""
import logging
from dataclasses import replace
from decimal import InvalidOperation
from typing import Optional, Sequence

from ..config.settings import get_settings, Settings
from .order_group import OrderGroupPolicy
from .components import (
    price_frames, price_mats, price_glass, price_backing, price_labor, price_special_services,
)
from .errors import InvalidCatalogPrice, InvalidQuantity, PricingError
from .layers import compose_frames, compose_mats, total_mat_width
from .models import (
    Order, PricedOrder, PricedOrderGroup, Discount,
    FrameSelection, MatSelection, GlassSelection, SpecialService,
    parse_position, parse_pricing_method,
)
from .money import (
    ZERO, money, to_decimal, require_positive, require_non_negative, pricing_context,
)
from .rate_tables import MAX_DIMENSION, MAX_CATALOG_PRICE, MAX_QUANTITY

logger = logging.getLogger(__name__)


class PricingEngine:
    """
    Core pricing engine for framed pieces.

    Order pricing:
    1. Validate and normalize the order (all-or-nothing)
    2. Compose frame and mat stacks outer -> inner
    3. Price frame, mat, glass, backing, labor and special services per piece
    4. subtotal x quantity = pre-tax total, then tax unless exempt

    Group pricing delegates to OrderGroupPolicy.
    """

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()
        self.tax_rate = self.settings.tax_rate
        self.group_policy = OrderGroupPolicy(tax_rate=self.tax_rate)

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    def normalize_order(self, order: Order) -> Order:
        """
        Validate every input and return a copy with Decimal numbers.

        Raises InvalidDimension, InvalidQuantity, InvalidCatalogPrice or
        InvalidSelection. Lengths, prices and quantity are capped by the
        MAX_* ceilings in rate_tables.
        """
        width = require_positive(order.artwork_width, "artwork_width", maximum=MAX_DIMENSION)
        height = require_positive(order.artwork_height, "artwork_height", maximum=MAX_DIMENSION)

        quantity = order.quantity
        if isinstance(quantity, bool) or not isinstance(quantity, int) or not 1 <= quantity <= MAX_QUANTITY:
            raise InvalidQuantity(f"quantity must be an integer from 1 to {MAX_QUANTITY}",
                                  field="quantity", value=quantity)

        frames = []
        for i, selection in enumerate(order.frames):
            ref = selection.frame
            price = require_non_negative(
                ref.price_per_linear_foot, f"frames[{i}].price_per_linear_foot", InvalidCatalogPrice,
                maximum=MAX_CATALOG_PRICE
            )
            frames.append(FrameSelection(
                frame=replace(ref, width=to_decimal(ref.width), price_per_linear_foot=price),
                position=parse_position(selection.position, f"frames[{i}].position"),
                pricing_method=parse_pricing_method(
                    selection.pricing_method, f"frames[{i}].pricing_method"
                ),
            ))

        mats = []
        for i, selection in enumerate(order.mats):
            ref = selection.matboard
            price = require_non_negative(
                ref.price_per_united_inch, f"mats[{i}].price_per_united_inch", InvalidCatalogPrice,
                maximum=MAX_CATALOG_PRICE
            )
            mats.append(MatSelection(
                matboard=replace(ref, price_per_united_inch=price),
                position=parse_position(selection.position, f"mats[{i}].position"),
                width=require_positive(selection.width, f"mats[{i}].width", maximum=MAX_DIMENSION),
                offset=require_non_negative(selection.offset, f"mats[{i}].offset", maximum=MAX_DIMENSION),
            ))

        glass = None
        if order.glass is not None:
            ref = order.glass.glass
            price = require_non_negative(
                ref.price_per_united_inch, "glass.price_per_united_inch", InvalidCatalogPrice,
                maximum=MAX_CATALOG_PRICE
            )
            glass = GlassSelection(glass=replace(ref, price_per_united_inch=price))

        services = [
            SpecialService(
                id=s.id,
                description=s.description,
                fixed_price=require_non_negative(
                    s.fixed_price, f"special_services[{i}].fixed_price", InvalidCatalogPrice,
                    maximum=MAX_CATALOG_PRICE
                ),
            )
            for i, s in enumerate(order.special_services)
        ]

        return Order(
            order_id=order.order_id,
            artwork_width=width,
            artwork_height=height,
            frames=frames,
            mats=mats,
            glass=glass,
            special_services=services,
            quantity=quantity,
            tax_exempt=bool(order.tax_exempt),
        )

    # ------------------------------------------------------------------
    # Pricing
    # ------------------------------------------------------------------

    def price_order(self, order: Order) -> PricedOrder:
        """
        Price one framed piece.

        Args:
            order: Order with artwork size, layer selections and quantity

        Returns:
            PricedOrder with every derived field populated, plus trace

        Arithmetic runs in a fixed decimal context, never the caller's.
        """
        with pricing_context():
            try:
                return self._price_order(order)
            except InvalidOperation:
                # Many layers at the ceilings can still exceed PRICING_PRECISION
                raise PricingError("Order is too large to price", field="order", value=order.order_id)

    def _price_order(self, order: Order) -> PricedOrder:
        order = self.normalize_order(order)
        width, height = order.artwork_width, order.artwork_height

        frame_layers = compose_frames(order.frames)
        mat_layers = compose_mats(order.mats, width, height)
        mat_width = total_mat_width(order.mats)

        frame = price_frames(frame_layers, width, height)
        mat = price_mats(mat_layers)
        glass = price_glass(order.glass, width, height, mat_width)
        backing = price_backing(width, height, mat_width)
        labor = price_labor(width, height)
        services = price_special_services(order.special_services)

        components = (frame, mat, glass, backing, labor, services)
        subtotal = sum((c.retail for c in components), ZERO)
        pre_tax_total = subtotal * order.quantity
        tax = ZERO if order.tax_exempt else money(pre_tax_total * self.tax_rate)

        priced = PricedOrder(
            order=order,
            frame_price=frame.retail,
            mat_price=mat.retail,
            glass_price=glass.retail,
            backing_price=backing.retail,
            labor_price=labor.retail,
            special_services_price=services.retail,
            subtotal=subtotal,
            pre_tax_total=pre_tax_total,
            tax=tax,
            total=pre_tax_total + tax,
            wholesale={
                "frame": frame.wholesale,
                "mat": mat.wholesale,
                "glass": glass.wholesale,
                "backing": backing.wholesale,
            },
        )

        priced.add_trace("Artwork", f"{width}×{height} in, mats {mat_width} in total",
                         f"{width + 2 * mat_width}×{height + 2 * mat_width}")
        for component in components:
            priced.trace.extend(component.trace)
        priced.add_trace("Subtotal", "Per piece", f"${subtotal}")
        priced.add_trace("Quantity", f"{order.quantity} × ${subtotal}", f"${pre_tax_total}")
        if order.tax_exempt:
            priced.add_trace("Tax", "Tax exempt", "$0.00")
        else:
            priced.add_trace("Tax", f"${pre_tax_total} × {self.tax_rate}", f"${tax}")
        priced.add_trace("Total", "Order total", f"${priced.total}")

        for layer in frame_layers:
            if layer.defaulted_width:
                priced.add_warning(
                    f"Frame {layer.selection.frame.id} has no moulding width; "
                    f"assumed {layer.moulding_width} inch"
                )

        logger.debug("Priced order %s: subtotal %s × %d, total %s",
                     order.order_id, subtotal, order.quantity, priced.total)
        return priced

    def price_order_group(
        self,
        orders: Sequence[PricedOrder],
        discount: Optional[Discount] = None,
        tax_exempt: bool = False
    ) -> PricedOrderGroup:
        """Aggregate priced orders under one discount and tax decision."""
        return self.group_policy.aggregate(orders, discount=discount, tax_exempt=tax_exempt)


_engine: Optional[PricingEngine] = None


def get_engine() -> PricingEngine:
    """Get the shared engine built from global settings."""
    global _engine
    if _engine is None:
        _engine = PricingEngine()
    return _engine


def price_order(order: Order) -> PricedOrder:
    return get_engine().price_order(order)


def price_order_group(
    orders: Sequence[PricedOrder],
    discount: Optional[Discount] = None,
    tax_exempt: bool = False
) -> PricedOrderGroup:
    return get_engine().price_order_group(orders, discount=discount, tax_exempt=tax_exempt)
