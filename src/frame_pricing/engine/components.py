"""
Component Pricers - frame, mat, glass, backing, labor and special services.

Each pricer takes geometry plus catalog prices and returns a ComponentPrice.
Pricers are independent, keep no state and never apply order quantity.
Inputs are expected to be validated Decimals (see PricingEngine).
"""
from decimal import Decimal
from typing import Optional, Sequence

from .layers import FrameLayer, MatLayer
from .models import ComponentPrice, GlassSelection, SpecialService
from .money import ZERO, money
from .rate_tables import (
    FRAME_MARKUP, SIZE_MARKUP, BACKING_SIZE_DISCOUNT, LABOR_RATES,
    MUSEUM_GLASS_THRESHOLD, MUSEUM_GLASS_PREMIUM,
    BACKING_RATE_PER_SQ_IN, BACKING_MARKUP, BACKING_MINIMUM, INCHES_PER_FOOT,
)


def perimeter_feet(width: Decimal, height: Decimal) -> Decimal:
    return 2 * (width + height) / INCHES_PER_FOOT


def price_frames(
    layers: Sequence[FrameLayer],
    artwork_width: Decimal,
    artwork_height: Decimal
) -> ComponentPrice:
    """
    Price every frame layer against the same opening and sum.

    wholesale = perimeter feet x price per linear foot; the markup is chosen
    by that wholesale dollar amount, not by size.
    """
    result = ComponentPrice(retail=ZERO, wholesale=ZERO)
    feet = perimeter_feet(artwork_width, artwork_height)

    for layer in layers:
        frame = layer.selection.frame
        wholesale = feet * frame.price_per_linear_foot
        markup = FRAME_MARKUP.lookup(wholesale)
        retail = money(wholesale * markup)

        result.retail += retail
        result.wholesale += money(wholesale)
        result.add_trace(
            "Frame",
            f"{frame.id}: {feet:.4f} ft × ${frame.price_per_linear_foot}/ft × {markup}",
            f"${retail}"
        )
    return result


def price_mats(layers: Sequence[MatLayer]) -> ComponentPrice:
    """Price each mat on its own finished united inches and sum."""
    result = ComponentPrice(retail=ZERO, wholesale=ZERO)

    for layer in layers:
        board = layer.selection.matboard
        united_inches = layer.united_inches
        wholesale = united_inches * board.price_per_united_inch
        markup = SIZE_MARKUP.lookup(united_inches)
        retail = money(wholesale * markup)

        result.retail += retail
        result.wholesale += money(wholesale)
        result.add_trace(
            "Mat",
            f"{board.id}: {layer.outer_width}×{layer.outer_height} = {united_inches} UI "
            f"× ${board.price_per_united_inch} × {markup}",
            f"${retail}"
        )
    return result


def price_glass(
    glass: Optional[GlassSelection],
    artwork_width: Decimal,
    artwork_height: Decimal,
    mat_width: Decimal
) -> ComponentPrice:
    """
    Glass covers artwork plus the whole mat stack.

    Museum-grade glazing (price per united inch at or above the threshold)
    gets its markup factor multiplied by 1.5.
    """
    result = ComponentPrice(retail=ZERO, wholesale=ZERO)
    if glass is None:
        return result

    ref = glass.glass
    united_inches = (artwork_width + 2 * mat_width) + (artwork_height + 2 * mat_width)
    wholesale = united_inches * ref.price_per_united_inch
    markup = SIZE_MARKUP.lookup(united_inches)
    museum = ref.price_per_united_inch >= MUSEUM_GLASS_THRESHOLD
    if museum:
        markup = markup * MUSEUM_GLASS_PREMIUM

    result.retail = money(wholesale * markup)
    result.wholesale = money(wholesale)
    result.add_trace(
        "Glass",
        f"{ref.id}: {united_inches} UI × ${ref.price_per_united_inch} × {markup}"
        + (" (museum premium)" if museum else ""),
        f"${result.retail}"
    )
    return result


def price_backing(artwork_width: Decimal, artwork_height: Decimal, mat_width: Decimal) -> ComponentPrice:
    """Area-based backing with a size discount and a $10.00 minimum."""
    area = (artwork_width + 2 * mat_width) * (artwork_height + 2 * mat_width)
    factor = BACKING_SIZE_DISCOUNT.lookup(area)
    wholesale = area * BACKING_RATE_PER_SQ_IN * factor
    retail = money(wholesale * BACKING_MARKUP)

    result = ComponentPrice(retail=max(retail, BACKING_MINIMUM), wholesale=money(wholesale))
    description = f"{area} sq in × ${BACKING_RATE_PER_SQ_IN} × {factor} × {BACKING_MARKUP}"
    if retail < BACKING_MINIMUM:
        description += f" (minimum ${BACKING_MINIMUM} applied)"
    result.add_trace("Backing", description, f"${result.retail}")
    return result


def price_labor(artwork_width: Decimal, artwork_height: Decimal) -> ComponentPrice:
    """Flat fitting charge by artwork united inches. No proration."""
    united_inches = artwork_width + artwork_height
    rate = money(LABOR_RATES.lookup(united_inches))
    result = ComponentPrice(retail=rate, wholesale=ZERO)
    result.add_trace("Labor", f"{united_inches} UI artwork", f"${rate}")
    return result


def price_special_services(services: Sequence[SpecialService]) -> ComponentPrice:
    # Summed as given; exclusivity between services is the caller's concern.
    result = ComponentPrice(retail=ZERO, wholesale=ZERO)
    for service in services:
        price = money(service.fixed_price)
        result.retail += price
        result.add_trace("Service", service.description or service.id, f"${price}")
    return result
