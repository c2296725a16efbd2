"""Engine subpackage - core pricing logic and composition."""
from .pricing_engine import PricingEngine, price_order, price_order_group
from .models import (
    Order, PricedOrder, PricedOrderGroup, Discount, DiscountType,
    FrameRef, FrameSelection, MatboardRef, MatSelection,
    GlassRef, GlassSelection, SpecialService,
)
from .errors import (
    PricingError, InvalidDimension, InvalidQuantity,
    InvalidCatalogPrice, InvalidDiscount, InvalidSelection,
)

__all__ = [
    'PricingEngine', 'price_order', 'price_order_group',
    'Order', 'PricedOrder', 'PricedOrderGroup', 'Discount', 'DiscountType',
    'FrameRef', 'FrameSelection', 'MatboardRef', 'MatSelection',
    'GlassRef', 'GlassSelection', 'SpecialService',
    'PricingError', 'InvalidDimension', 'InvalidQuantity',
    'InvalidCatalogPrice', 'InvalidDiscount', 'InvalidSelection',
]
