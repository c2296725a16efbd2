"""
Exceptions raised by the pricing engine and the services around it.

Exception Hierarchy:
    PricingError (ValueError)       - invalid input, rejected before pricing
    ├── InvalidDimension            - non-positive, non-finite or oversized length
    ├── InvalidQuantity             - quantity is not an integer >= 1
    ├── InvalidCatalogPrice         - missing, negative, NaN or oversized price
    ├── InvalidDiscount             - discount outside its allowed range
    └── InvalidSelection            - layer position or pricing method not recognised
    OrderGroupError                 - lifecycle violations in the order group service
    ├── OrderGroupClosed            - group (or its orders) are frozen
    └── OrderAlreadyGrouped         - order already sits in another open group
    UnknownOrder / UnknownOrderGroup / UnknownCatalogItem (KeyError)
"""
from typing import Any, Optional


class PricingError(ValueError):
    """Base class for every input rejected by price_order / price_order_group."""

    def __init__(self, message: str, field: Optional[str] = None, value: Any = None):
        super().__init__(message)
        self.message = message
        self.field = field
        self.value = value

    def __str__(self) -> str:
        if self.field:
            return f"{self.message} (field={self.field}, value={self.value!r})"
        return self.message

    def to_dict(self) -> dict:
        return {
            "error": type(self).__name__,
            "message": self.message,
            "field": self.field,
            "value": None if self.value is None else str(self.value),
        }


class InvalidDimension(PricingError):
    """Width, height, mat width or mat offset is not a usable length."""


class InvalidQuantity(PricingError):
    """Order quantity must be an integer of at least 1."""


class InvalidCatalogPrice(PricingError):
    """A reference price is missing, negative or not a finite number."""


class InvalidDiscount(PricingError):
    """Percentage outside (0, 100], fixed amount <= 0, or an unknown type."""


class InvalidSelection(PricingError):
    """Layer position is not an integer, or the pricing method is unknown."""


class OrderGroupError(Exception):
    """Base class for order group lifecycle violations."""


class OrderGroupClosed(OrderGroupError):
    """The group is settled; its orders, discount and tax flag are frozen."""

    def __init__(self, group_id: str):
        super().__init__(f"Order group '{group_id}' is closed")
        self.group_id = group_id


class OrderAlreadyGrouped(OrderGroupError):
    """An order may belong to at most one open order group."""

    def __init__(self, order_id: str, group_id: str):
        super().__init__(f"Order '{order_id}' already belongs to open group '{group_id}'")
        self.order_id = order_id
        self.group_id = group_id


class UnknownOrder(KeyError):
    pass


class UnknownOrderGroup(KeyError):
    pass


class UnknownCatalogItem(KeyError):
    """No catalog entry with the requested id."""

    def __init__(self, kind: str, item_id: str):
        super().__init__(f"No {kind} with id '{item_id}' in catalog")
        self.kind = kind
        self.item_id = item_id
