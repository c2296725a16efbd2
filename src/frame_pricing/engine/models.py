"""
Data models for the pricing engine.

Uses dataclasses for structured, type-safe data representation. Priced models
serialize to plain dicts whose money fields are two-digit decimal strings, and
rebuild from them exactly.
"""
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Any, Optional

from .money import format_money, to_decimal
from .errors import InvalidDiscount, InvalidSelection


def _num(value: Any) -> Any:
    """Exact decimal string for a number, passthrough otherwise."""
    number = to_decimal(value)
    return str(number) if number is not None else value


def _dec(value: Any) -> Optional[Decimal]:
    # Unparseable input becomes None and is rejected by engine validation.
    return to_decimal(value)


@dataclass
class TraceStep:
    """A single step in the pricing trace."""
    step: str
    description: str
    value: Optional[str] = None

    def to_dict(self) -> dict:
        return {"step": self.step, "description": self.description, "value": self.value}

    @classmethod
    def from_dict(cls, data: dict) -> 'TraceStep':
        return cls(step=data['step'], description=data['description'], value=data.get('value'))


def _trace_text(trace: list[TraceStep], bullet: str) -> str:
    lines = []
    for t in trace:
        if t.value:
            lines.append(f"{bullet} {t.step}: {t.description} = {t.value}")
        else:
            lines.append(f"{bullet} {t.step}: {t.description}")
    return "\n".join(lines)


@dataclass
class ComponentPrice:
    """Output of one component pricer."""
    retail: Decimal
    wholesale: Decimal
    trace: list[TraceStep] = field(default_factory=list)

    def add_trace(self, step: str, description: str, value: str = None):
        self.trace.append(TraceStep(step=step, description=description, value=value))


# ---------------------------------------------------------------------------
# Selections
# ---------------------------------------------------------------------------

@dataclass
class FrameRef:
    """Moulding from the catalog."""
    id: str
    name: str = ""
    material: str = ""
    width: Optional[Decimal] = None  # moulding face width, inches
    price_per_linear_foot: Optional[Decimal] = None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "material": self.material,
            "width": _num(self.width),
            "price_per_linear_foot": _num(self.price_per_linear_foot),
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'FrameRef':
        return cls(
            id=data['id'],
            name=data.get('name', ''),
            material=data.get('material', ''),
            width=_dec(data.get('width')),
            price_per_linear_foot=_dec(data.get('price_per_linear_foot')),
        )


class PricingMethod(str, Enum):
    """How the moulding is ordered from the vendor. Does not affect retail price."""
    CHOP = "chop"
    LENGTH = "length"
    JOIN = "join"


def parse_position(value: Any, field: str = "position") -> int:
    """Layer position as an int. Integral strings are accepted, bools and floats are not."""
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    if isinstance(value, str):
        text = value.strip()
        digits = text[1:] if text[:1] in ('+', '-') else text
        if digits.isascii() and digits.isdigit():
            return int(text)
    raise InvalidSelection(f"{field} must be an integer", field=field, value=value)


def parse_pricing_method(value: Any, field: str = "pricing_method") -> PricingMethod:
    """Missing means chop; anything else must name a PricingMethod."""
    if value is None or value == '':
        return PricingMethod.CHOP
    try:
        return PricingMethod(value)
    except ValueError:
        raise InvalidSelection(
            "pricing_method must be one of: " + ", ".join(m.value for m in PricingMethod),
            field=field, value=value
        )


@dataclass
class FrameSelection:
    """One frame layer; higher position = more outer."""
    frame: FrameRef
    position: int = 0
    pricing_method: PricingMethod = PricingMethod.CHOP

    def to_dict(self) -> dict:
        return {
            "frame": self.frame.to_dict(),
            "position": self.position,
            "pricing_method": PricingMethod(self.pricing_method).value,
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'FrameSelection':
        return cls(
            frame=FrameRef.from_dict(data['frame']),
            position=parse_position(data.get('position', 0)),
            pricing_method=parse_pricing_method(data.get('pricing_method')),
        )


@dataclass
class MatboardRef:
    """Matboard from the catalog."""
    id: str
    name: str = ""
    color: str = ""
    price_per_united_inch: Optional[Decimal] = None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "color": self.color,
            "price_per_united_inch": _num(self.price_per_united_inch),
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'MatboardRef':
        return cls(
            id=data['id'],
            name=data.get('name', ''),
            color=data.get('color', ''),
            price_per_united_inch=_dec(data.get('price_per_united_inch')),
        )


@dataclass
class MatSelection:
    """
    One mat layer; higher position = more outer.

    offset is a visual reveal only and never changes the price.
    """
    matboard: MatboardRef
    position: int = 0
    width: Decimal = Decimal('2')
    offset: Decimal = Decimal('0')

    def to_dict(self) -> dict:
        return {
            "matboard": self.matboard.to_dict(),
            "position": self.position,
            "width": _num(self.width),
            "offset": _num(self.offset),
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'MatSelection':
        return cls(
            matboard=MatboardRef.from_dict(data['matboard']),
            position=parse_position(data.get('position', 0)),
            width=_dec(data.get('width', '2')),
            offset=_dec(data.get('offset', '0')),
        )


@dataclass
class GlassRef:
    """Glazing from the catalog."""
    id: str
    name: str = ""
    price_per_united_inch: Optional[Decimal] = None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "price_per_united_inch": _num(self.price_per_united_inch),
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'GlassRef':
        return cls(
            id=data['id'],
            name=data.get('name', ''),
            price_per_united_inch=_dec(data.get('price_per_united_inch')),
        )


@dataclass
class GlassSelection:
    glass: GlassRef

    def to_dict(self) -> dict:
        return {"glass": self.glass.to_dict()}

    @classmethod
    def from_dict(cls, data: dict) -> 'GlassSelection':
        return cls(glass=GlassRef.from_dict(data['glass']))


@dataclass
class SpecialService:
    """Fixed-price add-on from the special services catalog."""
    id: str
    description: str
    fixed_price: Decimal

    def to_dict(self) -> dict:
        return {"id": self.id, "description": self.description, "fixed_price": _num(self.fixed_price)}

    @classmethod
    def from_dict(cls, data: dict) -> 'SpecialService':
        return cls(
            id=data['id'],
            description=data.get('description', ''),
            fixed_price=_dec(data.get('fixed_price')),
        )


# ---------------------------------------------------------------------------
# Orders
# ---------------------------------------------------------------------------

@dataclass
class Order:
    """Pricing view of one framed piece."""
    artwork_width: Decimal
    artwork_height: Decimal
    frames: list[FrameSelection] = field(default_factory=list)
    mats: list[MatSelection] = field(default_factory=list)
    glass: Optional[GlassSelection] = None
    special_services: list[SpecialService] = field(default_factory=list)
    quantity: int = 1
    tax_exempt: bool = False
    order_id: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "order_id": self.order_id,
            "artwork_width": _num(self.artwork_width),
            "artwork_height": _num(self.artwork_height),
            "frames": [f.to_dict() for f in self.frames],
            "mats": [m.to_dict() for m in self.mats],
            "glass": self.glass.to_dict() if self.glass else None,
            "special_services": [s.to_dict() for s in self.special_services],
            "quantity": self.quantity,
            "tax_exempt": self.tax_exempt,
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'Order':
        glass = data.get('glass')
        return cls(
            order_id=data.get('order_id'),
            artwork_width=_dec(data.get('artwork_width')),
            artwork_height=_dec(data.get('artwork_height')),
            frames=[FrameSelection.from_dict(f) for f in data.get('frames') or []],
            mats=[MatSelection.from_dict(m) for m in data.get('mats') or []],
            glass=GlassSelection.from_dict(glass) if glass else None,
            special_services=[SpecialService.from_dict(s) for s in data.get('special_services') or []],
            quantity=data.get('quantity', 1),
            tax_exempt=bool(data.get('tax_exempt', False)),
        )


MONEY_FIELDS = (
    'frame_price', 'mat_price', 'glass_price', 'backing_price', 'labor_price',
    'special_services_price', 'subtotal', 'pre_tax_total', 'tax', 'total',
)


@dataclass
class PricedOrder:
    """
    An order with every derived price field populated.

    Built only by the pricing engine; never edited by hand. Component prices
    are per piece, pre_tax_total and total include quantity.
    """
    order: Order
    frame_price: Decimal
    mat_price: Decimal
    glass_price: Decimal
    backing_price: Decimal
    labor_price: Decimal
    special_services_price: Decimal
    subtotal: Decimal
    pre_tax_total: Decimal
    tax: Decimal
    total: Decimal
    wholesale: dict[str, Decimal] = field(default_factory=dict)
    warnings: list[str] = field(default_factory=list)
    trace: list[TraceStep] = field(default_factory=list)

    @property
    def order_id(self) -> Optional[str]:
        return self.order.order_id

    def add_trace(self, step: str, description: str, value: str = None):
        self.trace.append(TraceStep(step=step, description=description, value=value))

    def add_warning(self, warning: str):
        if warning not in self.warnings:
            self.warnings.append(warning)

    def get_trace_text(self) -> str:
        """Get human-readable trace as formatted text."""
        return _trace_text(self.trace, "→")

    def to_dict(self) -> dict:
        data = {"order": self.order.to_dict()}
        for name in MONEY_FIELDS:
            data[name] = format_money(getattr(self, name))
        data["wholesale"] = {k: format_money(v) for k, v in self.wholesale.items()}
        data["warnings"] = list(self.warnings)
        data["trace"] = [t.to_dict() for t in self.trace]
        return data

    @classmethod
    def from_dict(cls, data: dict) -> 'PricedOrder':
        return cls(
            order=Order.from_dict(data['order']),
            **{name: Decimal(data[name]) for name in MONEY_FIELDS},
            wholesale={k: Decimal(v) for k, v in data.get('wholesale', {}).items()},
            warnings=list(data.get('warnings', [])),
            trace=[TraceStep.from_dict(t) for t in data.get('trace', [])],
        )


class DiscountType(str, Enum):
    PERCENTAGE = "percentage"
    FIXED = "fixed"


@dataclass
class Discount:
    """Group-level discount. Range checks happen in the order group policy."""
    type: DiscountType
    amount: Decimal

    def to_dict(self) -> dict:
        return {"type": DiscountType(self.type).value, "amount": _num(self.amount)}

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> Optional['Discount']:
        if not data:
            return None
        try:
            discount_type = DiscountType(data.get('type'))
        except ValueError:
            raise InvalidDiscount("Discount type must be 'percentage' or 'fixed'",
                                  field="discount.type", value=data.get('type'))
        return cls(type=discount_type, amount=to_decimal(data.get('amount')))


GROUP_MONEY_FIELDS = ('subtotal', 'discount_amount', 'discounted_subtotal', 'tax', 'total')


@dataclass
class PricedOrderGroup:
    """Priced cart/invoice: member orders plus one discount and one tax decision."""
    orders: list[PricedOrder]
    discount: Optional[Discount]
    tax_exempt: bool
    subtotal: Decimal
    discount_amount: Decimal
    discounted_subtotal: Decimal
    tax: Decimal
    total: Decimal
    trace: list[TraceStep] = field(default_factory=list)

    @property
    def order_ids(self) -> list[Optional[str]]:
        return [o.order_id for o in self.orders]

    def add_trace(self, step: str, description: str, value: str = None):
        self.trace.append(TraceStep(step=step, description=description, value=value))

    def get_trace_text(self) -> str:
        """Get human-readable group trace as formatted text."""
        return _trace_text(self.trace, "•")

    def to_dict(self) -> dict:
        data = {
            "orders": [o.to_dict() for o in self.orders],
            "discount": self.discount.to_dict() if self.discount else None,
            "tax_exempt": self.tax_exempt,
        }
        for name in GROUP_MONEY_FIELDS:
            data[name] = format_money(getattr(self, name))
        data["trace"] = [t.to_dict() for t in self.trace]
        return data

    @classmethod
    def from_dict(cls, data: dict) -> 'PricedOrderGroup':
        return cls(
            orders=[PricedOrder.from_dict(o) for o in data.get('orders', [])],
            discount=Discount.from_dict(data.get('discount')),
            tax_exempt=bool(data.get('tax_exempt', False)),
            **{name: Decimal(data[name]) for name in GROUP_MONEY_FIELDS},
            trace=[TraceStep.from_dict(t) for t in data.get('trace', [])],
        )
