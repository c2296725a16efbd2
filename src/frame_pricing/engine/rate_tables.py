"""
Rate Tables - bracket tables mapping a computed quantity to a factor.

Every table is an ascending list of upper-bound thresholds. The last bracket is
open-ended (Infinity). A single lookup is shared by all tables:

    FRAME_MARKUP           wholesale $      [lo, hi) brackets
    SIZE_MARKUP            united inches    <= brackets (mats and glass)
    BACKING_SIZE_DISCOUNT  area sq in       <= brackets
    LABOR_RATES            united inches    <= brackets, flat dollars
"""
from dataclasses import dataclass
from decimal import Decimal

from ..config.settings import TAX_RATE  # noqa: F401  re-exported

INFINITY = Decimal('Infinity')

MUSEUM_GLASS_THRESHOLD = Decimal('0.45')  # $ per united inch
MUSEUM_GLASS_PREMIUM = Decimal('1.5')

BACKING_RATE_PER_SQ_IN = Decimal('0.008')
BACKING_MARKUP = Decimal('3.0')
BACKING_MINIMUM = Decimal('10.00')

DEFAULT_MOULDING_WIDTH = Decimal('1')  # inches

INCHES_PER_FOOT = Decimal('12')

# Input ceilings. Every product of these stays well inside PRICING_PRECISION digits.
MAX_DIMENSION = Decimal('10000')         # inches, artwork and mat widths
MAX_CATALOG_PRICE = Decimal('1000000')   # any single reference price
MAX_QUANTITY = 100000


@dataclass(frozen=True)
class Bracket:
    """Upper bound and the factor (or flat amount) it selects."""
    threshold: Decimal
    value: Decimal


@dataclass(frozen=True)
class BracketTable:
    """
    Ordered brackets with a first-match lookup.

    inclusive=True matches `quantity <= threshold`, False matches `quantity < threshold`.
    """
    name: str
    brackets: tuple
    inclusive: bool = True

    def __post_init__(self):
        thresholds = [b.threshold for b in self.brackets]
        if thresholds != sorted(thresholds) or thresholds[-1] != INFINITY:
            raise ValueError(f"{self.name}: thresholds must ascend and end at Infinity")

    def lookup(self, quantity: Decimal) -> Decimal:
        for bracket in self.brackets:
            if quantity <= bracket.threshold if self.inclusive else quantity < bracket.threshold:
                return bracket.value
        return self.brackets[-1].value

    def describe(self) -> list[dict]:
        """Table as plain records, for display."""
        op = '<=' if self.inclusive else '<'
        return [
            {"bound": f"{op} {b.threshold}" if b.threshold != INFINITY else "above",
             "value": str(b.value)}
            for b in self.brackets
        ]


def _table(name: str, rows: list[tuple], inclusive: bool = True) -> BracketTable:
    return BracketTable(
        name=name,
        brackets=tuple(Bracket(Decimal(str(t)), Decimal(str(v))) for t, v in rows),
        inclusive=inclusive,
    )


# Keyed by wholesale cost, not by size.
FRAME_MARKUP = _table('frame_markup', [
    (2, '4.0'),
    (4, '3.5'),
    (6, '3.2'),
    (10, '3.0'),
    (15, '2.8'),
    (25, '2.6'),
    (40, '2.4'),
    ('Infinity', '2.2'),
], inclusive=False)

# Shared by mats and glass. Comments give the common frame size at each bound.
SIZE_MARKUP = _table('size_markup', [
    (24, '4.0'),    # 5x7
    (36, '3.8'),    # 8x10
    (50, '3.5'),    # 11x14
    (68, '3.2'),    # 16x20
    (88, '3.0'),    # 18x24
    (108, '2.8'),   # 24x30
    ('Infinity', '2.5'),
])

BACKING_SIZE_DISCOUNT = _table('backing_size_discount', [
    (500, '1.0'),
    (1000, '0.9'),
    (1500, '0.85'),
    ('Infinity', '0.8'),
])

LABOR_RATES = _table('labor_rates', [
    (40, '50.00'),
    (60, '60.00'),
    (80, '70.00'),
    (100, '85.00'),
    ('Infinity', '100.00'),
])

ALL_TABLES = (FRAME_MARKUP, SIZE_MARKUP, BACKING_SIZE_DISCOUNT, LABOR_RATES)


def calculate_price_per_united_inch(
    box_price: Decimal,
    sheets_per_box: int,
    sheet_width: Decimal,
    sheet_height: Decimal
) -> Decimal:
    """
    Wholesale price per united inch from supplier box pricing.

    A box of 15 museum-glass lites at $485, each 32x40, is
    485 / 15 / 72 = $0.449 per united inch.
    """
    price_per_sheet = Decimal(box_price) / Decimal(sheets_per_box)
    united_inches_per_sheet = Decimal(sheet_width) + Decimal(sheet_height)
    return price_per_sheet / united_inches_per_sheet
