"""
Layer Compositor - resolves frame and mat stacks into cumulative offsets.

A stack is a plain list ordered outer -> inner by `position` (higher = outer).
Duplicate positions are legal and keep their insertion order.
"""
import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Sequence, TypeVar

from .models import FrameSelection, MatSelection
from .money import to_decimal
from .rate_tables import DEFAULT_MOULDING_WIDTH

logger = logging.getLogger(__name__)

T = TypeVar('T')


def sort_layers(items: Sequence[T]) -> list[T]:
    """Outer first. sorted() is stable, so equal positions keep input order."""
    return sorted(items, key=lambda item: item.position, reverse=True)


@dataclass
class FrameLayer:
    """A frame placed in the stack. offset = moulding width outside this layer."""
    selection: FrameSelection
    depth: int
    moulding_width: Decimal
    offset: Decimal
    defaulted_width: bool = False


@dataclass
class MatLayer:
    """
    A mat placed in the stack.

    offset is the mat width outside this layer; outer_width/outer_height are
    the finished size of this board (artwork + 2 x this and every inner mat).
    """
    selection: MatSelection
    depth: int
    offset: Decimal
    outer_width: Decimal
    outer_height: Decimal

    @property
    def united_inches(self) -> Decimal:
        return self.outer_width + self.outer_height


def compose_frames(frames: Sequence[FrameSelection]) -> list[FrameLayer]:
    """Sort frames outer -> inner and accumulate moulding widths."""
    layers = []
    offset = Decimal('0')
    for depth, selection in enumerate(sort_layers(frames)):
        width = to_decimal(selection.frame.width)
        defaulted = width is None or not width.is_finite() or width <= 0
        if defaulted:
            logger.warning(
                "Frame %s has no usable moulding width (%r); using %s inch",
                selection.frame.id, selection.frame.width, DEFAULT_MOULDING_WIDTH
            )
            width = DEFAULT_MOULDING_WIDTH
        layers.append(FrameLayer(
            selection=selection,
            depth=depth,
            moulding_width=width,
            offset=offset,
            defaulted_width=defaulted,
        ))
        offset += width
    return layers


def total_mat_width(mats: Sequence[MatSelection]) -> Decimal:
    """Sum of every mat width in the stack (0 when there are no mats)."""
    return sum((Decimal(m.width) for m in mats), Decimal('0'))


def compose_mats(
    mats: Sequence[MatSelection],
    artwork_width: Decimal,
    artwork_height: Decimal
) -> list[MatLayer]:
    """
    Sort mats outer -> inner and compute each board's finished size.

    Walks outside in: the outermost board covers the whole mat stack, each
    inner board is smaller by twice the widths already passed.
    """
    ordered = sort_layers(mats)
    remaining = total_mat_width(ordered)
    offset = Decimal('0')
    layers = []
    for depth, selection in enumerate(ordered):
        layers.append(MatLayer(
            selection=selection,
            depth=depth,
            offset=offset,
            outer_width=artwork_width + 2 * remaining,
            outer_height=artwork_height + 2 * remaining,
        ))
        offset += selection.width
        remaining -= selection.width
    return layers
