import os
import sys
from decimal import Decimal
from types import SimpleNamespace

import pytest

# Add src to path for internal imports
src_path = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), 'src')
if src_path not in sys.path:
    sys.path.insert(0, src_path)

from frame_pricing.config.settings import Settings, TAX_RATE
from frame_pricing.engine import (
    PricingEngine, Order, FrameRef, FrameSelection, MatboardRef, MatSelection,
    GlassRef, GlassSelection, SpecialService,
)


@pytest.fixture
def engine():
    settings = Settings.load()
    settings.tax_rate = TAX_RATE
    return PricingEngine(settings)


def frame(price="10", width="1.5", position=0, frame_id="test-frame"):
    return FrameSelection(
        frame=FrameRef(id=frame_id, name=frame_id, width=width, price_per_linear_foot=price),
        position=position,
    )


def mat(price="0.02", width="2", position=0, mat_id="test-mat", offset="0"):
    return MatSelection(
        matboard=MatboardRef(id=mat_id, name=mat_id, price_per_united_inch=price),
        position=position,
        width=width,
        offset=offset,
    )


def glass(price="0.08", glass_id="test-glass"):
    return GlassSelection(glass=GlassRef(id=glass_id, name=glass_id, price_per_united_inch=price))


def service(price, service_id="svc"):
    return SpecialService(id=service_id, description=service_id, fixed_price=price)


@pytest.fixture
def make_order():
    """Factory for orders built from inline catalog prices."""
    def _make(width="16", height="20", frames=(), mats=(), glass_sel=None, services=(),
              quantity=1, tax_exempt=False, order_id=None):
        return Order(
            artwork_width=Decimal(width) if isinstance(width, str) else width,
            artwork_height=Decimal(height) if isinstance(height, str) else height,
            frames=list(frames),
            mats=list(mats),
            glass=glass_sel,
            special_services=list(services),
            quantity=quantity,
            tax_exempt=tax_exempt,
            order_id=order_id,
        )
    return _make


@pytest.fixture
def builders():
    """Selection builders: frame(), mat(), glass(), service()."""
    return SimpleNamespace(frame=frame, mat=mat, glass=glass, service=service)
