"""
Price a sample order from the catalog and print its trace.

Usage:
    python scripts/debug_quote.py [width] [height]
"""
import sys
from pathlib import Path

# Add src to path
src_path = Path(__file__).parent.parent / 'src'
sys.path.insert(0, str(src_path))

from frame_pricing.data.catalog import Catalog
from frame_pricing.engine import PricingEngine, Discount, DiscountType
from frame_pricing.logging_config import setup_logging


def debug(width: str = "16", height: str = "20"):
    setup_logging("DEBUG")
    engine = PricingEngine()
    catalog = Catalog(engine.settings)

    print("Frames Head:")
    print(catalog.frames.head())
    print("\nMatboards Head:")
    print(catalog.matboards.head())

    print(f"\n--- Quoting {width}x{height} ---")
    order = catalog.build_order(
        artwork_width=width,
        artwork_height=height,
        frames=[{"frame_id": catalog.frames.index[0], "position": 0}],
        mats=[{"matboard_id": catalog.matboards.index[0], "position": 0, "width": 2}],
        glass_id="museum",
        service_ids=["dry-mount"],
        order_id="debug-1",
    )
    priced = engine.price_order(order)
    print(priced.get_trace_text())
    for warning in priced.warnings:
        print(f"WARNING: {warning}")

    print("\n--- Order group, 10% off ---")
    group = engine.price_order_group(
        [priced, priced], discount=Discount(DiscountType.PERCENTAGE, 10)
    )
    print(group.get_trace_text())


if __name__ == "__main__":
    debug(*sys.argv[1:3])
