"""
Catalog - static reference data for frames, matboards, glass and services.

Loads the shop's CSV catalogs with pandas and turns rows into the engine's
reference models. Prices are checked here: a missing, negative or NaN price
raises InvalidCatalogPrice instead of silently becoming $0.
"""
import logging
from decimal import Decimal
from pathlib import Path
from typing import Optional, Sequence

import pandas as pd

from ..config.settings import get_settings, Settings
from ..engine.errors import InvalidCatalogPrice, UnknownCatalogItem
from ..engine.models import (
    FrameRef, FrameSelection, MatboardRef, MatSelection,
    GlassRef, GlassSelection, SpecialService, Order,
    parse_position, parse_pricing_method,
)
from ..engine.money import to_decimal
from ..engine.rate_tables import calculate_price_per_united_inch, MAX_CATALOG_PRICE

logger = logging.getLogger(__name__)

NO_SELECTION = ('', 'none')

BOX_COLUMNS = ('box_price', 'sheets_per_box', 'sheet_width', 'sheet_height')


def _load_csv(path: Path, required: Sequence[str]) -> pd.DataFrame:
    """Read a catalog CSV as strings, stripped, first row wins per id."""
    if not path.exists():
        raise FileNotFoundError(f"Catalog file not found at {path}")

    df = pd.read_csv(path, dtype=str).fillna('')
    df.columns = [c.strip() for c in df.columns]
    missing = [c for c in required if c not in df.columns]
    if missing:
        raise ValueError(f"{path.name} is missing columns: {', '.join(missing)}")

    for col in df.columns:
        df[col] = df[col].astype(str).str.strip()

    df = df[df['id'] != '']
    duplicates = df['id'].duplicated().sum()
    if duplicates:
        logger.warning("%s: %d duplicate ids ignored (first entry kept)", path.name, duplicates)
    return df.drop_duplicates('id').set_index('id', drop=False)


def _price(value: str, field: str, item_id: str) -> Decimal:
    price = to_decimal(value) if value != '' else None
    if price is None or not price.is_finite() or price < 0 or price > MAX_CATALOG_PRICE:
        raise InvalidCatalogPrice(
            f"Catalog entry '{item_id}' has no valid {field}", field=field, value=value
        )
    return price


class Catalog:
    """
    Catalog lookup for the pricing engine.

    Tables are loaded once at construction; call reload() after editing files.
    """

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()

        self.frames = _load_csv(self.settings.frames_csv, ('id', 'name', 'width', 'price_per_linear_foot'))
        self.matboards = _load_csv(self.settings.matboards_csv, ('id', 'name', 'color'))
        self.glass = _load_csv(self.settings.glass_csv, ('id', 'name', 'price_per_united_inch'))
        self.special_services = _load_csv(
            self.settings.special_services_csv, ('id', 'description', 'fixed_price')
        )

        logger.info(
            "Catalog loaded: %d frames, %d matboards, %d glass, %d services",
            len(self.frames), len(self.matboards), len(self.glass), len(self.special_services)
        )

    def reload(self):
        """Reload all CSV data from disk."""
        self.__init__(self.settings)

    def _row(self, table: pd.DataFrame, kind: str, item_id: str) -> pd.Series:
        item_id = str(item_id).strip()
        if item_id not in table.index:
            raise UnknownCatalogItem(kind, item_id)
        return table.loc[item_id]

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def get_frame(self, frame_id: str) -> FrameRef:
        row = self._row(self.frames, 'frame', frame_id)
        return FrameRef(
            id=row['id'],
            name=row['name'],
            material=row.get('material', ''),
            # Blank width is allowed; the compositor substitutes its default.
            width=to_decimal(row['width']) if row['width'] else None,
            price_per_linear_foot=_price(row['price_per_linear_foot'], 'price_per_linear_foot', row['id']),
        )

    def get_matboard(self, matboard_id: str) -> MatboardRef:
        """
        Matboard with its wholesale price per united inch.

        Uses the explicit price column when filled, otherwise derives the
        price from supplier box pricing.
        """
        row = self._row(self.matboards, 'matboard', matboard_id)

        if row.get('price_per_united_inch', ''):
            price = _price(row['price_per_united_inch'], 'price_per_united_inch', row['id'])
        elif all(row.get(c, '') for c in BOX_COLUMNS):
            box_price = _price(row['box_price'], 'box_price', row['id'])
            sheets = to_decimal(row['sheets_per_box'])
            sheet_width = to_decimal(row['sheet_width'])
            sheet_height = to_decimal(row['sheet_height'])
            for name, value in (('sheets_per_box', sheets), ('sheet_width', sheet_width),
                                ('sheet_height', sheet_height)):
                if value is None or not value.is_finite() or value <= 0:
                    raise InvalidCatalogPrice(
                        f"Catalog entry '{row['id']}' has no valid {name}", field=name, value=row[name]
                    )
            price = calculate_price_per_united_inch(box_price, sheets, sheet_width, sheet_height)
        else:
            raise InvalidCatalogPrice(
                f"Catalog entry '{row['id']}' has no price per united inch or box pricing",
                field='price_per_united_inch', value=None
            )

        return MatboardRef(id=row['id'], name=row['name'], color=row['color'], price_per_united_inch=price)

    def get_glass(self, glass_id: str) -> GlassRef:
        row = self._row(self.glass, 'glass', glass_id)
        return GlassRef(
            id=row['id'],
            name=row['name'],
            price_per_united_inch=_price(row['price_per_united_inch'], 'price_per_united_inch', row['id']),
        )

    def get_special_service(self, service_id: str) -> SpecialService:
        row = self._row(self.special_services, 'special service', service_id)
        return SpecialService(
            id=row['id'],
            description=row.get('name') or row['description'],
            fixed_price=_price(row['fixed_price'], 'fixed_price', row['id']),
        )

    def list_special_services(self) -> list[SpecialService]:
        return [self.get_special_service(i) for i in self.special_services.index]

    def list_items(self, kind: str) -> list[dict]:
        """Raw catalog rows for display, keyed by kind name."""
        tables = {
            'frames': self.frames,
            'matboards': self.matboards,
            'glass': self.glass,
            'special-services': self.special_services,
        }
        if kind not in tables:
            raise KeyError(kind)
        return tables[kind].to_dict(orient='records')

    # ------------------------------------------------------------------
    # Order assembly
    # ------------------------------------------------------------------

    def build_order(
        self,
        artwork_width,
        artwork_height,
        frames: Sequence[dict] = (),
        mats: Sequence[dict] = (),
        glass_id: Optional[str] = None,
        service_ids: Sequence[str] = (),
        quantity: int = 1,
        tax_exempt: bool = False,
        order_id: Optional[str] = None,
    ) -> Order:
        """
        Resolve catalog ids into an Order ready for pricing.

        frames: [{"frame_id", "position", "pricing_method"}]
        mats:   [{"matboard_id", "position", "width", "offset"}]
        """
        frame_selections = [
            FrameSelection(
                frame=self.get_frame(f['frame_id']),
                position=parse_position(f.get('position', 0), f"frames[{i}].position"),
                pricing_method=parse_pricing_method(f.get('pricing_method'), f"frames[{i}].pricing_method"),
            )
            for i, f in enumerate(frames)
        ]
        mat_selections = [
            MatSelection(
                matboard=self.get_matboard(m['matboard_id']),
                position=parse_position(m.get('position', 0), f"mats[{i}].position"),
                width=to_decimal(m.get('width', 2)),
                offset=to_decimal(m.get('offset', 0)),
            )
            for i, m in enumerate(mats)
        ]
        glass = None
        if glass_id is not None and str(glass_id).strip().lower() not in NO_SELECTION:
            glass = GlassSelection(glass=self.get_glass(glass_id))

        return Order(
            order_id=order_id,
            artwork_width=to_decimal(artwork_width),
            artwork_height=to_decimal(artwork_height),
            frames=frame_selections,
            mats=mat_selections,
            glass=glass,
            special_services=[self.get_special_service(s) for s in service_ids],
            quantity=quantity,
            tax_exempt=tax_exempt,
        )
