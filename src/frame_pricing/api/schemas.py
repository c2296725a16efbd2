"""
Pydantic request models shared by the API routers.

They mirror the engine's to_dict() shapes so a payload can be handed to
Order.from_dict() / Discount.from_dict() unchanged.
"""
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel

from ..engine.models import DiscountType, PricingMethod


class FrameRefModel(BaseModel):
    id: str
    name: str = ""
    material: str = ""
    width: Optional[Decimal] = None
    price_per_linear_foot: Optional[Decimal] = None


class FrameSelectionModel(BaseModel):
    frame: FrameRefModel
    position: int = 0
    pricing_method: PricingMethod = PricingMethod.CHOP


class MatboardRefModel(BaseModel):
    id: str
    name: str = ""
    color: str = ""
    price_per_united_inch: Optional[Decimal] = None


class MatSelectionModel(BaseModel):
    matboard: MatboardRefModel
    position: int = 0
    width: Decimal = Decimal('2')
    offset: Decimal = Decimal('0')


class GlassRefModel(BaseModel):
    id: str
    name: str = ""
    price_per_united_inch: Optional[Decimal] = None


class GlassSelectionModel(BaseModel):
    glass: GlassRefModel


class SpecialServiceModel(BaseModel):
    id: str
    description: str = ""
    fixed_price: Optional[Decimal] = None


class OrderPayload(BaseModel):
    """Fully specified order (catalog prices inline)."""
    order_id: Optional[str] = None
    artwork_width: Decimal
    artwork_height: Decimal
    frames: list[FrameSelectionModel] = []
    mats: list[MatSelectionModel] = []
    glass: Optional[GlassSelectionModel] = None
    special_services: list[SpecialServiceModel] = []
    quantity: int = 1
    tax_exempt: bool = False


class DiscountPayload(BaseModel):
    type: DiscountType
    amount: Decimal


class OrderGroupPayload(BaseModel):
    orders: list[OrderPayload]
    discount: Optional[DiscountPayload] = None
    tax_exempt: bool = False


class QuoteFrame(BaseModel):
    frame_id: str
    position: int = 0
    pricing_method: PricingMethod = PricingMethod.CHOP


class QuoteMat(BaseModel):
    matboard_id: str
    position: int = 0
    width: Decimal = Decimal('2')
    offset: Decimal = Decimal('0')


class QuoteRequest(BaseModel):
    """Order described by catalog ids; prices come from the catalog."""
    order_id: Optional[str] = None
    artwork_width: Decimal
    artwork_height: Decimal
    frames: list[QuoteFrame] = []
    mats: list[QuoteMat] = []
    glass_id: Optional[str] = None
    service_ids: list[str] = []
    quantity: int = 1
    tax_exempt: bool = False


class CreateGroupRequest(BaseModel):
    group_id: Optional[str] = None
    tax_exempt: bool = False


class TaxExemptRequest(BaseModel):
    tax_exempt: bool
