"""
Order Groups API - FastAPI router over the order group service.
"""
from typing import Optional

from fastapi import APIRouter, HTTPException

from ..engine.errors import (
    PricingError, OrderGroupError, UnknownOrder, UnknownOrderGroup,
)
from ..engine.models import Order, Discount
from .schemas import OrderPayload, DiscountPayload, CreateGroupRequest, TaxExemptRequest
from .state import service

router = APIRouter(prefix="/api", tags=["order-groups"])


# Endpoints

@router.post("/orders")
async def save_order(payload: OrderPayload):
    """Price and store an order (reprices its open group, if any)."""
    try:
        return service.save_order(Order.from_dict(payload.model_dump())).to_dict()
    except PricingError as e:
        raise HTTPException(status_code=422, detail=e.to_dict())
    except OrderGroupError as e:
        raise HTTPException(status_code=409, detail=str(e))


@router.get("/orders/{order_id}")
async def get_order(order_id: str):
    try:
        return service.get_order(order_id).to_dict()
    except UnknownOrder:
        raise HTTPException(status_code=404, detail=f"Order '{order_id}' not found")


@router.post("/order-groups")
async def create_group(req: CreateGroupRequest):
    try:
        return service.create_group(group_id=req.group_id, tax_exempt=req.tax_exempt).to_dict()
    except ValueError as e:
        raise HTTPException(status_code=409, detail=str(e))


@router.get("/order-groups/{group_id}")
async def get_group(group_id: str):
    try:
        return service.get_group(group_id).to_dict()
    except UnknownOrderGroup:
        raise HTTPException(status_code=404, detail=f"Order group '{group_id}' not found")


@router.post("/order-groups/{group_id}/orders/{order_id}")
async def add_order(group_id: str, order_id: str):
    try:
        return service.add_order(group_id, order_id).to_dict()
    except (UnknownOrder, UnknownOrderGroup) as e:
        raise HTTPException(status_code=404, detail=f"Not found: {e.args[0]}")
    except OrderGroupError as e:
        raise HTTPException(status_code=409, detail=str(e))


@router.delete("/order-groups/{group_id}/orders/{order_id}")
async def remove_order(group_id: str, order_id: str):
    try:
        return service.remove_order(group_id, order_id).to_dict()
    except (UnknownOrder, UnknownOrderGroup) as e:
        raise HTTPException(status_code=404, detail=f"Not found: {e.args[0]}")
    except OrderGroupError as e:
        raise HTTPException(status_code=409, detail=str(e))


@router.put("/order-groups/{group_id}/discount")
async def set_discount(group_id: str, payload: Optional[DiscountPayload] = None):
    """Set the group discount; an empty body clears it."""
    try:
        discount = Discount.from_dict(payload.model_dump()) if payload else None
        return service.set_discount(group_id, discount).to_dict()
    except PricingError as e:
        raise HTTPException(status_code=422, detail=e.to_dict())
    except UnknownOrderGroup:
        raise HTTPException(status_code=404, detail=f"Order group '{group_id}' not found")
    except OrderGroupError as e:
        raise HTTPException(status_code=409, detail=str(e))


@router.put("/order-groups/{group_id}/tax-exempt")
async def set_tax_exempt(group_id: str, req: TaxExemptRequest):
    try:
        return service.set_tax_exempt(group_id, req.tax_exempt).to_dict()
    except UnknownOrderGroup:
        raise HTTPException(status_code=404, detail=f"Order group '{group_id}' not found")
    except OrderGroupError as e:
        raise HTTPException(status_code=409, detail=str(e))


@router.post("/order-groups/{group_id}/close")
async def close_group(group_id: str):
    try:
        return service.close_group(group_id).to_dict()
    except UnknownOrderGroup:
        raise HTTPException(status_code=404, detail=f"Order group '{group_id}' not found")
    except OrderGroupError as e:
        raise HTTPException(status_code=409, detail=str(e))
