from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware

from ..engine.errors import PricingError, UnknownCatalogItem
from ..engine.models import Order, Discount
from ..engine.rate_tables import ALL_TABLES
from ..logging_config import setup_logging
from .order_groups_api import router as order_groups_router
from .schemas import OrderPayload, OrderGroupPayload, QuoteRequest
from .state import engine, catalog

setup_logging(engine.settings.log_level)

app = FastAPI(
    title="Frame Pricing API",
    description="Order pricing and order group aggregation for the framing POS",
    version="1.0.0"
)

# Enable CORS for frontend development
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(order_groups_router)


@app.get("/")
async def root():
    return {"status": "online", "message": "Frame Pricing API Active"}


@app.post("/price/order")
async def price_order(payload: OrderPayload):
    try:
        priced = engine.price_order(Order.from_dict(payload.model_dump()))
    except PricingError as e:
        raise HTTPException(status_code=422, detail=e.to_dict())
    return priced.to_dict()


@app.post("/price/order-group")
async def price_order_group(payload: OrderGroupPayload):
    try:
        orders = [engine.price_order(Order.from_dict(o.model_dump())) for o in payload.orders]
        discount = Discount.from_dict(payload.discount.model_dump()) if payload.discount else None
        group = engine.price_order_group(orders, discount=discount, tax_exempt=payload.tax_exempt)
    except PricingError as e:
        raise HTTPException(status_code=422, detail=e.to_dict())
    return group.to_dict()


@app.post("/quote")
async def quote(req: QuoteRequest):
    """Price an order whose frames, mats, glass and services are given by catalog id."""
    try:
        order = catalog.build_order(
            artwork_width=req.artwork_width,
            artwork_height=req.artwork_height,
            frames=[f.model_dump() for f in req.frames],
            mats=[m.model_dump() for m in req.mats],
            glass_id=req.glass_id,
            service_ids=req.service_ids,
            quantity=req.quantity,
            tax_exempt=req.tax_exempt,
            order_id=req.order_id,
        )
        priced = engine.price_order(order)
    except UnknownCatalogItem as e:
        raise HTTPException(status_code=404, detail=str(e.args[0]))
    except PricingError as e:
        raise HTTPException(status_code=422, detail=e.to_dict())
    return priced.to_dict()


@app.get("/catalog/{kind}")
async def get_catalog(kind: str):
    try:
        return catalog.list_items(kind)
    except KeyError:
        raise HTTPException(status_code=404, detail=f"Unknown catalog '{kind}'")


@app.get("/rate-tables")
async def get_rate_tables():
    return {table.name: table.describe() for table in ALL_TABLES}


@app.get("/system/status")
async def get_status():
    return {
        "engine_active": True,
        "tax_rate": str(engine.tax_rate),
        "catalog": {
            "frames": len(catalog.frames),
            "matboards": len(catalog.matboards),
            "glass": len(catalog.glass),
            "special_services": len(catalog.special_services),
        },
    }


@app.post("/catalog/reload")
async def reload_catalog():
    """Re-read the catalog CSV files after they were edited."""
    try:
        catalog.reload()
    except (FileNotFoundError, ValueError) as e:
        raise HTTPException(status_code=500, detail=str(e))
    return {"status": "reloaded", "frames": len(catalog.frames)}
