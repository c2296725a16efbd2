"""Shared engine, catalog and service instances for the API process."""
from ..data.catalog import Catalog
from ..engine.pricing_engine import PricingEngine
from ..services.order_group_service import OrderGroupService

engine = PricingEngine()
catalog = Catalog(engine.settings)
service = OrderGroupService(engine)
