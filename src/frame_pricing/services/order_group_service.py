"""
Order Group Service - in-memory system of record around the pricing engine.

Holds priced orders and order groups (carts/invoices) and enforces their
lifecycle:
- every save reprices the order from scratch, never patches it
- an order belongs to at most one open group
- a closed group is frozen: its orders, discount and tax flag cannot change
- recompute-and-persist is serialized per order id and per group id

Locks are striped: a fixed pool for orders and another for groups, picked by
id hash. They are always taken order first, then group.
"""
import logging
import threading
import uuid
from contextlib import contextmanager
from dataclasses import dataclass, field, replace
from typing import Iterator, Optional

from ..engine.errors import (
    OrderGroupClosed, OrderAlreadyGrouped, UnknownOrder, UnknownOrderGroup,
)
from ..engine.models import Discount, Order, PricedOrder, PricedOrderGroup
from ..engine.order_group import validate_discount
from ..engine.pricing_engine import PricingEngine

logger = logging.getLogger(__name__)

STATUS_OPEN = "open"
STATUS_CLOSED = "closed"

LOCK_STRIPES = 64


@dataclass
class OrderGroupRecord:
    """Stored state of one order group."""
    group_id: str
    status: str = STATUS_OPEN
    order_ids: list[str] = field(default_factory=list)
    discount: Optional[Discount] = None
    tax_exempt: bool = False
    priced: Optional[PricedOrderGroup] = None
    version: int = 0

    @property
    def is_open(self) -> bool:
        return self.status == STATUS_OPEN

    def to_dict(self) -> dict:
        return {
            "group_id": self.group_id,
            "status": self.status,
            "order_ids": list(self.order_ids),
            "discount": self.discount.to_dict() if self.discount else None,
            "tax_exempt": self.tax_exempt,
            "version": self.version,
            "priced": self.priced.to_dict() if self.priced else None,
        }


class OrderGroupService:
    """Service for storing, repricing and settling orders and order groups."""

    def __init__(self, engine: Optional[PricingEngine] = None):
        self.engine = engine or PricingEngine()
        self._orders: dict[str, PricedOrder] = {}
        self._groups: dict[str, OrderGroupRecord] = {}
        self._membership: dict[str, str] = {}  # order_id -> group_id
        self._order_locks = tuple(threading.Lock() for _ in range(LOCK_STRIPES))
        self._group_locks = tuple(threading.Lock() for _ in range(LOCK_STRIPES))
        self._registry_lock = threading.Lock()

    @contextmanager
    def _locked(self, pool: tuple, key: str) -> Iterator[None]:
        with pool[hash(key) % len(pool)]:
            yield

    def _order_lock(self, order_id: str):
        return self._locked(self._order_locks, order_id)

    def _group_lock(self, group_id: str):
        return self._locked(self._group_locks, group_id)

    # ------------------------------------------------------------------
    # Orders
    # ------------------------------------------------------------------

    def save_order(self, order: Order) -> PricedOrder:
        """
        Price and store an order, then reprice its open group if it has one.

        A missing order_id gets a generated one. Orders inside a closed group
        are frozen.
        """
        order_id = order.order_id or f"o-{uuid.uuid4().hex[:12]}"
        if order.order_id != order_id:
            order = replace(order, order_id=order_id)

        with self._order_lock(order_id):
            group_id = self._membership.get(order_id)
            if group_id is None:
                priced = self.engine.price_order(order)
                self._orders[order_id] = priced
                logger.info("Saved order %s (total %s)", order_id, priced.total)
                return priced

            with self._group_lock(group_id):
                record = self._groups[group_id]
                if not record.is_open:
                    raise OrderGroupClosed(group_id)
                priced = self.engine.price_order(order)
                self._orders[order_id] = priced
                self._reprice(record)
            logger.info("Saved order %s (total %s), repriced group %s", order_id, priced.total, group_id)
            return priced

    def get_order(self, order_id: str) -> PricedOrder:
        if order_id not in self._orders:
            raise UnknownOrder(order_id)
        return self._orders[order_id]

    # ------------------------------------------------------------------
    # Groups
    # ------------------------------------------------------------------

    def create_group(self, group_id: Optional[str] = None, tax_exempt: bool = False) -> OrderGroupRecord:
        group_id = group_id or f"g-{uuid.uuid4().hex[:12]}"
        with self._registry_lock:
            if group_id in self._groups:
                raise ValueError(f"Order group '{group_id}' already exists")
            record = OrderGroupRecord(group_id=group_id, tax_exempt=bool(tax_exempt))
            self._groups[group_id] = record
        with self._group_lock(group_id):
            self._reprice(record)
        logger.info("Created order group %s", group_id)
        return record

    def get_group(self, group_id: str) -> OrderGroupRecord:
        if group_id not in self._groups:
            raise UnknownOrderGroup(group_id)
        return self._groups[group_id]

    def add_order(self, group_id: str, order_id: str) -> OrderGroupRecord:
        """Attach a saved order to an open group."""
        self.get_order(order_id)
        record = self.get_group(group_id)

        with self._order_lock(order_id), self._group_lock(group_id):
            if not record.is_open:
                raise OrderGroupClosed(group_id)
            current = self._membership.get(order_id)
            if current == group_id:
                return record
            if current is not None:
                if self._groups[current].is_open:
                    raise OrderAlreadyGrouped(order_id, current)
                raise OrderGroupClosed(current)
            self._membership[order_id] = group_id
            record.order_ids.append(order_id)
            self._reprice(record)
        logger.info("Added order %s to group %s", order_id, group_id)
        return record

    def remove_order(self, group_id: str, order_id: str) -> OrderGroupRecord:
        record = self.get_group(group_id)
        with self._order_lock(order_id), self._group_lock(group_id):
            if not record.is_open:
                raise OrderGroupClosed(group_id)
            if self._membership.get(order_id) != group_id:
                raise UnknownOrder(order_id)
            del self._membership[order_id]
            record.order_ids.remove(order_id)
            self._reprice(record)
        logger.info("Removed order %s from group %s", order_id, group_id)
        return record

    def set_discount(self, group_id: str, discount: Optional[Discount]) -> OrderGroupRecord:
        """Validate and store the group discount (None clears it)."""
        discount = validate_discount(discount)
        record = self.get_group(group_id)
        with self._group_lock(group_id):
            if not record.is_open:
                raise OrderGroupClosed(group_id)
            record.discount = discount
            self._reprice(record)
        return record

    def set_tax_exempt(self, group_id: str, tax_exempt: bool) -> OrderGroupRecord:
        record = self.get_group(group_id)
        with self._group_lock(group_id):
            if not record.is_open:
                raise OrderGroupClosed(group_id)
            record.tax_exempt = bool(tax_exempt)
            self._reprice(record)
        return record

    def close_group(self, group_id: str) -> OrderGroupRecord:
        """Settle the group. Its totals are final from here on."""
        record = self.get_group(group_id)
        with self._group_lock(group_id):
            if not record.is_open:
                raise OrderGroupClosed(group_id)
            self._reprice(record)
            record.status = STATUS_CLOSED
        logger.info("Closed order group %s (total %s)", group_id, record.priced.total)
        return record

    def _reprice(self, record: OrderGroupRecord):
        """Recompute group totals from the stored orders. Caller holds the group lock."""
        orders = [self._orders[order_id] for order_id in record.order_ids]
        record.priced = self.engine.price_order_group(
            orders, discount=record.discount, tax_exempt=record.tax_exempt
        )
        record.version += 1
