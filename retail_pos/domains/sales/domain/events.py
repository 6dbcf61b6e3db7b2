"""
Sales Domain Events

Recorded by Order and Product aggregates; published by the application
layer once the aggregates have been saved.
"""

from dataclasses import dataclass
from decimal import Decimal

from retail_pos.core.domain import DomainEvent

from .value_objects import StockStatus


@dataclass(frozen=True, kw_only=True)
class OrderCompleted(DomainEvent):
    order_id: str | None
    order_number: str | None
    total_amount: Decimal
    item_count: int


@dataclass(frozen=True, kw_only=True)
class OrderCancelled(DomainEvent):
    order_id: str | None
    reason: str | None = None


@dataclass(frozen=True, kw_only=True)
class OrderReturned(DomainEvent):
    """A completed order spawned a return order."""

    order_id: str | None
    return_order_id: str
    refund_amount: Decimal
    full_return: bool


@dataclass(frozen=True, kw_only=True)
class StockStatusChanged(DomainEvent):
    product_id: str | None
    previous_status: StockStatus
    new_status: StockStatus
    quantity_on_hand: int
