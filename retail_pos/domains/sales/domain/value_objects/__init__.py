"""
Sales Domain Value Objects

Immutable value objects for the sales domain.
"""

from retail_pos.domains.sales.domain.value_objects.order_status import (
    ORDER_TRANSITIONS,
    OrderStatus,
    OrderStatusTransition,
    PaymentMethod,
)
from retail_pos.domains.sales.domain.value_objects.stock_status import StockStatus

__all__ = [
    "ORDER_TRANSITIONS",
    "OrderStatus",
    "OrderStatusTransition",
    "PaymentMethod",
    "StockStatus",
]
