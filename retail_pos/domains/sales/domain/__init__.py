"""
Sales Domain Layer

Entities, value objects, domain services and events for orders and stock.
"""

from retail_pos.domains.sales.domain.entities import LineItem, Order, Product
from retail_pos.domains.sales.domain.events import (
    OrderCancelled,
    OrderCompleted,
    OrderReturned,
    StockStatusChanged,
)
from retail_pos.domains.sales.domain.services import (
    ReturnPolicy,
    StockLedger,
    StockReservation,
    can_return,
    line_item_calculator,
)
from retail_pos.domains.sales.domain.value_objects import (
    OrderStatus,
    OrderStatusTransition,
    PaymentMethod,
    StockStatus,
)

__all__ = [
    # Entities
    "LineItem",
    "Order",
    "Product",
    # Value Objects
    "OrderStatus",
    "OrderStatusTransition",
    "PaymentMethod",
    "StockStatus",
    # Services
    "line_item_calculator",
    "ReturnPolicy",
    "can_return",
    "StockLedger",
    "StockReservation",
    # Events
    "OrderCompleted",
    "OrderCancelled",
    "OrderReturned",
    "StockStatusChanged",
]
