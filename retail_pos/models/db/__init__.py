"""
Database models
"""

from .base import Base, TimestampMixin
from .orders import OrderItemModel, OrderModel
from .products import ProductModel

__all__ = [
    "Base",
    "TimestampMixin",
    "OrderModel",
    "OrderItemModel",
    "ProductModel",
]
