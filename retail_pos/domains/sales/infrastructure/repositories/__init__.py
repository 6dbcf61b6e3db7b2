"""
Sales Repositories

SQLAlchemy implementations of the sales ports.
"""

from .order_repository import SQLAlchemyOrderRepository
from .product_repository import SQLAlchemyProductRepository

__all__ = [
    "SQLAlchemyOrderRepository",
    "SQLAlchemyProductRepository",
]
