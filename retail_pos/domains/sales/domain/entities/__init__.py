"""
Sales Domain Entities
"""

from retail_pos.domains.sales.domain.entities.line_item import LineItem
from retail_pos.domains.sales.domain.entities.order import Order
from retail_pos.domains.sales.domain.entities.product import Product

__all__ = [
    "LineItem",
    "Order",
    "Product",
]
