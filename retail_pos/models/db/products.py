"""
Product catalogue and stock models
"""

from sqlalchemy import Boolean, Column, Index, Integer, Numeric, String, Text
from sqlalchemy.ext.hybrid import hybrid_property

from .base import Base, TimestampMixin


class ProductModel(Base, TimestampMixin):
    """Products with their on-hand stock"""

    __tablename__ = "products"

    id = Column(String(64), primary_key=True)
    name = Column(String(255), nullable=False)
    product_code = Column(String(50), unique=True, index=True)
    description = Column(Text)

    price = Column(Numeric(10, 2), nullable=False)
    cost_price = Column(Numeric(10, 2))

    # Stock
    quantity_on_hand = Column(Integer, nullable=False, default=0)
    reorder_level = Column(Integer, nullable=False, default=10)
    max_stock_level = Column(Integer, nullable=False, default=100)
    stock_status = Column(String(20), nullable=False, default="available")  # available, low_stock, out_of_stock, discontinued
    is_active = Column(Boolean, nullable=False, default=True)

    # Optimistic concurrency
    version = Column(Integer, nullable=False, default=0)

    __table_args__ = (
        Index("idx_products_stock_status", stock_status),
        Index("idx_products_active_stock", is_active, quantity_on_hand),
    )

    def __repr__(self):
        return f"<ProductModel(id='{self.id}', on_hand={self.quantity_on_hand}, status='{self.stock_status}')>"

    @hybrid_property
    def needs_reorder(self) -> bool:
        return self.quantity_on_hand <= self.reorder_level
