"""
Order models
"""

from typing import List

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Index, Integer, Numeric, String, Text
from sqlalchemy.ext.hybrid import hybrid_property
from sqlalchemy.orm import Mapped, relationship

from .base import Base, TimestampMixin


class OrderModel(Base, TimestampMixin):
    """Sales and return orders"""

    __tablename__ = "orders"

    id = Column(String(64), primary_key=True)
    order_number = Column(String(50), unique=True, index=True)

    # Order details
    status = Column(String(20), nullable=False, default="pending")  # pending, completed, cancelled, refunded, ...
    payment_method = Column(String(30), nullable=False, default="cash")
    customer_name = Column(String(255))
    customer_email = Column(String(255))
    customer_phone = Column(String(50))
    employee_id = Column(String(64))
    notes = Column(Text)

    # Money
    tax_rate = Column(Numeric(5, 4), nullable=False)
    subtotal = Column(Numeric(10, 2), nullable=False, default=0)
    tax_amount = Column(Numeric(10, 2), nullable=False, default=0)
    discount_amount = Column(Numeric(10, 2), nullable=False, default=0)
    total_amount = Column(Numeric(10, 2), nullable=False, default=0)
    amount_paid = Column(Numeric(10, 2), nullable=False, default=0)
    change_amount = Column(Numeric(10, 2), nullable=False, default=0)

    # Returns
    is_return = Column(Boolean, nullable=False, default=False)
    original_order_id = Column(String(64), ForeignKey("orders.id"))

    completed_at = Column(DateTime(timezone=True))
    cancelled_at = Column(DateTime(timezone=True))
    version = Column(Integer, nullable=False, default=0)

    # Relationships
    items: Mapped[List["OrderItemModel"]] = relationship(
        "OrderItemModel",
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="OrderItemModel.position",
    )

    # Indexes
    __table_args__ = (
        Index("idx_orders_status", status),
        Index("idx_orders_original", original_order_id),
        Index("idx_orders_status_created", status, "created_at"),
    )

    def __repr__(self):
        return f"<OrderModel(id='{self.id}', status='{self.status}', total={self.total_amount})>"

    @hybrid_property
    def is_open(self) -> bool:
        return self.status == "pending"


class OrderItemModel(Base, TimestampMixin):
    """Order lines"""

    __tablename__ = "order_items"

    id = Column(Integer, primary_key=True, autoincrement=True)
    order_id = Column(String(64), ForeignKey("orders.id", ondelete="CASCADE"), nullable=False)
    product_id = Column(String(64), ForeignKey("products.id"), nullable=False)
    position = Column(Integer, nullable=False, default=0)

    # Item details
    quantity = Column(Integer, nullable=False)
    unit_price = Column(Numeric(10, 2), nullable=False)  # Price at the time of sale
    discount_amount = Column(Numeric(10, 2), nullable=False, default=0)
    subtotal = Column(Numeric(10, 2), nullable=False)

    # Product info at time of sale
    product_name = Column(String(255), nullable=False, default="")
    notes = Column(Text)

    # Relationships
    order: Mapped["OrderModel"] = relationship("OrderModel", back_populates="items")

    __table_args__ = (
        Index("idx_order_items_order", order_id),
        Index("idx_order_items_product", product_id),
    )

    def __repr__(self):
        return f"<OrderItemModel(product='{self.product_id}', quantity={self.quantity}, price={self.unit_price})>"
