"""
Order Repository Implementation

SQLAlchemy implementation of IOrderRepository.
"""

import logging
from datetime import datetime
from decimal import Decimal
from typing import cast

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from retail_pos.core.domain import Money
from retail_pos.domains.sales.application.ports import IOrderRepository
from retail_pos.domains.sales.domain.entities import LineItem, Order
from retail_pos.domains.sales.domain.value_objects import OrderStatus, PaymentMethod
from retail_pos.models.db.orders import OrderItemModel, OrderModel

logger = logging.getLogger(__name__)


class SQLAlchemyOrderRepository(IOrderRepository):
    """
    SQLAlchemy implementation of order repository.

    ``save`` flushes but never commits; the calling use case owns the
    transaction.
    """

    def __init__(self, session: AsyncSession):
        """
        Initialize repository.

        Args:
            session: SQLAlchemy async session
        """
        self.session = session

    async def get_by_id(self, order_id: str) -> Order | None:
        """Get order by ID."""
        try:
            model = await self._get_model(order_id)
            return self._to_entity(model) if model else None
        except Exception as e:
            logger.error(f"Error getting order by ID {order_id}: {e}")
            raise

    async def get_by_order_number(self, order_number: str) -> Order | None:
        """Get order by order number."""
        result = await self.session.execute(
            select(OrderModel)
            .options(selectinload(OrderModel.items))
            .where(OrderModel.order_number == order_number)
        )
        model = result.scalar_one_or_none()
        return self._to_entity(model) if model else None

    async def save(self, order: Order) -> Order:
        """Insert or update an order and replace its lines."""
        try:
            model = await self._get_model(order.id)
            if model is None:
                model = OrderModel(id=order.id)
                self.session.add(model)
                logger.debug(f"Inserting order {order.id}")

            self._apply_to_model(order, model)
            await self.session.flush()
            order.increment_version()
            return order
        except Exception as e:
            logger.error(f"Error saving order {order.id}: {e}")
            raise

    async def find_by_status(self, status: OrderStatus, limit: int = 50) -> list[Order]:
        """Find orders by status, newest first."""
        result = await self.session.execute(
            select(OrderModel)
            .options(selectinload(OrderModel.items))
            .where(OrderModel.status == status.value)
            .order_by(OrderModel.created_at.desc())
            .limit(limit)
        )
        models = result.scalars().all()
        return [self._to_entity(m) for m in models]

    async def find_returns_for(self, order_id: str) -> list[Order]:
        """Find return orders created from an original order."""
        result = await self.session.execute(
            select(OrderModel)
            .options(selectinload(OrderModel.items))
            .where(OrderModel.original_order_id == order_id, OrderModel.is_return.is_(True))
            .order_by(OrderModel.created_at)
        )
        models = result.scalars().all()
        return [self._to_entity(m) for m in models]

    async def _get_model(self, order_id: str | None) -> OrderModel | None:
        result = await self.session.execute(
            select(OrderModel)
            .options(selectinload(OrderModel.items))
            .where(OrderModel.id == order_id)
        )
        return result.scalar_one_or_none()

    # Mapping methods

    def _to_entity(self, model: OrderModel) -> Order:
        """Convert model to entity. Totals are recalculated from the lines."""
        items = [
            LineItem(
                product_id=cast(str, item.product_id),
                quantity=cast(int, item.quantity),
                unit_price=Money.of(cast(Decimal, item.unit_price)),
                discount_amount=Money.of(cast(Decimal, item.discount_amount) or Decimal("0")),
                product_name=cast(str | None, item.product_name) or "",
                notes=cast(str | None, item.notes),
            )
            for item in sorted(model.items or [], key=lambda i: i.position or 0)
        ]

        order = Order(
            id=cast(str, model.id),
            order_number=cast(str | None, model.order_number),
            customer_name=cast(str | None, model.customer_name),
            customer_email=cast(str | None, model.customer_email),
            customer_phone=cast(str | None, model.customer_phone),
            employee_id=cast(str | None, model.employee_id),
            payment_method=PaymentMethod(cast(str, model.payment_method)),
            notes=cast(str | None, model.notes),
            items=items,
            status=OrderStatus(cast(str, model.status)),
            tax_rate=cast(Decimal, model.tax_rate),
            discount_amount=Money.of(cast(Decimal, model.discount_amount) or Decimal("0")),
            amount_paid=Money.of(cast(Decimal, model.amount_paid) or Decimal("0")),
            is_return=bool(model.is_return),
            original_order_id=cast(str | None, model.original_order_id),
            completed_at=cast(datetime | None, model.completed_at),
            cancelled_at=cast(datetime | None, model.cancelled_at),
            version=cast(int, model.version) or 0,
        )
        if model.created_at is not None:
            order.created_at = cast(datetime, model.created_at)
        if model.updated_at is not None:
            order.updated_at = cast(datetime, model.updated_at)
        return order

    def _apply_to_model(self, order: Order, model: OrderModel) -> None:
        """Copy entity state onto the model, replacing its lines."""
        model.order_number = order.order_number
        model.status = order.status.value
        model.payment_method = order.payment_method.value
        model.customer_name = order.customer_name
        model.customer_email = order.customer_email
        model.customer_phone = order.customer_phone
        model.employee_id = order.employee_id
        model.notes = order.notes

        model.tax_rate = order.tax_rate
        model.subtotal = order.subtotal.amount
        model.tax_amount = order.tax_amount.amount
        model.discount_amount = order.discount_amount.amount
        model.total_amount = order.total_amount.amount
        model.amount_paid = order.amount_paid.amount
        model.change_amount = order.change_amount.amount

        model.is_return = order.is_return
        model.original_order_id = order.original_order_id
        model.completed_at = order.completed_at
        model.cancelled_at = order.cancelled_at
        model.created_at = order.created_at
        model.version = order.version + 1

        model.items = [
            OrderItemModel(
                product_id=item.product_id,
                position=position,
                quantity=item.quantity,
                unit_price=item.unit_price.amount,
                discount_amount=item.discount_amount.amount,
                subtotal=item.subtotal.amount,
                product_name=item.product_name,
                notes=item.notes,
            )
            for position, item in enumerate(order.items)
        ]


__all__ = ["SQLAlchemyOrderRepository"]
