"""
Modify Order Use Cases

Changes to a pending order: lines, order-level discount and payment.
Every change recalculates the order totals before it is saved.
"""

from abc import ABC, abstractmethod

from retail_pos.core.domain import DomainException, Money, ValidationException
from retail_pos.core.shared import get_use_case_logger
from retail_pos.domains.sales.application.dto import (
    AddOrderItemRequest,
    ApplyOrderDiscountRequest,
    RecordPaymentRequest,
    RemoveOrderItemRequest,
    UpdateOrderItemRequest,
    UseCaseResult,
)
from retail_pos.domains.sales.application.ports import IOrderRepository, IProductRepository, ITransaction
from retail_pos.domains.sales.domain.entities import LineItem, Order

from .common import build_line_item, load_order, load_product

logger = get_use_case_logger("modify_order")


def _find_line(order: Order, product_id: str) -> LineItem:
    item = order.find_item(product_id)
    if item is None:
        raise ValidationException(
            f"Order {order.id} has no line for product {product_id}",
            field="product_id",
            details={"product_id": product_id},
        )
    return item


class _OrderChange(ABC):
    """Load, change, save and commit one order."""

    operation = "modify_order"

    def __init__(self, order_repository: IOrderRepository, transaction: ITransaction):
        self.order_repository = order_repository
        self.transaction = transaction

    @abstractmethod
    async def _apply(self, order: Order, request) -> None:
        """Change ``order`` in place; raise a DomainException to reject the request."""

    async def execute(self, request) -> UseCaseResult:
        log = logger.with_context(order_id=request.order_id, operation=self.operation)
        try:
            order = await load_order(self.order_repository, request.order_id)
            await self._apply(order, request)
            saved = await self.order_repository.save(order)
            await self.transaction.commit()

        except DomainException as e:
            await self.transaction.rollback()
            log.warning(f"Order change rejected: {e.message}", error_code=e.code)
            return UseCaseResult.from_exception(e)
        except Exception:
            await self.transaction.rollback()
            log.exception("Unexpected error changing order")
            raise

        log.debug(f"Order total is now {saved.total_amount}")
        return UseCaseResult.ok(saved.to_detail_dict())


class AddOrderItemUseCase(_OrderChange):
    """
    Use Case: Add Order Item

    Adds a product to a pending order. A line for the same product at the
    same price is merged by increasing its quantity.
    """

    operation = "add_item"

    def __init__(
        self,
        order_repository: IOrderRepository,
        product_repository: IProductRepository,
        transaction: ITransaction,
    ):
        super().__init__(order_repository, transaction)
        self.product_repository = product_repository

    async def _apply(self, order: Order, request: AddOrderItemRequest) -> None:
        product = await load_product(self.product_repository, request.item.product_id)
        line = build_line_item(product, request.item)

        existing = order.find_item(line.product_id)
        if existing is not None and existing.unit_price == line.unit_price and not line.has_discount():
            order.update_item_quantity(existing, existing.quantity + line.quantity)
        else:
            order.add_item(line)


class UpdateOrderItemUseCase(_OrderChange):
    """
    Use Case: Update Order Item

    Changes quantity, unit price and/or discount of a line.
    """

    operation = "update_item"

    async def _apply(self, order: Order, request: UpdateOrderItemRequest) -> None:
        item = _find_line(order, request.product_id)
        if request.quantity is not None:
            order.update_item_quantity(item, request.quantity)
        if request.unit_price is not None:
            order.update_item_unit_price(item, request.unit_price)
        if request.discount_amount is not None:
            order.apply_item_fixed_discount(item, request.discount_amount)
        elif request.discount_percentage is not None:
            order.apply_item_percentage_discount(item, request.discount_percentage)


class RemoveOrderItemUseCase(_OrderChange):
    """Use Case: Remove Order Item"""

    operation = "remove_item"

    async def _apply(self, order: Order, request: RemoveOrderItemRequest) -> None:
        order.remove_item(_find_line(order, request.product_id))


class ApplyOrderDiscountUseCase(_OrderChange):
    """Use Case: Apply Order Discount"""

    operation = "apply_discount"

    async def _apply(self, order: Order, request: ApplyOrderDiscountRequest) -> None:
        order.apply_discount(Money.of(request.amount))


class RecordPaymentUseCase(_OrderChange):
    """
    Use Case: Record Payment

    Stores the tendered amount; the result data includes the change due.
    """

    operation = "record_payment"

    async def _apply(self, order: Order, request: RecordPaymentRequest) -> None:
        order.record_payment(request.amount_paid)
        if request.payment_method is not None:
            order.payment_method = request.payment_method


__all__ = [
    "AddOrderItemUseCase",
    "UpdateOrderItemUseCase",
    "RemoveOrderItemUseCase",
    "ApplyOrderDiscountUseCase",
    "RecordPaymentUseCase",
]
