"""
Checkout Use Cases

Completing (with stock reservation) and cancelling pending orders.
"""

from retail_pos.core.domain import DomainException, DomainEventPublisher, ValidationException
from retail_pos.core.shared import get_use_case_logger
from retail_pos.domains.sales.application.dto import CancelOrderRequest, CompleteOrderRequest, UseCaseResult
from retail_pos.domains.sales.application.ports import IOrderRepository, IProductRepository, ITransaction
from retail_pos.domains.sales.domain.services import StockLedger, StockReservation

from .common import (
    discard_events,
    load_order,
    publish_events,
    snapshot_versions,
    track_products,
    untrack_products,
)

logger = get_use_case_logger("checkout")


class CompleteOrderUseCase:
    """
    Use Case: Complete Order

    Reserves stock for every line through the shared StockLedger, then saves
    the order and the affected products in one transaction.

    If anything fails after the reservation (a stale product version, a
    database error) the transaction is rolled back, the reserved units are
    released and the products are dropped from the ledger. The next request
    reloads them, so a conflict with another writer fails this checkout only.
    """

    def __init__(
        self,
        order_repository: IOrderRepository,
        product_repository: IProductRepository,
        ledger: StockLedger,
        transaction: ITransaction,
        event_publisher: DomainEventPublisher | None = None,
    ):
        self.order_repository = order_repository
        self.product_repository = product_repository
        self.ledger = ledger
        self.transaction = transaction
        self.event_publisher = event_publisher

    async def execute(self, request: CompleteOrderRequest) -> UseCaseResult:
        """
        Check out an order.

        Args:
            request: Checkout request

        Returns:
            UseCaseResult with the completed order, or the domain error
            (insufficient stock, wrong state, unpaid balance)
        """
        log = logger.with_context(order_id=request.order_id)
        reservations: list[StockReservation] = []
        products = []
        versions: dict[str, int] = {}
        try:
            order = await load_order(self.order_repository, request.order_id)
            if request.require_full_payment and not order.is_fully_paid():
                raise ValidationException(
                    f"Order {order.id} has a balance due of {order.balance_due}",
                    field="amount_paid",
                    details={"balance_due": str(order.balance_due)},
                )

            products = await track_products(
                self.ledger,
                self.product_repository,
                (item.product_id for item in order.items),
            )
            versions = snapshot_versions(products)
            reservations = order.complete(self.ledger)

            saved = await self.order_repository.save(order)
            for product in products:
                await self.product_repository.save(product)
            await self.transaction.commit()

        except DomainException as e:
            await self._abort(reservations, products, versions)
            log.warning(f"Checkout failed: {e.message}", error_code=e.code)
            return UseCaseResult.from_exception(e)
        except Exception:
            await self._abort(reservations, products, versions)
            log.exception("Unexpected error completing order")
            raise

        await publish_events(self.event_publisher, order, *products)
        log.info(f"Order completed: {saved.total_items} items, total {saved.total_amount}")
        return UseCaseResult.ok(
            {
                **saved.to_detail_dict(),
                "reservations": [
                    {"product_id": r.product_id, "quantity": r.quantity, "remaining": r.remaining}
                    for r in reservations
                ],
            }
        )

    async def _abort(self, reservations: list[StockReservation], products, versions: dict[str, int]) -> None:
        await self.transaction.rollback()
        if reservations:
            self.ledger.release_many((r.product_id, r.quantity) for r in reservations)
            logger.info(f"Released {len(reservations)} stock reservations after failed checkout")
            untrack_products(self.ledger, products, versions)
        discard_events(*products)


class CancelOrderUseCase:
    """
    Use Case: Cancel Order

    Only pending orders can be cancelled. No stock was reserved for them, so
    nothing is released.
    """

    def __init__(
        self,
        order_repository: IOrderRepository,
        transaction: ITransaction,
        event_publisher: DomainEventPublisher | None = None,
    ):
        self.order_repository = order_repository
        self.transaction = transaction
        self.event_publisher = event_publisher

    async def execute(self, request: CancelOrderRequest) -> UseCaseResult:
        log = logger.with_context(order_id=request.order_id)
        try:
            order = await load_order(self.order_repository, request.order_id)
            order.cancel(request.reason)
            saved = await self.order_repository.save(order)
            await self.transaction.commit()

        except DomainException as e:
            await self.transaction.rollback()
            log.warning(f"Cancellation rejected: {e.message}", error_code=e.code)
            return UseCaseResult.from_exception(e)
        except Exception:
            await self.transaction.rollback()
            log.exception("Unexpected error cancelling order")
            raise

        await publish_events(self.event_publisher, order)
        log.info(f"Order cancelled (reason: {request.reason or 'none'})")
        return UseCaseResult.ok(saved.to_summary_dict())


__all__ = ["CompleteOrderUseCase", "CancelOrderUseCase"]
